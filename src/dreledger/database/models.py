"""SQLAlchemy models for dreledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Category(Base):
    """DRE category model.

    report_group holds the enumeration value as text; the mapper and the
    category resolver check it against the enumeration on the way out.
    """

    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    report_group = Column(String, nullable=False)
    kind = Column(String, nullable=False, default="expense")
    is_operating = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Institution(Base):
    """Bank, broker or wallet model."""

    __tablename__ = "institutions"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False, default="bank")
    entity_id = Column(String, nullable=True)
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class CreditCard(Base):
    """Credit card model."""

    __tablename__ = "credit_cards"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    brand = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    debit_institution_id = Column(String, ForeignKey("institutions.id"), nullable=True)
    closing_day = Column(Integer, nullable=True)
    due_day = Column(Integer, nullable=True)
    credit_limit = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Asset(Base):
    """Investment asset model."""

    __tablename__ = "assets"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    institution_id = Column(String, ForeignKey("institutions.id"), nullable=True)
    entity_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class BankTransaction(Base):
    """Bank transaction model.

    category_id and institution_id are plain references: a transaction may
    outlive its category, and such orphans must still be loadable.
    """

    __tablename__ = "bank_transactions"

    id = Column(String, primary_key=True)
    cash_date = Column(Date, nullable=True)
    accrual_date = Column(Date, nullable=True)
    direction = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(String, nullable=True)
    institution_id = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    description = Column(String, nullable=True)
    line_kind = Column(String, nullable=False, default="operational")
    affects_income_statement = Column(Boolean, nullable=False, default=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class CardTransaction(Base):
    """Credit card installment model."""

    __tablename__ = "card_transactions"

    id = Column(String, primary_key=True)
    card_id = Column(String, nullable=False)
    purchase_date = Column(Date, nullable=True)
    invoice_due_date = Column(Date, nullable=True)
    description = Column(String, nullable=True)
    category_id = Column(String, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    total_purchase_amount = Column(Numeric(14, 2), nullable=True)
    installment_index = Column(Integer, nullable=False, default=1)
    installment_count = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default="pending")
    group_id = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class InvestmentSnapshot(Base):
    """Monthly investment closing model."""

    __tablename__ = "investment_snapshots"

    id = Column(String, primary_key=True)
    asset_id = Column(String, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    closing_balance = Column(Numeric(14, 2), nullable=False)
    contributions = Column(Numeric(14, 2), nullable=False, default=0)
    withdrawals = Column(Numeric(14, 2), nullable=False, default=0)
    yield_amount = Column(Numeric(14, 2), nullable=False)

    # One closing per asset per month
    __table_args__ = (
        UniqueConstraint("asset_id", "year", "month", name="uq_asset_period"),
    )


class FixedAsset(Base):
    """Fixed asset model (property, vehicle, business stake)."""

    __tablename__ = "fixed_assets"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="other")
    acquisition_value = Column(Numeric(14, 2), nullable=False, default=0)
    market_value = Column(Numeric(14, 2), nullable=False, default=0)
    entity_id = Column(String, nullable=True)
    acquisition_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    participation_percent = Column(Numeric(7, 4), nullable=True)
    valuation_method = Column(String, nullable=False, default="market_value")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class FixedAssetSnapshot(Base):
    """Monthly fixed asset valuation model."""

    __tablename__ = "fixed_asset_snapshots"

    id = Column(String, primary_key=True)
    fixed_asset_id = Column(String, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    equity_value = Column(Numeric(14, 2), nullable=False)

    # One valuation per asset per month
    __table_args__ = (
        UniqueConstraint("fixed_asset_id", "year", "month", name="uq_fixed_asset_period"),
    )


class Liability(Base):
    """Debt model."""

    __tablename__ = "liabilities"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False, default="other")
    outstanding_balance = Column(Numeric(14, 2), nullable=False)
    entity_id = Column(String, nullable=True)
    installment_amount = Column(Numeric(14, 2), nullable=True)
    rate = Column(String, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class InsurancePolicy(Base):
    """Insurance policy model."""

    __tablename__ = "insurance_policies"

    id = Column(String, primary_key=True)
    kind = Column(String, nullable=False, default="other")
    insurer = Column(String, nullable=False)
    insured_value = Column(Numeric(14, 2), nullable=False)
    annual_premium = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    fixed_asset_id = Column(String, ForeignKey("fixed_assets.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
