"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal
from typing import Optional

from dreledger.domain import entities as domain
from dreledger.database.models import (
    Asset as ORMAsset,
    BankTransaction as ORMBankTransaction,
    CardTransaction as ORMCardTransaction,
    Category as ORMCategory,
    CreditCard as ORMCreditCard,
    FixedAsset as ORMFixedAsset,
    FixedAssetSnapshot as ORMFixedAssetSnapshot,
    Institution as ORMInstitution,
    InsurancePolicy as ORMInsurancePolicy,
    InvestmentSnapshot as ORMInvestmentSnapshot,
    Liability as ORMLiability,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _report_group(value: str):
    """Return the enumeration member, or the raw text if it drifted.

    The raw text is kept so the category resolver can report the drift
    instead of the record silently vanishing on load.
    """
    try:
        return domain.ReportGroup(value)
    except ValueError:
        return value


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        report_group=_report_group(orm_category.report_group),
        kind=domain.CategoryKind(orm_category.kind),
        is_operating=orm_category.is_operating,
    )


def category_to_orm(category: domain.Category) -> ORMCategory:
    """Convert domain Category entity to SQLAlchemy Category model."""
    return ORMCategory(
        id=category.id,
        name=category.name,
        report_group=category.report_group.value,
        kind=category.kind.value,
        is_operating=category.is_operating,
    )


def institution_to_domain(orm_institution: ORMInstitution) -> domain.Institution:
    """Convert SQLAlchemy Institution model to domain Institution entity."""
    return domain.Institution(
        id=orm_institution.id,
        name=orm_institution.name,
        kind=domain.InstitutionKind(orm_institution.kind),
        entity_id=orm_institution.entity_id,
        opening_balance=_decimal(orm_institution.opening_balance) or Decimal("0"),
    )


def institution_to_orm(institution: domain.Institution) -> ORMInstitution:
    """Convert domain Institution entity to SQLAlchemy Institution model."""
    return ORMInstitution(
        id=institution.id,
        name=institution.name,
        kind=institution.kind.value,
        entity_id=institution.entity_id,
        opening_balance=institution.opening_balance,
    )


def credit_card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        name=orm_card.name,
        brand=orm_card.brand,
        entity_id=orm_card.entity_id,
        debit_institution_id=orm_card.debit_institution_id,
        closing_day=orm_card.closing_day,
        due_day=orm_card.due_day,
        credit_limit=_decimal(orm_card.credit_limit),
    )


def credit_card_to_orm(card: domain.CreditCard) -> ORMCreditCard:
    """Convert domain CreditCard entity to SQLAlchemy CreditCard model."""
    return ORMCreditCard(
        id=card.id,
        name=card.name,
        brand=card.brand,
        entity_id=card.entity_id,
        debit_institution_id=card.debit_institution_id,
        closing_day=card.closing_day,
        due_day=card.due_day,
        credit_limit=card.credit_limit,
    )


def asset_to_domain(orm_asset: ORMAsset) -> domain.Asset:
    """Convert SQLAlchemy Asset model to domain Asset entity."""
    return domain.Asset(
        id=orm_asset.id,
        name=orm_asset.name,
        institution_id=orm_asset.institution_id,
        entity_id=orm_asset.entity_id,
    )


def asset_to_orm(asset: domain.Asset) -> ORMAsset:
    """Convert domain Asset entity to SQLAlchemy Asset model."""
    return ORMAsset(
        id=asset.id,
        name=asset.name,
        institution_id=asset.institution_id,
        entity_id=asset.entity_id,
    )


def bank_transaction_to_domain(orm_txn: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    return domain.BankTransaction(
        id=orm_txn.id,
        cash_date=orm_txn.cash_date,
        accrual_date=orm_txn.accrual_date,
        direction=domain.Direction(orm_txn.direction),
        amount=_decimal(orm_txn.amount),
        category_id=orm_txn.category_id,
        institution_id=orm_txn.institution_id,
        entity_id=orm_txn.entity_id,
        description=orm_txn.description,
        line_kind=domain.LineKind(orm_txn.line_kind),
        affects_income_statement=orm_txn.affects_income_statement,
    )


def bank_transaction_to_orm(txn: domain.BankTransaction) -> ORMBankTransaction:
    """Convert domain BankTransaction entity to SQLAlchemy BankTransaction model."""
    return ORMBankTransaction(
        id=txn.id,
        cash_date=txn.cash_date,
        accrual_date=txn.accrual_date,
        direction=txn.direction.value,
        amount=txn.amount,
        category_id=txn.category_id,
        institution_id=txn.institution_id,
        entity_id=txn.entity_id,
        description=txn.description,
        line_kind=txn.line_kind.value,
        affects_income_statement=txn.affects_income_statement,
    )


def card_transaction_to_domain(orm_txn: ORMCardTransaction) -> domain.CardTransaction:
    """Convert SQLAlchemy CardTransaction model to domain CardTransaction entity."""
    return domain.CardTransaction(
        id=orm_txn.id,
        card_id=orm_txn.card_id,
        purchase_date=orm_txn.purchase_date,
        invoice_due_date=orm_txn.invoice_due_date,
        description=orm_txn.description,
        category_id=orm_txn.category_id,
        amount=_decimal(orm_txn.amount),
        total_purchase_amount=_decimal(orm_txn.total_purchase_amount),
        installment_index=orm_txn.installment_index,
        installment_count=orm_txn.installment_count,
        status=domain.CardStatus(orm_txn.status),
        group_id=orm_txn.group_id,
    )


def card_transaction_to_orm(txn: domain.CardTransaction) -> ORMCardTransaction:
    """Convert domain CardTransaction entity to SQLAlchemy CardTransaction model."""
    return ORMCardTransaction(
        id=txn.id,
        card_id=txn.card_id,
        purchase_date=txn.purchase_date,
        invoice_due_date=txn.invoice_due_date,
        description=txn.description,
        category_id=txn.category_id,
        amount=txn.amount,
        total_purchase_amount=txn.total_purchase_amount,
        installment_index=txn.installment_index,
        installment_count=txn.installment_count,
        status=txn.status.value,
        group_id=txn.group_id,
    )


def investment_snapshot_to_domain(
    orm_snapshot: ORMInvestmentSnapshot,
) -> domain.InvestmentSnapshot:
    """Convert SQLAlchemy InvestmentSnapshot model to domain entity."""
    return domain.InvestmentSnapshot(
        id=orm_snapshot.id,
        asset_id=orm_snapshot.asset_id,
        month=orm_snapshot.month,
        year=orm_snapshot.year,
        closing_balance=_decimal(orm_snapshot.closing_balance),
        contributions=_decimal(orm_snapshot.contributions),
        withdrawals=_decimal(orm_snapshot.withdrawals),
        yield_amount=_decimal(orm_snapshot.yield_amount),
    )


def investment_snapshot_to_orm(
    snapshot: domain.InvestmentSnapshot,
) -> ORMInvestmentSnapshot:
    """Convert domain InvestmentSnapshot entity to SQLAlchemy model."""
    return ORMInvestmentSnapshot(
        id=snapshot.id,
        asset_id=snapshot.asset_id,
        month=snapshot.month,
        year=snapshot.year,
        closing_balance=snapshot.closing_balance,
        contributions=snapshot.contributions,
        withdrawals=snapshot.withdrawals,
        yield_amount=snapshot.yield_amount,
    )


def fixed_asset_to_domain(orm_asset: ORMFixedAsset) -> domain.FixedAsset:
    """Convert SQLAlchemy FixedAsset model to domain FixedAsset entity."""
    return domain.FixedAsset(
        id=orm_asset.id,
        name=orm_asset.name,
        category=domain.FixedAssetCategory(orm_asset.category),
        acquisition_value=_decimal(orm_asset.acquisition_value),
        market_value=_decimal(orm_asset.market_value),
        entity_id=orm_asset.entity_id,
        acquisition_date=orm_asset.acquisition_date,
        notes=orm_asset.notes,
        participation_percent=_decimal(orm_asset.participation_percent),
        valuation_method=domain.ValuationMethod(orm_asset.valuation_method),
    )


def fixed_asset_to_orm(asset: domain.FixedAsset) -> ORMFixedAsset:
    """Convert domain FixedAsset entity to SQLAlchemy FixedAsset model."""
    return ORMFixedAsset(
        id=asset.id,
        name=asset.name,
        category=asset.category.value,
        acquisition_value=asset.acquisition_value,
        market_value=asset.market_value,
        entity_id=asset.entity_id,
        acquisition_date=asset.acquisition_date,
        notes=asset.notes,
        participation_percent=asset.participation_percent,
        valuation_method=asset.valuation_method.value,
    )


def fixed_asset_snapshot_to_domain(
    orm_snapshot: ORMFixedAssetSnapshot,
) -> domain.FixedAssetSnapshot:
    """Convert SQLAlchemy FixedAssetSnapshot model to domain entity."""
    return domain.FixedAssetSnapshot(
        id=orm_snapshot.id,
        fixed_asset_id=orm_snapshot.fixed_asset_id,
        month=orm_snapshot.month,
        year=orm_snapshot.year,
        equity_value=_decimal(orm_snapshot.equity_value),
    )


def fixed_asset_snapshot_to_orm(
    snapshot: domain.FixedAssetSnapshot,
) -> ORMFixedAssetSnapshot:
    """Convert domain FixedAssetSnapshot entity to SQLAlchemy model."""
    return ORMFixedAssetSnapshot(
        id=snapshot.id,
        fixed_asset_id=snapshot.fixed_asset_id,
        month=snapshot.month,
        year=snapshot.year,
        equity_value=snapshot.equity_value,
    )


def liability_to_domain(orm_liability: ORMLiability) -> domain.Liability:
    """Convert SQLAlchemy Liability model to domain Liability entity."""
    return domain.Liability(
        id=orm_liability.id,
        name=orm_liability.name,
        kind=domain.LiabilityKind(orm_liability.kind),
        outstanding_balance=_decimal(orm_liability.outstanding_balance),
        entity_id=orm_liability.entity_id,
        installment_amount=_decimal(orm_liability.installment_amount),
        rate=orm_liability.rate,
        end_date=orm_liability.end_date,
    )


def liability_to_orm(liability: domain.Liability) -> ORMLiability:
    """Convert domain Liability entity to SQLAlchemy Liability model."""
    return ORMLiability(
        id=liability.id,
        name=liability.name,
        kind=liability.kind.value,
        outstanding_balance=liability.outstanding_balance,
        entity_id=liability.entity_id,
        installment_amount=liability.installment_amount,
        rate=liability.rate,
        end_date=liability.end_date,
    )


def insurance_policy_to_domain(
    orm_policy: ORMInsurancePolicy,
) -> domain.InsurancePolicy:
    """Convert SQLAlchemy InsurancePolicy model to domain entity."""
    return domain.InsurancePolicy(
        id=orm_policy.id,
        kind=domain.InsuranceKind(orm_policy.kind),
        insurer=orm_policy.insurer,
        insured_value=_decimal(orm_policy.insured_value),
        annual_premium=_decimal(orm_policy.annual_premium),
        start_date=orm_policy.start_date,
        end_date=orm_policy.end_date,
        fixed_asset_id=orm_policy.fixed_asset_id,
    )


def insurance_policy_to_orm(policy: domain.InsurancePolicy) -> ORMInsurancePolicy:
    """Convert domain InsurancePolicy entity to SQLAlchemy model."""
    return ORMInsurancePolicy(
        id=policy.id,
        kind=policy.kind.value,
        insurer=policy.insurer,
        insured_value=policy.insured_value,
        annual_premium=policy.annual_premium,
        start_date=policy.start_date,
        end_date=policy.end_date,
        fixed_asset_id=policy.fixed_asset_id,
    )
