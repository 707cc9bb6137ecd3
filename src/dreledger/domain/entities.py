"""Domain model entities for dreledger.

These are pure data classes representing the ledger records and the report
structures built from them, independent of the database schema. The DRE
engine only ever sees these types, bundled in a LedgerSnapshot.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class ReportGroup(str, Enum):
    """Fixed, ordered DRE report groups."""

    OPERATING_REVENUE = "Operating revenue"
    SURVIVAL_LIVING_COST = "Survival living cost"
    COMFORT_LIVING_COST = "Comfort living cost"
    PROFESSIONAL_EXPENSES = "Professional expenses"
    NON_OPERATING_MOVEMENTS = "Non-operating movements"
    FINANCIAL_INCOME = "Financial income / Variation"
    REALIZED_INVESTMENTS = "Realized investments"
    INTERNAL_TRANSFERS = "Internal transfers"


OPERATING_GROUPS = (
    ReportGroup.OPERATING_REVENUE,
    ReportGroup.SURVIVAL_LIVING_COST,
    ReportGroup.COMFORT_LIVING_COST,
    ReportGroup.PROFESSIONAL_EXPENSES,
)

WEALTH_GROUPS = (
    ReportGroup.NON_OPERATING_MOVEMENTS,
    ReportGroup.FINANCIAL_INCOME,
    ReportGroup.REALIZED_INVESTMENTS,
)


class CategoryKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class LineKind(str, Enum):
    """Structural class of a bank line."""

    OPERATIONAL = "operational"
    INVOICE_PAYMENT = "invoice_payment"
    INTERNAL_TRANSFER = "internal_transfer"


class CardStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    RECONCILED = "reconciled"
    UNCLASSIFIED = "unclassified"


class InstitutionKind(str, Enum):
    BANK = "bank"
    BROKER = "broker"
    WALLET = "wallet"


class WindowKind(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMESTER = "semester"
    ANNUAL = "annual"
    YEAR_OVER_YEAR = "year-over-year"


class ViewMode(str, Enum):
    """Recognition basis: cash (caixa) or accrual (competência)."""

    CASH = "cash"
    ACCRUAL = "accrual"


class LineSource(str, Enum):
    BANK = "bank"
    CARD = "card"
    INVESTMENT = "investment"


class FixedAssetCategory(str, Enum):
    REAL_ESTATE = "real_estate"
    VEHICLE = "vehicle"
    EQUITY_STAKE = "equity_stake"
    EQUIPMENT = "equipment"
    OTHER = "other"


class ValuationMethod(str, Enum):
    EBITDA_MULTIPLE = "ebitda_multiple"
    DISCOUNTED_CASH_FLOW = "discounted_cash_flow"
    MARKET_VALUE = "market_value"
    ADJUSTED_BOOK_VALUE = "adjusted_book_value"


class LiabilityKind(str, Enum):
    FINANCING = "financing"
    LOAN = "loan"
    INSTALLMENT_PLAN = "installment_plan"
    CARD = "card"
    OTHER = "other"


class InsuranceKind(str, Enum):
    PROPERTY = "property"
    LIFE = "life"
    VEHICLE = "vehicle"
    LIABILITY = "liability"
    OTHER = "other"


@dataclass(frozen=True)
class Category:
    """DRE category mapped to one report group."""

    id: str
    name: str
    report_group: ReportGroup
    kind: CategoryKind
    is_operating: bool = True


@dataclass(frozen=True)
class Institution:
    """Bank, broker or wallet holding money."""

    id: str
    name: str
    kind: InstitutionKind
    entity_id: Optional[str] = None
    opening_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class CreditCard:
    """Credit card whose invoices are paid from a bank institution."""

    id: str
    name: str
    brand: Optional[str] = None
    entity_id: Optional[str] = None
    debit_institution_id: Optional[str] = None
    closing_day: Optional[int] = None
    due_day: Optional[int] = None
    credit_limit: Optional[Decimal] = None


@dataclass(frozen=True)
class Asset:
    """Investment asset tracked through monthly snapshots."""

    id: str
    name: str
    institution_id: Optional[str] = None
    entity_id: Optional[str] = None


@dataclass(frozen=True)
class BankTransaction:
    """Bank account line.

    Invoice payments and internal transfers must carry
    affects_income_statement=False: their value already reached the
    statement as card purchases, or nets to zero across the two legs.
    """

    id: str
    cash_date: Optional[date]
    accrual_date: Optional[date]
    direction: Direction
    amount: Decimal
    category_id: Optional[str]
    institution_id: Optional[str]
    entity_id: Optional[str] = None
    description: Optional[str] = None
    line_kind: LineKind = LineKind.OPERATIONAL
    affects_income_statement: bool = True


@dataclass(frozen=True)
class CardTransaction:
    """One installment of a credit card purchase (or a refund)."""

    id: str
    card_id: str
    purchase_date: Optional[date]
    invoice_due_date: Optional[date]
    description: Optional[str]
    category_id: Optional[str]
    amount: Decimal
    total_purchase_amount: Optional[Decimal] = None
    installment_index: int = 1
    installment_count: int = 1
    status: CardStatus = CardStatus.PENDING
    group_id: Optional[str] = None


@dataclass(frozen=True)
class InvestmentSnapshot:
    """Monthly closing of an investment asset."""

    id: str
    asset_id: str
    month: int
    year: int
    closing_balance: Decimal
    contributions: Decimal
    withdrawals: Decimal
    yield_amount: Decimal


@dataclass(frozen=True)
class FixedAsset:
    """Property, vehicle or business stake held outside the investment portfolio."""

    id: str
    name: str
    category: FixedAssetCategory
    acquisition_value: Decimal
    market_value: Decimal
    entity_id: Optional[str] = None
    acquisition_date: Optional[date] = None
    notes: Optional[str] = None
    participation_percent: Optional[Decimal] = None
    valuation_method: ValuationMethod = ValuationMethod.MARKET_VALUE


@dataclass(frozen=True)
class FixedAssetSnapshot:
    """Valuation of a fixed asset at the end of a month."""

    id: str
    fixed_asset_id: str
    month: int
    year: int
    equity_value: Decimal


@dataclass(frozen=True)
class Liability:
    """Debt owed by an entity, carried at its outstanding balance."""

    id: str
    name: str
    kind: LiabilityKind
    outstanding_balance: Decimal
    entity_id: Optional[str] = None
    installment_amount: Optional[Decimal] = None
    rate: Optional[str] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class InsurancePolicy:
    id: str
    kind: InsuranceKind
    insurer: str
    insured_value: Decimal
    annual_premium: Decimal
    start_date: date
    end_date: date
    fixed_asset_id: Optional[str] = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable view of every record the reports read."""

    categories: tuple[Category, ...] = ()
    bank_transactions: tuple[BankTransaction, ...] = ()
    card_transactions: tuple[CardTransaction, ...] = ()
    investment_snapshots: tuple[InvestmentSnapshot, ...] = ()
    institutions: tuple[Institution, ...] = ()
    credit_cards: tuple[CreditCard, ...] = ()
    assets: tuple[Asset, ...] = ()
    fixed_assets: tuple[FixedAsset, ...] = ()
    fixed_asset_snapshots: tuple[FixedAssetSnapshot, ...] = ()
    liabilities: tuple[Liability, ...] = ()
    insurance_policies: tuple[InsurancePolicy, ...] = ()


@dataclass(frozen=True)
class PeriodWindow:
    """Reference period and recognition basis of a report run."""

    reference_month: int
    reference_year: int
    window_kind: WindowKind = WindowKind.MONTHLY
    view_mode: ViewMode = ViewMode.CASH


@dataclass(frozen=True)
class LineDetail:
    """A source line contributing to a category total."""

    record_id: str
    source: LineSource
    date: Optional[date]
    description: Optional[str]
    amount: Decimal
    source_name: Optional[str]


@dataclass(frozen=True)
class CategoryTotal:
    """Category bucket inside a report group."""

    category_id: str
    name: str
    total: Decimal
    lines: tuple[LineDetail, ...] = ()


@dataclass(frozen=True)
class GroupTotal:
    """Report group bucket with its category breakdown."""

    group: ReportGroup
    total: Decimal
    categories: tuple[CategoryTotal, ...] = ()

    def category(self, category_id: str) -> Optional[CategoryTotal]:
        for bucket in self.categories:
            if bucket.category_id == category_id:
                return bucket
        return None


@dataclass(frozen=True)
class AggregateDiagnostics:
    """Counters describing how the records of a run were treated.

    orphans + classified + malformed == considered always holds.
    """

    considered: int = 0
    classified: int = 0
    orphans: int = 0
    malformed: int = 0
    skipped_structural: int = 0
    unresolved_sources: int = 0


@dataclass(frozen=True)
class AggregateResult:
    """DRE output for one window."""

    window: PeriodWindow
    groups: tuple[GroupTotal, ...]
    operating_revenue: Decimal
    operating_result: Decimal
    wealth_result: Decimal
    global_result: Decimal
    unclassified: int
    diagnostics: AggregateDiagnostics = field(default_factory=AggregateDiagnostics)

    def group(self, group: ReportGroup) -> GroupTotal:
        for bucket in self.groups:
            if bucket.group == group:
                return bucket
        raise KeyError(group)

    def total(self, group: ReportGroup) -> Decimal:
        return self.group(group).total

    def vertical_share(self, group: ReportGroup) -> Optional[Decimal]:
        """Group total as a percentage of operating revenue (absolute)."""
        if self.operating_revenue == 0:
            return None
        return abs(self.total(group) / self.operating_revenue * 100)


@dataclass(frozen=True)
class Variation:
    """Current vs prior value; percent is None when prior is zero."""

    current: Decimal
    prior: Decimal
    percent: Optional[Decimal]


@dataclass(frozen=True)
class ComparativeResult:
    """Year-over-year DRE comparison."""

    current: AggregateResult
    prior: AggregateResult
    group_variations: dict[ReportGroup, Variation]
    operating_result_variation: Variation
    global_result_variation: Variation


@dataclass(frozen=True)
class TrendPoint:
    year: int
    month: int
    operating_result: Decimal


@dataclass(frozen=True)
class Invoice:
    """Card installments due in the same month."""

    card_id: str
    month_key: str
    total: Decimal
    items: tuple[CardTransaction, ...]
    is_paid: bool


@dataclass(frozen=True)
class NetWorth:
    """Fixed assets against outstanding debt.

    leverage_percent and coverage_percent are relative to the fixed asset
    total and are None when it is zero.
    """

    fixed_assets: Decimal
    liabilities: Decimal
    net: Decimal
    insured_value: Decimal
    leverage_percent: Optional[Decimal]
    coverage_percent: Optional[Decimal]
