"""In-memory record builders for engine tests."""

from datetime import date
from decimal import Decimal

from dreledger.domain.entities import (
    BankTransaction,
    CardTransaction,
    Category,
    CategoryKind,
    CreditCard,
    Direction,
    Institution,
    InstitutionKind,
    LineKind,
    ReportGroup,
)


CATEGORIES = (
    Category("rev", "Salary", ReportGroup.OPERATING_REVENUE, CategoryKind.INCOME),
    Category("surv", "Groceries", ReportGroup.SURVIVAL_LIVING_COST, CategoryKind.EXPENSE),
    Category("comf", "Travel", ReportGroup.COMFORT_LIVING_COST, CategoryKind.EXPENSE),
    Category("prof", "Software", ReportGroup.PROFESSIONAL_EXPENSES, CategoryKind.EXPENSE),
    Category(
        "nonop",
        "Asset sale",
        ReportGroup.NON_OPERATING_MOVEMENTS,
        CategoryKind.INCOME,
        is_operating=False,
    ),
    Category(
        "inv",
        "Contributions",
        ReportGroup.REALIZED_INVESTMENTS,
        CategoryKind.EXPENSE,
        is_operating=False,
    ),
    Category(
        "trf",
        "Own transfer",
        ReportGroup.INTERNAL_TRANSFERS,
        CategoryKind.TRANSFER,
        is_operating=False,
    ),
)

INSTITUTIONS = (
    Institution("bank-a", "Itau", InstitutionKind.BANK, entity_id="fam"),
    Institution("bank-b", "Nubank", InstitutionKind.BANK, entity_id="co"),
    Institution("broker", "XP", InstitutionKind.BROKER, entity_id="fam"),
)

CARDS = (
    CreditCard("card-a", "Black", entity_id="fam", debit_institution_id="bank-a"),
    CreditCard("card-b", "Corporate", entity_id="co", debit_institution_id="bank-b"),
)


def bank(
    txn_id,
    amount,
    category_id="rev",
    when=date(2026, 1, 10),
    accrual=None,
    direction=Direction.IN,
    institution_id="bank-a",
    entity_id="fam",
    line_kind=LineKind.OPERATIONAL,
    affects=True,
):
    """Build a bank line; accrual defaults to the cash date."""
    return BankTransaction(
        id=txn_id,
        cash_date=when,
        accrual_date=accrual if accrual is not None else when,
        direction=direction,
        amount=Decimal(str(amount)) if isinstance(amount, (int, float)) else amount,
        category_id=category_id,
        institution_id=institution_id,
        entity_id=entity_id,
        description=f"line {txn_id}",
        line_kind=line_kind,
        affects_income_statement=affects,
    )


def card_installment(
    txn_id,
    amount,
    category_id="surv",
    purchase=date(2026, 1, 15),
    due=date(2026, 1, 15),
    index=1,
    count=1,
    total=None,
    card_id="card-a",
):
    """Build one card installment."""
    return CardTransaction(
        id=txn_id,
        card_id=card_id,
        purchase_date=purchase,
        invoice_due_date=due,
        description=f"purchase {txn_id}",
        category_id=category_id,
        amount=Decimal(str(amount)),
        total_purchase_amount=Decimal(str(total)) if total is not None else None,
        installment_index=index,
        installment_count=count,
    )
