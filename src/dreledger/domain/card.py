"""Credit card purchases, invoices and invoice reconciliation."""

import logging
import re
import uuid
from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from dreledger.database.base import Database
from dreledger.domain.entities import (
    CardStatus,
    CardTransaction,
    CreditCard,
    Invoice,
    LineKind,
)
from dreledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    non_positive_amount,
)
from dreledger.utils.amount_parser import coerce_amount

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
SETTLED_STATUSES = (CardStatus.PAID, CardStatus.RECONCILED)

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_key(value: date) -> str:
    """Invoice key (YYYY-MM) of a due date."""
    return f"{value.year:04d}-{value.month:02d}"


def month_key_of(txn: CardTransaction) -> Optional[str]:
    """Invoice key of an installment, or None without a due date."""
    if txn.invoice_due_date is None:
        return None
    return month_key(txn.invoice_due_date)


def split_purchase(
    card_id: str,
    purchase_date: date,
    total_amount: Decimal,
    installment_count: int,
    category_id: Optional[str],
    description: Optional[str] = None,
    group_id: Optional[str] = None,
) -> list[CardTransaction]:
    """Split one card purchase into monthly installments.

    Every installment is total / count rounded to cents; the rounding
    remainder lands on the last one, so the installments always add up to
    the total. Installment i is due i - 1 months after the purchase.

    Args:
        card_id: Card the purchase was made with
        purchase_date: Purchase date
        total_amount: Full purchase value (negative for a refund)
        installment_count: Number of installments, at least 1
        category_id: DRE category of the purchase
        description: Optional description
        group_id: Shared ID of the installments; generated when omitted

    Returns:
        Installments ordered by index

    Raises:
        ValidationError: If the count is below 1 or the total is zero
    """
    if installment_count < 1:
        raise ValidationError(
            f"Installment count must be at least 1, got {installment_count}"
        )
    total = coerce_amount(total_amount)
    if total == 0:
        raise ValidationError(non_positive_amount(total_amount))

    if group_id is None:
        group_id = f"grp-{uuid.uuid4().hex[:10]}"

    base = (total / installment_count).quantize(CENT, rounding=ROUND_HALF_UP)
    installments = []
    for index in range(1, installment_count + 1):
        if index == installment_count:
            amount = total - base * (installment_count - 1)
        else:
            amount = base
        installments.append(
            CardTransaction(
                id=f"ctx-{group_id}-{index}",
                card_id=card_id,
                purchase_date=purchase_date,
                invoice_due_date=purchase_date + relativedelta(months=index - 1),
                description=description,
                category_id=category_id,
                amount=amount,
                total_purchase_amount=total,
                installment_index=index,
                installment_count=installment_count,
                status=CardStatus.PENDING,
                group_id=group_id,
            )
        )
    return installments


def group_invoices(
    card_transactions: Iterable[CardTransaction], card_id: str
) -> list[Invoice]:
    """Group a card's installments into invoices by due month, newest first.

    Installments without a due date belong to no invoice.
    """
    buckets: dict[str, list[CardTransaction]] = {}
    for txn in card_transactions:
        if txn.card_id != card_id or txn.invoice_due_date is None:
            continue
        buckets.setdefault(month_key(txn.invoice_due_date), []).append(txn)

    invoices = []
    for key in sorted(buckets, reverse=True):
        items = buckets[key]
        invoices.append(
            Invoice(
                card_id=card_id,
                month_key=key,
                total=sum((coerce_amount(t.amount) for t in items), Decimal("0")),
                items=tuple(items),
                is_paid=all(t.status in SETTLED_STATUSES for t in items),
            )
        )
    return invoices


def reconcile_invoice(
    card_transactions: Iterable[CardTransaction], card_id: str, invoice_month: str
) -> list[CardTransaction]:
    """Return the records with one invoice's installments marked paid.

    The input records are left untouched.

    Raises:
        ValidationError: If invoice_month is not in YYYY-MM form
    """
    if not _MONTH_KEY.match(invoice_month or ""):
        raise ValidationError(f"Invoice month must be YYYY-MM, got '{invoice_month}'")
    updated = []
    for txn in card_transactions:
        if txn.card_id == card_id and month_key_of(txn) == invoice_month:
            txn = replace(txn, status=CardStatus.PAID)
        updated.append(txn)
    return updated


def outstanding_balance(
    card_transactions: Iterable[CardTransaction], card_id: str
) -> Decimal:
    """Sum of the card's installments not yet paid."""
    return sum(
        (
            coerce_amount(t.amount)
            for t in card_transactions
            if t.card_id == card_id and t.status not in SETTLED_STATUSES
        ),
        Decimal("0"),
    )


class CardService:
    """Service for credit cards and their purchases."""

    def __init__(self, db: Database):
        """Initialize card service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_card(
        self,
        name: str,
        brand: Optional[str] = None,
        entity_id: Optional[str] = None,
        debit_institution_id: Optional[str] = None,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
        credit_limit: Optional[Decimal] = None,
        card_id: Optional[str] = None,
    ) -> str:
        """Register a credit card.

        Returns:
            Card ID

        Raises:
            ValidationError: If the name is empty or a day is outside 1..31
            NotFoundError: If the debit institution doesn't exist
            ConflictError: If the card ID already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Card name cannot be empty")
        for label, day in (("Closing day", closing_day), ("Due day", due_day)):
            if day is not None and not 1 <= day <= 31:
                raise ValidationError(f"{label} must be between 1 and 31, got {day}")
        if (
            debit_institution_id is not None
            and self.db.get_institution(debit_institution_id) is None
        ):
            raise NotFoundError(f"Institution '{debit_institution_id}' not found")

        if card_id is None:
            card_id = f"card-{uuid.uuid4().hex[:10]}"
        elif self.db.get_credit_card(card_id) is not None:
            raise ConflictError(f"Credit card '{card_id}' already exists")

        self.db.add_credit_card(
            CreditCard(
                id=card_id,
                name=name,
                brand=brand,
                entity_id=entity_id,
                debit_institution_id=debit_institution_id,
                closing_day=closing_day,
                due_day=due_day,
                credit_limit=credit_limit,
            )
        )
        logger.info("Created credit card %s", card_id)
        return card_id

    def list_cards(self) -> list[CreditCard]:
        """List all credit cards."""
        return self.db.list_credit_cards()

    def register_purchase(
        self,
        card_id: str,
        purchase_date: date,
        total_amount: Decimal,
        category_id: str,
        installment_count: int = 1,
        description: Optional[str] = None,
    ) -> list[str]:
        """Split a purchase into installments and store them.

        Args:
            card_id: Card ID
            purchase_date: Purchase date
            total_amount: Full purchase value, positive
            category_id: DRE category
            installment_count: Number of installments
            description: Optional description

        Returns:
            IDs of the stored installments

        Raises:
            NotFoundError: If the card or the category doesn't exist
            ValidationError: If the amount is not positive or the count is below 1
        """
        if self.db.get_credit_card(card_id) is None:
            raise NotFoundError(f"Credit card '{card_id}' not found")
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        total = coerce_amount(total_amount)
        if total <= 0:
            raise ValidationError(non_positive_amount(total_amount))

        installments = split_purchase(
            card_id=card_id,
            purchase_date=purchase_date,
            total_amount=total,
            installment_count=installment_count,
            category_id=category_id,
            description=description.upper() if description else None,
        )
        ids = self.db.add_card_transactions(installments)
        logger.info(
            "Registered purchase of %s on card %s in %d installment(s)",
            total,
            card_id,
            installment_count,
        )
        return ids

    def invoices(self, card_id: str) -> list[Invoice]:
        """List a card's invoices, newest first.

        Raises:
            NotFoundError: If the card doesn't exist
        """
        if self.db.get_credit_card(card_id) is None:
            raise NotFoundError(f"Credit card '{card_id}' not found")
        return group_invoices(self.db.list_card_transactions(card_id), card_id)

    def outstanding(self, card_id: str) -> Decimal:
        """Unpaid installments of a card."""
        return outstanding_balance(self.db.list_card_transactions(card_id), card_id)

    def reconcile_invoice(
        self,
        card_id: str,
        invoice_month: str,
        payment_transaction_id: Optional[str] = None,
    ) -> int:
        """Mark every installment of an invoice as paid.

        Args:
            card_id: Card ID
            invoice_month: Invoice key, YYYY-MM
            payment_transaction_id: Optional bank line that paid the invoice;
                it must be an invoice payment

        Returns:
            Number of installments updated

        Raises:
            NotFoundError: If the card, the invoice or the payment doesn't exist
            ValidationError: If the payment line is not an invoice payment
        """
        if self.db.get_credit_card(card_id) is None:
            raise NotFoundError(f"Credit card '{card_id}' not found")
        if payment_transaction_id is not None:
            payment = self.db.get_bank_transaction(payment_transaction_id)
            if payment is None:
                raise NotFoundError(
                    f"Bank transaction '{payment_transaction_id}' not found"
                )
            if payment.line_kind != LineKind.INVOICE_PAYMENT:
                raise ValidationError(
                    f"Bank transaction '{payment_transaction_id}' is not an invoice payment"
                )

        current = self.db.list_card_transactions(card_id)
        updated = reconcile_invoice(current, card_id, invoice_month)
        changed = [
            txn.id
            for txn in updated
            if txn.card_id == card_id and month_key_of(txn) == invoice_month
        ]
        if not changed:
            raise NotFoundError(
                f"No invoice {invoice_month} for credit card '{card_id}'"
            )
        count = self.db.update_card_transaction_status(changed, CardStatus.PAID)
        logger.info(
            "Reconciled invoice %s of card %s (%d installment(s))",
            invoice_month,
            card_id,
            count,
        )
        return count
