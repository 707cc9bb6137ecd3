"""Bank transaction and institution domain services."""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from dreledger.database.base import Database
from dreledger.domain.entities import (
    BankTransaction,
    Direction,
    Institution,
    InstitutionKind,
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


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


class InstitutionService:
    """Service for banks, brokers and wallets."""

    def __init__(self, db: Database):
        """Initialize institution service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_institution(
        self,
        name: str,
        kind: InstitutionKind = InstitutionKind.BANK,
        entity_id: Optional[str] = None,
        opening_balance: Decimal = Decimal("0"),
        institution_id: Optional[str] = None,
    ) -> str:
        """Create an institution.

        Args:
            name: Institution name
            kind: Bank, broker or wallet
            entity_id: Owning entity (person or company)
            opening_balance: Balance before the first recorded line
            institution_id: Optional explicit ID; generated when omitted

        Returns:
            Institution ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If an institution with the same name or ID exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Institution name cannot be empty")
        for existing in self.db.list_institutions():
            if existing.name.casefold() == name.casefold():
                raise ConflictError(f"Institution with name '{name}' already exists")

        if institution_id is None:
            institution_id = _new_id("inst")
        elif self.db.get_institution(institution_id) is not None:
            raise ConflictError(f"Institution '{institution_id}' already exists")

        self.db.add_institution(
            Institution(
                id=institution_id,
                name=name,
                kind=InstitutionKind(kind),
                entity_id=entity_id,
                opening_balance=coerce_amount(opening_balance),
            )
        )
        logger.info("Created institution %s", institution_id)
        return institution_id

    def list_institutions(self) -> list[Institution]:
        """List all institutions."""
        return self.db.list_institutions()

    def balance(self, institution_id: str) -> Decimal:
        """Opening balance plus every line recorded at the institution.

        Unlike the DRE, the balance counts every line, transfers and
        invoice payments included.

        Raises:
            NotFoundError: If the institution doesn't exist
        """
        institution = self.db.get_institution(institution_id)
        if institution is None:
            raise NotFoundError(f"Institution '{institution_id}' not found")
        balance = institution.opening_balance
        for txn in self.db.list_bank_transactions(institution_id):
            amount = coerce_amount(txn.amount)
            balance += amount if txn.direction == Direction.IN else -amount
        return balance


class TransactionService:
    """Service for recording bank lines."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_amount(self, amount: Decimal) -> Decimal:
        value = coerce_amount(amount)
        if value <= 0:
            raise ValidationError(non_positive_amount(amount))
        return value

    def _check_institution(self, institution_id: str) -> Institution:
        institution = self.db.get_institution(institution_id)
        if institution is None:
            raise NotFoundError(f"Institution '{institution_id}' not found")
        return institution

    def _check_category(self, category_id: Optional[str]) -> None:
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def record_operational(
        self,
        institution_id: str,
        direction: Direction,
        amount: Decimal,
        category_id: str,
        cash_date: date,
        accrual_date: Optional[date] = None,
        description: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> str:
        """Record a line that reaches the income statement.

        Args:
            institution_id: Institution the money moved through
            direction: Money in or out
            amount: Positive amount
            category_id: DRE category
            cash_date: Date the money moved
            accrual_date: Date the revenue or expense belongs to; defaults
                to the cash date
            description: Optional description
            entity_id: Owning entity; defaults to the institution's

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the institution or category doesn't exist
        """
        value = self._check_amount(amount)
        institution = self._check_institution(institution_id)
        self._check_category(category_id)

        txn = BankTransaction(
            id=_new_id("txn"),
            cash_date=cash_date,
            accrual_date=accrual_date or cash_date,
            direction=Direction(direction),
            amount=value,
            category_id=category_id,
            institution_id=institution_id,
            entity_id=entity_id or institution.entity_id,
            description=description,
            line_kind=LineKind.OPERATIONAL,
            affects_income_statement=True,
        )
        self.db.add_bank_transactions([txn])
        logger.info("Recorded %s line %s of %s", txn.direction.value, txn.id, value)
        return txn.id

    def record_transfer(
        self,
        from_institution_id: str,
        to_institution_id: str,
        amount: Decimal,
        cash_date: date,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> tuple[str, str]:
        """Record both legs of a transfer between own institutions.

        Neither leg reaches the income statement.

        Returns:
            (outgoing leg ID, incoming leg ID)

        Raises:
            ValidationError: If the amount is not positive or both
                institutions are the same
            NotFoundError: If an institution or the category doesn't exist
        """
        value = self._check_amount(amount)
        if from_institution_id == to_institution_id:
            raise ValidationError("Transfer needs two different institutions")
        source = self._check_institution(from_institution_id)
        destination = self._check_institution(to_institution_id)
        self._check_category(category_id)

        pair = uuid.uuid4().hex[:10]
        legs = [
            BankTransaction(
                id=f"trf-{pair}-out",
                cash_date=cash_date,
                accrual_date=cash_date,
                direction=Direction.OUT,
                amount=value,
                category_id=category_id,
                institution_id=source.id,
                entity_id=source.entity_id,
                description=description or f"Transfer to {destination.name}",
                line_kind=LineKind.INTERNAL_TRANSFER,
                affects_income_statement=False,
            ),
            BankTransaction(
                id=f"trf-{pair}-in",
                cash_date=cash_date,
                accrual_date=cash_date,
                direction=Direction.IN,
                amount=value,
                category_id=category_id,
                institution_id=destination.id,
                entity_id=destination.entity_id,
                description=description or f"Transfer from {source.name}",
                line_kind=LineKind.INTERNAL_TRANSFER,
                affects_income_statement=False,
            ),
        ]
        out_id, in_id = self.db.add_bank_transactions(legs)
        logger.info(
            "Recorded transfer of %s from %s to %s", value, source.id, destination.id
        )
        return out_id, in_id

    def record_invoice_payment(
        self,
        card_id: str,
        amount: Decimal,
        cash_date: date,
        institution_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """Record the bank line that pays a card invoice.

        The purchases already reached the statement through the card, so the
        payment never does.

        Args:
            card_id: Card whose invoice is paid
            amount: Positive amount
            cash_date: Payment date
            institution_id: Paying institution; defaults to the card's debit
                institution
            description: Optional description

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not positive or no paying
                institution is known
            NotFoundError: If the card or the institution doesn't exist
        """
        value = self._check_amount(amount)
        card = self.db.get_credit_card(card_id)
        if card is None:
            raise NotFoundError(f"Credit card '{card_id}' not found")
        institution_id = institution_id or card.debit_institution_id
        if institution_id is None:
            raise ValidationError(
                f"Credit card '{card_id}' has no debit institution; pass one explicitly"
            )
        institution = self._check_institution(institution_id)

        txn = BankTransaction(
            id=_new_id("pay"),
            cash_date=cash_date,
            accrual_date=cash_date,
            direction=Direction.OUT,
            amount=value,
            category_id=None,
            institution_id=institution.id,
            entity_id=card.entity_id or institution.entity_id,
            description=description or f"Invoice payment {card.name}",
            line_kind=LineKind.INVOICE_PAYMENT,
            affects_income_statement=False,
        )
        self.db.add_bank_transactions([txn])
        logger.info("Recorded invoice payment %s for card %s", txn.id, card_id)
        return txn.id

    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        return self.db.get_bank_transaction(transaction_id)

    def list_transactions(
        self, institution_id: Optional[str] = None
    ) -> list[BankTransaction]:
        """List bank transactions, optionally for one institution."""
        return self.db.list_bank_transactions(institution_id)
