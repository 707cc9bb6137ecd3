"""Export and import of the whole ledger as one JSON document.

The document is a single object with one key, STORAGE_KEY, holding every
collection:

    {"dreledger_state_v1": {"categories": [...], "institutions": [...], ...}}

Dates are ISO strings, amounts decimal strings and enumerations their
values, so a file exported here reads back without loss.
"""

import json
import logging
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from dreledger.database.base import Database
from dreledger.domain.category import quarantine_categories
from dreledger.domain.entities import (
    Asset,
    BankTransaction,
    CardStatus,
    CardTransaction,
    CreditCard,
    Direction,
    FixedAsset,
    FixedAssetCategory,
    FixedAssetSnapshot,
    Institution,
    InstitutionKind,
    InsuranceKind,
    InsurancePolicy,
    InvestmentSnapshot,
    LedgerSnapshot,
    Liability,
    LiabilityKind,
    LineKind,
    ValuationMethod,
)
from dreledger.domain.errors import DomainError, ValidationError
from dreledger.utils.amount_parser import coerce_amount
from dreledger.utils.date_parser import parse_record_date

logger = logging.getLogger(__name__)

STORAGE_KEY = "dreledger_state_v1"

# Import order: referenced tables first.
COLLECTIONS = (
    "categories",
    "institutions",
    "credit_cards",
    "assets",
    "bank_transactions",
    "card_transactions",
    "investment_snapshots",
    "fixed_assets",
    "fixed_asset_snapshots",
    "liabilities",
    "insurance_policies",
)


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def snapshot_to_document(snapshot: LedgerSnapshot) -> dict[str, Any]:
    """Build the state document of a snapshot."""
    return {
        STORAGE_KEY: {
            name: [asdict(record) for record in getattr(snapshot, name)]
            for name in COLLECTIONS
        }
    }


def _require(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing '{key}'")
    return value


def _optional_date(row: Mapping[str, Any], key: str) -> Optional[date]:
    value = row.get(key)
    if value is None or value == "":
        return None
    parsed = parse_record_date(value)
    if parsed is None:
        raise ValidationError(f"Unparseable date in '{key}': {value!r}")
    return parsed


def _optional_amount(row: Mapping[str, Any], key: str) -> Optional[Decimal]:
    value = row.get(key)
    if value is None or value == "":
        return None
    return coerce_amount(value)


def _optional_bool(row: Mapping[str, Any], key: str, default: bool) -> bool:
    value = row.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"'{key}' must be true or false, got {value!r}")
    return value


def _optional_str(row: Mapping[str, Any], key: str) -> Optional[str]:
    value = row.get(key)
    return None if value is None or value == "" else str(value)


def _parse_institution(row: Mapping[str, Any]) -> Institution:
    return Institution(
        id=str(_require(row, "id")),
        name=str(_require(row, "name")),
        kind=InstitutionKind(row.get("kind") or "bank"),
        entity_id=_optional_str(row, "entity_id"),
        opening_balance=_optional_amount(row, "opening_balance") or Decimal("0"),
    )


def _parse_credit_card(row: Mapping[str, Any]) -> CreditCard:
    return CreditCard(
        id=str(_require(row, "id")),
        name=str(_require(row, "name")),
        brand=_optional_str(row, "brand"),
        entity_id=_optional_str(row, "entity_id"),
        debit_institution_id=_optional_str(row, "debit_institution_id"),
        closing_day=int(row["closing_day"]) if row.get("closing_day") else None,
        due_day=int(row["due_day"]) if row.get("due_day") else None,
        credit_limit=_optional_amount(row, "credit_limit"),
    )


def _parse_asset(row: Mapping[str, Any]) -> Asset:
    return Asset(
        id=str(_require(row, "id")),
        name=str(_require(row, "name")),
        institution_id=_optional_str(row, "institution_id"),
        entity_id=_optional_str(row, "entity_id"),
    )


def _parse_bank_transaction(row: Mapping[str, Any]) -> BankTransaction:
    line_kind = LineKind(row.get("line_kind") or "operational")
    affects = _optional_bool(row, "affects_income_statement", True)
    if line_kind != LineKind.OPERATIONAL:
        affects = False
    amount = coerce_amount(_require(row, "amount"))
    if amount < 0:
        raise ValidationError(f"Bank amount cannot be negative, got {amount}")
    cash_date = _optional_date(row, "cash_date")
    return BankTransaction(
        id=str(_require(row, "id")),
        cash_date=cash_date,
        accrual_date=_optional_date(row, "accrual_date") or cash_date,
        direction=Direction(_require(row, "direction")),
        amount=amount,
        category_id=_optional_str(row, "category_id"),
        institution_id=_optional_str(row, "institution_id"),
        entity_id=_optional_str(row, "entity_id"),
        description=_optional_str(row, "description"),
        line_kind=line_kind,
        affects_income_statement=affects,
    )


def _parse_card_transaction(row: Mapping[str, Any]) -> CardTransaction:
    return CardTransaction(
        id=str(_require(row, "id")),
        card_id=str(_require(row, "card_id")),
        purchase_date=_optional_date(row, "purchase_date"),
        invoice_due_date=_optional_date(row, "invoice_due_date"),
        description=_optional_str(row, "description"),
        category_id=_optional_str(row, "category_id"),
        amount=coerce_amount(_require(row, "amount")),
        total_purchase_amount=_optional_amount(row, "total_purchase_amount"),
        installment_index=int(row.get("installment_index") or 1),
        installment_count=int(row.get("installment_count") or 1),
        status=CardStatus(row.get("status") or "pending"),
        group_id=_optional_str(row, "group_id"),
    )


def _parse_investment_snapshot(row: Mapping[str, Any]) -> InvestmentSnapshot:
    month = int(_require(row, "month"))
    if not 1 <= month <= 12:
        raise ValidationError(f"Snapshot month must be between 1 and 12, got {month}")
    return InvestmentSnapshot(
        id=str(_require(row, "id")),
        asset_id=str(_require(row, "asset_id")),
        month=month,
        year=int(_require(row, "year")),
        closing_balance=coerce_amount(_require(row, "closing_balance")),
        contributions=_optional_amount(row, "contributions") or Decimal("0"),
        withdrawals=_optional_amount(row, "withdrawals") or Decimal("0"),
        yield_amount=coerce_amount(_require(row, "yield_amount")),
    )


def _parse_fixed_asset(row: Mapping[str, Any]) -> FixedAsset:
    return FixedAsset(
        id=str(_require(row, "id")),
        name=str(_require(row, "name")),
        category=FixedAssetCategory(row.get("category") or "other"),
        acquisition_value=_optional_amount(row, "acquisition_value") or Decimal("0"),
        market_value=coerce_amount(_require(row, "market_value")),
        entity_id=_optional_str(row, "entity_id"),
        acquisition_date=_optional_date(row, "acquisition_date"),
        notes=_optional_str(row, "notes"),
        participation_percent=_optional_amount(row, "participation_percent"),
        valuation_method=ValuationMethod(row.get("valuation_method") or "market_value"),
    )


def _parse_fixed_asset_snapshot(row: Mapping[str, Any]) -> FixedAssetSnapshot:
    month = int(_require(row, "month"))
    if not 1 <= month <= 12:
        raise ValidationError(f"Valuation month must be between 1 and 12, got {month}")
    return FixedAssetSnapshot(
        id=str(_require(row, "id")),
        fixed_asset_id=str(_require(row, "fixed_asset_id")),
        month=month,
        year=int(_require(row, "year")),
        equity_value=coerce_amount(_require(row, "equity_value")),
    )


def _parse_liability(row: Mapping[str, Any]) -> Liability:
    return Liability(
        id=str(_require(row, "id")),
        name=str(_require(row, "name")),
        kind=LiabilityKind(row.get("kind") or "other"),
        outstanding_balance=coerce_amount(_require(row, "outstanding_balance")),
        entity_id=_optional_str(row, "entity_id"),
        installment_amount=_optional_amount(row, "installment_amount"),
        rate=_optional_str(row, "rate"),
        end_date=_optional_date(row, "end_date"),
    )


def _parse_insurance_policy(row: Mapping[str, Any]) -> InsurancePolicy:
    start = _optional_date(row, "start_date")
    end = _optional_date(row, "end_date")
    if start is None or end is None:
        raise ValidationError("Policy requires 'start_date' and 'end_date'")
    return InsurancePolicy(
        id=str(_require(row, "id")),
        kind=InsuranceKind(row.get("kind") or "other"),
        insurer=str(_require(row, "insurer")),
        insured_value=coerce_amount(_require(row, "insured_value")),
        annual_premium=_optional_amount(row, "annual_premium") or Decimal("0"),
        start_date=start,
        end_date=end,
        fixed_asset_id=_optional_str(row, "fixed_asset_id"),
    )


class StateService:
    """Service for saving and restoring the whole ledger state."""

    def __init__(self, db: Database):
        """Initialize state service.

        Args:
            db: Database instance
        """
        self.db = db

    def export_state(self, path: Union[str, Path]) -> dict[str, int]:
        """Write every collection to a JSON file.

        Args:
            path: Destination file

        Returns:
            Number of records written per collection
        """
        snapshot = self.db.load_snapshot()
        document = snapshot_to_document(snapshot)
        Path(path).write_text(
            json.dumps(document, default=_json_default, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        counts = {name: len(getattr(snapshot, name)) for name in COLLECTIONS}
        logger.info("Exported state to %s: %s", path, counts)
        return counts

    def import_state(self, path: Union[str, Path]) -> dict[str, Any]:
        """Load a JSON state file into the database.

        Categories whose report group is not part of the DRE structure are
        quarantined; other records that cannot be parsed or stored are
        skipped and reported under "errors".

        Args:
            path: State file written by export_state

        Returns:
            {"imported": {collection: count}, "quarantined": [...], "errors": [...]}

        Raises:
            ValidationError: If the file is not a state document
        """
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"State file is not valid JSON: {e}") from e
        if not isinstance(document, dict) or not isinstance(
            document.get(STORAGE_KEY), dict
        ):
            raise ValidationError(f"State file has no '{STORAGE_KEY}' object")
        state = document[STORAGE_KEY]

        imported = {name: 0 for name in COLLECTIONS}
        errors: list[dict[str, Any]] = []

        categories, quarantined = quarantine_categories(
            row for row in state.get("categories") or [] if isinstance(row, dict)
        )
        for entry in quarantined:
            logger.warning(
                "Quarantined category %s: %s", entry["row"].get("id"), entry["reason"]
            )
        for category in categories:
            if self._store("categories", category.id, self.db.add_category, category, errors):
                imported["categories"] += 1

        parsers: dict[str, tuple[Callable[[Mapping[str, Any]], Any], Callable[[Any], Any]]] = {
            "institutions": (_parse_institution, self.db.add_institution),
            "credit_cards": (_parse_credit_card, self.db.add_credit_card),
            "assets": (_parse_asset, self.db.add_asset),
            "bank_transactions": (
                _parse_bank_transaction,
                lambda record: self.db.add_bank_transactions([record]),
            ),
            "card_transactions": (
                _parse_card_transaction,
                lambda record: self.db.add_card_transactions([record]),
            ),
            "investment_snapshots": (
                _parse_investment_snapshot,
                self.db.save_investment_snapshot,
            ),
            "fixed_assets": (_parse_fixed_asset, self.db.add_fixed_asset),
            "fixed_asset_snapshots": (
                _parse_fixed_asset_snapshot,
                self.db.save_fixed_asset_snapshot,
            ),
            "liabilities": (_parse_liability, self.db.add_liability),
            "insurance_policies": (_parse_insurance_policy, self.db.add_insurance_policy),
        }
        for name, (parse, store) in parsers.items():
            for row in state.get(name) or []:
                record_id = row.get("id") if isinstance(row, dict) else None
                try:
                    if not isinstance(row, dict):
                        raise ValidationError("Record is not an object")
                    record = parse(row)
                except (DomainError, ValueError, TypeError) as e:
                    errors.append({"collection": name, "id": record_id, "reason": str(e)})
                    continue
                if self._store(name, record.id, store, record, errors):
                    imported[name] += 1

        logger.info(
            "Imported state from %s: %s (%d quarantined, %d errors)",
            path,
            imported,
            len(quarantined),
            len(errors),
        )
        return {"imported": imported, "quarantined": quarantined, "errors": errors}

    @staticmethod
    def _store(
        collection: str,
        record_id: str,
        store: Callable[[Any], Any],
        record: Any,
        errors: list[dict[str, Any]],
    ) -> bool:
        try:
            store(record)
        except DomainError as e:
            errors.append({"collection": collection, "id": record_id, "reason": str(e)})
            return False
        return True
