"""Monthly closing of investment assets."""

import logging
import uuid
from decimal import Decimal
from typing import Iterable, Optional

from dreledger.database.base import Database
from dreledger.domain.entities import Asset, InvestmentSnapshot
from dreledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from dreledger.domain.period import validate_reference
from dreledger.utils.amount_parser import coerce_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def previous_month(month: int, year: int) -> tuple[int, int]:
    """(month, year) before the given one; January goes back to December."""
    if month == 1:
        return 12, year - 1
    return month - 1, year


def previous_snapshot(
    snapshots: Iterable[InvestmentSnapshot], asset_id: str, month: int, year: int
) -> Optional[InvestmentSnapshot]:
    """Closing of the asset in the month before (month, year), if any."""
    prev_month, prev_year = previous_month(month, year)
    for snap in snapshots:
        if (
            snap.asset_id == asset_id
            and snap.month == prev_month
            and snap.year == prev_year
        ):
            return snap
    return None


def close_month(
    asset_id: str,
    month: int,
    year: int,
    closing_balance: Decimal,
    contributions: Decimal = ZERO,
    withdrawals: Decimal = ZERO,
    previous: Optional[InvestmentSnapshot] = None,
) -> InvestmentSnapshot:
    """Build the closing snapshot of an asset for one month.

    The yield is what the balance grew beyond the money moved in and out:
    closing - previous closing - contributions + withdrawals. Without a
    previous closing the asset starts from zero.

    Raises:
        ValidationError: If the month is invalid or an amount is negative
    """
    validate_reference(month, year)
    closing = coerce_amount(closing_balance)
    contributed = coerce_amount(contributions)
    withdrawn = coerce_amount(withdrawals)
    if contributed < 0 or withdrawn < 0:
        raise ValidationError("Contributions and withdrawals cannot be negative")

    prior_balance = previous.closing_balance if previous is not None else ZERO
    return InvestmentSnapshot(
        id=f"snap-{asset_id}-{year}-{month}",
        asset_id=asset_id,
        month=month,
        year=year,
        closing_balance=closing,
        contributions=contributed,
        withdrawals=withdrawn,
        yield_amount=closing - prior_balance - contributed + withdrawn,
    )


def portfolio_balance(
    snapshots: Iterable[InvestmentSnapshot], month: int, year: int
) -> Decimal:
    """Sum of the closing balances of every asset closed in (month, year)."""
    return sum(
        (s.closing_balance for s in snapshots if s.month == month and s.year == year),
        ZERO,
    )


class InvestmentService:
    """Service for assets and their monthly closings."""

    def __init__(self, db: Database):
        """Initialize investment service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_asset(
        self,
        name: str,
        institution_id: Optional[str] = None,
        entity_id: Optional[str] = None,
        asset_id: Optional[str] = None,
    ) -> str:
        """Register an investment asset.

        Returns:
            Asset ID

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the custodian institution doesn't exist
            ConflictError: If the asset ID already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Asset name cannot be empty")
        if institution_id is not None and self.db.get_institution(institution_id) is None:
            raise NotFoundError(f"Institution '{institution_id}' not found")
        if asset_id is None:
            asset_id = f"asset-{uuid.uuid4().hex[:10]}"
        elif self.db.get_asset(asset_id) is not None:
            raise ConflictError(f"Asset '{asset_id}' already exists")

        self.db.add_asset(
            Asset(id=asset_id, name=name, institution_id=institution_id, entity_id=entity_id)
        )
        logger.info("Created asset %s", asset_id)
        return asset_id

    def list_assets(self) -> list[Asset]:
        """List all assets."""
        return self.db.list_assets()

    def close_month(
        self,
        asset_id: str,
        month: int,
        year: int,
        closing_balance: Decimal,
        contributions: Decimal = ZERO,
        withdrawals: Decimal = ZERO,
    ) -> InvestmentSnapshot:
        """Close an asset's month, replacing any earlier closing of it.

        Args:
            asset_id: Asset ID
            month: Month (1-12)
            year: Year
            closing_balance: Market value at the end of the month
            contributions: Money put into the asset during the month
            withdrawals: Money taken out of the asset during the month

        Returns:
            The stored snapshot

        Raises:
            NotFoundError: If the asset doesn't exist
            ValidationError: If the month or an amount is invalid
        """
        if self.db.get_asset(asset_id) is None:
            raise NotFoundError(f"Asset '{asset_id}' not found")

        snapshots = self.db.list_investment_snapshots(asset_id)
        snapshot = close_month(
            asset_id,
            month,
            year,
            closing_balance,
            contributions,
            withdrawals,
            previous=previous_snapshot(snapshots, asset_id, month, year),
        )
        self.db.save_investment_snapshot(snapshot)
        logger.info(
            "Closed %02d/%d for asset %s with yield %s",
            month,
            year,
            asset_id,
            snapshot.yield_amount,
        )
        return snapshot

    def list_snapshots(self, asset_id: Optional[str] = None) -> list[InvestmentSnapshot]:
        """List snapshots, optionally for one asset."""
        return self.db.list_investment_snapshots(asset_id)

    def portfolio_balance(self, month: int, year: int) -> Decimal:
        """Total closing balance across assets for one month."""
        return portfolio_balance(self.db.list_investment_snapshots(), month, year)
