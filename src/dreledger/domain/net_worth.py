"""Net worth: fixed assets, liabilities and the insurance covering them."""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from dreledger.database.base import Database
from dreledger.domain.entities import (
    FixedAsset,
    FixedAssetCategory,
    FixedAssetSnapshot,
    InsuranceKind,
    InsurancePolicy,
    LedgerSnapshot,
    Liability,
    LiabilityKind,
    NetWorth,
    ValuationMethod,
)
from dreledger.domain.errors import ConflictError, NotFoundError, ValidationError
from dreledger.domain.period import validate_reference
from dreledger.utils.amount_parser import coerce_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _non_negative(value: Any, label: str) -> Decimal:
    amount = coerce_amount(value)
    if amount < 0:
        raise ValidationError(f"{label} cannot be negative, got {amount}")
    return amount


def _share(part: Decimal, whole: Decimal) -> Optional[Decimal]:
    if whole == 0:
        return None
    return part / whole * HUNDRED


def valuation_as_of(
    asset: FixedAsset,
    snapshots: Iterable[FixedAssetSnapshot],
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Decimal:
    """Value of a fixed asset at the end of (month, year).

    Uses the latest valuation recorded at or before that month, falling back
    to the asset's market value. Without a month the market value is used.
    """
    if month is None or year is None:
        return asset.market_value
    latest: Optional[FixedAssetSnapshot] = None
    for snap in snapshots:
        if snap.fixed_asset_id != asset.id:
            continue
        if (snap.year, snap.month) > (year, month):
            continue
        if latest is None or (snap.year, snap.month) > (latest.year, latest.month):
            latest = snap
    return latest.equity_value if latest is not None else asset.market_value


def net_worth(
    snapshot: LedgerSnapshot,
    entity_id: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> NetWorth:
    """Net worth of one entity, or of everyone when entity_id is None.

    Insured value counts the policies attached to the selected fixed assets;
    policies attached to no asset only count for the whole family.
    """
    if month is not None and year is not None:
        validate_reference(month, year)

    assets = [
        asset
        for asset in snapshot.fixed_assets
        if entity_id is None or asset.entity_id == entity_id
    ]
    liabilities = [
        liability
        for liability in snapshot.liabilities
        if entity_id is None or liability.entity_id == entity_id
    ]

    asset_total = sum(
        (valuation_as_of(a, snapshot.fixed_asset_snapshots, month, year) for a in assets),
        ZERO,
    )
    debt_total = sum((debt.outstanding_balance for debt in liabilities), ZERO)

    asset_ids = {asset.id for asset in assets}
    insured_total = sum(
        (
            policy.insured_value
            for policy in snapshot.insurance_policies
            if policy.fixed_asset_id in asset_ids
            or (policy.fixed_asset_id is None and entity_id is None)
        ),
        ZERO,
    )

    return NetWorth(
        fixed_assets=asset_total,
        liabilities=debt_total,
        net=asset_total - debt_total,
        insured_value=insured_total,
        leverage_percent=_share(debt_total, asset_total),
        coverage_percent=_share(insured_total, asset_total),
    )


class NetWorthService:
    """Service for fixed assets, liabilities and insurance policies."""

    def __init__(self, db: Database):
        """Initialize net worth service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_fixed_asset(
        self,
        name: str,
        category: Any,
        acquisition_value: Any,
        market_value: Any,
        entity_id: Optional[str] = None,
        acquisition_date: Optional[date] = None,
        notes: Optional[str] = None,
        participation_percent: Any = None,
        valuation_method: Any = ValuationMethod.MARKET_VALUE,
        asset_id: Optional[str] = None,
    ) -> str:
        """Register a fixed asset.

        Returns:
            Fixed asset ID

        Raises:
            ValidationError: If the name is empty, a value negative or the
                participation outside 0..100
            ConflictError: If the ID already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Fixed asset name cannot be empty")
        try:
            asset_category = FixedAssetCategory(category)
            method = ValuationMethod(valuation_method)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        participation = None
        if participation_percent is not None:
            participation = coerce_amount(participation_percent)
            if not ZERO <= participation <= HUNDRED:
                raise ValidationError(
                    f"Participation must be between 0 and 100, got {participation}"
                )

        if asset_id is None:
            asset_id = f"fa-{uuid.uuid4().hex[:10]}"
        elif self.db.get_fixed_asset(asset_id) is not None:
            raise ConflictError(f"Fixed asset '{asset_id}' already exists")

        self.db.add_fixed_asset(
            FixedAsset(
                id=asset_id,
                name=name,
                category=asset_category,
                acquisition_value=_non_negative(acquisition_value, "Acquisition value"),
                market_value=_non_negative(market_value, "Market value"),
                entity_id=entity_id,
                acquisition_date=acquisition_date,
                notes=notes,
                participation_percent=participation,
                valuation_method=method,
            )
        )
        logger.info("Created fixed asset %s", asset_id)
        return asset_id

    def list_fixed_assets(self) -> list[FixedAsset]:
        """List all fixed assets."""
        return self.db.list_fixed_assets()

    def record_valuation(
        self, fixed_asset_id: str, month: int, year: int, equity_value: Any
    ) -> FixedAssetSnapshot:
        """Record a fixed asset's value for a month, replacing any earlier one.

        Raises:
            NotFoundError: If the fixed asset doesn't exist
            ValidationError: If the month is invalid or the value negative
        """
        if self.db.get_fixed_asset(fixed_asset_id) is None:
            raise NotFoundError(f"Fixed asset '{fixed_asset_id}' not found")
        validate_reference(month, year)
        snapshot = FixedAssetSnapshot(
            id=f"fav-{fixed_asset_id}-{year}-{month}",
            fixed_asset_id=fixed_asset_id,
            month=month,
            year=year,
            equity_value=_non_negative(equity_value, "Equity value"),
        )
        self.db.save_fixed_asset_snapshot(snapshot)
        logger.info("Valued fixed asset %s at %02d/%d", fixed_asset_id, month, year)
        return snapshot

    def list_valuations(self, fixed_asset_id: Optional[str] = None) -> list[FixedAssetSnapshot]:
        return self.db.list_fixed_asset_snapshots(fixed_asset_id)

    def add_liability(
        self,
        name: str,
        kind: Any,
        outstanding_balance: Any,
        entity_id: Optional[str] = None,
        installment_amount: Any = None,
        rate: Optional[str] = None,
        end_date: Optional[date] = None,
        liability_id: Optional[str] = None,
    ) -> str:
        """Register a liability.

        Returns:
            Liability ID

        Raises:
            ValidationError: If the name is empty, the kind unknown or an
                amount negative
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Liability name cannot be empty")
        try:
            liability_kind = LiabilityKind(kind)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if liability_id is None:
            liability_id = f"liab-{uuid.uuid4().hex[:10]}"

        self.db.add_liability(
            Liability(
                id=liability_id,
                name=name,
                kind=liability_kind,
                outstanding_balance=_non_negative(outstanding_balance, "Outstanding balance"),
                entity_id=entity_id,
                installment_amount=(
                    _non_negative(installment_amount, "Installment amount")
                    if installment_amount is not None
                    else None
                ),
                rate=rate,
                end_date=end_date,
            )
        )
        logger.info("Created liability %s", liability_id)
        return liability_id

    def list_liabilities(self) -> list[Liability]:
        """List all liabilities."""
        return self.db.list_liabilities()

    def add_insurance_policy(
        self,
        kind: Any,
        insurer: str,
        insured_value: Any,
        annual_premium: Any,
        start_date: date,
        end_date: date,
        fixed_asset_id: Optional[str] = None,
        policy_id: Optional[str] = None,
    ) -> str:
        """Register an insurance policy, optionally covering a fixed asset.

        Returns:
            Policy ID

        Raises:
            ValidationError: If the insurer is empty, an amount negative or
                the policy ends before it starts
            NotFoundError: If the covered fixed asset doesn't exist
        """
        insurer = (insurer or "").strip()
        if not insurer:
            raise ValidationError("Insurer cannot be empty")
        try:
            policy_kind = InsuranceKind(kind)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if end_date < start_date:
            raise ValidationError(
                f"Policy ends ({end_date}) before it starts ({start_date})"
            )
        if fixed_asset_id is not None and self.db.get_fixed_asset(fixed_asset_id) is None:
            raise NotFoundError(f"Fixed asset '{fixed_asset_id}' not found")
        if policy_id is None:
            policy_id = f"pol-{uuid.uuid4().hex[:10]}"

        self.db.add_insurance_policy(
            InsurancePolicy(
                id=policy_id,
                kind=policy_kind,
                insurer=insurer,
                insured_value=_non_negative(insured_value, "Insured value"),
                annual_premium=_non_negative(annual_premium, "Annual premium"),
                start_date=start_date,
                end_date=end_date,
                fixed_asset_id=fixed_asset_id,
            )
        )
        logger.info("Created insurance policy %s", policy_id)
        return policy_id

    def list_insurance_policies(self) -> list[InsurancePolicy]:
        """List all insurance policies."""
        return self.db.list_insurance_policies()

    def net_worth(
        self,
        entity_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> NetWorth:
        """Net worth from the current database contents."""
        return net_worth(self.db.load_snapshot(), entity_id=entity_id, month=month, year=year)
