"""DRE (management income statement) aggregation.

The aggregator is a pure function of a LedgerSnapshot and a PeriodWindow:
it reads the records, never mutates them, and returns a fresh
AggregateResult on every call. Rules run in a fixed order (bank lines,
card installments, investment yield) and the roll-ups are derived from the
group totals at the end.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from dreledger.domain.category import CategoryResolver
from dreledger.domain.entities import (
    OPERATING_GROUPS,
    WEALTH_GROUPS,
    AggregateDiagnostics,
    AggregateResult,
    BankTransaction,
    CardTransaction,
    CategoryTotal,
    Direction,
    GroupTotal,
    InvestmentSnapshot,
    LedgerSnapshot,
    LineDetail,
    LineKind,
    LineSource,
    PeriodWindow,
    ReportGroup,
    TrendPoint,
    ViewMode,
    WindowKind,
)
from dreledger.domain.period import (
    month_in_period,
    trailing_months,
    validate_reference,
    window_matches,
)
from dreledger.utils.amount_parser import coerce_amount
from dreledger.utils.date_parser import parse_record_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
YIELD_CATEGORY_PREFIX = "asset:"


@dataclass
class _CategoryBucket:
    name: str
    total: Decimal = ZERO
    lines: list[LineDetail] = field(default_factory=list)


@dataclass
class _GroupBucket:
    total: Decimal = ZERO
    categories: dict[str, _CategoryBucket] = field(default_factory=dict)


class _Accumulator:
    """Mutable totals for a single run; frozen into the result at the end."""

    def __init__(self) -> None:
        self.groups: dict[ReportGroup, _GroupBucket] = {
            group: _GroupBucket() for group in ReportGroup
        }
        self.considered = 0
        self.classified = 0
        self.orphans = 0
        self.malformed = 0
        self.skipped_structural = 0
        self.unresolved_sources = 0

    def post(
        self,
        group: ReportGroup,
        category_id: str,
        category_name: str,
        line: LineDetail,
    ) -> None:
        bucket = self.groups[group]
        category = bucket.categories.get(category_id)
        if category is None:
            category = _CategoryBucket(name=category_name)
            bucket.categories[category_id] = category
        category.total += line.amount
        category.lines.append(line)
        bucket.total += line.amount
        self.classified += 1

    def freeze(self) -> tuple[tuple[GroupTotal, ...], AggregateDiagnostics]:
        groups = tuple(
            GroupTotal(
                group=group,
                total=bucket.total,
                categories=tuple(
                    CategoryTotal(
                        category_id=category_id,
                        name=category.name,
                        total=category.total,
                        lines=tuple(category.lines),
                    )
                    for category_id, category in bucket.categories.items()
                ),
            )
            for group, bucket in self.groups.items()
        )
        diagnostics = AggregateDiagnostics(
            considered=self.considered,
            classified=self.classified,
            orphans=self.orphans,
            malformed=self.malformed,
            skipped_structural=self.skipped_structural,
            unresolved_sources=self.unresolved_sources,
        )
        return groups, diagnostics


class DREAggregator:
    """Build DRE reports from one ledger snapshot.

    The snapshot can be reused for any number of windows (e.g. the twelve
    months of a trend); each call to aggregate() starts from empty totals.
    """

    def __init__(self, snapshot: LedgerSnapshot):
        """Index the snapshot's reference tables.

        Raises:
            ConfigurationIntegrityError: If a category declares a report
                group outside the enumeration
        """
        self.snapshot = snapshot
        self.resolver = CategoryResolver(snapshot.categories)
        self._institutions = {inst.id: inst for inst in snapshot.institutions}
        self._cards = {card.id: card for card in snapshot.credit_cards}
        self._assets = {asset.id: asset for asset in snapshot.assets}

    def aggregate(
        self, window: PeriodWindow, entity_id: Optional[str] = None
    ) -> AggregateResult:
        """Aggregate every record that falls in the window.

        A year-over-year window is treated as its annual baseline; use
        compare_years() for the side-by-side comparison.

        Args:
            window: Reference period, window kind and view mode
            entity_id: Only count records belonging to this entity

        Returns:
            AggregateResult with group totals, drill-down and roll-ups
        """
        validate_reference(window.reference_month, window.reference_year)
        acc = _Accumulator()

        for txn in self.snapshot.bank_transactions:
            self._apply_bank_transaction(acc, txn, window, entity_id)
        for txn in self.snapshot.card_transactions:
            self._apply_card_transaction(acc, txn, window, entity_id)
        for snap in self.snapshot.investment_snapshots:
            self._apply_investment_snapshot(acc, snap, window, entity_id)

        groups, diagnostics = acc.freeze()
        totals = {bucket.group: bucket.total for bucket in groups}

        operating_revenue = totals[ReportGroup.OPERATING_REVENUE]
        operating_result = sum((totals[g] for g in OPERATING_GROUPS), ZERO)
        wealth_result = sum((totals[g] for g in WEALTH_GROUPS), ZERO)

        logger.debug(
            "DRE %s/%s %s %s: considered=%d classified=%d orphans=%d",
            window.reference_month,
            window.reference_year,
            window.window_kind.value,
            window.view_mode.value,
            diagnostics.considered,
            diagnostics.classified,
            diagnostics.orphans,
        )
        if diagnostics.orphans:
            logger.warning(
                "%d record(s) reference unknown categories and were left out of the report",
                diagnostics.orphans,
            )
        if diagnostics.malformed:
            logger.warning(
                "%d malformed record(s) skipped", diagnostics.malformed
            )

        return AggregateResult(
            window=window,
            groups=groups,
            operating_revenue=operating_revenue,
            operating_result=operating_result,
            wealth_result=wealth_result,
            global_result=operating_result + wealth_result,
            unclassified=diagnostics.orphans,
            diagnostics=diagnostics,
        )

    def _apply_bank_transaction(
        self,
        acc: _Accumulator,
        txn: BankTransaction,
        window: PeriodWindow,
        entity_id: Optional[str],
    ) -> None:
        # Invoice payments and transfers are excluded structurally, whatever
        # their flag says.
        if txn.line_kind != LineKind.OPERATIONAL or not txn.affects_income_statement:
            acc.skipped_structural += 1
            return
        if entity_id is not None and txn.entity_id != entity_id:
            return

        recognized = txn.cash_date if window.view_mode == ViewMode.CASH else txn.accrual_date
        if not window_matches(recognized, window):
            return
        acc.considered += 1

        try:
            amount = coerce_amount(txn.amount)
        except ValueError:
            acc.malformed += 1
            return
        if amount < 0:
            acc.malformed += 1
            return

        category = self.resolver.resolve(txn.category_id)
        if category is None:
            acc.orphans += 1
            return

        signed = amount if txn.direction == Direction.IN else -amount
        source_name = None
        if txn.institution_id is not None:
            institution = self._institutions.get(txn.institution_id)
            if institution is None:
                acc.unresolved_sources += 1
            else:
                source_name = institution.name

        acc.post(
            category.report_group,
            category.id,
            category.name,
            LineDetail(
                record_id=txn.id,
                source=LineSource.BANK,
                date=parse_record_date(recognized),
                description=txn.description,
                amount=signed,
                source_name=source_name,
            ),
        )

    def _apply_card_transaction(
        self,
        acc: _Accumulator,
        txn: CardTransaction,
        window: PeriodWindow,
        entity_id: Optional[str],
    ) -> None:
        card = self._cards.get(txn.card_id)
        if entity_id is not None and (card is None or card.entity_id != entity_id):
            return

        accrual = window.view_mode == ViewMode.ACCRUAL
        recognized = txn.purchase_date if accrual else txn.invoice_due_date
        if not window_matches(recognized, window):
            return
        # The whole purchase is recognized once, on its first installment.
        if accrual and (txn.installment_index or 1) != 1:
            acc.skipped_structural += 1
            return
        acc.considered += 1

        try:
            if window.view_mode == ViewMode.ACCRUAL:
                amount = self._full_purchase_amount(txn)
            else:
                amount = coerce_amount(txn.amount)
        except ValueError:
            acc.malformed += 1
            return

        category = self.resolver.resolve(txn.category_id)
        if category is None:
            acc.orphans += 1
            return

        source_name = None
        if card is None:
            acc.unresolved_sources += 1
        else:
            source_name = card.name

        acc.post(
            category.report_group,
            category.id,
            category.name,
            LineDetail(
                record_id=txn.id,
                source=LineSource.CARD,
                date=parse_record_date(recognized),
                description=txn.description,
                amount=-amount,
                source_name=source_name,
            ),
        )

    @staticmethod
    def _full_purchase_amount(txn: CardTransaction) -> Decimal:
        if txn.total_purchase_amount is not None:
            return coerce_amount(txn.total_purchase_amount)
        count = txn.installment_count or 1
        return coerce_amount(txn.amount) * count

    def _apply_investment_snapshot(
        self,
        acc: _Accumulator,
        snap: InvestmentSnapshot,
        window: PeriodWindow,
        entity_id: Optional[str],
    ) -> None:
        asset = self._assets.get(snap.asset_id)
        if entity_id is not None and (asset is None or asset.entity_id != entity_id):
            return
        if isinstance(snap.year, bool) or not isinstance(snap.year, int):
            return
        if not month_in_period(
            snap.month,
            snap.year,
            window.reference_month,
            window.reference_year,
            window.window_kind,
        ):
            return
        acc.considered += 1

        try:
            amount = coerce_amount(snap.yield_amount)
        except ValueError:
            acc.malformed += 1
            return

        source_name = None
        if asset is not None and asset.institution_id is not None:
            institution = self._institutions.get(asset.institution_id)
            source_name = institution.name if institution else None

        acc.post(
            ReportGroup.FINANCIAL_INCOME,
            f"{YIELD_CATEGORY_PREFIX}{snap.asset_id}",
            asset.name if asset is not None else snap.asset_id,
            LineDetail(
                record_id=snap.id,
                source=LineSource.INVESTMENT,
                date=date(snap.year, snap.month, 1),
                description=f"Yield {snap.month:02d}/{snap.year}",
                amount=amount,
                source_name=source_name,
            ),
        )


def aggregate(
    snapshot: LedgerSnapshot,
    window: PeriodWindow,
    entity_id: Optional[str] = None,
) -> AggregateResult:
    """Run the DRE aggregator once; see DREAggregator.aggregate."""
    return DREAggregator(snapshot).aggregate(window, entity_id=entity_id)


def operating_trend(
    snapshot: LedgerSnapshot,
    reference_month: int,
    reference_year: int,
    view_mode: ViewMode = ViewMode.CASH,
    months: int = 12,
    entity_id: Optional[str] = None,
) -> list[TrendPoint]:
    """Operating result of each of the trailing months, oldest first."""
    aggregator = DREAggregator(snapshot)
    points = []
    for year, month in trailing_months(reference_month, reference_year, months):
        result = aggregator.aggregate(
            PeriodWindow(
                reference_month=month,
                reference_year=year,
                window_kind=WindowKind.MONTHLY,
                view_mode=view_mode,
            ),
            entity_id=entity_id,
        )
        points.append(
            TrendPoint(year=year, month=month, operating_result=result.operating_result)
        )
    return points
