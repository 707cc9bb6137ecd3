"""Year-over-year comparison of DRE results."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Union

from dreledger.domain.dre import DREAggregator
from dreledger.domain.entities import (
    AggregateResult,
    ComparativeResult,
    LedgerSnapshot,
    PeriodWindow,
    ReportGroup,
    Variation,
    WindowKind,
)


def variation_percent(current: Decimal, prior: Decimal) -> Optional[Decimal]:
    """Relative change against the prior value, in percent.

    Returns None when the prior value is zero (variation unavailable).
    """
    if prior == 0:
        return None
    return (current - prior) / abs(prior) * 100


def _variation(current: Decimal, prior: Decimal) -> Variation:
    return Variation(
        current=current, prior=prior, percent=variation_percent(current, prior)
    )


def compare_years(
    snapshot: LedgerSnapshot,
    window: PeriodWindow,
    entity_id: Optional[str] = None,
) -> ComparativeResult:
    """Compare the reference year with the year before it.

    Both sides are annual aggregates under the window's view mode.

    Args:
        snapshot: Ledger records
        window: Reference window; only its year and view mode are used
        entity_id: Optional entity filter applied to both years

    Returns:
        ComparativeResult with both aggregates and their variations
    """
    aggregator = DREAggregator(snapshot)
    current_window = replace(window, window_kind=WindowKind.ANNUAL)
    prior_window = replace(
        current_window, reference_year=window.reference_year - 1
    )
    current = aggregator.aggregate(current_window, entity_id=entity_id)
    prior = aggregator.aggregate(prior_window, entity_id=entity_id)

    return ComparativeResult(
        current=current,
        prior=prior,
        group_variations={
            group: _variation(current.total(group), prior.total(group))
            for group in ReportGroup
        },
        operating_result_variation=_variation(
            current.operating_result, prior.operating_result
        ),
        global_result_variation=_variation(
            current.global_result, prior.global_result
        ),
    )


def aggregate_window(
    snapshot: LedgerSnapshot,
    window: PeriodWindow,
    entity_id: Optional[str] = None,
) -> Union[AggregateResult, ComparativeResult]:
    """Aggregate a window, returning the comparison for year-over-year."""
    if window.window_kind == WindowKind.YEAR_OVER_YEAR:
        return compare_years(snapshot, window, entity_id=entity_id)
    return DREAggregator(snapshot).aggregate(window, entity_id=entity_id)
