"""Tests for year-over-year comparison."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from builders import CARDS, CATEGORIES, INSTITUTIONS, bank, card_installment
from dreledger.domain.comparative import aggregate_window, compare_years, variation_percent
from dreledger.domain.dre import aggregate
from dreledger.domain.entities import (
    AggregateResult,
    ComparativeResult,
    Direction,
    LedgerSnapshot,
    PeriodWindow,
    ReportGroup,
    ViewMode,
    WindowKind,
)


def make_snapshot():
    return LedgerSnapshot(
        categories=CATEGORIES,
        institutions=INSTITUTIONS,
        credit_cards=CARDS,
        bank_transactions=(
            bank("r25", 1000, "rev", when=date(2025, 3, 1)),
            bank("r26", 1500, "rev", when=date(2026, 3, 1)),
            bank("s26", 200, "surv", when=date(2026, 8, 1), direction=Direction.OUT),
            bank("old", 50, "rev", when=date(2024, 12, 1)),
        ),
        card_transactions=(
            card_installment("c26", 300, "prof", purchase=date(2026, 5, 2), due=date(2026, 6, 10)),
        ),
    )


def yoy(view=ViewMode.CASH, month=4, year=2026):
    return PeriodWindow(
        reference_month=month,
        reference_year=year,
        window_kind=WindowKind.YEAR_OVER_YEAR,
        view_mode=view,
    )


def test_variation_percent():
    assert variation_percent(Decimal("150"), Decimal("100")) == Decimal("50")
    assert variation_percent(Decimal("50"), Decimal("100")) == Decimal("-50")


def test_variation_percent_uses_absolute_prior():
    # A loss shrinking from -100 to -50 is an improvement.
    assert variation_percent(Decimal("-50"), Decimal("-100")) == Decimal("50")


def test_variation_percent_unavailable_for_zero_prior():
    assert variation_percent(Decimal("10"), Decimal("0")) is None


def test_compare_years_matches_annual_aggregates():
    snapshot = make_snapshot()
    comparison = compare_years(snapshot, yoy())

    annual = replace(yoy(), window_kind=WindowKind.ANNUAL)
    assert comparison.current == aggregate(snapshot, annual)
    assert comparison.prior == aggregate(snapshot, replace(annual, reference_year=2025))


def test_compare_years_variations():
    comparison = compare_years(make_snapshot(), yoy())

    revenue = comparison.group_variations[ReportGroup.OPERATING_REVENUE]
    assert revenue.current == Decimal("1500")
    assert revenue.prior == Decimal("1000")
    assert revenue.percent == Decimal("50")

    survival = comparison.group_variations[ReportGroup.SURVIVAL_LIVING_COST]
    assert survival.current == Decimal("-200")
    assert survival.percent is None

    assert comparison.operating_result_variation.current == Decimal("1000")
    assert comparison.operating_result_variation.prior == Decimal("1000")
    assert comparison.operating_result_variation.percent == 0
    assert set(comparison.group_variations) == set(ReportGroup)


def test_compare_years_keeps_view_mode():
    comparison = compare_years(make_snapshot(), yoy(view=ViewMode.ACCRUAL))

    assert comparison.current.window.view_mode == ViewMode.ACCRUAL
    assert comparison.prior.window.view_mode == ViewMode.ACCRUAL
    assert comparison.prior.window.reference_year == 2025


def test_aggregate_window_dispatch():
    snapshot = make_snapshot()

    comparison = aggregate_window(snapshot, yoy())
    monthly = aggregate_window(snapshot, replace(yoy(month=3), window_kind=WindowKind.MONTHLY))

    assert isinstance(comparison, ComparativeResult)
    assert isinstance(monthly, AggregateResult)
    assert monthly.operating_revenue == Decimal("1500")


def test_compare_years_entity_filter():
    comparison = compare_years(make_snapshot(), yoy(), entity_id="co")

    assert comparison.current.global_result == 0
    assert comparison.global_result_variation.percent is None
