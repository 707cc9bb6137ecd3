"""Report window matching."""

from datetime import date

from dateutil.relativedelta import relativedelta

from dreledger.domain.entities import PeriodWindow, WindowKind
from dreledger.domain.errors import ValidationError, invalid_reference_month
from dreledger.utils.date_parser import parse_record_date

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def validate_reference(reference_month: int, reference_year: int) -> None:
    """Raise ValidationError for a month outside 1..12."""
    if not 1 <= reference_month <= 12:
        raise ValidationError(invalid_reference_month(reference_month))


def quarter_of(month: int) -> int:
    """Zero-based calendar quarter of a 1-based month."""
    return (month - 1) // 3


def is_first_half(month: int) -> bool:
    return month <= 6


def month_in_period(
    month: int,
    year: int,
    reference_month: int,
    reference_year: int,
    window_kind: WindowKind,
) -> bool:
    """Check whether (month, year) falls in the window around the reference.

    A month outside 1..12 never matches.
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        return False
    if year != reference_year:
        return False
    if window_kind == WindowKind.MONTHLY:
        return month == reference_month
    if window_kind == WindowKind.QUARTERLY:
        return quarter_of(month) == quarter_of(reference_month)
    if window_kind == WindowKind.SEMESTER:
        return is_first_half(month) == is_first_half(reference_month)
    if window_kind in (WindowKind.ANNUAL, WindowKind.YEAR_OVER_YEAR):
        return True
    return False


def in_period(
    value: object,
    reference_month: int,
    reference_year: int,
    window_kind: WindowKind,
) -> bool:
    """Check whether a record date falls in the window.

    A missing or unparseable date never matches.
    """
    record_date = parse_record_date(value)
    if record_date is None:
        return False
    return month_in_period(
        record_date.month,
        record_date.year,
        reference_month,
        reference_year,
        window_kind,
    )


def window_matches(value: object, window: PeriodWindow) -> bool:
    return in_period(
        value, window.reference_month, window.reference_year, window.window_kind
    )


def period_label(window: PeriodWindow) -> str:
    """Human-readable label for a report window."""
    month = window.reference_month
    year = window.reference_year
    kind = window.window_kind
    if kind == WindowKind.MONTHLY:
        return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"
    if kind == WindowKind.QUARTERLY:
        return f"Q{quarter_of(month) + 1} {year}"
    if kind == WindowKind.SEMESTER:
        return f"H{1 if is_first_half(month) else 2} {year}"
    if kind == WindowKind.ANNUAL:
        return f"FY {year}"
    return f"{year} vs {year - 1}"


def trailing_months(
    reference_month: int, reference_year: int, count: int = 12
) -> list[tuple[int, int]]:
    """Return (year, month) pairs ending at the reference, oldest first."""
    validate_reference(reference_month, reference_year)
    anchor = date(reference_year, reference_month, 1)
    months = []
    for offset in range(count - 1, -1, -1):
        current = anchor - relativedelta(months=offset)
        months.append((current.year, current.month))
    return months
