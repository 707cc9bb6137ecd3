"""CLI helpers for report period resolution."""

from datetime import date

import click

from dreledger.utils.date_parser import parse_date


def resolve_reference_period(
    ctx,
    *,
    month: int | None,
    year: int | None,
    at: str | None,
    today: date | None = None,
) -> tuple[int, int]:
    """Resolve the report's reference (month, year).

    --at takes any date parse_date understands ("last month", "2026-03-10")
    and cannot be combined with --month/--year. Missing parts default to the
    current month and year.
    """
    if at and (month is not None or year is not None):
        click.echo("Error: --at cannot be combined with --month or --year.", err=True)
        ctx.exit(1)

    if at:
        try:
            reference = parse_date(at)
        except ValueError as e:
            click.echo(f"Error: Invalid reference date: {e}", err=True)
            ctx.exit(1)
        return reference.month, reference.year

    today = today or date.today()
    if month is not None and not 1 <= month <= 12:
        click.echo(f"Error: Month must be between 1 and 12, got {month}.", err=True)
        ctx.exit(1)
    return (
        month if month is not None else today.month,
        year if year is not None else today.year,
    )
