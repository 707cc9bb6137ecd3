"""DRE report commands."""

import click
from dreledger.cli.date_filters import resolve_reference_period
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.formatting import format_money, format_percent
from dreledger.domain.comparative import aggregate_window
from dreledger.domain.dre import operating_trend
from dreledger.domain.entities import (
    AggregateResult,
    ComparativeResult,
    PeriodWindow,
    ReportGroup,
    ViewMode,
    WindowKind,
)
from dreledger.domain.errors import DomainError
from dreledger.domain.period import MONTH_ABBREVIATIONS, period_label

LABEL_WIDTH = 36
AMOUNT_WIDTH = 16


def _echo_row(label: str, *columns: str) -> None:
    cells = "".join(f"{c:>{AMOUNT_WIDTH}}" for c in columns)
    click.echo(f"{label:<{LABEL_WIDTH}}{cells}")


def _display_result(result: AggregateResult, detail: bool) -> None:
    """Print a DRE with roll-ups after the operating and wealth blocks."""
    for position, bucket in enumerate(result.groups, start=1):
        share = result.vertical_share(bucket.group)
        _echo_row(
            f"{position}. {bucket.group.value}",
            format_money(bucket.total),
            format_percent(share).lstrip("+") if share is not None else "",
        )
        if detail:
            for cat in sorted(bucket.categories, key=lambda c: (-abs(c.total), c.name)):
                _echo_row(f"    {cat.name}", format_money(cat.total))
                for line in cat.lines:
                    source = f" [{line.source_name}]" if line.source_name else ""
                    when = line.date.isoformat() if line.date else ""
                    description = (line.description or "")[:28]
                    click.echo(
                        f"        {when:<10} {description:<28}{source}  "
                        f"{format_money(line.amount)}"
                    )
        if bucket.group == ReportGroup.PROFESSIONAL_EXPENSES:
            click.echo("-" * (LABEL_WIDTH + 2 * AMOUNT_WIDTH))
            _echo_row("= Operating result", format_money(result.operating_result))
            click.echo("-" * (LABEL_WIDTH + 2 * AMOUNT_WIDTH))
        if bucket.group == ReportGroup.REALIZED_INVESTMENTS:
            click.echo("-" * (LABEL_WIDTH + 2 * AMOUNT_WIDTH))
            _echo_row("= Wealth result", format_money(result.wealth_result))
            _echo_row("= Global result", format_money(result.global_result))
            click.echo("-" * (LABEL_WIDTH + 2 * AMOUNT_WIDTH))


def _display_comparative(comparison: ComparativeResult) -> None:
    current_year = comparison.current.window.reference_year
    _echo_row("", str(current_year), str(current_year - 1), "Var.")
    for position, group in enumerate(ReportGroup, start=1):
        variation = comparison.group_variations[group]
        _echo_row(
            f"{position}. {group.value}",
            format_money(variation.current),
            format_money(variation.prior),
            format_percent(variation.percent),
        )
    click.echo("-" * (LABEL_WIDTH + 3 * AMOUNT_WIDTH))
    for label, variation in (
        ("= Operating result", comparison.operating_result_variation),
        ("= Global result", comparison.global_result_variation),
    ):
        _echo_row(
            label,
            format_money(variation.current),
            format_money(variation.prior),
            format_percent(variation.percent),
        )


def _display_diagnostics(result: AggregateResult) -> None:
    diagnostics = result.diagnostics
    if result.unclassified:
        click.echo(
            f"\nWarning: {result.unclassified} record(s) reference unknown categories "
            "and are not in the report."
        )
    if diagnostics.malformed:
        click.echo(f"Warning: {diagnostics.malformed} malformed record(s) skipped.")


@click.group()
def report_group():
    """Management income statement (DRE) reports."""
    pass


@report_group.command("dre")
@click.option("--month", type=int, help="Reference month (1-12, default: current)")
@click.option("--year", type=int, help="Reference year (default: current)")
@click.option("--at", help="Reference date instead of --month/--year (e.g. 'last month')")
@click.option(
    "--window",
    type=click.Choice([k.value for k in WindowKind], case_sensitive=False),
    default=WindowKind.MONTHLY.value,
    show_default=True,
    help="Report window",
)
@click.option(
    "--view",
    type=click.Choice([v.value for v in ViewMode], case_sensitive=False),
    default=ViewMode.CASH.value,
    show_default=True,
    help="Recognize by cash date or accrual date",
)
@click.option("--entity", "entity_id", help="Only records of this entity")
@click.option("--detail", is_flag=True, help="Show categories and source lines")
@click.pass_context
def dre(
    ctx,
    month: int | None,
    year: int | None,
    at: str | None,
    window: str,
    view: str,
    entity_id: str | None,
    detail: bool,
):
    """Show the DRE for a period.

    Examples:
        dreledger report dre --month 1 --year 2026 --view accrual
        dreledger report dre --at "last month" --window quarterly --detail
        dreledger report dre --year 2026 --window year-over-year
    """
    db = ctx.obj["db"]
    ref_month, ref_year = resolve_reference_period(ctx, month=month, year=year, at=at)
    period = PeriodWindow(
        reference_month=ref_month,
        reference_year=ref_year,
        window_kind=WindowKind(window.lower()),
        view_mode=ViewMode(view.lower()),
    )

    try:
        outcome = aggregate_window(db.load_snapshot(), period, entity_id=entity_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    entity = f" - entity {entity_id}" if entity_id else ""
    click.echo(f"DRE {period_label(period)} ({period.view_mode.value} basis){entity}\n")
    if isinstance(outcome, ComparativeResult):
        _display_comparative(outcome)
        _display_diagnostics(outcome.current)
    else:
        _display_result(outcome, detail)
        _display_diagnostics(outcome)


@report_group.command("trend")
@click.option("--month", type=int, help="Last month of the trend (default: current)")
@click.option("--year", type=int, help="Year of the last month (default: current)")
@click.option("--at", help="Reference date instead of --month/--year")
@click.option("--months", type=click.IntRange(1, 120), default=12, show_default=True)
@click.option(
    "--view",
    type=click.Choice([v.value for v in ViewMode], case_sensitive=False),
    default=ViewMode.CASH.value,
    show_default=True,
)
@click.option("--entity", "entity_id", help="Only records of this entity")
@click.pass_context
def trend(
    ctx,
    month: int | None,
    year: int | None,
    at: str | None,
    months: int,
    view: str,
    entity_id: str | None,
):
    """Show the operating result of the trailing months."""
    db = ctx.obj["db"]
    ref_month, ref_year = resolve_reference_period(ctx, month=month, year=year, at=at)

    try:
        points = operating_trend(
            db.load_snapshot(),
            ref_month,
            ref_year,
            view_mode=ViewMode(view.lower()),
            months=months,
            entity_id=entity_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    for point in points:
        click.echo(
            f"{MONTH_ABBREVIATIONS[point.month - 1]} {point.year}  "
            f"{format_money(point.operating_result):>{AMOUNT_WIDTH}}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
