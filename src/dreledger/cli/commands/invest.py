"""Investment commands."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.formatting import format_money
from dreledger.cli.record_resolution import resolve_or_exit
from dreledger.domain.errors import DomainError
from dreledger.domain.investment import InvestmentService
from dreledger.utils.amount_parser import parse_amount


def _amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.group()
def invest_group():
    """Manage investment assets and monthly closings."""
    pass


@invest_group.command("create")
@click.argument("name")
@click.option("--institution", help="Custodian institution name or ID")
@click.option("--entity", "entity_id", help="Owning entity")
@click.option("--id", "asset_id", help="Asset ID (auto-generated if not provided)")
@click.pass_context
def create_asset(ctx, name: str, institution: str | None, entity_id: str | None, asset_id: str | None):
    """Register an investment asset."""
    db = ctx.obj["db"]
    service = InvestmentService(db)

    institution_id = (
        resolve_or_exit(ctx, db.list_institutions(), institution, "Institution")
        if institution
        else None
    )
    try:
        new_id = service.create_asset(
            name=name, institution_id=institution_id, entity_id=entity_id, asset_id=asset_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created asset '{name}' (ID: {new_id})")


@invest_group.command("close")
@click.option("--asset", required=True, help="Asset name or ID")
@click.option("--month", type=click.IntRange(1, 12), required=True, help="Month (1-12)")
@click.option("--year", type=int, required=True, help="Year")
@click.option("--balance", required=True, help="Closing balance")
@click.option("--contributions", default="0", help="Money put in during the month")
@click.option("--withdrawals", default="0", help="Money taken out during the month")
@click.pass_context
def close(
    ctx,
    asset: str,
    month: int,
    year: int,
    balance: str,
    contributions: str,
    withdrawals: str,
):
    """Close an asset's month and compute its yield."""
    db = ctx.obj["db"]
    service = InvestmentService(db)

    asset_id = resolve_or_exit(ctx, db.list_assets(), asset, "Asset")
    try:
        snapshot = service.close_month(
            asset_id=asset_id,
            month=month,
            year=year,
            closing_balance=_amount_or_exit(ctx, balance),
            contributions=_amount_or_exit(ctx, contributions),
            withdrawals=_amount_or_exit(ctx, withdrawals),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Closed {month:02d}/{year} for {asset_id}")
    click.echo(f"  Balance: {format_money(snapshot.closing_balance)}")
    click.echo(f"  Yield: {format_money(snapshot.yield_amount)}")


@invest_group.command("list")
@click.option("--asset", help="Only this asset (name or ID)")
@click.pass_context
def list_snapshots(ctx, asset: str | None):
    """List monthly closings."""
    db = ctx.obj["db"]
    service = InvestmentService(db)

    asset_id = resolve_or_exit(ctx, db.list_assets(), asset, "Asset") if asset else None
    snapshots = service.list_snapshots(asset_id)
    if not snapshots:
        click.echo("No closings found.")
        return
    names = {a.id: a.name for a in service.list_assets()}
    click.echo(f"{'Period':<8} {'Asset':<24} {'Balance':>14} {'In':>12} {'Out':>12} {'Yield':>12}")
    for snap in snapshots:
        click.echo(
            f"{snap.month:02d}/{snap.year} {names.get(snap.asset_id, snap.asset_id):<24} "
            f"{format_money(snap.closing_balance):>14} {format_money(snap.contributions):>12} "
            f"{format_money(snap.withdrawals):>12} {format_money(snap.yield_amount):>12}"
        )


def register_commands(cli):
    """Register investment commands with main CLI."""
    cli.add_command(invest_group, name="invest")
