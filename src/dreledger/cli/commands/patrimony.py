"""Net worth commands: fixed assets, liabilities and insurance."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.formatting import format_money
from dreledger.cli.record_resolution import resolve_or_exit
from dreledger.domain.entities import (
    FixedAssetCategory,
    InsuranceKind,
    LiabilityKind,
    ValuationMethod,
)
from dreledger.domain.errors import DomainError
from dreledger.domain.net_worth import NetWorthService
from dreledger.utils.amount_parser import parse_amount
from dreledger.utils.date_parser import parse_date


def _amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _date_or_exit(ctx, value: str, label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _percent(value) -> str:
    return "n/a" if value is None else f"{value:.1f}%"


@click.group()
def patrimony_group():
    """Manage fixed assets, liabilities and insurance policies."""
    pass


@patrimony_group.command("add-asset")
@click.argument("name")
@click.option(
    "--category",
    type=click.Choice([c.value for c in FixedAssetCategory]),
    default=FixedAssetCategory.OTHER.value,
    show_default=True,
)
@click.option("--acquisition-value", default="0", help="Price paid")
@click.option("--market-value", required=True, help="Current market value")
@click.option("--entity", "entity_id", help="Owning entity")
@click.option("--acquired", help="Acquisition date")
@click.option(
    "--valuation-method",
    type=click.Choice([m.value for m in ValuationMethod]),
    default=ValuationMethod.MARKET_VALUE.value,
    show_default=True,
)
@click.option("--participation", help="Percentage held (business stakes)")
@click.option("--notes", help="Free text notes")
@click.option("--id", "asset_id", help="Fixed asset ID (auto-generated if not provided)")
@click.pass_context
def add_asset(
    ctx,
    name: str,
    category: str,
    acquisition_value: str,
    market_value: str,
    entity_id: str | None,
    acquired: str | None,
    valuation_method: str,
    participation: str | None,
    notes: str | None,
    asset_id: str | None,
):
    """Register a fixed asset such as a property or vehicle."""
    service = NetWorthService(ctx.obj["db"])
    try:
        new_id = service.create_fixed_asset(
            name=name,
            category=category,
            acquisition_value=_amount_or_exit(ctx, acquisition_value),
            market_value=_amount_or_exit(ctx, market_value),
            entity_id=entity_id,
            acquisition_date=_date_or_exit(ctx, acquired, "acquisition date") if acquired else None,
            notes=notes,
            participation_percent=_amount_or_exit(ctx, participation) if participation else None,
            valuation_method=valuation_method,
            asset_id=asset_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created fixed asset '{name}' (ID: {new_id})")


@patrimony_group.command("value")
@click.option("--asset", required=True, help="Fixed asset name or ID")
@click.option("--month", type=click.IntRange(1, 12), required=True, help="Month (1-12)")
@click.option("--year", type=int, required=True, help="Year")
@click.option("--equity", required=True, help="Value at the end of the month")
@click.pass_context
def value(ctx, asset: str, month: int, year: int, equity: str):
    """Record a fixed asset's value for a month."""
    db = ctx.obj["db"]
    service = NetWorthService(db)

    asset_id = resolve_or_exit(ctx, db.list_fixed_assets(), asset, "Fixed asset")
    try:
        snapshot = service.record_valuation(
            asset_id, month, year, _amount_or_exit(ctx, equity)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Valued {asset_id} at {format_money(snapshot.equity_value)} for {month:02d}/{year}"
    )


@patrimony_group.command("add-liability")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in LiabilityKind]),
    default=LiabilityKind.OTHER.value,
    show_default=True,
)
@click.option("--balance", required=True, help="Outstanding balance")
@click.option("--entity", "entity_id", help="Owing entity")
@click.option("--installment", help="Monthly installment")
@click.option("--rate", help="Interest rate, as written in the contract")
@click.option("--end-date", help="Date of the last installment")
@click.option("--id", "liability_id", help="Liability ID (auto-generated if not provided)")
@click.pass_context
def add_liability(
    ctx,
    name: str,
    kind: str,
    balance: str,
    entity_id: str | None,
    installment: str | None,
    rate: str | None,
    end_date: str | None,
    liability_id: str | None,
):
    """Register a loan, financing or other debt."""
    service = NetWorthService(ctx.obj["db"])
    try:
        new_id = service.add_liability(
            name=name,
            kind=kind,
            outstanding_balance=_amount_or_exit(ctx, balance),
            entity_id=entity_id,
            installment_amount=_amount_or_exit(ctx, installment) if installment else None,
            rate=rate,
            end_date=_date_or_exit(ctx, end_date, "end date") if end_date else None,
            liability_id=liability_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created liability '{name}' (ID: {new_id})")


@patrimony_group.command("add-policy")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in InsuranceKind]),
    default=InsuranceKind.PROPERTY.value,
    show_default=True,
)
@click.option("--insurer", required=True, help="Insurance company")
@click.option("--insured-value", required=True, help="Insured value")
@click.option("--premium", default="0", help="Annual premium")
@click.option("--start", required=True, help="Start of coverage")
@click.option("--end", required=True, help="End of coverage")
@click.option("--asset", help="Covered fixed asset (name or ID)")
@click.option("--id", "policy_id", help="Policy ID (auto-generated if not provided)")
@click.pass_context
def add_policy(
    ctx,
    kind: str,
    insurer: str,
    insured_value: str,
    premium: str,
    start: str,
    end: str,
    asset: str | None,
    policy_id: str | None,
):
    """Register an insurance policy."""
    db = ctx.obj["db"]
    service = NetWorthService(db)

    asset_id = resolve_or_exit(ctx, db.list_fixed_assets(), asset, "Fixed asset") if asset else None
    try:
        new_id = service.add_insurance_policy(
            kind=kind,
            insurer=insurer,
            insured_value=_amount_or_exit(ctx, insured_value),
            annual_premium=_amount_or_exit(ctx, premium),
            start_date=_date_or_exit(ctx, start, "start date"),
            end_date=_date_or_exit(ctx, end, "end date"),
            fixed_asset_id=asset_id,
            policy_id=policy_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created {kind} policy with {insurer} (ID: {new_id})")


@patrimony_group.command("list")
@click.pass_context
def list_patrimony(ctx):
    """List fixed assets, liabilities and insurance policies."""
    service = NetWorthService(ctx.obj["db"])
    assets = service.list_fixed_assets()
    liabilities = service.list_liabilities()
    policies = service.list_insurance_policies()
    if not (assets or liabilities or policies):
        click.echo("No fixed assets, liabilities or policies found.")
        return

    if assets:
        click.echo("Fixed assets:")
        for asset in assets:
            entity = f" [{asset.entity_id}]" if asset.entity_id else ""
            click.echo(
                f"  {asset.id}: {asset.name} ({asset.category.value}){entity} "
                f"{format_money(asset.market_value)}"
            )
    if liabilities:
        click.echo("Liabilities:")
        for liability in liabilities:
            entity = f" [{liability.entity_id}]" if liability.entity_id else ""
            click.echo(
                f"  {liability.id}: {liability.name} ({liability.kind.value}){entity} "
                f"{format_money(liability.outstanding_balance)}"
            )
    if policies:
        click.echo("Insurance policies:")
        for policy in policies:
            covered = f" on {policy.fixed_asset_id}" if policy.fixed_asset_id else ""
            click.echo(
                f"  {policy.id}: {policy.insurer} ({policy.kind.value}){covered} "
                f"{format_money(policy.insured_value)} until {policy.end_date}"
            )


@patrimony_group.command("report")
@click.option("--entity", "entity_id", help="Only this entity")
@click.option("--month", type=click.IntRange(1, 12), help="Value assets as of this month")
@click.option("--year", type=int, help="Year of --month")
@click.pass_context
def report(ctx, entity_id: str | None, month: int | None, year: int | None):
    """Show net worth: fixed assets minus liabilities."""
    if (month is None) != (year is None):
        click.echo("Error: --month and --year must be given together", err=True)
        ctx.exit(1)
    service = NetWorthService(ctx.obj["db"])
    try:
        worth = service.net_worth(entity_id=entity_id, month=month, year=year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Fixed assets:  {format_money(worth.fixed_assets):>16}")
    click.echo(f"Liabilities:   {format_money(worth.liabilities):>16}")
    click.echo(f"Net worth:     {format_money(worth.net):>16}")
    click.echo(f"Insured value: {format_money(worth.insured_value):>16}")
    click.echo(f"Leverage:      {_percent(worth.leverage_percent):>16}")
    click.echo(f"Coverage:      {_percent(worth.coverage_percent):>16}")


def register_commands(cli):
    """Register net worth commands with main CLI."""
    cli.add_command(patrimony_group, name="patrimony")
