"""Institution management commands."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.formatting import format_money
from dreledger.domain.errors import DomainError
from dreledger.domain.transaction import InstitutionService
from dreledger.utils.amount_parser import parse_amount


@click.group()
def institution_group():
    """Manage banks, brokers and wallets."""
    pass


@institution_group.command("list")
@click.pass_context
def list_institutions(ctx):
    """List institutions with their current balance."""
    db = ctx.obj["db"]
    service = InstitutionService(db)

    institutions = service.list_institutions()
    if not institutions:
        click.echo("No institutions found. Create one with 'institution create'.")
        return

    click.echo(f"{'ID':<18} {'Name':<30} {'Kind':<8} {'Entity':<12} {'Balance':>16}")
    click.echo("-" * 88)
    for inst in institutions:
        click.echo(
            f"{inst.id:<18} {inst.name:<30} {inst.kind.value:<8} "
            f"{inst.entity_id or '':<12} {format_money(service.balance(inst.id)):>16}"
        )


@institution_group.command("create")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice(["bank", "broker", "wallet"], case_sensitive=False),
    default="bank",
    help="Institution kind (default: bank)",
)
@click.option("--entity", "entity_id", help="Owning entity (person or company)")
@click.option("--opening-balance", default="0", help="Balance before the first recorded line")
@click.option("--id", "institution_id", help="Institution ID (auto-generated if not provided)")
@click.pass_context
def create_institution(
    ctx,
    name: str,
    kind: str,
    entity_id: str | None,
    opening_balance: str,
    institution_id: str | None,
):
    """Create a new institution."""
    db = ctx.obj["db"]
    service = InstitutionService(db)

    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        new_id = service.create_institution(
            name=name,
            kind=kind.lower(),
            entity_id=entity_id,
            opening_balance=balance,
            institution_id=institution_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created institution '{name}' (ID: {new_id})")


def register_commands(cli):
    """Register institution commands with main CLI."""
    cli.add_command(institution_group, name="institution")
