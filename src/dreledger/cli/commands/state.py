"""State export and import commands."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.domain.errors import DomainError
from dreledger.domain.state import StateService


@click.group()
def state_group():
    """Save or restore the whole ledger as JSON."""
    pass


@state_group.command("export")
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_state(ctx, path: str):
    """Write every record to a JSON file."""
    db = ctx.obj["db"]
    service = StateService(db)

    counts = service.export_state(path)
    click.echo(f"Exported state to {path}")
    for name, count in counts.items():
        click.echo(f"  {name}: {count}")


@state_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_state(ctx, path: str):
    """Load records from a JSON file exported by 'state export'."""
    db = ctx.obj["db"]
    service = StateService(db)

    try:
        outcome = service.import_state(path)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Imported state from {path}")
    for name, count in outcome["imported"].items():
        click.echo(f"  {name}: {count}")
    if outcome["quarantined"]:
        click.echo(f"\nQuarantined {len(outcome['quarantined'])} category(ies):")
        for entry in outcome["quarantined"]:
            click.echo(f"  {entry['row'].get('id')}: {entry['reason']}")
    if outcome["errors"]:
        click.echo(f"\nSkipped {len(outcome['errors'])} record(s):")
        for entry in outcome["errors"]:
            click.echo(f"  {entry['collection']} {entry['id']}: {entry['reason']}")


def register_commands(cli):
    """Register state commands with main CLI."""
    cli.add_command(state_group, name="state")
