"""Main CLI entry point."""

import logging

import click
from dreledger.database.factories import create_sqlite_database

# Import and register all commands at module level
from dreledger.cli.commands import (
    category,
    institution,
    add,
    card,
    invest,
    patrimony,
    report,
    state,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DRELEDGER_DB_PATH environment variable)",
    envvar="DRELEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="DRELEDGER_LOG_LEVEL",
    help="Logging level (overrides DRELEDGER_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """dreledger - Family ledger and management income statement (DRE).

    Record bank lines, card purchases and investment closings, then report
    them as a DRE by cash or accrual, month to year-over-year.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
category.register_commands(cli)
institution.register_commands(cli)
add.register_commands(cli)
card.register_commands(cli)
invest.register_commands(cli)
patrimony.register_commands(cli)
report.register_commands(cli)
state.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
