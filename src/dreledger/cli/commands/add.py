"""Bank line commands: add, transfer and pay-invoice."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.record_resolution import resolve_or_exit
from dreledger.domain.entities import Direction
from dreledger.domain.errors import DomainError
from dreledger.domain.transaction import TransactionService
from dreledger.utils.amount_parser import parse_amount
from dreledger.utils.date_parser import parse_date


def _parse_date_or_exit(ctx, value: str, label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.command("add")
@click.option("--institution", required=True, help="Institution name or ID")
@click.option(
    "--direction",
    type=click.Choice(["in", "out"], case_sensitive=False),
    required=True,
    help="Money in (revenue) or out (expense)",
)
@click.option("--amount", required=True, help="Positive amount (e.g., 123.45 or 'R$ 1.234,56')")
@click.option("--category", required=True, help="Category name or ID")
@click.option(
    "--date",
    "cash_date",
    required=True,
    help="Cash date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today')",
)
@click.option("--accrual-date", help="Accrual date (defaults to the cash date)")
@click.option("--description", help="Transaction description")
@click.option("--entity", "entity_id", help="Owning entity (defaults to the institution's)")
@click.pass_context
def add_transaction(
    ctx,
    institution: str,
    direction: str,
    amount: str,
    category: str,
    cash_date: str,
    accrual_date: str | None,
    description: str | None,
    entity_id: str | None,
):
    """Add an operational bank line.

    Examples:
        dreledger add --institution Itau --direction in --amount 1000 --category Salary --date 2026-01-05
        dreledger add --institution Itau --direction out --amount 250 --category Rent --date 05/01/2026 --accrual-date 2025-12-31
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    institution_id = resolve_or_exit(ctx, db.list_institutions(), institution, "Institution")
    category_id = resolve_or_exit(ctx, db.list_categories(), category, "Category")
    txn_date = _parse_date_or_exit(ctx, cash_date, "date")
    accrual = _parse_date_or_exit(ctx, accrual_date, "accrual date") if accrual_date else None
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        transaction_id = service.record_operational(
            institution_id=institution_id,
            direction=Direction(direction.lower()),
            amount=txn_amount,
            category_id=category_id,
            cash_date=txn_date,
            accrual_date=accrual,
            description=description,
            entity_id=entity_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    if accrual:
        click.echo(f"  Accrual date: {accrual}")
    click.echo(f"  Amount: {direction.lower()} {txn_amount:,.2f}")
    if description:
        click.echo(f"  Description: {description}")


@click.command("transfer")
@click.option("--from", "from_institution", required=True, help="Source institution name or ID")
@click.option("--to", "to_institution", required=True, help="Destination institution name or ID")
@click.option("--amount", required=True, help="Positive amount")
@click.option("--date", "cash_date", required=True, help="Transfer date")
@click.option("--category", help="Optional category name or ID for the legs")
@click.option("--description", help="Description")
@click.pass_context
def transfer(
    ctx,
    from_institution: str,
    to_institution: str,
    amount: str,
    cash_date: str,
    category: str | None,
    description: str | None,
):
    """Move money between own institutions (never reaches the DRE)."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    institutions = db.list_institutions()
    source_id = resolve_or_exit(ctx, institutions, from_institution, "Institution")
    destination_id = resolve_or_exit(ctx, institutions, to_institution, "Institution")
    category_id = (
        resolve_or_exit(ctx, db.list_categories(), category, "Category") if category else None
    )
    txn_date = _parse_date_or_exit(ctx, cash_date, "date")
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        out_id, in_id = service.record_transfer(
            from_institution_id=source_id,
            to_institution_id=destination_id,
            amount=txn_amount,
            cash_date=txn_date,
            description=description,
            category_id=category_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded transfer of {txn_amount:,.2f} ({out_id} -> {in_id})")


@click.command("pay-invoice")
@click.option("--card", required=True, help="Card name or ID")
@click.option("--amount", required=True, help="Positive amount paid")
@click.option("--date", "cash_date", required=True, help="Payment date")
@click.option("--institution", help="Paying institution (defaults to the card's debit institution)")
@click.option("--description", help="Description")
@click.pass_context
def pay_invoice(
    ctx,
    card: str,
    amount: str,
    cash_date: str,
    institution: str | None,
    description: str | None,
):
    """Record the bank payment of a card invoice (never reaches the DRE)."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    card_id = resolve_or_exit(ctx, db.list_credit_cards(), card, "Credit card")
    institution_id = (
        resolve_or_exit(ctx, db.list_institutions(), institution, "Institution")
        if institution
        else None
    )
    txn_date = _parse_date_or_exit(ctx, cash_date, "date")
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        payment_id = service.record_invoice_payment(
            card_id=card_id,
            amount=txn_amount,
            cash_date=txn_date,
            institution_id=institution_id,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded invoice payment {payment_id}")


def register_commands(cli):
    """Register bank line commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(transfer)
    cli.add_command(pay_invoice)
