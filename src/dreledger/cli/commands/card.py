"""Credit card commands."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.cli.formatting import format_money
from dreledger.cli.record_resolution import resolve_or_exit
from dreledger.domain.card import CardService
from dreledger.domain.errors import DomainError
from dreledger.utils.amount_parser import parse_amount
from dreledger.utils.date_parser import parse_date


@click.group()
def card_group():
    """Manage credit cards, purchases and invoices."""
    pass


@card_group.command("create")
@click.argument("name")
@click.option("--brand", help="Card brand (Visa, Mastercard, ...)")
@click.option("--entity", "entity_id", help="Owning entity")
@click.option("--debit-institution", help="Institution that pays the invoices (name or ID)")
@click.option("--closing-day", type=int, help="Invoice closing day")
@click.option("--due-day", type=int, help="Invoice due day")
@click.option("--limit", "credit_limit", help="Credit limit")
@click.option("--id", "card_id", help="Card ID (auto-generated if not provided)")
@click.pass_context
def create_card(
    ctx,
    name: str,
    brand: str | None,
    entity_id: str | None,
    debit_institution: str | None,
    closing_day: int | None,
    due_day: int | None,
    credit_limit: str | None,
    card_id: str | None,
):
    """Register a credit card."""
    db = ctx.obj["db"]
    service = CardService(db)

    institution_id = (
        resolve_or_exit(ctx, db.list_institutions(), debit_institution, "Institution")
        if debit_institution
        else None
    )
    limit = None
    if credit_limit:
        try:
            limit = parse_amount(credit_limit)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        new_id = service.create_card(
            name=name,
            brand=brand,
            entity_id=entity_id,
            debit_institution_id=institution_id,
            closing_day=closing_day,
            due_day=due_day,
            credit_limit=limit,
            card_id=card_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created credit card '{name}' (ID: {new_id})")


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List credit cards with their unpaid balance."""
    db = ctx.obj["db"]
    service = CardService(db)

    cards = service.list_cards()
    if not cards:
        click.echo("No credit cards found. Create one with 'card create'.")
        return
    for card in cards:
        brand = f" [{card.brand}]" if card.brand else ""
        click.echo(
            f"{card.name}{brand} (ID: {card.id}) unpaid: {format_money(service.outstanding(card.id))}"
        )


@card_group.command("purchase")
@click.option("--card", required=True, help="Card name or ID")
@click.option("--amount", required=True, help="Total purchase amount")
@click.option("--category", required=True, help="Category name or ID")
@click.option("--date", "purchase_date", required=True, help="Purchase date")
@click.option("--installments", type=int, default=1, show_default=True, help="Number of installments")
@click.option("--description", help="Description")
@click.pass_context
def purchase(
    ctx,
    card: str,
    amount: str,
    category: str,
    purchase_date: str,
    installments: int,
    description: str | None,
):
    """Register a purchase, split into monthly installments."""
    db = ctx.obj["db"]
    service = CardService(db)

    card_id = resolve_or_exit(ctx, db.list_credit_cards(), card, "Credit card")
    category_id = resolve_or_exit(ctx, db.list_categories(), category, "Category")
    try:
        bought_on = parse_date(purchase_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
    try:
        total = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        ids = service.register_purchase(
            card_id=card_id,
            purchase_date=bought_on,
            total_amount=total,
            category_id=category_id,
            installment_count=installments,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Registered purchase of {format_money(total)} in {len(ids)} installment(s)")


@card_group.command("invoices")
@click.option("--card", required=True, help="Card name or ID")
@click.option("--items", is_flag=True, help="Show the installments of each invoice")
@click.pass_context
def invoices(ctx, card: str, items: bool):
    """List a card's invoices, newest first."""
    db = ctx.obj["db"]
    service = CardService(db)

    card_id = resolve_or_exit(ctx, db.list_credit_cards(), card, "Credit card")
    try:
        card_invoices = service.invoices(card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not card_invoices:
        click.echo("No invoices found.")
        return
    for invoice in card_invoices:
        status = "paid" if invoice.is_paid else "open"
        click.echo(
            f"{invoice.month_key}  {format_money(invoice.total):>14}  "
            f"{len(invoice.items):>3} item(s)  {status}"
        )
        if items:
            for txn in invoice.items:
                label = (
                    f"{txn.installment_index}/{txn.installment_count}"
                    if txn.installment_count > 1
                    else "single"
                )
                click.echo(
                    f"    {txn.purchase_date}  {txn.description or '':<30} {label:>7} "
                    f"{format_money(txn.amount):>12}"
                )


@card_group.command("reconcile")
@click.option("--card", required=True, help="Card name or ID")
@click.option("--month", "invoice_month", required=True, help="Invoice month (YYYY-MM)")
@click.option("--payment", "payment_id", help="Bank line ID of the invoice payment")
@click.pass_context
def reconcile(ctx, card: str, invoice_month: str, payment_id: str | None):
    """Mark an invoice as paid."""
    db = ctx.obj["db"]
    service = CardService(db)

    card_id = resolve_or_exit(ctx, db.list_credit_cards(), card, "Credit card")
    try:
        count = service.reconcile_invoice(card_id, invoice_month, payment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Invoice {invoice_month} reconciled ({count} installment(s) marked paid)")


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
