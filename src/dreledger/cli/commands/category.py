"""Category management commands."""

import click
from dreledger.cli.error_handling import handle_domain_error
from dreledger.domain.category import CategoryService
from dreledger.domain.entities import ReportGroup
from dreledger.domain.errors import DomainError

GROUP_HELP = "Report group, by name or label (e.g. 'survival_living_cost', 'Operating revenue')"


@click.group()
def category_group():
    """Manage DRE categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories under their report groups."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    grouped = service.categories_by_group()
    if not any(grouped.values()):
        click.echo("No categories found. Create one with 'category create'.")
        return

    for position, group in enumerate(ReportGroup, start=1):
        categories = grouped[group]
        if not categories:
            continue
        click.echo(f"\n{position}. {group.value}")
        for cat in categories:
            flag = "" if cat.is_operating else " [non-operating]"
            click.echo(f"    {cat.name} ({cat.kind.value}, ID: {cat.id}){flag}")


@category_group.command("create")
@click.argument("name")
@click.option("--group", "report_group", required=True, help=GROUP_HELP)
@click.option(
    "--kind",
    type=click.Choice(["expense", "income", "transfer"], case_sensitive=False),
    default="expense",
    help="Category kind (default: expense)",
)
@click.option("--non-operating", is_flag=True, help="Mark as outside operating activity")
@click.option("--id", "category_id", help="Category ID (auto-generated if not provided)")
@click.pass_context
def create_category(
    ctx,
    name: str,
    report_group: str,
    kind: str,
    non_operating: bool,
    category_id: str | None,
):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        new_id = service.create_category(
            name=name,
            report_group=report_group,
            kind=kind.lower(),
            is_operating=not non_operating,
            category_id=category_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    created = service.get_category(new_id)
    click.echo(f"Created category '{name}' in '{created.report_group.value}' (ID: {new_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
