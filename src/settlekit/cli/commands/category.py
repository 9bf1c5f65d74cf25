"""Category management commands."""

import click
from settlekit.cli.error_handling import handle_domain_error
from settlekit.domain.category import CategoryService
from settlekit.domain.entities import CategoryType


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType]),
    default=CategoryType.EXPENSE.value,
    show_default=True,
)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a category.

    Examples:
        settlekit category create Food
        settlekit category create Salary --type income
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(name, CategoryType(category_type))
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType]),
    help="Only show one category type",
)
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories(
        CategoryType(category_type) if category_type else None
    )
    if not categories:
        click.echo("No categories found.")
        return

    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.name:25s} | {cat.type.value}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
