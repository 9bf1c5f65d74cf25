"""Report commands."""

import click
from settlekit.domain.errors import format_amount
from settlekit.domain.summary import SummaryService
from settlekit.utils.date_parser import parse_month


@click.group()
def report_group():
    """Reports."""
    pass


@report_group.command("pl")
@click.option("--month", default="this month", show_default=True, help="YYYY-MM or relative like 'last month'")
@click.pass_context
def profit_and_loss(ctx, month: str):
    """Monthly profit and loss by category."""
    try:
        year, month_number = parse_month(month)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)

    report = SummaryService(ctx.obj["db"]).profit_and_loss(year, month_number)

    click.echo(f"Profit and loss for {year}-{month_number:02d}")
    for title, rows, total in (
        ("Income", report.income, report.total_income),
        ("Expense", report.expense, report.total_expense),
    ):
        click.echo(f"\n{title}:")
        for row in rows:
            click.echo(f"  {row.category_name:25s} {format_amount(row.amount):>14s}")
        click.echo(f"  {'Total':25s} {format_amount(total):>14s}")

    click.echo(f"\nNet income: {format_amount(report.net_income)}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
