"""Transaction management commands."""

from datetime import date

import click
from dateutil.relativedelta import relativedelta

from settlekit.cli.account_resolution import resolve_optional_account_or_exit
from settlekit.cli.error_handling import handle_domain_error
from settlekit.domain.account import AccountService
from settlekit.domain.category import CategoryService
from settlekit.domain.entities import LineType, NewLine
from settlekit.domain.errors import format_amount
from settlekit.domain.transaction import TransactionService
from settlekit.utils.amount_parser import parse_amount
from settlekit.utils.date_parser import parse_date

LINE_HELP = (
    "Line as TYPE:AMOUNT[:CATEGORY[:COUNTERPARTY]], where TYPE is "
    "income, expense, asset or liability. Repeat for several lines."
)


def parse_line_spec(
    spec: str,
    category_service: CategoryService,
    amortize_months: int | None = None,
    start: date | None = None,
) -> NewLine:
    """Turn a --line option value into a NewLine.

    Raises:
        ValueError: If the type, amount or category is invalid
    """
    parts = spec.split(":", 3)
    if len(parts) < 2:
        raise ValueError(f"Invalid line '{spec}': expected TYPE:AMOUNT")

    try:
        line_type = LineType(parts[0].strip().lower())
    except ValueError:
        raise ValueError(f"Invalid line type '{parts[0]}'") from None

    amount = parse_amount(parts[1])
    category_name = parts[2].strip() if len(parts) > 2 else ""
    counterparty = parts[3].strip() if len(parts) > 3 else ""

    category_id = None
    if category_name:
        category_id = category_service.require_category_by_name(category_name).id

    amortization = {}
    if amortize_months and amortize_months > 1 and line_type in (LineType.INCOME, LineType.EXPENSE):
        first = start.replace(day=1)
        amortization = {
            "amortization_months": amortize_months,
            "amortization_start": first,
            "amortization_end": first + relativedelta(months=amortize_months, days=-1),
        }

    return NewLine(
        amount=amount,
        line_type=line_type,
        category_id=category_id,
        counterparty=counterparty or None,
        **amortization,
    )


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--date", "txn_date", default="today", help="Accrual date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", default="", help="Transaction description")
@click.option("--line", "line_specs", multiple=True, required=True, help=LINE_HELP)
@click.option("--account", help="Account name or ID the transaction is paid from or into")
@click.option("--payment-date", help="Expected or actual payment date")
@click.option("--paid-by", help="Counterparty who paid on your behalf")
@click.option("--amortize", type=int, help="Spread income and expense lines over this many months")
@click.pass_context
def add_transaction(
    ctx,
    txn_date: str,
    description: str,
    line_specs: tuple[str, ...],
    account: str | None,
    payment_date: str | None,
    paid_by: str | None,
    amortize: int | None,
):
    """Record a transaction.

    Examples:
        settlekit transaction add --description Lunch --line expense:1200:Food --account Wallet --payment-date today
        settlekit transaction add --description "Concert for Alex" --line asset:3000::Alex
        settlekit transaction add --description Dinner --line expense:8000:Food --paid-by Sam
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_optional_account_or_exit(ctx, account_service, account)

    try:
        accrual = parse_date(txn_date)
        payment = parse_date(payment_date) if payment_date else None
        lines = [
            parse_line_spec(spec, category_service, amortize, accrual) for spec in line_specs
        ]
        transaction_id = transaction_service.create_transaction(
            date=accrual,
            description=description,
            lines=lines,
            account_id=account_id,
            payment_date=payment,
            paid_by_other=paid_by is not None,
            counterparty=paid_by,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    txn = transaction_service.get_transaction(transaction_id)
    status = "settled" if txn.is_cash_settled else "unsettled"
    click.echo(
        f"Created transaction {transaction_id} ({format_amount(txn.total_amount)}, {status})"
    )


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None):
    """List transactions, newest first."""
    service = TransactionService(ctx.obj["db"])

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    transactions = service.list_transactions(start_date=start, end_date=end)
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        status = "settled" if txn.is_cash_settled else f"open {format_amount(txn.remaining_amount)}"
        click.echo(
            f"{txn.id:5d} | {txn.date} | {txn.description[:30]:30s} | "
            f"{format_amount(txn.total_amount):>12s} | {status}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show a transaction with its lines and classification."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    classification = service.classify(transaction_id)
    click.echo(f"Transaction {txn.id}: {txn.description}")
    click.echo(f"  Date:         {txn.date}")
    click.echo(f"  Payment date: {txn.payment_date or '-'}")
    click.echo(f"  Total:        {format_amount(txn.total_amount)}")
    click.echo(f"  Bucket:       {classification.bucket.value}")
    click.echo(
        f"  Settled:      {format_amount(txn.settled_amount)}"
        f"{' (fully)' if txn.is_cash_settled else ''}"
    )
    if txn.paid_by_other:
        click.echo("  Paid by someone else")

    click.echo("\nLines:")
    for line in txn.lines:
        category = category_service.get_category(line.category_id) if line.category_id else None
        parts = [f"{line.id:5d}", f"{line.line_type.value:9s}", f"{format_amount(line.amount):>12s}"]
        if category is not None:
            parts.append(category.name)
        if line.counterparty:
            parts.append(f"@{line.counterparty} settled {format_amount(line.settled_amount)}")
        click.echo("  " + " | ".join(parts))

    for warning in classification.warnings:
        click.echo(f"Warning: {warning}", err=True)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction and reverse its cash effect."""
    service = TransactionService(ctx.obj["db"])
    if not yes:
        click.confirm(f"Delete transaction {transaction_id}?", abort=True)

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
