"""Cash settlement commands."""

import click
from settlekit.cli.account_resolution import resolve_optional_account_or_exit
from settlekit.cli.error_handling import handle_domain_error
from settlekit.domain.account import AccountService
from settlekit.domain.cash_settlement import CashSettlementService
from settlekit.domain.entities import Bucket
from settlekit.domain.errors import format_amount
from settlekit.utils.amount_parser import parse_amount
from settlekit.utils.date_parser import parse_date


@click.group()
def cash_group():
    """Settle transactions against cash accounts."""
    pass


@cash_group.command("pending")
@click.pass_context
def list_pending(ctx):
    """List transactions awaiting settlement, grouped by direction."""
    service = CashSettlementService(ctx.obj["db"])
    groups = service.group_unsettled()

    if not any(groups.values()):
        click.echo("Nothing to settle.")
        return

    for bucket, title in ((Bucket.PAYABLE, "To pay"), (Bucket.RECEIVABLE, "To receive")):
        transactions = groups[bucket]
        if not transactions:
            continue
        total = sum(txn.remaining_amount for txn in transactions)
        click.echo(f"\n{title} ({format_amount(total)}):")
        for txn in transactions:
            click.echo(
                f"{txn.id:5d} | {txn.date} | due {txn.payment_date or '-'} | "
                f"{txn.description[:30]:30s} | {format_amount(txn.remaining_amount):>12s}"
            )


@cash_group.command("settle")
@click.argument("transaction_ids", nargs=-1, type=int, required=True)
@click.option("--account", help="Account name or ID the money moved through")
@click.option("--date", "settle_date", help="Settlement date (defaults to today)")
@click.pass_context
def settle(ctx, transaction_ids: tuple[int, ...], account: str | None, settle_date: str | None):
    """Fully settle one or more transactions.

    Examples:
        settlekit cash settle 3 4 --account "Main Bank"
    """
    db = ctx.obj["db"]
    service = CashSettlementService(db)
    account_id = resolve_optional_account_or_exit(ctx, AccountService(db), account)

    try:
        when = parse_date(settle_date) if settle_date else None
        total = service.settle(transaction_ids, account_id, when)
        click.echo(f"Settled {len(set(transaction_ids))} transaction(s) for {format_amount(total)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@cash_group.command("partial")
@click.argument("transaction_id", type=int)
@click.argument("amount")
@click.option("--account", help="Account name or ID the money moved through")
@click.option("--date", "settle_date", help="Settlement date (defaults to the payment date)")
@click.pass_context
def partial(ctx, transaction_id: int, amount: str, account: str | None, settle_date: str | None):
    """Settle part of a transaction.

    Examples:
        settlekit cash partial 7 4000 --account "Main Bank"
    """
    db = ctx.obj["db"]
    service = CashSettlementService(db)
    account_id = resolve_optional_account_or_exit(ctx, AccountService(db), account)

    try:
        when = parse_date(settle_date) if settle_date else None
        txn = service.partial_settle(transaction_id, parse_amount(amount), account_id, when)
        click.echo(
            f"Transaction {txn.id}: settled {format_amount(txn.settled_amount)} "
            f"of {format_amount(txn.total_amount)}"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@cash_group.command("unsettle")
@click.argument("transaction_ids", nargs=-1, type=int, required=True)
@click.pass_context
def unsettle(ctx, transaction_ids: tuple[int, ...]):
    """Return transactions to the unsettled state."""
    service = CashSettlementService(ctx.obj["db"])
    try:
        count = service.unsettle(transaction_ids)
        click.echo(f"Unsettled {count} transaction(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@cash_group.command("overdue")
@click.pass_context
def list_overdue(ctx):
    """List unsettled transactions whose payment date has passed."""
    service = CashSettlementService(ctx.obj["db"])
    overdue = service.list_overdue()
    if not overdue:
        click.echo("No overdue transactions.")
        return

    for item in overdue:
        txn = item.transaction
        click.echo(
            f"{txn.id:5d} | due {txn.payment_date} ({item.days_overdue} days) | "
            f"{item.account_name:15s} | {txn.description[:30]:30s} | "
            f"{format_amount(item.remaining_amount):>12s}"
        )

    total = sum(item.remaining_amount for item in overdue)
    click.echo(f"\n{len(overdue)} overdue, {format_amount(total)} outstanding")


@cash_group.command("settled")
@click.option("--limit", type=int, default=50, show_default=True)
@click.pass_context
def list_settled(ctx, limit: int):
    """List recently settled transactions."""
    service = CashSettlementService(ctx.obj["db"])
    transactions = service.list_settled(limit=limit)
    if not transactions:
        click.echo("No settled transactions.")
        return

    for txn in transactions:
        click.echo(
            f"{txn.id:5d} | settled {txn.settlement_date or '-'} | "
            f"{txn.description[:30]:30s} | {format_amount(txn.settled_amount):>12s}"
        )


def register_commands(cli):
    """Register cash settlement commands with main CLI."""
    cli.add_command(cash_group, name="cash")
