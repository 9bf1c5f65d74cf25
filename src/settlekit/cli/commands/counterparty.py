"""Counterparty settlement commands."""

import click
from settlekit.cli.account_resolution import resolve_optional_account_or_exit
from settlekit.cli.error_handling import handle_domain_error
from settlekit.domain.account import AccountService
from settlekit.domain.counterparty import DEFAULT_HISTORY_LIMIT, CounterpartyLedgerService
from settlekit.domain.entities import CashEventType, LineType
from settlekit.domain.errors import format_amount
from settlekit.utils.amount_parser import parse_amount
from settlekit.utils.date_parser import parse_date


@click.group()
def counterparty_group():
    """Track money advanced to or borrowed from other people."""
    pass


@counterparty_group.command("list")
@click.pass_context
def list_worklist(ctx):
    """Show unsettled lines per counterparty with their pools."""
    service = CounterpartyLedgerService(ctx.obj["db"])
    summaries = service.worklist()
    if not summaries:
        click.echo("Nothing outstanding.")
        return

    for summary in summaries:
        balance = service.get_balance(summary.counterparty)
        click.echo(
            f"\n{summary.counterparty}: net {format_amount(summary.net_amount)} "
            f"(received {format_amount(balance.receive_balance)}, "
            f"paid {format_amount(balance.pay_balance)})"
        )
        for line in summary.asset_lines + summary.liability_lines:
            click.echo(
                f"  {line.id:5d} | {line.line_type.value:9s} | {line.date or '-'} | "
                f"{line.description[:25]:25s} | {format_amount(line.unsettled_amount):>12s}"
            )


def _record_event(ctx, event_type: CashEventType, name, amount, event_date, account, note):
    db = ctx.obj["db"]
    service = CounterpartyLedgerService(db)
    account_id = resolve_optional_account_or_exit(ctx, AccountService(db), account)
    try:
        settlement_id = service.record_cash_event(
            counterparty=name,
            event_type=event_type,
            amount=parse_amount(amount),
            event_date=parse_date(event_date) if event_date else None,
            cash_account_id=account_id,
            note=note,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    balance = service.get_balance(name.strip())
    click.echo(
        f"Recorded {event_type.value} (settlement {settlement_id}); "
        f"received {format_amount(balance.receive_balance)}, "
        f"paid {format_amount(balance.pay_balance)}"
    )


@counterparty_group.command("deposit")
@click.argument("name")
@click.argument("amount")
@click.option("--date", "event_date", help="Date received (defaults to today)")
@click.option("--account", help="Account the money arrived in")
@click.option("--note")
@click.pass_context
def deposit(ctx, name: str, amount: str, event_date: str | None, account: str | None, note: str | None):
    """Record money received from a counterparty."""
    _record_event(ctx, CashEventType.RECEIVE, name, amount, event_date, account, note)


@counterparty_group.command("pay")
@click.argument("name")
@click.argument("amount")
@click.option("--date", "event_date", help="Date paid (defaults to today)")
@click.option("--account", help="Account the money left from")
@click.option("--note")
@click.pass_context
def pay(ctx, name: str, amount: str, event_date: str | None, account: str | None, note: str | None):
    """Record money paid to a counterparty."""
    _record_event(ctx, CashEventType.PAY, name, amount, event_date, account, note)


@counterparty_group.command("settle")
@click.argument("name")
@click.argument("line_ids", nargs=-1, type=int, required=True)
@click.option(
    "--type",
    "line_type",
    type=click.Choice([LineType.ASSET.value, LineType.LIABILITY.value]),
    default=LineType.ASSET.value,
    show_default=True,
)
@click.option("--date", "settle_date", help="Settlement date (defaults to today)")
@click.pass_context
def settle(ctx, name: str, line_ids: tuple[int, ...], line_type: str, settle_date: str | None):
    """Settle selected lines against what was received or paid.

    Examples:
        settlekit counterparty settle Alex 12 15
        settlekit counterparty settle Sam 21 --type liability
    """
    service = CounterpartyLedgerService(ctx.obj["db"])
    try:
        settlement_id = service.settle_lines(
            name,
            LineType(line_type),
            line_ids,
            settlement_date=parse_date(settle_date) if settle_date else None,
        )
        click.echo(f"Settled {len(set(line_ids))} line(s) (settlement {settlement_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@counterparty_group.command("write-off")
@click.argument("name")
@click.argument("line_ids", nargs=-1, type=int, required=True)
@click.pass_context
def write_off(ctx, name: str, line_ids: tuple[int, ...]):
    """Drop lines from the worklist without touching any pool."""
    service = CounterpartyLedgerService(ctx.obj["db"])
    try:
        count = service.write_off_lines(name, line_ids)
        click.echo(f"Wrote off {count} line(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@counterparty_group.command("history")
@click.option("--name", help="Only show one counterparty")
@click.option("--limit", type=int, default=DEFAULT_HISTORY_LIMIT, show_default=True)
@click.pass_context
def history(ctx, name: str | None, limit: int):
    """Show recent deposits, payments and settlements."""
    service = CounterpartyLedgerService(ctx.obj["db"])
    records = service.list_history(counterparty=name, limit=limit)
    if not records:
        click.echo("No settlement history.")
        return

    for record in records:
        if record.amount > 0:
            kind = "receive"
        elif record.amount < 0:
            kind = "pay"
        else:
            kind = f"settle {len(record.items)} line(s)"
        click.echo(
            f"{record.id:5d} | {record.date} | {record.counterparty:15s} | {kind:18s} | "
            f"{format_amount(abs(record.amount)):>12s} | {record.note or ''}"
        )


@counterparty_group.command("edit")
@click.argument("settlement_id", type=int)
@click.option(
    "--type",
    "event_type",
    type=click.Choice([e.value for e in CashEventType]),
    required=True,
)
@click.option("--amount", required=True)
@click.option("--date", "event_date", required=True)
@click.option("--note")
@click.option("--name", help="Move the record to another counterparty")
@click.pass_context
def edit(ctx, settlement_id: int, event_type: str, amount: str, event_date: str, note: str | None, name: str | None):
    """Correct a recorded deposit or payment.

    Pools and account balances are not recalculated.
    """
    service = CounterpartyLedgerService(ctx.obj["db"])
    try:
        service.edit_cash_event(
            settlement_id,
            CashEventType(event_type),
            parse_amount(amount),
            parse_date(event_date),
            note=note,
            counterparty=name,
        )
        click.echo(f"Updated settlement {settlement_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@counterparty_group.command("delete")
@click.argument("settlement_id", type=int)
@click.pass_context
def delete(ctx, settlement_id: int):
    """Delete a history record. Balances are not reversed."""
    service = CounterpartyLedgerService(ctx.obj["db"])
    try:
        service.delete_settlement(settlement_id)
        click.echo(f"Deleted settlement {settlement_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register counterparty commands with main CLI."""
    cli.add_command(counterparty_group, name="counterparty")
