"""Account management commands."""

import click
from settlekit.cli.account_resolution import resolve_account_or_exit
from settlekit.cli.error_handling import handle_domain_error
from settlekit.domain.account import AccountService
from settlekit.domain.cash_settlement import CashSettlementService
from settlekit.domain.entities import AccountOwner, AccountType
from settlekit.domain.errors import format_amount
from settlekit.utils.amount_parser import parse_amount
from settlekit.utils.date_parser import parse_date


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType]),
    default=AccountType.BANK.value,
    show_default=True,
    help="Account type",
)
@click.option(
    "--owner",
    type=click.Choice([o.value for o in AccountOwner]),
    default=AccountOwner.SELF.value,
    show_default=True,
    help="Whose money the account holds",
)
@click.option("--opening-balance", default="0", help="Balance on the opening date")
@click.option("--opening-date", help="Opening date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    owner: str,
    opening_balance: str,
    opening_date: str | None,
):
    """Create a new account.

    Examples:
        settlekit account create "Main Bank" --opening-balance 50000
        settlekit account create "Wallet" --type cash
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        balance = parse_amount(opening_balance)
        start = parse_date(opening_date) if opening_date else None
        account_id = service.create_account(
            name=name,
            type=AccountType(account_type),
            owner=AccountOwner(owner),
            opening_balance=balance,
            opening_date=start,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Only show active accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List accounts with their current balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(active_only=active_only)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.type.value:10s} | "
            f"{format_amount(acc.current_balance):>14s}{status}"
        )


@account_group.command("set-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount")
@click.pass_context
def set_balance(ctx, account: str, amount: str) -> None:
    """Override an account's current balance.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.override_balance(account_id, parse_amount(amount))
        click.echo(f"Balance set to {format_amount(parse_amount(amount))}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Hide an account from settlement choices."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_id, False)
    click.echo(f"Deactivated account {account_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def delete_account(ctx, account: str) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. Accounts referenced by
    transactions cannot be deleted; deactivate them instead.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("resync")
@click.pass_context
def resync_accounts(ctx) -> None:
    """Recompute cached balances from opening balances and settlements."""
    db = ctx.obj["db"]
    service = CashSettlementService(db)

    corrected = service.resync_account_balances()
    if not corrected:
        click.echo("All account balances are in sync.")
        return

    for acc, computed in corrected:
        click.echo(
            f"{acc.name}: {format_amount(acc.current_balance)} -> {format_amount(computed)}"
        )
    click.echo(f"\nCorrected {len(corrected)} account(s)")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
