"""Main CLI entry point."""

import logging

import click
from settlekit.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

# Import and register all commands at module level
from settlekit.cli.commands import (
    account,
    category,
    transaction,
    cash,
    counterparty,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option("-v", "--verbose", is_flag=True, help="Log each ledger change")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Settlekit - household ledger and settlement tracking.

    Record transactions, settle them against cash accounts and keep track
    of money advanced to or borrowed from other people.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
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
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
cash.register_commands(cli)
counterparty.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
