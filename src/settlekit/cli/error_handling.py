"""Rendering of ledger errors on the command line."""

import logging
from typing import Optional

import click

from settlekit.domain.errors import ConfigurationError, InsufficientBalanceError

logger = logging.getLogger(__name__)

# Next step printed under the message, first matching type wins
ERROR_HINTS: list[tuple[type[ValueError], str]] = [
    (
        InsufficientBalanceError,
        "Record the money first with 'counterparty deposit' or 'counterparty pay'.",
    ),
    (ConfigurationError, "Pass --account with the account name or ID the money moved through."),
]


def hint_for(error: ValueError) -> Optional[str]:
    """Return the follow-up hint for an error, if one applies."""
    for error_type, hint in ERROR_HINTS:
        if isinstance(error, error_type):
            return hint
    return None


def handle_domain_error(ctx: click.Context, error: ValueError) -> None:
    """Print ``Error: <message>`` and any hint to stderr, then exit with status 1."""
    logger.debug("%s failed: %s", ctx.command_path, type(error).__name__)
    click.echo(f"Error: {error}", err=True)
    hint = hint_for(error)
    if hint is not None:
        click.echo(f"Hint: {hint}", err=True)
    ctx.exit(1)
