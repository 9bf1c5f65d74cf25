"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ConfigurationError(DomainError):
    """Operation blocked because required configuration is missing."""


class InsufficientBalanceError(ValidationError):
    """Settlement would overdraw a counterparty pool."""


def format_amount(amount: int) -> str:
    """Render a whole-unit amount the way messages show it."""
    return f"¥{amount:,}"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def line_not_found(line_id: int) -> str:
    """Return message for missing transaction line."""
    return f"Transaction line {line_id} not found"


def settlement_not_found(settlement_id: int) -> str:
    """Return message for missing settlement record."""
    return f"Settlement {settlement_id} not found"


def cash_account_required() -> str:
    """Return message when a settlement needs a cash account."""
    return "A cash account must be selected to settle transactions"


def amount_not_positive(amount: int) -> str:
    """Return message for a non-positive amount."""
    return f"Amount must be greater than 0 (got {amount})"


def partial_exceeds_remaining(transaction_id: int, amount: int, remaining: int) -> str:
    """Return message when a partial settlement exceeds what is left."""
    return (
        f"Cannot settle {format_amount(amount)} on transaction {transaction_id}: "
        f"only {format_amount(remaining)} remains"
    )


def settlement_account_mismatch(transaction_id: int, recorded_account_id: int | None) -> str:
    """Return message when a settlement names a different account than earlier ones."""
    recorded = f"account {recorded_account_id}" if recorded_account_id is not None else "no account"
    return (
        f"Transaction {transaction_id} is already partly settled through {recorded}; "
        "unsettle it before settling through another account"
    )


def transaction_changed(transaction_id: int) -> str:
    """Return message when a transaction's settlement changed during an update."""
    return f"Transaction {transaction_id} was changed by another update; try again"


def line_changed(line_id: int) -> str:
    """Return message when a line's settlement changed during an update."""
    return f"Transaction line {line_id} was changed by another update; try again"


def insufficient_pool(pool_name: str, need: int, have: int) -> str:
    """Return message when a counterparty pool cannot cover a settlement."""
    return f"insufficient {pool_name} balance: need {format_amount(need)}, have {format_amount(have)}"


def line_not_eligible(line_id: int, reason: str) -> str:
    """Return message when a line cannot be settled."""
    return f"Transaction line {line_id} cannot be settled: {reason}"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Deactivate it instead."
    )
