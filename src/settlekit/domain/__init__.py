"""Domain layer for settlekit application."""

_SERVICES = {
    "AccountService": "settlekit.domain.account",
    "CategoryService": "settlekit.domain.category",
    "TransactionService": "settlekit.domain.transaction",
    "CashSettlementService": "settlekit.domain.cash_settlement",
    "CounterpartyLedgerService": "settlekit.domain.counterparty",
    "AutoOffsetService": "settlekit.domain.auto_offset",
    "SummaryService": "settlekit.domain.summary",
}

__all__ = list(_SERVICES)


# Services import the database layer, which imports entities from this
# package, so they are resolved lazily.
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
