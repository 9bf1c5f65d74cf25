"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, Optional, Sequence
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from settlekit.domain.entities import (
    Account,
    Category,
    LineType,
    NewLine,
    Settlement,
    SettlementBalance,
    Transaction,
    TransactionLine,
)


class Database(ABC):
    """Abstract ledger store for settlekit.

    Writes issued outside ``atomic()`` commit immediately. Writes issued
    inside share one database transaction.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one all-or-nothing database transaction.

        Nested blocks join the outermost one. Any exception rolls back
        every write made inside the outermost block.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        type: str,
        owner: str = "self",
        opening_balance: int = 0,
        opening_date: Optional[date] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, active_only: bool = False) -> list[Account]:
        """List accounts ordered by name."""
        pass

    @abstractmethod
    def update_account_balance(self, account_id: int, current_balance: int) -> None:
        """Overwrite an account's cached balance."""
        pass

    @abstractmethod
    def adjust_account_balance(self, account_id: int, delta: int) -> int:
        """Add ``delta`` to an account's balance in one statement. Returns new balance."""
        pass

    @abstractmethod
    def set_account_active(self, account_id: int, is_active: bool) -> None:
        """Enable or disable an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions that reference an account."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, type: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, type: Optional[str] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        date: date,
        description: str,
        total_amount: int,
        account_id: Optional[int] = None,
        payment_date: Optional[date] = None,
        is_cash_settled: bool = False,
        settled_amount: int = 0,
        settlement_account_id: Optional[int] = None,
        settlement_date: Optional[date] = None,
        paid_by_other: bool = False,
    ) -> int:
        """Create a transaction without lines. Returns transaction ID."""
        pass

    @abstractmethod
    def add_transaction_lines(self, transaction_id: int, lines: Sequence[NewLine]) -> list[int]:
        """Insert lines for a transaction. Returns line IDs in input order."""
        pass

    @abstractmethod
    def delete_transaction_lines(self, transaction_id: int) -> None:
        """Delete every line of a transaction."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        date: date,
        description: str,
        total_amount: int,
        account_id: Optional[int],
        payment_date: Optional[date],
        paid_by_other: bool,
    ) -> None:
        """Overwrite the editable fields of a transaction."""
        pass

    @abstractmethod
    def update_transaction_settlement(
        self,
        transaction_id: int,
        settled_amount: int,
        is_cash_settled: bool,
        settlement_account_id: Optional[int],
        settlement_date: Optional[date],
    ) -> None:
        """Update cash-settlement state of a transaction."""
        pass

    @abstractmethod
    def apply_transaction_settlement(
        self,
        transaction_id: int,
        delta: int,
        settlement_account_id: Optional[int],
        settlement_date: Optional[date],
    ) -> bool:
        """Add ``delta`` to a transaction's settled amount in one statement.

        Applies only while the result stays within the total amount and any
        amount already settled went through ``settlement_account_id``.
        Returns False when nothing was changed.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction (with lines) by ID."""
        pass

    @abstractmethod
    def list_transactions_by_ids(self, transaction_ids: Iterable[int]) -> list[Transaction]:
        """Get transactions (with lines) for the given IDs."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        settlement_account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def list_unsettled_transactions(self) -> list[Transaction]:
        """List transactions not yet fully cash-settled, oldest first."""
        pass

    @abstractmethod
    def list_settled_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        """List fully cash-settled transactions, most recently settled first."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction together with its lines."""
        pass

    # Transaction line operations
    @abstractmethod
    def get_transaction_line(self, line_id: int) -> Optional[TransactionLine]:
        """Get a transaction line by ID."""
        pass

    @abstractmethod
    def list_counterparty_lines(
        self,
        counterparty: Optional[str] = None,
        line_type: Optional[LineType] = None,
    ) -> list[TransactionLine]:
        """List lines that name a counterparty, oldest created first."""
        pass

    @abstractmethod
    def update_line_settlement(self, line_id: int, settled_amount: int, is_settled: bool) -> None:
        """Update counterparty-settlement state of a line."""
        pass

    @abstractmethod
    def apply_line_settlement(self, line_id: int, delta: int) -> bool:
        """Add ``delta`` to a line's settled amount, keeping it within 0 and the line amount.

        Returns False when the result would leave that range.
        """
        pass

    # Settlement balance operations
    @abstractmethod
    def get_settlement_balance(self, counterparty: str) -> Optional[SettlementBalance]:
        """Get the pool row for a counterparty."""
        pass

    @abstractmethod
    def list_settlement_balances(self) -> list[SettlementBalance]:
        """List every pool row ordered by counterparty."""
        pass

    @abstractmethod
    def upsert_settlement_balance(
        self, counterparty: str, receive_balance: int, pay_balance: int
    ) -> None:
        """Create or overwrite the pool row for a counterparty."""
        pass

    @abstractmethod
    def adjust_settlement_balance(
        self, counterparty: str, receive_delta: int = 0, pay_delta: int = 0
    ) -> SettlementBalance:
        """Add deltas to a counterparty's pools, creating the row if needed."""
        pass

    @abstractmethod
    def draw_settlement_balance(
        self, counterparty: str, receive_amount: int = 0, pay_amount: int = 0
    ) -> bool:
        """Take amounts out of a counterparty's pools if they cover them.

        Returns False, leaving the pools untouched, when either pool is short.
        """
        pass

    # Settlement history operations
    @abstractmethod
    def create_settlement(
        self,
        date: date,
        counterparty: str,
        amount: int,
        note: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Append a settlement record. Returns settlement ID."""
        pass

    @abstractmethod
    def create_settlement_items(
        self, settlement_id: int, items: Sequence[tuple[int, int]]
    ) -> list[int]:
        """Append (transaction_line_id, amount) items to a settlement."""
        pass

    @abstractmethod
    def get_settlement(self, settlement_id: int) -> Optional[Settlement]:
        """Get settlement record (with items) by ID."""
        pass

    @abstractmethod
    def list_settlements(
        self, counterparty: Optional[str] = None, limit: Optional[int] = None
    ) -> list[Settlement]:
        """List settlement records newest first."""
        pass

    @abstractmethod
    def list_settlements_for_lines(self, line_ids: Iterable[int]) -> list[Settlement]:
        """List settlement records with an item on any of the given lines."""
        pass

    @abstractmethod
    def update_settlement(
        self,
        settlement_id: int,
        date: date,
        counterparty: str,
        amount: int,
        note: Optional[str],
    ) -> None:
        """Overwrite the descriptive fields of a settlement record."""
        pass

    @abstractmethod
    def delete_settlement(self, settlement_id: int) -> None:
        """Delete a settlement record and its items.

        Pool balances and line settlement state are left as they are.
        """
        pass

    @abstractmethod
    def delete_settlement_items(self, item_ids: Iterable[int]) -> None:
        """Delete individual settlement items, leaving their records in place."""
        pass
