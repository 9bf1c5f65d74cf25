"""Account domain service."""

import logging
from datetime import date
from typing import Optional
from settlekit.database.base import Database
from settlekit.domain.entities import Account as AccountEntity, AccountOwner, AccountType
from settlekit.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    account_delete_blocked,
    account_not_found,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        type: AccountType = AccountType.BANK,
        owner: AccountOwner = AccountOwner.SELF,
        opening_balance: int = 0,
        opening_date: Optional[date] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            type: Account type
            owner: Whether the account is the user's own or shared
            opening_balance: Balance on the opening date
            opening_date: Transactions settled before this date are ignored
                when the balance is recomputed

        Returns:
            Account ID

        Raises:
            ConflictError: If account name already exists
        """
        # Check if account with same name exists
        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            name=name,
            type=AccountType(type).value,
            owner=AccountOwner(owner).value,
            opening_balance=opening_balance,
            opening_date=opening_date,
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, active_only: bool = False) -> list[AccountEntity]:
        """List accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts(active_only=active_only)

    def set_active(self, account_id: int, is_active: bool) -> None:
        """Enable or disable an account."""
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.set_account_active(account_id, is_active)

    def override_balance(self, account_id: int, current_balance: int) -> None:
        """Manually set an account's cached balance."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.update_account_balance(account_id, current_balance)
        logger.info(
            "Balance of account %s overridden: %d -> %d",
            account_id,
            account.current_balance,
            current_balance,
        )

    def delete_account(self, account_id: int) -> None:
        """Delete an account that no transaction references.

        Raises:
            NotFoundError: If account not found
            DependencyError: If transactions reference the account
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)
