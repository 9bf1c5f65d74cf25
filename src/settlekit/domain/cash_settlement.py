"""Cash settlement domain service.

Moves transactions from unsettled to partially or fully settled and mirrors
the cash movement on the account used. The direction of every balance
change comes from the transaction's bucket: settling a payable debits the
account, settling a receivable credits it.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from settlekit.database.base import Database
from settlekit.domain.classification import classify_transaction
from settlekit.domain.entities import (
    Account,
    Bucket,
    OverdueTransaction,
    Transaction,
)
from settlekit.domain.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    amount_not_positive,
    cash_account_required,
    partial_exceeds_remaining,
    settlement_account_mismatch,
    transaction_changed,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


class CashSettlementService:
    """Service for cash settlement of transactions."""

    def __init__(self, db: Database):
        """Initialize cash settlement service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def resolve_cash_account(self, cash_account_id: Optional[int]) -> Optional[int]:
        """Check the cash account a settlement will move money through.

        Settling without an account is only allowed when no active account
        exists at all.

        Raises:
            ConfigurationError: If no account was chosen but accounts exist
            NotFoundError: If the chosen account does not exist
        """
        if cash_account_id is None:
            if self.db.list_accounts(active_only=True):
                raise ConfigurationError(cash_account_required())
            return None
        if self.db.get_account(cash_account_id) is None:
            raise NotFoundError(account_not_found(cash_account_id))
        return cash_account_id

    def _require_same_account(self, txn: Transaction, account_id: Optional[int]) -> None:
        # Unsettle and resync reverse the settled amount on one recorded account
        if txn.settled_amount > 0 and txn.settlement_account_id != account_id:
            raise ValidationError(
                settlement_account_mismatch(txn.id, txn.settlement_account_id)
            )

    def settle(
        self,
        transaction_ids: Iterable[int],
        cash_account_id: Optional[int] = None,
        settlement_date: Optional[date] = None,
    ) -> int:
        """Fully settle a batch of transactions.

        The account balance is changed once for the whole batch, by the
        bucket-signed sum of the amounts that were still outstanding.
        Transactions already fully settled are left untouched.

        Args:
            transaction_ids: Transactions to settle, applied in order
            cash_account_id: Account the money moved through
            settlement_date: Settlement date (defaults to today)

        Returns:
            Total amount settled by this call

        Raises:
            ConfigurationError: If a cash account is required but missing
            NotFoundError: If a transaction or the account does not exist
            ValidationError: If a partly settled transaction used another account
            ConflictError: If a transaction changed while the batch was applied
        """
        settlement_date = settlement_date or date.today()
        account_id = self.resolve_cash_account(cash_account_id)
        transaction_ids = list(dict.fromkeys(transaction_ids))

        total_settled = 0
        balance_delta = 0
        with self.db.atomic():
            transactions = [self._require_transaction(tid) for tid in transaction_ids]
            for txn in transactions:
                remaining = txn.remaining_amount
                if txn.is_cash_settled and remaining <= 0:
                    logger.debug("Transaction %s already settled, skipping", txn.id)
                    continue
                self._require_same_account(txn, account_id)
                bucket = classify_transaction(txn).bucket
                if not self.db.apply_transaction_settlement(
                    txn.id, remaining, account_id, settlement_date
                ):
                    raise ConflictError(transaction_changed(txn.id))
                total_settled += remaining
                balance_delta += bucket.sign * remaining

            if account_id is not None and balance_delta != 0:
                self.db.adjust_account_balance(account_id, balance_delta)

        logger.info(
            "Settled %d transaction(s) for %d (account %s, balance change %+d)",
            len(transactions),
            total_settled,
            account_id,
            balance_delta,
        )
        return total_settled

    def partial_settle(
        self,
        transaction_id: int,
        amount: int,
        cash_account_id: Optional[int] = None,
        settlement_date: Optional[date] = None,
    ) -> Transaction:
        """Settle part of a transaction's outstanding amount.

        Every part must go through the same account. To move a partly
        settled transaction to another account, unsettle it first.

        Args:
            transaction_id: Transaction to settle
            amount: Amount settled now; must not exceed what remains
            cash_account_id: Account the money moved through
            settlement_date: Settlement date (defaults to payment date, then today)

        Returns:
            The updated transaction

        Raises:
            ValidationError: If amount is not positive, exceeds the remainder
                or names another account than earlier parts
            ConfigurationError: If a cash account is required but missing
            NotFoundError: If the transaction or account does not exist
            ConflictError: If the transaction changed during the update
        """
        if amount <= 0:
            raise ValidationError(amount_not_positive(amount))
        account_id = self.resolve_cash_account(cash_account_id)

        with self.db.atomic():
            txn = self._require_transaction(transaction_id)
            remaining = txn.remaining_amount
            if amount > remaining:
                raise ValidationError(partial_exceeds_remaining(transaction_id, amount, remaining))
            self._require_same_account(txn, account_id)

            settlement_date = settlement_date or txn.payment_date or date.today()
            bucket = classify_transaction(txn).bucket
            if not self.db.apply_transaction_settlement(
                txn.id, amount, account_id, settlement_date
            ):
                raise ConflictError(transaction_changed(txn.id))
            if account_id is not None:
                self.db.adjust_account_balance(account_id, bucket.sign * amount)

        logger.info(
            "Partially settled transaction %s: %d of %d (account %s)",
            txn.id,
            txn.settled_amount + amount,
            txn.total_amount,
            account_id,
        )
        return self._require_transaction(txn.id)

    def reverse_cash_effect(self, transaction: Transaction) -> int:
        """Undo the account-balance change recorded for a transaction.

        Returns the balance delta applied (0 when no account was recorded).
        """
        if transaction.settlement_account_id is None or transaction.settled_amount <= 0:
            return 0
        if self.db.get_account(transaction.settlement_account_id) is None:
            logger.warning(
                "Transaction %s was settled to missing account %s; balance not reversed",
                transaction.id,
                transaction.settlement_account_id,
            )
            return 0
        bucket = classify_transaction(transaction).bucket
        delta = -bucket.sign * transaction.settled_amount
        self.db.adjust_account_balance(transaction.settlement_account_id, delta)
        return delta

    def unsettle(self, transaction_ids: Iterable[int]) -> int:
        """Return transactions to the unsettled state.

        The balance change made when they were settled is reversed on the
        recorded settlement account.

        Returns:
            Number of transactions reset
        """
        transactions = [self._require_transaction(tid) for tid in dict.fromkeys(transaction_ids)]
        with self.db.atomic():
            for txn in transactions:
                delta = self.reverse_cash_effect(txn)
                self.db.update_transaction_settlement(
                    txn.id,
                    settled_amount=0,
                    is_cash_settled=False,
                    settlement_account_id=None,
                    settlement_date=None,
                )
                logger.info("Unsettled transaction %s (balance change %+d)", txn.id, delta)
        return len(transactions)

    def group_unsettled(self) -> dict[Bucket, list[Transaction]]:
        """Group transactions awaiting cash settlement by bucket."""
        groups: dict[Bucket, list[Transaction]] = {Bucket.PAYABLE: [], Bucket.RECEIVABLE: []}
        for txn in self.db.list_unsettled_transactions():
            if txn.remaining_amount <= 0:
                continue
            groups[classify_transaction(txn).bucket].append(txn)
        return groups

    def list_settled(self, limit: Optional[int] = 50) -> list[Transaction]:
        """List the most recently settled transactions."""
        return self.db.list_settled_transactions(limit=limit)

    def list_overdue(self, today: Optional[date] = None) -> list[OverdueTransaction]:
        """List unsettled transactions whose payment date has passed.

        Oldest payment date first.
        """
        today = today or date.today()
        account_names = {acc.id: acc.name for acc in self.db.list_accounts()}
        overdue = [
            OverdueTransaction(
                transaction=txn,
                account_name=account_names.get(txn.account_id, "Unknown"),
                days_overdue=(today - txn.payment_date).days,
            )
            for txn in self.db.list_unsettled_transactions()
            if txn.payment_date is not None and txn.payment_date < today
        ]
        overdue.sort(key=lambda item: (item.transaction.payment_date, item.transaction.id))
        return overdue

    def compute_account_balance(self, account: Account) -> int:
        """Recompute an account balance from its opening balance and cash events."""
        balance = account.opening_balance

        for txn in self.db.list_transactions(settlement_account_id=account.id):
            if txn.settled_amount <= 0:
                continue
            effective_date = txn.settlement_date or txn.date
            if account.opening_date is not None and effective_date < account.opening_date:
                continue
            balance += classify_transaction(txn).bucket.sign * txn.settled_amount

        for settlement in self.db.list_settlements():
            if settlement.account_id != account.id:
                continue
            if account.opening_date is not None and settlement.date < account.opening_date:
                continue
            balance += settlement.amount

        return balance

    def resync_account_balances(self) -> list[tuple[Account, int]]:
        """Rewrite cached balances that drifted from their cash events.

        Returns:
            (account before resync, recomputed balance) for each corrected account
        """
        corrected: list[tuple[Account, int]] = []
        with self.db.atomic():
            for account in self.db.list_accounts():
                computed = self.compute_account_balance(account)
                if computed == account.current_balance:
                    continue
                self.db.update_account_balance(account.id, computed)
                corrected.append((account, computed))
                logger.info(
                    "Resynced account %s (%s): %d -> %d",
                    account.id,
                    account.name,
                    account.current_balance,
                    computed,
                )
        return corrected
