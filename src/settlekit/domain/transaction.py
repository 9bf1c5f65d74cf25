"""Transaction domain service."""

import logging
from typing import Optional, Sequence
from datetime import date
from settlekit.database.base import Database
from settlekit.domain.auto_offset import AutoOffsetService
from settlekit.domain.cash_settlement import CashSettlementService
from settlekit.domain.classification import (
    classify_transaction,
    is_cash_settled_at_save,
    total_amount,
)
from settlekit.domain.counterparty import CounterpartyLedgerService
from settlekit.domain.entities import (
    Classification,
    LineType,
    NewLine,
    Transaction as TransactionEntity,
)
from settlekit.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions and their lines."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.cash = CashSettlementService(db)
        self.auto_offset = AutoOffsetService(db)
        self.ledger = CounterpartyLedgerService(db)

    def _validate(
        self,
        lines: Sequence[NewLine],
        account_id: Optional[int],
        paid_by_other: bool,
        counterparty: Optional[str],
    ) -> None:
        if not lines:
            raise ValidationError("A transaction needs at least one line")
        for line in lines:
            if line.amount <= 0:
                raise ValidationError(f"Line amounts must be greater than 0 (got {line.amount})")
            if line.line_type.is_counterparty_line and not line.counterparty:
                raise ValidationError(f"A {line.line_type.value} line needs a counterparty")
            if line.category_id is not None and self.db.get_category(line.category_id) is None:
                raise NotFoundError(category_not_found(line.category_id))
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if paid_by_other and not (counterparty and counterparty.strip()):
            raise ValidationError("A counterparty is required when paid by someone else")

    def _save_lines_and_settlement(
        self,
        transaction_id: int,
        txn_date: date,
        lines: Sequence[NewLine],
        account_id: Optional[int],
        payment_date: Optional[date],
        paid_by_other: bool,
        counterparty: Optional[str],
        today: Optional[date],
    ) -> None:
        """Insert lines and apply the save-time settlement state."""
        total = total_amount(lines)
        self.db.add_transaction_lines(transaction_id, lines)

        if paid_by_other:
            liability = NewLine(
                amount=total,
                line_type=LineType.LIABILITY,
                category_id=lines[0].category_id,
                counterparty=counterparty.strip(),
            )
            (liability_id,) = self.db.add_transaction_lines(transaction_id, [liability])
            self.db.update_transaction_settlement(
                transaction_id,
                settled_amount=total,
                is_cash_settled=True,
                settlement_account_id=None,
                settlement_date=txn_date,
            )
            self.auto_offset.offset_liability(liability_id)
        elif is_cash_settled_at_save(txn_date, payment_date, paid_by_other, today):
            if account_id is not None:
                self.cash.settle([transaction_id], account_id, payment_date)
            else:
                self.db.update_transaction_settlement(
                    transaction_id,
                    settled_amount=total,
                    is_cash_settled=True,
                    settlement_account_id=None,
                    settlement_date=payment_date,
                )

    def create_transaction(
        self,
        date: date,
        description: str,
        lines: Sequence[NewLine],
        account_id: Optional[int] = None,
        payment_date: Optional[date] = None,
        paid_by_other: bool = False,
        counterparty: Optional[str] = None,
        today: Optional[date] = None,
    ) -> int:
        """Create a transaction with its lines.

        Args:
            date: Accrual date
            description: Description
            lines: User-entered lines
            account_id: Account the transaction is paid from or into
            payment_date: Expected or actual payment date (None = undetermined)
            paid_by_other: True when a counterparty paid on the user's behalf
            counterparty: Who paid, required with paid_by_other
            today: Reference date for the cash-settled default

        Returns:
            Transaction ID

        Raises:
            ValidationError: If lines are invalid or a counterparty is missing
            NotFoundError: If the account or a category doesn't exist
        """
        self._validate(lines, account_id, paid_by_other, counterparty)
        if paid_by_other:
            payment_date = date

        with self.db.atomic():
            transaction_id = self.db.create_transaction(
                date=date,
                description=(description or "").strip(),
                total_amount=total_amount(lines),
                account_id=account_id,
                payment_date=payment_date,
                paid_by_other=paid_by_other,
            )
            self._save_lines_and_settlement(
                transaction_id, date, lines, account_id, payment_date, paid_by_other, counterparty, today
            )

        logger.info("Created transaction %s (%d line(s))", transaction_id, len(lines))
        return transaction_id

    def edit_transaction(
        self,
        transaction_id: int,
        date: date,
        description: str,
        lines: Sequence[NewLine],
        account_id: Optional[int] = None,
        payment_date: Optional[date] = None,
        paid_by_other: bool = False,
        counterparty: Optional[str] = None,
        today: Optional[date] = None,
    ) -> None:
        """Replace a transaction's fields and lines.

        The previous cash effect is reversed, counterparty settlement on the
        old lines is undone, and the save-time settlement state is
        recomputed from the new values. A paid-by-other edit therefore nets
        its new liability against the same advances again.

        Raises:
            NotFoundError: If the transaction, account or a category doesn't exist
            ValidationError: If lines are invalid or a counterparty is missing
        """
        existing = self.db.get_transaction(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self._validate(lines, account_id, paid_by_other, counterparty)
        if paid_by_other:
            payment_date = date

        with self.db.atomic():
            self.cash.reverse_cash_effect(existing)
            self.ledger.release_lines(line.id for line in existing.lines)
            self.db.delete_transaction_lines(transaction_id)
            self.db.update_transaction(
                transaction_id,
                date=date,
                description=(description or "").strip(),
                total_amount=total_amount(lines),
                account_id=account_id,
                payment_date=payment_date,
                paid_by_other=paid_by_other,
            )
            self.db.update_transaction_settlement(
                transaction_id,
                settled_amount=0,
                is_cash_settled=False,
                settlement_account_id=None,
                settlement_date=None,
            )
            self._save_lines_and_settlement(
                transaction_id, date, lines, account_id, payment_date, paid_by_other, counterparty, today
            )

        logger.info("Edited transaction %s", transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and its lines, reversing its cash effect.

        Advances or borrowings its lines were netted against become
        outstanding again, and amounts drawn from a pool go back to it.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        existing = self.db.get_transaction(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        with self.db.atomic():
            self.cash.reverse_cash_effect(existing)
            self.ledger.release_lines(line.id for line in existing.lines)
            self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[TransactionEntity]:
        """List transactions, newest first."""
        return self.db.list_transactions(start_date=start_date, end_date=end_date)

    def classify(self, transaction_id: int) -> Classification:
        """Classify a stored transaction, reporting lines with missing categories."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        known_category_ids = {cat.id for cat in self.db.list_categories()}
        return classify_transaction(txn, known_category_ids)
