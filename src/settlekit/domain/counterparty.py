"""Counterparty settlement ledger.

Each counterparty has two liquidity pools. ``receive_balance`` holds money
received from them that has not yet been matched to the advances (asset
lines) it pays down; ``pay_balance`` holds money paid to them not yet
matched to borrowings (liability lines). Pools grow with deposits and
payments and shrink only when lines are settled against them.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from settlekit.database.base import Database
from settlekit.domain.classification import line_settlement_state, unsettled_amount
from settlekit.domain.entities import (
    CashEventType,
    CounterpartySummary,
    LineType,
    Settlement,
    SettlementBalance,
    TransactionLine,
    UnsettledLine,
)
from settlekit.domain.errors import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
    account_not_found,
    amount_not_positive,
    insufficient_pool,
    line_changed,
    line_not_eligible,
    line_not_found,
    settlement_not_found,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20
SETTLE_NOTE = "Settlement"

POOL_NAMES = {
    LineType.ASSET: "receivable",
    LineType.LIABILITY: "payable",
}


def _require_counterparty(counterparty: str) -> str:
    name = (counterparty or "").strip()
    if not name:
        raise ValidationError("Counterparty name is required")
    return name


def _require_counterparty_line_type(line_type: LineType) -> LineType:
    if not line_type.is_counterparty_line:
        raise ValidationError(
            f"Only asset or liability lines can be settled (got '{line_type.value}')"
        )
    return line_type


class CounterpartyLedgerService:
    """Service for person-to-person settlement of asset and liability lines."""

    def __init__(self, db: Database):
        """Initialize counterparty ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_balance(self, counterparty: str) -> SettlementBalance:
        """Get a counterparty's pools (zero when none were recorded)."""
        balance = self.db.get_settlement_balance(counterparty)
        if balance is None:
            return SettlementBalance(id=0, counterparty=counterparty, receive_balance=0, pay_balance=0)
        return balance

    def record_cash_event(
        self,
        counterparty: str,
        event_type: CashEventType,
        amount: int,
        event_date: Optional[date] = None,
        cash_account_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Record money received from or paid to a counterparty.

        Adds ``amount`` to the matching pool, appends a signed history
        record and, when a cash account is given, moves its balance in the
        same direction.

        Args:
            counterparty: Counterparty name
            event_type: RECEIVE or PAY
            amount: Positive amount
            event_date: Date of the event (defaults to today)
            cash_account_id: Optional account the money moved through
            note: Optional note

        Returns:
            Settlement record ID

        Raises:
            ValidationError: If amount is not positive or counterparty is empty
            NotFoundError: If the cash account does not exist
        """
        counterparty = _require_counterparty(counterparty)
        if amount <= 0:
            raise ValidationError(amount_not_positive(amount))
        if cash_account_id is not None and self.db.get_account(cash_account_id) is None:
            raise NotFoundError(account_not_found(cash_account_id))

        event_date = event_date or date.today()
        signed_amount = event_type.sign * amount

        with self.db.atomic():
            if event_type is CashEventType.RECEIVE:
                self.db.adjust_settlement_balance(counterparty, receive_delta=amount)
            else:
                self.db.adjust_settlement_balance(counterparty, pay_delta=amount)
            settlement_id = self.db.create_settlement(
                date=event_date,
                counterparty=counterparty,
                amount=signed_amount,
                note=note or None,
                account_id=cash_account_id,
            )
            if cash_account_id is not None:
                self.db.adjust_account_balance(cash_account_id, signed_amount)

        logger.info(
            "Recorded %s of %d for %s (settlement %s, account %s)",
            event_type.value,
            amount,
            counterparty,
            settlement_id,
            cash_account_id,
        )
        return settlement_id

    def edit_cash_event(
        self,
        settlement_id: int,
        event_type: CashEventType,
        amount: int,
        event_date: date,
        note: Optional[str] = None,
        counterparty: Optional[str] = None,
    ) -> None:
        """Correct a recorded deposit or payment.

        Only the history record changes. Pools and account balances keep
        the values applied when the event was first recorded.

        Raises:
            NotFoundError: If the settlement does not exist
            ValidationError: If the record is a netting record or amount is not positive
        """
        settlement = self.db.get_settlement(settlement_id)
        if settlement is None:
            raise NotFoundError(settlement_not_found(settlement_id))
        if settlement.amount == 0:
            raise ValidationError(
                f"Settlement {settlement_id} nets existing lines and cannot be edited"
            )
        if amount <= 0:
            raise ValidationError(amount_not_positive(amount))

        counterparty = _require_counterparty(counterparty or settlement.counterparty)
        self.db.update_settlement(
            settlement_id,
            date=event_date,
            counterparty=counterparty,
            amount=event_type.sign * amount,
            note=note or None,
        )
        logger.info(
            "Edited settlement %s; pool and account balances left unchanged", settlement_id
        )

    def delete_settlement(self, settlement_id: int) -> None:
        """Delete a history record.

        Line settlement state, pools and account balances are not reversed.
        """
        if self.db.get_settlement(settlement_id) is None:
            raise NotFoundError(settlement_not_found(settlement_id))
        self.db.delete_settlement(settlement_id)
        logger.info("Deleted settlement %s (balances not reversed)", settlement_id)

    def _load_selected_lines(
        self, counterparty: str, line_ids: Iterable[int], line_type: Optional[LineType]
    ) -> list[TransactionLine]:
        ids = list(dict.fromkeys(line_ids))
        if not ids:
            raise ValidationError("No transaction lines selected")

        lines = []
        for line_id in ids:
            line = self.db.get_transaction_line(line_id)
            if line is None:
                raise NotFoundError(line_not_found(line_id))
            if line.counterparty != counterparty:
                raise ValidationError(
                    line_not_eligible(line_id, f"it does not belong to '{counterparty}'")
                )
            if line_type is not None and line.line_type is not line_type:
                raise ValidationError(
                    line_not_eligible(line_id, f"it is not a {line_type.value} line")
                )
            if unsettled_amount(line) <= 0:
                raise ValidationError(line_not_eligible(line_id, "it is already settled"))
            lines.append(line)
        return lines

    def settle_lines(
        self,
        counterparty: str,
        line_type: LineType,
        line_ids: Iterable[int],
        settlement_date: Optional[date] = None,
        note: Optional[str] = SETTLE_NOTE,
    ) -> int:
        """Settle selected lines against the counterparty's matching pool.

        Asset lines draw on the receive pool, liability lines on the pay
        pool. Each selected line is settled for its full unsettled amount.
        The pool is drawn with a conditional update, so a concurrent
        settlement that emptied it first makes this one fail without writes.

        Args:
            counterparty: Counterparty name
            line_type: ASSET or LIABILITY; every selected line must match
            line_ids: Lines to settle
            settlement_date: Date of the settlement record (defaults to today)
            note: Note stored on the settlement record

        Returns:
            Settlement record ID

        Raises:
            InsufficientBalanceError: If the pool cannot cover the selection
            ValidationError: If a line is ineligible or nothing is selected
            NotFoundError: If a line does not exist
            ConflictError: If a line changed while it was being settled
        """
        counterparty = _require_counterparty(counterparty)
        line_type = _require_counterparty_line_type(line_type)

        with self.db.atomic():
            lines = self._load_selected_lines(counterparty, line_ids, line_type)
            applied = [(line, unsettled_amount(line)) for line in lines]
            total_to_settle = sum(amount for _, amount in applied)

            if line_type is LineType.ASSET:
                drawn = self.db.draw_settlement_balance(counterparty, receive_amount=total_to_settle)
            else:
                drawn = self.db.draw_settlement_balance(counterparty, pay_amount=total_to_settle)
            if not drawn:
                pool = self.get_balance(counterparty).available_for(line_type)
                logger.warning(
                    "Rejected settlement for %s: %s pool %d < %d",
                    counterparty,
                    POOL_NAMES[line_type],
                    pool,
                    total_to_settle,
                )
                raise InsufficientBalanceError(
                    insufficient_pool(POOL_NAMES[line_type], total_to_settle, pool)
                )

            settlement_id = self.db.create_settlement(
                date=settlement_date or date.today(),
                counterparty=counterparty,
                amount=0,
                note=note,
            )
            for line, amount in applied:
                if not self.db.apply_line_settlement(line.id, amount):
                    raise ConflictError(line_changed(line.id))
                logger.debug("Line %s settled %d more", line.id, amount)
            self.db.create_settlement_items(
                settlement_id, [(line.id, amount) for line, amount in applied]
            )

        logger.info(
            "Settled %d %s line(s) for %s totalling %d (settlement %s)",
            len(applied),
            line_type.value,
            counterparty,
            total_to_settle,
            settlement_id,
        )
        return settlement_id

    def release_lines(self, line_ids: Iterable[int]) -> int:
        """Undo counterparty settlement recorded against lines about to be removed.

        A netting record pairs asset lines with a liability line, so it is
        undone as a whole: every other line on it gives back its share and
        the record is deleted. A record that settled lines against a pool
        only loses the items of the removed lines, and their amounts go back
        into the pool.

        Returns:
            Number of settlement records changed or deleted
        """
        removed = set(line_ids)
        if not removed:
            return 0

        with self.db.atomic():
            settlements = self.db.list_settlements_for_lines(removed)
            for settlement in settlements:
                lines = {
                    item.transaction_line_id: self.db.get_transaction_line(item.transaction_line_id)
                    for item in settlement.items
                }
                line_types = {line.line_type for line in lines.values() if line is not None}
                if {LineType.ASSET, LineType.LIABILITY} <= line_types:
                    self._undo_netting(settlement, removed, lines)
                else:
                    self._return_to_pool(settlement, removed, lines)
        return len(settlements)

    def _undo_netting(
        self,
        settlement: Settlement,
        removed: set[int],
        lines: dict[int, Optional[TransactionLine]],
    ) -> None:
        for item in settlement.items:
            if item.transaction_line_id in removed:
                continue
            if not self.db.apply_line_settlement(item.transaction_line_id, -item.amount):
                line = lines.get(item.transaction_line_id)
                if line is None:
                    continue
                logger.warning(
                    "Line %s holds less than %d from settlement %s; clearing it",
                    line.id,
                    item.amount,
                    settlement.id,
                )
                settled, is_settled = line_settlement_state(
                    line.amount, max(line.settled_amount - item.amount, 0)
                )
                self.db.update_line_settlement(line.id, settled, is_settled)
        self.db.delete_settlement(settlement.id)
        logger.info(
            "Undid netting settlement %s for %s", settlement.id, settlement.counterparty
        )

    def _return_to_pool(
        self,
        settlement: Settlement,
        removed: set[int],
        lines: dict[int, Optional[TransactionLine]],
    ) -> None:
        released = [item for item in settlement.items if item.transaction_line_id in removed]
        amount = sum(item.amount for item in released)
        line = lines.get(released[0].transaction_line_id)
        if line is not None and line.line_type is LineType.ASSET:
            self.db.adjust_settlement_balance(settlement.counterparty, receive_delta=amount)
        else:
            self.db.adjust_settlement_balance(settlement.counterparty, pay_delta=amount)

        if len(released) == len(settlement.items):
            self.db.delete_settlement(settlement.id)
        else:
            self.db.delete_settlement_items(item.id for item in released)
        logger.info(
            "Returned %d to %s's pool from settlement %s",
            amount,
            settlement.counterparty,
            settlement.id,
        )

    def write_off_lines(self, counterparty: str, line_ids: Iterable[int]) -> int:
        """Remove lines from the worklist by marking them fully settled.

        No pool is drawn on and no history record is written.

        Returns:
            Number of lines written off
        """
        counterparty = _require_counterparty(counterparty)
        lines = self._load_selected_lines(counterparty, line_ids, None)
        with self.db.atomic():
            for line in lines:
                self.db.update_line_settlement(line.id, line.amount, True)
        logger.info("Wrote off %d line(s) for %s", len(lines), counterparty)
        return len(lines)

    def list_unsettled_lines(self, counterparty: Optional[str] = None) -> list[UnsettledLine]:
        """List counterparty lines with an outstanding amount, oldest first."""
        lines = []
        for line in self.db.list_counterparty_lines(counterparty=counterparty):
            if not line.line_type.is_counterparty_line:
                continue
            if unsettled_amount(line) > 0:
                lines.append(line)

        transactions = {
            txn.id: txn
            for txn in self.db.list_transactions_by_ids(line.transaction_id for line in lines)
        }
        result = []
        for line in lines:
            txn = transactions.get(line.transaction_id)
            result.append(
                UnsettledLine(
                    id=line.id,
                    transaction_id=line.transaction_id,
                    date=txn.date if txn is not None else None,
                    description=txn.description if txn is not None else "",
                    counterparty=line.counterparty,
                    line_type=line.line_type,
                    amount=line.amount,
                    settled_amount=line.settled_amount,
                    unsettled_amount=unsettled_amount(line),
                )
            )
        return result

    def worklist(self) -> list[CounterpartySummary]:
        """Group unsettled lines by counterparty.

        Ordered by the size of the net position, largest first. The net is
        for display only; settlement always works on selected lines.
        """
        asset_lines: dict[str, list[UnsettledLine]] = defaultdict(list)
        liability_lines: dict[str, list[UnsettledLine]] = defaultdict(list)
        for line in self.list_unsettled_lines():
            if line.line_type is LineType.ASSET:
                asset_lines[line.counterparty].append(line)
            else:
                liability_lines[line.counterparty].append(line)

        def by_date(line: UnsettledLine):
            return (line.date or date.min, line.id)

        summaries = []
        for name in set(asset_lines) | set(liability_lines):
            assets = sorted(asset_lines[name], key=by_date)
            liabilities = sorted(liability_lines[name], key=by_date)
            summaries.append(
                CounterpartySummary(
                    counterparty=name,
                    asset_lines=tuple(assets),
                    liability_lines=tuple(liabilities),
                    total_asset=sum(line.unsettled_amount for line in assets),
                    total_liability=sum(line.unsettled_amount for line in liabilities),
                )
            )
        summaries.sort(key=lambda s: (-abs(s.net_amount), s.counterparty))
        return summaries

    def list_counterparties(self) -> list[str]:
        """Counterparties with unsettled lines or money waiting in a pool."""
        names = {summary.counterparty for summary in self.worklist()}
        for balance in self.db.list_settlement_balances():
            if balance.receive_balance > 0 or balance.pay_balance > 0:
                names.add(balance.counterparty)
        return sorted(names)

    def list_history(
        self, counterparty: Optional[str] = None, limit: Optional[int] = DEFAULT_HISTORY_LIMIT
    ) -> list[Settlement]:
        """List settlement records with their items, newest first."""
        return self.db.list_settlements(counterparty=counterparty, limit=limit)
