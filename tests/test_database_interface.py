"""Tests for the Database interface and its SQLAlchemy implementation."""

from datetime import date, datetime

import pytest

from settlekit.domain import entities
from settlekit.domain.entities import LineType, NewLine


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        account_id = temp_db.create_account(name="Main Bank", type="bank", opening_balance=100)

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.type is entities.AccountType.BANK
        assert account.current_balance == 100
        assert isinstance(account.created_at, datetime)

    def test_transaction_lines_returned_in_order(self, temp_db):
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Split", total_amount=300)
        line_ids = temp_db.add_transaction_lines(
            txn_id,
            [
                NewLine(amount=100, line_type=LineType.EXPENSE),
                NewLine(amount=200, line_type=LineType.ASSET, counterparty="Alex"),
            ],
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert [line.id for line in txn.lines] == line_ids
        assert txn.lines[1].line_type is LineType.ASSET

    def test_list_counterparty_lines_skips_plain_lines(self, temp_db):
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Split", total_amount=300)
        temp_db.add_transaction_lines(
            txn_id,
            [
                NewLine(amount=100, line_type=LineType.EXPENSE),
                NewLine(amount=200, line_type=LineType.ASSET, counterparty="Alex"),
            ],
        )

        lines = temp_db.list_counterparty_lines()

        assert [line.counterparty for line in lines] == ["Alex"]
        assert temp_db.list_counterparty_lines("Alex", LineType.LIABILITY) == []


class TestBalanceAdjustments:
    """Relative balance updates."""

    def test_adjust_account_balance(self, temp_db):
        account_id = temp_db.create_account(name="Main Bank", type="bank", opening_balance=50000)

        assert temp_db.adjust_account_balance(account_id, -3000) == 47000
        assert temp_db.adjust_account_balance(account_id, 500) == 47500
        assert temp_db.get_account(account_id).current_balance == 47500

    def test_adjust_unknown_account(self, temp_db):
        with pytest.raises(ValueError):
            temp_db.adjust_account_balance(99, 10)

    def test_adjust_settlement_balance_creates_row(self, temp_db):
        balance = temp_db.adjust_settlement_balance("Alex", receive_delta=2000)
        assert (balance.receive_balance, balance.pay_balance) == (2000, 0)

        balance = temp_db.adjust_settlement_balance("Alex", receive_delta=-500, pay_delta=300)
        assert (balance.receive_balance, balance.pay_balance) == (1500, 300)

    def test_upsert_settlement_balance(self, temp_db):
        temp_db.upsert_settlement_balance("Sam", 100, 200)
        temp_db.upsert_settlement_balance("Sam", 5, 6)

        balance = temp_db.get_settlement_balance("Sam")
        assert (balance.receive_balance, balance.pay_balance) == (5, 6)
        assert len(temp_db.list_settlement_balances()) == 1


class TestConditionalUpdates:
    """Relative updates that refuse to overdraw."""

    def _line(self, temp_db, amount=3000, line_type=LineType.ASSET):
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Loan", total_amount=0)
        (line_id,) = temp_db.add_transaction_lines(
            txn_id, [NewLine(amount=amount, line_type=line_type, counterparty="Alex")]
        )
        return line_id

    def test_draw_settlement_balance_within_pool(self, temp_db):
        temp_db.adjust_settlement_balance("Alex", receive_delta=2000, pay_delta=700)

        assert temp_db.draw_settlement_balance("Alex", receive_amount=2000) is True

        balance = temp_db.get_settlement_balance("Alex")
        assert (balance.receive_balance, balance.pay_balance) == (0, 700)

    def test_draw_settlement_balance_refuses_overdraw(self, temp_db):
        temp_db.adjust_settlement_balance("Alex", receive_delta=2000)

        assert temp_db.draw_settlement_balance("Alex", receive_amount=2500) is False
        assert temp_db.draw_settlement_balance("Alex", pay_amount=1) is False
        assert temp_db.draw_settlement_balance("Nobody", receive_amount=1) is False

        assert temp_db.get_settlement_balance("Alex").receive_balance == 2000

    def test_apply_line_settlement_stays_within_amount(self, temp_db):
        line_id = self._line(temp_db)

        assert temp_db.apply_line_settlement(line_id, 1000) is True
        assert temp_db.apply_line_settlement(line_id, 2500) is False
        assert temp_db.apply_line_settlement(line_id, 2000) is True

        line = temp_db.get_transaction_line(line_id)
        assert (line.settled_amount, line.is_settled) == (3000, True)

    def test_apply_line_settlement_gives_back(self, temp_db):
        line_id = self._line(temp_db)
        temp_db.apply_line_settlement(line_id, 3000)

        assert temp_db.apply_line_settlement(line_id, -1000) is True
        assert temp_db.apply_line_settlement(line_id, -2500) is False

        line = temp_db.get_transaction_line(line_id)
        assert (line.settled_amount, line.is_settled) == (2000, False)

    def test_apply_transaction_settlement_keeps_account(self, temp_db):
        first = temp_db.create_account(name="Wallet A", type="cash")
        second = temp_db.create_account(name="Wallet B", type="cash")
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Rent", total_amount=6000)

        assert temp_db.apply_transaction_settlement(txn_id, 4000, first, date(2024, 1, 5)) is True
        assert temp_db.apply_transaction_settlement(txn_id, 1000, second, date(2024, 1, 6)) is False
        assert temp_db.apply_transaction_settlement(txn_id, 3000, first, date(2024, 1, 6)) is False
        assert temp_db.apply_transaction_settlement(txn_id, 2000, first, date(2024, 1, 7)) is True

        txn = temp_db.get_transaction(txn_id)
        assert txn.settled_amount == 6000
        assert txn.is_cash_settled is True
        assert txn.settlement_account_id == first
        assert txn.settlement_date == date(2024, 1, 7)


class TestSettlementItems:
    """Looking up and trimming settlement items by line."""

    def test_list_settlements_for_lines(self, temp_db):
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Loans", total_amount=0)
        first, second, third = temp_db.add_transaction_lines(
            txn_id,
            [NewLine(amount=100 * n, line_type=LineType.ASSET, counterparty="Alex") for n in (1, 2, 3)],
        )
        older = temp_db.create_settlement(date(2024, 1, 2), "Alex", 0)
        temp_db.create_settlement_items(older, [(first, 100), (second, 200)])
        newer = temp_db.create_settlement(date(2024, 1, 3), "Alex", 0)
        temp_db.create_settlement_items(newer, [(third, 300)])

        assert [s.id for s in temp_db.list_settlements_for_lines([second, third])] == [older, newer]
        assert [s.id for s in temp_db.list_settlements_for_lines([first, second])] == [older]
        assert temp_db.list_settlements_for_lines([]) == []

    def test_delete_settlement_items_keeps_record(self, temp_db):
        txn_id = temp_db.create_transaction(date(2024, 1, 1), "Loans", total_amount=0)
        first, second = temp_db.add_transaction_lines(
            txn_id,
            [NewLine(amount=100, line_type=LineType.ASSET, counterparty="Alex")] * 2,
        )
        settlement_id = temp_db.create_settlement(date(2024, 1, 2), "Alex", 0)
        item_ids = temp_db.create_settlement_items(settlement_id, [(first, 100), (second, 100)])

        temp_db.delete_settlement_items(item_ids[:1])

        record = temp_db.get_settlement(settlement_id)
        assert [item.transaction_line_id for item in record.items] == [second]


class TestAtomic:
    """All-or-nothing write blocks."""

    def test_atomic_commits_on_success(self, temp_db):
        with temp_db.atomic():
            account_id = temp_db.create_account(name="Main Bank", type="bank")
            temp_db.adjust_account_balance(account_id, 100)

        temp_db.disconnect()
        assert temp_db.get_account(account_id).current_balance == 100

    def test_atomic_rolls_back_every_write(self, temp_db):
        account_id = temp_db.create_account(name="Main Bank", type="bank", opening_balance=1000)

        with pytest.raises(RuntimeError):
            with temp_db.atomic():
                temp_db.adjust_account_balance(account_id, -400)
                temp_db.create_settlement(date(2024, 1, 1), "Alex", 400)
                raise RuntimeError("boom")

        assert temp_db.get_account(account_id).current_balance == 1000
        assert temp_db.list_settlements() == []

    def test_nested_atomic_joins_outer_block(self, temp_db):
        account_id = temp_db.create_account(name="Main Bank", type="bank", opening_balance=1000)

        with pytest.raises(RuntimeError):
            with temp_db.atomic():
                with temp_db.atomic():
                    temp_db.adjust_account_balance(account_id, -400)
                raise RuntimeError("boom")

        assert temp_db.get_account(account_id).current_balance == 1000

    def test_failed_service_call_writes_nothing(self, temp_db, transaction_service, sample_account):
        """A missing category inside the lines aborts the whole create."""
        with pytest.raises(ValueError):
            with temp_db.atomic():
                temp_db.create_transaction(date(2024, 1, 1), "Half written", total_amount=10)
                transaction_service.create_transaction(
                    date(2024, 1, 1),
                    "Bad",
                    [NewLine(amount=10, line_type=LineType.EXPENSE, category_id=77)],
                )

        assert temp_db.list_transactions() == []
