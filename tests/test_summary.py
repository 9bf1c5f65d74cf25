"""Tests for profit-and-loss summary."""

from datetime import date, datetime

from settlekit.domain.entities import LineType, NewLine, TransactionLine
from settlekit.domain.summary import UNCATEGORIZED, amount_for_month, month_bounds


def _amortized_line(amount, months, start, end):
    return TransactionLine(
        id=1,
        transaction_id=1,
        amount=amount,
        line_type=LineType.EXPENSE,
        category_id=None,
        counterparty=None,
        is_settled=False,
        settled_amount=0,
        note=None,
        created_at=datetime(2024, 1, 1),
        amortization_months=months,
        amortization_start=start,
        amortization_end=end,
    )


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


def test_amortized_share_rounds_half_up():
    line = _amortized_line(10000, 3, date(2024, 1, 1), date(2024, 3, 31))
    start, end = month_bounds(2024, 2)
    assert amount_for_month(line, date(2024, 1, 15), start, end) == 3333

    line = _amortized_line(5, 2, date(2024, 1, 1), date(2024, 2, 29))
    assert amount_for_month(line, date(2024, 1, 15), start, end) == 3


def test_amortized_share_outside_window():
    line = _amortized_line(12000, 12, date(2024, 1, 1), date(2024, 12, 31))
    start, end = month_bounds(2025, 1)
    assert amount_for_month(line, date(2024, 1, 1), start, end) == 0


def test_profit_and_loss_by_category(transaction_service, summary_service, sample_categories):
    transaction_service.create_transaction(
        date(2024, 1, 25),
        "Salary",
        [NewLine(amount=300000, line_type=LineType.INCOME, category_id=sample_categories["Salary"])],
    )
    transaction_service.create_transaction(
        date(2024, 1, 10),
        "Groceries",
        [
            NewLine(amount=5000, line_type=LineType.EXPENSE, category_id=sample_categories["Food"]),
            NewLine(amount=2000, line_type=LineType.ASSET, counterparty="Alex"),
        ],
    )
    transaction_service.create_transaction(
        date(2024, 1, 1),
        "Rent",
        [NewLine(amount=80000, line_type=LineType.EXPENSE, category_id=sample_categories["Rent"])],
    )
    transaction_service.create_transaction(
        date(2024, 2, 3),
        "Next month",
        [NewLine(amount=999, line_type=LineType.EXPENSE, category_id=sample_categories["Food"])],
    )

    report = summary_service.profit_and_loss(2024, 1)

    assert [(row.category_name, row.amount) for row in report.income] == [("Salary", 300000)]
    assert [(row.category_name, row.amount) for row in report.expense] == [
        ("Rent", 80000),
        ("Food", 5000),
    ]
    assert report.total_expense == 85000
    assert report.net_income == 215000


def test_profit_and_loss_spreads_amortized_lines(transaction_service, summary_service, sample_categories):
    transaction_service.create_transaction(
        date(2024, 1, 15),
        "Insurance",
        [
            NewLine(
                amount=12000,
                line_type=LineType.EXPENSE,
                category_id=sample_categories["Rent"],
                amortization_months=12,
                amortization_start=date(2024, 1, 1),
                amortization_end=date(2024, 12, 31),
            )
        ],
    )

    for month in (1, 6, 12):
        report = summary_service.profit_and_loss(2024, month)
        assert report.total_expense == 1000
    assert summary_service.profit_and_loss(2025, 1).total_expense == 0


def test_profit_and_loss_without_category(transaction_service, summary_service):
    transaction_service.create_transaction(
        date(2024, 1, 10), "Misc", [NewLine(amount=700, line_type=LineType.EXPENSE)]
    )

    report = summary_service.profit_and_loss(2024, 1)

    assert [(row.category_id, row.category_name) for row in report.expense] == [
        (None, UNCATEGORIZED)
    ]


def test_missing_category_reported_uncategorized(temp_db, summary_service, caplog):
    txn_id = temp_db.create_transaction(date(2024, 1, 10), "Orphan", total_amount=400)
    temp_db.add_transaction_lines(
        txn_id, [NewLine(amount=400, line_type=LineType.EXPENSE, category_id=321)]
    )

    with caplog.at_level("WARNING", logger="settlekit.domain.summary"):
        report = summary_service.profit_and_loss(2024, 1)

    assert [(row.category_name, row.amount) for row in report.expense] == [(UNCATEGORIZED, 400)]
    assert "missing category 321" in caplog.text
