"""Profit-and-loss aggregation domain service."""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from dateutil.relativedelta import relativedelta

from settlekit.database.base import Database
from settlekit.domain.classification import feeds_profit_and_loss
from settlekit.domain.entities import (
    CategoryTotal,
    LineType,
    ProfitAndLoss,
    TransactionLine,
)

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a month."""
    start = date(year, month, 1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def is_amortized(line: TransactionLine) -> bool:
    """True when a line is spread over several reporting months."""
    return (
        line.amortization_months is not None
        and line.amortization_months > 1
        and line.amortization_start is not None
        and line.amortization_end is not None
    )


def amount_for_month(
    line: TransactionLine, transaction_date: date, month_start: date, month_end: date
) -> int:
    """Amount a line contributes to one month's profit and loss.

    Amortized lines contribute an equal monthly share to every month that
    overlaps their window; other lines count in full in their accrual month.
    """
    if is_amortized(line):
        if line.amortization_start <= month_end and line.amortization_end >= month_start:
            share = Decimal(line.amount) / line.amortization_months
            return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return 0
    if month_start <= transaction_date <= month_end:
        return line.amount
    return 0


class SummaryService:
    """Service for building profit-and-loss reports."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def profit_and_loss(self, year: int, month: int) -> ProfitAndLoss:
        """Aggregate income and expense lines by category for one month.

        Asset and liability lines are never included. Lines whose category
        no longer exists are reported as uncategorized.

        Args:
            year: Report year
            month: Report month (1-12)

        Returns:
            ProfitAndLoss with per-category totals sorted by amount, largest first
        """
        month_start, month_end = month_bounds(year, month)
        categories = {cat.id: cat for cat in self.db.list_categories()}
        totals: dict[LineType, dict[Optional[int], int]] = {
            LineType.INCOME: defaultdict(int),
            LineType.EXPENSE: defaultdict(int),
        }

        for txn in self.db.list_transactions():
            for line in txn.lines:
                if not feeds_profit_and_loss(line.line_type):
                    continue
                amount = amount_for_month(line, txn.date, month_start, month_end)
                if amount == 0:
                    continue
                category_id = line.category_id
                if category_id is not None and category_id not in categories:
                    logger.warning(
                        "Line %s references missing category %s; reported as %s",
                        line.id,
                        category_id,
                        UNCATEGORIZED,
                    )
                    category_id = None
                totals[line.line_type][category_id] += amount

        def to_rows(amounts: dict[Optional[int], int]) -> tuple[CategoryTotal, ...]:
            rows = [
                CategoryTotal(
                    category_id=category_id,
                    category_name=(
                        categories[category_id].name if category_id is not None else UNCATEGORIZED
                    ),
                    amount=amount,
                )
                for category_id, amount in amounts.items()
            ]
            rows.sort(key=lambda row: (-row.amount, row.category_name))
            return tuple(rows)

        return ProfitAndLoss(
            year=year,
            month=month,
            income=to_rows(totals[LineType.INCOME]),
            expense=to_rows(totals[LineType.EXPENSE]),
        )
