"""Classification of transactions and lines.

Everything here is a pure function of its arguments so the same rules are
applied by settlement, worklist and reporting code.
"""

import logging
from datetime import date
from typing import Collection, Iterable, Optional

from settlekit.domain.entities import (
    Bucket,
    Classification,
    LineType,
    NewLine,
    Transaction,
    TransactionLine,
)

logger = logging.getLogger(__name__)


def is_legacy_settled(line: TransactionLine) -> bool:
    """Return True for rows marked settled by flag only (no settled amount)."""
    return line.is_settled and line.settled_amount == 0


def unsettled_amount(line: TransactionLine) -> int:
    """Return the amount of a line still awaiting counterparty settlement.

    A line flagged settled with ``settled_amount == 0`` predates partial
    settlement tracking and counts as fully settled.
    """
    if is_legacy_settled(line):
        return 0
    return max(line.amount - line.settled_amount, 0)


def line_settlement_state(amount: int, settled_amount: int) -> tuple[int, bool]:
    """Clamp a line's settled amount and derive its settled flag."""
    settled_amount = min(max(settled_amount, 0), amount)
    return settled_amount, settled_amount >= amount


def bucket_for(inflow: int, outflow: int) -> Bucket:
    """Receivable only when inflow strictly exceeds outflow."""
    if inflow > outflow:
        return Bucket.RECEIVABLE
    return Bucket.PAYABLE


def flow_totals(lines: Iterable[TransactionLine | NewLine]) -> tuple[int, int]:
    """Return (inflow, outflow) for a set of lines."""
    inflow = 0
    outflow = 0
    for line in lines:
        if line.line_type.is_inflow:
            inflow += line.amount
        else:
            outflow += line.amount
    return inflow, outflow


def classify_lines(
    lines: Collection[TransactionLine | NewLine],
    known_category_ids: Optional[Collection[int]] = None,
) -> Classification:
    """Classify a line set as payable or receivable.

    Args:
        lines: Lines of one transaction
        known_category_ids: Category IDs that resolve. When given, lines that
            reference any other category produce a warning.

    Returns:
        Classification with the bucket, flow totals and integrity warnings
    """
    warnings: list[str] = []
    if not lines:
        warnings.append("transaction has no lines")

    if known_category_ids is not None:
        for line in lines:
            if line.category_id is not None and line.category_id not in known_category_ids:
                line_ref = getattr(line, "id", None)
                label = f"line {line_ref}" if line_ref is not None else "line"
                warnings.append(f"{label} references missing category {line.category_id}")

    inflow, outflow = flow_totals(lines)
    return Classification(
        bucket=bucket_for(inflow, outflow),
        inflow=inflow,
        outflow=outflow,
        warnings=tuple(warnings),
    )


def classify_transaction(
    transaction: Transaction,
    known_category_ids: Optional[Collection[int]] = None,
) -> Classification:
    """Classify a stored transaction, logging any integrity warnings."""
    result = classify_lines(transaction.lines, known_category_ids)
    for warning in result.warnings:
        logger.warning("Transaction %s: %s", transaction.id, warning)
    return result


def total_amount(lines: Iterable[TransactionLine | NewLine]) -> int:
    """Total of a transaction: sum of absolute line amounts."""
    return sum(abs(line.amount) for line in lines)


def is_cash_settled_at_save(
    accrual_date: date,
    payment_date: Optional[date],
    paid_by_other: bool,
    today: Optional[date] = None,
) -> bool:
    """Default cash-settled state when a transaction is saved.

    Paid-by-other transactions never move the user's own money and are
    settled immediately. Otherwise the payment must already have happened:
    a payment date on or before both the accrual date and today.
    """
    if paid_by_other:
        return True
    if payment_date is None:
        return False
    today = today or date.today()
    return payment_date <= accrual_date and payment_date <= today


def feeds_profit_and_loss(line_type: LineType) -> bool:
    """Only income and expense lines are reported in profit and loss."""
    return line_type in (LineType.INCOME, LineType.EXPENSE)
