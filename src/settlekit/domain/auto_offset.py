"""Automatic netting of new borrowings against outstanding advances."""

import logging
from datetime import date
from typing import Optional

from settlekit.database.base import Database
from settlekit.domain.classification import unsettled_amount
from settlekit.domain.entities import LineType
from settlekit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    line_changed,
    line_not_found,
)

logger = logging.getLogger(__name__)

AUTO_OFFSET_NOTE = "Auto-offset: {description}"


class AutoOffsetService:
    """Nets a counterparty's new liability against their unsettled asset lines."""

    def __init__(self, db: Database):
        """Initialize auto-offset service.

        Args:
            db: Database instance
        """
        self.db = db

    def offset_liability(self, line_id: int, offset_date: Optional[date] = None) -> Optional[int]:
        """Discharge outstanding advances to the liability's counterparty.

        The offset is the smaller of the liability's unsettled amount and the
        counterparty's total unsettled asset amount. Asset lines are consumed
        oldest first and the liability is settled by the same amount. No cash
        moves, so the counterparty's pools are not touched.

        Args:
            line_id: Newly recorded liability line
            offset_date: Date of the netting record (defaults to the
                transaction's date)

        Returns:
            ID of the netting settlement record, or None when nothing was offset

        Raises:
            NotFoundError: If the line does not exist
            ValidationError: If the line is not a liability with a counterparty
        """
        with self.db.atomic():
            liability = self.db.get_transaction_line(line_id)
            if liability is None:
                raise NotFoundError(line_not_found(line_id))
            if liability.line_type is not LineType.LIABILITY or not liability.counterparty:
                raise ValidationError(
                    f"Transaction line {line_id} is not a liability with a counterparty"
                )

            counterparty = liability.counterparty
            assets = [
                line
                for line in self.db.list_counterparty_lines(counterparty, LineType.ASSET)
                if unsettled_amount(line) > 0
            ]
            total_unsettled_assets = sum(unsettled_amount(line) for line in assets)
            offset = min(unsettled_amount(liability), total_unsettled_assets)
            if offset <= 0:
                logger.debug("No auto-offset for line %s (%s)", line_id, counterparty)
                return None

            transaction = self.db.get_transaction(liability.transaction_id)
            description = transaction.description if transaction is not None else ""
            if offset_date is None:
                offset_date = transaction.date if transaction is not None else date.today()

            settlement_id = self.db.create_settlement(
                date=offset_date,
                counterparty=counterparty,
                amount=0,
                note=AUTO_OFFSET_NOTE.format(description=description),
            )

            items: list[tuple[int, int]] = []
            remaining = offset
            for asset in assets:
                if remaining <= 0:
                    break
                to_settle = min(remaining, unsettled_amount(asset))
                if not self.db.apply_line_settlement(asset.id, to_settle):
                    raise ConflictError(line_changed(asset.id))
                items.append((asset.id, to_settle))
                remaining -= to_settle

            if not self.db.apply_line_settlement(liability.id, offset):
                raise ConflictError(line_changed(liability.id))
            items.append((liability.id, offset))
            self.db.create_settlement_items(settlement_id, items)

        logger.info(
            "Auto-offset %d for %s across %d asset line(s) (settlement %s)",
            offset,
            counterparty,
            len(items) - 1,
            settlement_id,
        )
        return settlement_id
