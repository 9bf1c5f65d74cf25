"""Domain model entities for settlekit.

These are pure data classes representing ledger concepts, independent of
database schema. Amounts are whole currency units held as ``int``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kind of cash or credit holding point."""

    BANK = "bank"
    CARD = "card"
    CASH = "cash"
    POINTS = "points"
    INVESTMENT = "investment"


class AccountOwner(str, Enum):
    """Who an account belongs to."""

    SELF = "self"
    SHARED = "shared"


class CategoryType(str, Enum):
    """Reporting category kind."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class LineType(str, Enum):
    """Economic effect of a transaction line.

    ``income`` and ``liability`` move money toward the user; ``expense`` and
    ``asset`` move money away from the user.
    """

    INCOME = "income"
    EXPENSE = "expense"
    ASSET = "asset"
    LIABILITY = "liability"

    @property
    def is_inflow(self) -> bool:
        return self in (LineType.INCOME, LineType.LIABILITY)

    @property
    def is_counterparty_line(self) -> bool:
        """Asset and liability lines are tracked per counterparty."""
        return self in (LineType.ASSET, LineType.LIABILITY)


class Bucket(str, Enum):
    """Settlement worklist bucket of a transaction."""

    PAYABLE = "payable"
    RECEIVABLE = "receivable"

    @property
    def sign(self) -> int:
        """Sign of the cash-account movement when settling this bucket."""
        return -1 if self is Bucket.PAYABLE else 1


class CashEventType(str, Enum):
    """Direction of a counterparty deposit or payment."""

    RECEIVE = "receive"
    PAY = "pay"

    @property
    def sign(self) -> int:
        return 1 if self is CashEventType.RECEIVE else -1

    @property
    def line_type(self) -> LineType:
        """Line type whose pool this event feeds."""
        return LineType.ASSET if self is CashEventType.RECEIVE else LineType.LIABILITY


@dataclass(frozen=True)
class Account:
    """Cash or credit account domain entity."""

    id: int
    name: str
    type: AccountType
    owner: AccountOwner
    opening_balance: int
    opening_date: Optional[date]
    current_balance: int
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    type: CategoryType
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class TransactionLine:
    """One component of a transaction's economic effect."""

    id: int
    transaction_id: int
    amount: int
    line_type: LineType
    category_id: Optional[int]
    counterparty: Optional[str]
    is_settled: bool
    settled_amount: int
    note: Optional[str]
    created_at: datetime
    amortization_months: Optional[int] = None
    amortization_start: Optional[date] = None
    amortization_end: Optional[date] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity with its lines."""

    id: int
    date: date
    payment_date: Optional[date]
    description: str
    account_id: Optional[int]
    total_amount: int
    is_cash_settled: bool
    settled_amount: int
    settlement_account_id: Optional[int]
    settlement_date: Optional[date]
    paid_by_other: bool
    created_at: datetime
    lines: tuple[TransactionLine, ...] = ()

    @property
    def remaining_amount(self) -> int:
        return self.total_amount - self.settled_amount


@dataclass(frozen=True)
class SettlementBalance:
    """Per-counterparty liquidity pools."""

    id: int
    counterparty: str
    receive_balance: int
    pay_balance: int

    def available_for(self, line_type: LineType) -> int:
        """Pool that can be applied against lines of ``line_type``."""
        if line_type is LineType.ASSET:
            return self.receive_balance
        if line_type is LineType.LIABILITY:
            return self.pay_balance
        raise ValueError(f"Line type '{line_type.value}' has no settlement pool")


@dataclass(frozen=True)
class SettlementItem:
    """Amount of one transaction line settled by a settlement record."""

    id: int
    settlement_id: int
    transaction_line_id: int
    amount: int


@dataclass(frozen=True)
class Settlement:
    """Append-only settlement history record.

    ``amount`` is positive for cash received, negative for cash paid and 0
    for netting existing lines without new cash movement.
    """

    id: int
    date: date
    counterparty: str
    amount: int
    note: Optional[str]
    account_id: Optional[int]
    created_at: datetime
    items: tuple[SettlementItem, ...] = ()


@dataclass(frozen=True)
class NewLine:
    """User-entered line for creating or editing a transaction."""

    amount: int
    line_type: LineType
    category_id: Optional[int] = None
    counterparty: Optional[str] = None
    note: Optional[str] = None
    amortization_months: Optional[int] = None
    amortization_start: Optional[date] = None
    amortization_end: Optional[date] = None


@dataclass(frozen=True)
class Classification:
    """Result of classifying a transaction's lines."""

    bucket: Bucket
    inflow: int
    outflow: int
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnsettledLine:
    """Counterparty line with an outstanding amount."""

    id: int
    transaction_id: int
    date: Optional[date]
    description: str
    counterparty: str
    line_type: LineType
    amount: int
    settled_amount: int
    unsettled_amount: int


@dataclass(frozen=True)
class CounterpartySummary:
    """Worklist entry grouping a counterparty's unsettled lines."""

    counterparty: str
    asset_lines: tuple[UnsettledLine, ...]
    liability_lines: tuple[UnsettledLine, ...]
    total_asset: int
    total_liability: int

    @property
    def net_amount(self) -> int:
        """Positive when the counterparty owes the user on balance."""
        return self.total_asset - self.total_liability


@dataclass(frozen=True)
class OverdueTransaction:
    """Unsettled transaction whose payment date has passed."""

    transaction: Transaction
    account_name: str
    days_overdue: int

    @property
    def remaining_amount(self) -> int:
        return self.transaction.remaining_amount


@dataclass(frozen=True)
class CategoryTotal:
    """Profit-and-loss amount for one category."""

    category_id: Optional[int]
    category_name: str
    amount: int


@dataclass(frozen=True)
class ProfitAndLoss:
    """Monthly profit-and-loss aggregation."""

    year: int
    month: int
    income: tuple[CategoryTotal, ...] = field(default_factory=tuple)
    expense: tuple[CategoryTotal, ...] = field(default_factory=tuple)

    @property
    def total_income(self) -> int:
        return sum(c.amount for c in self.income)

    @property
    def total_expense(self) -> int:
        return sum(c.amount for c in self.expense)

    @property
    def net_income(self) -> int:
        return self.total_income - self.total_expense
