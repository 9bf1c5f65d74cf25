"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so string columns become the
closed enums the domain works with and nullable counters become ints.
"""

from settlekit.domain import entities as domain
from settlekit.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    TransactionLine as ORMTransactionLine,
    SettlementBalance as ORMSettlementBalance,
    Settlement as ORMSettlement,
    SettlementItem as ORMSettlementItem,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        owner=domain.AccountOwner(orm_account.owner),
        opening_balance=orm_account.opening_balance or 0,
        opening_date=orm_account.opening_date,
        current_balance=orm_account.current_balance or 0,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.CategoryType(orm_category.type),
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def line_to_domain(orm_line: ORMTransactionLine) -> domain.TransactionLine:
    """Convert SQLAlchemy TransactionLine model to domain entity."""
    return domain.TransactionLine(
        id=orm_line.id,
        transaction_id=orm_line.transaction_id,
        amount=orm_line.amount,
        line_type=domain.LineType(orm_line.line_type),
        category_id=orm_line.category_id,
        counterparty=orm_line.counterparty,
        is_settled=orm_line.is_settled,
        settled_amount=orm_line.settled_amount or 0,
        note=orm_line.note,
        created_at=orm_line.created_at,
        amortization_months=orm_line.amortization_months,
        amortization_start=orm_line.amortization_start,
        amortization_end=orm_line.amortization_end,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model (with lines) to domain entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        payment_date=orm_transaction.payment_date,
        description=orm_transaction.description or "",
        account_id=orm_transaction.account_id,
        total_amount=orm_transaction.total_amount or 0,
        is_cash_settled=orm_transaction.is_cash_settled,
        settled_amount=orm_transaction.settled_amount or 0,
        settlement_account_id=orm_transaction.settlement_account_id,
        settlement_date=orm_transaction.settlement_date,
        paid_by_other=orm_transaction.paid_by_other,
        created_at=orm_transaction.created_at,
        lines=tuple(line_to_domain(line) for line in orm_transaction.lines),
    )


def settlement_balance_to_domain(orm_balance: ORMSettlementBalance) -> domain.SettlementBalance:
    """Convert SQLAlchemy SettlementBalance model to domain entity."""
    return domain.SettlementBalance(
        id=orm_balance.id,
        counterparty=orm_balance.counterparty,
        receive_balance=orm_balance.receive_balance or 0,
        pay_balance=orm_balance.pay_balance or 0,
    )


def settlement_item_to_domain(orm_item: ORMSettlementItem) -> domain.SettlementItem:
    """Convert SQLAlchemy SettlementItem model to domain entity."""
    return domain.SettlementItem(
        id=orm_item.id,
        settlement_id=orm_item.settlement_id,
        transaction_line_id=orm_item.transaction_line_id,
        amount=orm_item.amount,
    )


def settlement_to_domain(orm_settlement: ORMSettlement) -> domain.Settlement:
    """Convert SQLAlchemy Settlement model (with items) to domain entity."""
    return domain.Settlement(
        id=orm_settlement.id,
        date=orm_settlement.date,
        counterparty=orm_settlement.counterparty,
        amount=orm_settlement.amount,
        note=orm_settlement.note,
        account_id=orm_settlement.account_id,
        created_at=orm_settlement.created_at,
        items=tuple(settlement_item_to_domain(item) for item in orm_settlement.items),
    )
