"""Shared pytest fixtures for settlekit tests."""

import os
import tempfile
from datetime import date

import pytest

from settlekit.database.factories import create_sqlite_database
from settlekit.domain.account import AccountService
from settlekit.domain.auto_offset import AutoOffsetService
from settlekit.domain.cash_settlement import CashSettlementService
from settlekit.domain.category import CategoryService
from settlekit.domain.counterparty import CounterpartyLedgerService
from settlekit.domain.entities import CategoryType, LineType, NewLine
from settlekit.domain.summary import SummaryService
from settlekit.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def cash_service(temp_db):
    """Create a CashSettlementService with a temporary database."""
    return CashSettlementService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a CounterpartyLedgerService with a temporary database."""
    return CounterpartyLedgerService(temp_db)


@pytest.fixture
def offset_service(temp_db):
    """Create an AutoOffsetService with a temporary database."""
    return AutoOffsetService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a bank account holding 50,000."""
    account_id = account_service.create_account(name="Main Bank", opening_balance=50000)
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create a few categories and return their IDs by name."""
    return {
        "Food": category_service.create_category("Food", CategoryType.EXPENSE),
        "Rent": category_service.create_category("Rent", CategoryType.EXPENSE),
        "Salary": category_service.create_category("Salary", CategoryType.INCOME),
    }


@pytest.fixture
def make_transaction(transaction_service):
    """Factory for single-line transactions."""

    def _make(
        amount,
        line_type=LineType.EXPENSE,
        counterparty=None,
        txn_date=date(2024, 1, 10),
        description="Test",
        **kwargs,
    ):
        line = NewLine(amount=amount, line_type=line_type, counterparty=counterparty)
        return transaction_service.create_transaction(
            date=txn_date, description=description, lines=[line], **kwargs
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
