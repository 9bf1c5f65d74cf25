"""Tests for CLI commands."""

from settlekit.cli.error_handling import hint_for
from settlekit.cli.main import cli
from settlekit.domain.errors import ConflictError, InsufficientBalanceError


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "counterparty" in result.output


def test_account_create_and_list(cli_runner, temp_db):
    result = _invoke(
        cli_runner, temp_db, "account", "create", "Main Bank", "--opening-balance", "50,000"
    )
    assert result.exit_code == 0
    assert "Created account 'Main Bank'" in result.output

    result = _invoke(cli_runner, temp_db, "account", "list")
    assert result.exit_code == 0
    assert "Main Bank" in result.output
    assert "¥50,000" in result.output


def test_duplicate_account_reports_error(cli_runner, temp_db, sample_account):
    result = _invoke(cli_runner, temp_db, "account", "create", "Main Bank")
    assert result.exit_code == 1
    assert "Error: Account with name 'Main Bank' already exists" in result.output


def test_add_paid_transaction_moves_balance(cli_runner, temp_db, sample_account, sample_categories):
    result = _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "add",
        "--date",
        "2024-01-10",
        "--description",
        "Lunch",
        "--line",
        "expense:1200:Food",
        "--account",
        "Main Bank",
        "--payment-date",
        "2024-01-10",
    )
    assert result.exit_code == 0
    assert "Created transaction 1 (¥1,200, settled)" in result.output

    result = _invoke(cli_runner, temp_db, "account", "list")
    assert "¥48,800" in result.output


def test_add_rejects_unknown_category(cli_runner, temp_db):
    result = _invoke(
        cli_runner, temp_db, "transaction", "add", "--line", "expense:100:Nope"
    )
    assert result.exit_code == 1
    assert "Category 'Nope' not found" in result.output


def test_add_rejects_bad_line_spec(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "transaction", "add", "--line", "gift:100")
    assert result.exit_code == 1
    assert "Invalid line type" in result.output


def test_cash_settle_batch(cli_runner, temp_db, sample_account):
    for amount in ("3000", "7000"):
        _invoke(
            cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", f"expense:{amount}"
        )

    result = _invoke(cli_runner, temp_db, "cash", "pending")
    assert "To pay (¥10,000)" in result.output

    result = _invoke(cli_runner, temp_db, "cash", "settle", "1", "2", "--account", "Main Bank")
    assert result.exit_code == 0
    assert "Settled 2 transaction(s) for ¥10,000" in result.output

    result = _invoke(cli_runner, temp_db, "account", "list")
    assert "¥40,000" in result.output


def test_cash_settle_requires_account(cli_runner, temp_db, sample_account):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:3000")

    result = _invoke(cli_runner, temp_db, "cash", "settle", "1")

    assert result.exit_code == 1
    assert "A cash account must be selected" in result.output


def test_cash_partial_over_remaining(cli_runner, temp_db, sample_account):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:10000")

    result = _invoke(cli_runner, temp_db, "cash", "partial", "1", "4000", "--account", "1")
    assert result.exit_code == 0
    assert "settled ¥4,000 of ¥10,000" in result.output

    result = _invoke(cli_runner, temp_db, "cash", "partial", "1", "7000", "--account", "1")
    assert result.exit_code == 1
    assert "only ¥6,000 remains" in result.output


def test_counterparty_settle_rejected(cli_runner, temp_db):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "asset:3000::Alex")
    _invoke(cli_runner, temp_db, "counterparty", "deposit", "Alex", "2000")

    result = _invoke(cli_runner, temp_db, "counterparty", "settle", "Alex", "1")

    assert result.exit_code == 1
    assert "insufficient receivable balance: need ¥3,000, have ¥2,000" in result.output

    result = _invoke(cli_runner, temp_db, "counterparty", "list")
    assert "Alex: net ¥3,000" in result.output
    assert "received ¥2,000" in result.output


def test_counterparty_deposit_then_settle(cli_runner, temp_db):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "asset:3000::Alex")
    _invoke(cli_runner, temp_db, "counterparty", "deposit", "Alex", "3000")

    result = _invoke(cli_runner, temp_db, "counterparty", "settle", "Alex", "1")
    assert result.exit_code == 0

    result = _invoke(cli_runner, temp_db, "counterparty", "list")
    assert "Nothing outstanding." in result.output

    result = _invoke(cli_runner, temp_db, "counterparty", "history", "--name", "Alex")
    assert "settle 1 line(s)" in result.output
    assert "receive" in result.output


def test_paid_by_other_offsets_advance(cli_runner, temp_db):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-05", "--line", "asset:5000::Sam")

    result = _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "add",
        "--date",
        "2024-01-10",
        "--description",
        "Dinner",
        "--line",
        "expense:8000",
        "--paid-by",
        "Sam",
    )
    assert result.exit_code == 0
    assert "settled" in result.output

    result = _invoke(cli_runner, temp_db, "counterparty", "list")
    assert "Sam: net ¥-3,000" in result.output


def test_report_pl(cli_runner, temp_db, sample_categories):
    _invoke(
        cli_runner, temp_db, "transaction", "add", "--date", "2024-01-25", "--line", "income:300000:Salary"
    )
    _invoke(
        cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:5000:Food"
    )

    result = _invoke(cli_runner, temp_db, "report", "pl", "--month", "2024-01")

    assert result.exit_code == 0
    assert "Profit and loss for 2024-01" in result.output
    assert "Salary" in result.output
    assert "Net income: ¥295,000" in result.output


def test_transaction_show(cli_runner, temp_db, sample_categories):
    _invoke(
        cli_runner,
        temp_db,
        "transaction",
        "add",
        "--date",
        "2024-01-10",
        "--description",
        "Groceries",
        "--line",
        "expense:1200:Food",
        "--line",
        "asset:800::Alex",
    )

    result = _invoke(cli_runner, temp_db, "transaction", "show", "1")

    assert result.exit_code == 0
    assert "Transaction 1: Groceries" in result.output
    assert "Bucket:       payable" in result.output
    assert "@Alex" in result.output


def test_account_resync(cli_runner, temp_db, sample_account):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:3000")
    _invoke(cli_runner, temp_db, "cash", "settle", "1", "--account", "Main Bank")
    _invoke(cli_runner, temp_db, "account", "set-balance", "Main Bank", "0")

    result = _invoke(cli_runner, temp_db, "account", "resync")

    assert result.exit_code == 0
    assert "Main Bank: ¥0 -> ¥47,000" in result.output


def test_hint_for_known_errors():
    assert "counterparty deposit" in hint_for(InsufficientBalanceError("short"))
    assert hint_for(ConflictError("changed")) is None
    assert hint_for(ValueError("plain")) is None


def test_missing_account_error_carries_hint(cli_runner, temp_db, sample_account):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:3000")

    result = _invoke(cli_runner, temp_db, "cash", "settle", "1")

    assert result.exit_code == 1
    assert "Hint: Pass --account" in result.output


def test_short_pool_error_carries_hint(cli_runner, temp_db):
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "asset:3000::Alex")

    result = _invoke(cli_runner, temp_db, "counterparty", "settle", "Alex", "1")

    assert result.exit_code == 1
    assert "Error: insufficient receivable balance" in result.output
    assert "Hint: Record the money first" in result.output


def test_cash_partial_through_second_account_rejected(cli_runner, temp_db, sample_account):
    _invoke(cli_runner, temp_db, "account", "create", "Wallet")
    _invoke(cli_runner, temp_db, "transaction", "add", "--date", "2024-01-10", "--line", "expense:6000")
    _invoke(cli_runner, temp_db, "cash", "partial", "1", "4000", "--account", "Main Bank")

    result = _invoke(cli_runner, temp_db, "cash", "partial", "1", "1000", "--account", "Wallet")

    assert result.exit_code == 1
    assert "unsettle it before settling through another account" in result.output
    assert "Hint:" not in result.output
