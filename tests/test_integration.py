"""Integration tests for end-to-end workflows."""

import pytest

from dreledger.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def invoke(*args, db_path=None):
        return cli_runner.invoke(cli, ["--db-path", db_path or temp_db.database_path, *args])

    return invoke


def extract_id(output, marker):
    """Return the token that follows marker in CLI output."""
    for line in output.split("\n"):
        if marker in line:
            return line.split(marker, 1)[1].split()[0].strip("()")
    return None


@pytest.fixture
def ledger(run):
    """Set up a family ledger through the CLI."""
    commands = [
        ("category", "create", "Salary", "--group", "operating_revenue", "--kind", "income"),
        ("category", "create", "Groceries", "--group", "Survival living cost"),
        ("institution", "create", "Itau", "--kind", "bank", "--entity", "fam", "--id", "inst-itau"),
        ("institution", "create", "XP", "--kind", "broker", "--entity", "fam", "--id", "inst-xp"),
        ("card", "create", "Black", "--brand", "Visa", "--debit-institution", "Itau", "--due-day", "10"),
        (
            "add", "--institution", "Itau", "--direction", "in", "--amount", "5000",
            "--category", "Salary", "--date", "2026-01-05", "--description", "January salary",
        ),
        (
            "card", "purchase", "--card", "Black", "--amount", "1200", "--category", "Groceries",
            "--date", "2026-01-15", "--installments", "12", "--description", "tv",
        ),
        ("transfer", "--from", "Itau", "--to", "XP", "--amount", "1000", "--date", "2026-01-06"),
        ("invest", "create", "CDB", "--institution", "XP", "--id", "asset-cdb"),
        (
            "invest", "close", "--asset", "CDB", "--month", "12", "--year", "2025",
            "--balance", "1000", "--contributions", "1000",
        ),
        ("invest", "close", "--asset", "CDB", "--month", "1", "--year", "2026", "--balance", "1010"),
    ]
    for args in commands:
        result = run(*args)
        assert result.exit_code == 0, (args, result.output)

    result = run("pay-invoice", "--card", "Black", "--amount", "100", "--date", "2026-01-20")
    assert result.exit_code == 0
    return {"payment_id": extract_id(result.output, "Recorded invoice payment ")}


def test_accrual_report(run, ledger):
    """The card purchase counts in full in the purchase month."""
    result = run("report", "dre", "--month", "1", "--year", "2026", "--view", "accrual")

    assert result.exit_code == 0
    assert "DRE Jan 2026 (accrual basis)" in result.output
    assert "5,000.00" in result.output
    assert "-1,200.00" in result.output
    assert "24.0%" in result.output
    assert "3,800.00" in result.output
    assert "3,810.00" in result.output


def test_cash_report(run, ledger):
    """Only the first installment is due in January; the payment is not an expense."""
    result = run("report", "dre", "--month", "1", "--year", "2026", "--view", "cash")

    assert result.exit_code == 0
    assert "(cash basis)" in result.output
    assert "4,900.00" in result.output
    assert "4,910.00" in result.output
    assert "-1,200.00" not in result.output


def test_detail_report(run, ledger):
    result = run(
        "report", "dre", "--month", "1", "--year", "2026", "--view", "accrual", "--detail"
    )

    assert result.exit_code == 0
    assert "Groceries" in result.output
    assert "2026-01-15" in result.output
    assert "TV" in result.output
    assert "[Black]" in result.output
    assert "Yield 01/2026" in result.output


def test_year_over_year_report(run, ledger):
    result = run("report", "dre", "--year", "2026", "--month", "6", "--window", "year-over-year")

    assert result.exit_code == 0
    assert "DRE 2026 vs 2025" in result.output
    assert "Var." in result.output
    assert "n/a" in result.output
    assert "-1,200.00" in result.output


def test_entity_filter(run, ledger):
    result = run("report", "dre", "--month", "1", "--year", "2026", "--entity", "nobody")

    assert result.exit_code == 0
    assert "entity nobody" in result.output
    assert "5,000.00" not in result.output


def test_trend(run, ledger):
    result = run("report", "trend", "--month", "3", "--year", "2026", "--months", "3")

    assert result.exit_code == 0
    lines = [line for line in result.output.split("\n") if line.strip()]
    assert lines[0].startswith("Jan 2026") and lines[0].endswith("4,900.00")
    assert lines[1].startswith("Feb 2026") and lines[1].endswith("-100.00")
    assert lines[2].startswith("Mar 2026")


def test_invoice_reconciliation(run, ledger):
    result = run("card", "invoices", "--card", "Black")
    assert result.exit_code == 0
    assert "2026-01" in result.output
    assert "open" in result.output

    result = run(
        "card", "reconcile", "--card", "Black", "--month", "2026-01",
        "--payment", ledger["payment_id"],
    )
    assert result.exit_code == 0
    assert "Invoice 2026-01 reconciled (1 installment(s) marked paid)" in result.output

    result = run("card", "invoices", "--card", "Black", "--items")
    january = [line for line in result.output.split("\n") if line.startswith("2026-01")]
    assert january[0].endswith("paid")
    assert "1/12" in result.output


def test_institution_balances(run, ledger):
    result = run("institution", "list")

    assert result.exit_code == 0
    assert "3,900.00" in result.output
    assert "1,000.00" in result.output


def test_state_round_trip(run, ledger, tmp_path):
    state_path = str(tmp_path / "state.json")
    other_db = str(tmp_path / "other.db")

    result = run("state", "export", state_path)
    assert result.exit_code == 0
    assert "card_transactions: 12" in result.output

    result = run("state", "import", state_path, db_path=other_db)
    assert result.exit_code == 0
    assert "Imported state from" in result.output

    args = ("report", "dre", "--month", "1", "--year", "2026", "--view", "accrual", "--detail")
    assert run(*args, db_path=other_db).output == run(*args).output


def test_report_rejects_invalid_month(run):
    result = run("report", "dre", "--month", "13", "--year", "2026")

    assert result.exit_code == 1
    assert "Month must be between 1 and 12" in result.output


def test_report_rejects_mixed_reference(run):
    result = run("report", "dre", "--at", "2026-01-01", "--month", "1")

    assert result.exit_code == 1
    assert "--at cannot be combined" in result.output


def test_add_unknown_category(run, ledger):
    result = run(
        "add", "--institution", "Itau", "--direction", "out", "--amount", "10",
        "--category", "Yachts", "--date", "2026-01-05",
    )

    assert result.exit_code == 1
    assert "Category 'Yachts' not found" in result.output


def test_add_invalid_amount(run, ledger):
    result = run(
        "add", "--institution", "Itau", "--direction", "out", "--amount", "lots",
        "--category", "Groceries", "--date", "2026-01-05",
    )

    assert result.exit_code == 1
    assert "Invalid amount format" in result.output
