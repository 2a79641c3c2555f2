"""End-to-end tests for the command line interface."""

import csv

import pytest
from shopledger.cli.main import cli


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _invoke(*args, **kwargs):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)

    return _invoke


def add_debtor(invoke, name="Budi", amount="100,000", *extra):
    result = invoke("debtor", "add", name, "--amount", amount, *extra)
    assert result.exit_code == 0, result.output
    return int(result.output.split("ID:")[1].split(")")[0])


def test_help_does_not_need_a_database(cli_runner):
    """Test that --help works without touching a database."""
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "debtor" in result.output
    assert "transaction" in result.output
    assert "report" in result.output


class TestDebtorCommands:
    """Tests for the debtor command group."""

    def test_add_and_list(self, invoke):
        debtor_id = add_debtor(invoke, "Budi", "100,000", "--phone", "0812-3456-789")

        result = invoke("debtor", "list")
        assert result.exit_code == 0
        assert f"ID: {debtor_id:3d}" in result.output
        assert "Budi" in result.output
        assert "100,000" in result.output
        assert "Owed by customers: 100,000" in result.output

    def test_list_empty(self, invoke):
        result = invoke("debtor", "list")
        assert result.exit_code == 0
        assert "No debtors found." in result.output

    def test_add_rejects_zero_amount(self, invoke):
        result = invoke("debtor", "add", "Budi", "--amount", "0")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_add_rejects_bad_amount(self, invoke):
        result = invoke("debtor", "add", "Budi", "--amount", "lots")
        assert result.exit_code == 1
        assert "Invalid amount format" in result.output

    def test_payoff_workflow(self, invoke, temp_db):
        debtor_id = add_debtor(invoke)

        result = invoke("debtor", "receive", str(debtor_id), "40000", "--note", "cash")
        assert result.exit_code == 0
        assert "New balance: 60,000" in result.output

        result = invoke("debtor", "payoff", str(debtor_id))
        assert result.exit_code == 0
        assert "60,000 received" in result.output

        account = temp_db.get_debt_account(debtor_id)
        assert account.total_debt == 0
        assert len(account.movements) == 3

        result = invoke("debtor", "payoff", str(debtor_id))
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_give_requires_note(self, invoke):
        debtor_id = add_debtor(invoke)
        result = invoke("debtor", "give", str(debtor_id), "5000")
        assert result.exit_code != 0

    def test_give_backdated(self, invoke, temp_db):
        debtor_id = add_debtor(invoke)
        result = invoke(
            "debtor", "give", str(debtor_id), "5000", "--note", "oil", "--date", "yesterday"
        )
        assert result.exit_code == 0
        assert "New balance: 105,000" in result.output

        account = temp_db.get_debt_account(debtor_id)
        assert account.movements[-1].occurred_at.date() < account.movements[0].occurred_at.date()

    def test_movement_on_unknown_debtor(self, invoke):
        result = invoke("debtor", "receive", "99", "100", "--note", "cash")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_history(self, invoke):
        debtor_id = add_debtor(invoke, "Budi", "10000")
        invoke("debtor", "receive", str(debtor_id), "2500", "--note", "partial")

        result = invoke("debtor", "show", str(debtor_id))
        assert result.exit_code == 0
        assert "Balance: 7,500" in result.output
        assert "partial" in result.output
        assert "initial debt" in result.output

    def test_overdue_filter(self, invoke):
        add_debtor(invoke, "Budi", "1000")
        add_debtor(invoke, "Rina", "50000", "--due-date", "yesterday")

        result = invoke("debtor", "list", "--status", "overdue")
        assert result.exit_code == 0
        assert "Rina" in result.output
        assert "Budi" not in result.output
        assert "overdue" in result.output

    def test_due_date_set_and_clear(self, invoke, temp_db):
        debtor_id = add_debtor(invoke)

        result = invoke("debtor", "due", str(debtor_id), "2030-01-31")
        assert result.exit_code == 0
        assert "2030-01-31" in result.output

        result = invoke("debtor", "due", str(debtor_id), "--clear")
        assert result.exit_code == 0
        assert "cleared" in result.output
        assert temp_db.get_debt_account(debtor_id).due_date is None

        result = invoke("debtor", "due", str(debtor_id))
        assert result.exit_code == 1

    def test_refund(self, invoke):
        debtor_id = add_debtor(invoke, "Budi", "1000")
        invoke("debtor", "receive", str(debtor_id), "1500", "--note", "overpaid")

        result = invoke("debtor", "refund", str(debtor_id), "900")
        assert result.exit_code == 0
        assert "Refunded 500" in result.output

    def test_delete(self, invoke, temp_db):
        debtor_id = add_debtor(invoke)
        result = invoke("debtor", "delete", str(debtor_id), "--yes")
        assert result.exit_code == 0
        assert temp_db.get_debt_account(debtor_id) is None

    def test_remind(self, invoke):
        debtor_id = add_debtor(invoke, "Budi", "75000", "--phone", "0812-3456-789")

        result = invoke("debtor", "remind", str(debtor_id))
        assert result.exit_code == 0
        assert result.output.startswith("https://wa.me/08123456789?text=Hello%20Budi")

        result = invoke("--store-name", "Toko Makmur", "debtor", "remind", str(debtor_id),
                        "--channel", "text")
        assert result.exit_code == 0
        assert "75,000" in result.output
        assert "Toko Makmur" in result.output

    def test_remind_without_phone(self, invoke):
        debtor_id = add_debtor(invoke)
        result = invoke("debtor", "remind", str(debtor_id), "--channel", "sms")
        assert result.exit_code == 1
        assert "phone" in result.output


class TestTransactionCommands:
    """Tests for the transaction command group."""

    def test_add_and_list(self, invoke):
        result = invoke(
            "transaction", "add", "income", "100000",
            "--cost", "60000", "--note", "Rice 10kg", "--category", "Groceries",
        )
        assert result.exit_code == 0
        assert "Created transaction" in result.output
        assert "Profit: 40,000" in result.output

        invoke("transaction", "add", "expense", "30000", "--note", "Electricity", "--owed")

        result = invoke("transaction", "list")
        assert result.exit_code == 0
        assert "Rice 10kg" in result.output
        assert "Electricity" in result.output
        assert "Income:  100,000" in result.output
        assert "Expense: 30,000" in result.output
        assert "Owed:    30,000" in result.output

    def test_list_filters(self, invoke):
        invoke("transaction", "add", "income", "1000", "--note", "Soap")
        invoke("transaction", "add", "expense", "500", "--note", "Bags")

        result = invoke("transaction", "list", "--kind", "expense")
        assert "Bags" in result.output
        assert "Soap" not in result.output

        result = invoke("transaction", "list", "--search", "nothing-like-this")
        assert "No transactions found." in result.output

    def test_add_rejects_zero(self, invoke):
        result = invoke("transaction", "add", "income", "0", "--note", "x")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_add_rejects_unknown_kind(self, invoke):
        result = invoke("transaction", "add", "transfer", "100", "--note", "x")
        assert result.exit_code != 0


class TestReportCommands:
    """Tests for reports and exports."""

    def test_summary(self, invoke):
        invoke("transaction", "add", "income", "100000", "--cost", "60000",
               "--note", "Rice", "--category", "Groceries")
        invoke("transaction", "add", "expense", "30000", "--note", "Electricity")

        result = invoke("report", "summary", "--period", "today")
        assert result.exit_code == 0
        assert "Financial summary (today)" in result.output
        assert "100,000" in result.output
        assert "40.0%" in result.output
        assert "Groceries" in result.output

    def test_summary_unknown_period(self, invoke):
        result = invoke("report", "summary", "--period", "decade")
        assert result.exit_code == 1
        assert "Unknown period" in result.output

    def test_export_debtors(self, invoke, tmp_path):
        add_debtor(invoke, "Budi", "5000")
        add_debtor(invoke, "Siti", "7000")
        output = tmp_path / "debtors.csv"

        result = invoke("report", "export-debtors", str(output))
        assert result.exit_code == 0
        assert "Exported 2 debtors" in result.output

        with output.open(newline="") as fh:
            rows = list(csv.DictReader(fh))
        assert [row["customer_name"] for row in rows] == ["Budi", "Siti"]
        assert rows[1]["balance"] == "7000"

    def test_export_summary_to_stdout(self, invoke):
        invoke("transaction", "add", "income", "2000", "--note", "Soap")
        result = invoke("report", "export-summary", "-", "--period", "all")
        assert result.exit_code == 0
        assert result.output.startswith("section,label,value")
        assert "total_revenue,2000" in result.output
        assert "Exported" not in result.output
