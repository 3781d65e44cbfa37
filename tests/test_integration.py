"""End-to-end tests through the CLI."""

import re
from datetime import date

import pytest
from costwise.cli.main import cli
from costwise.domain.patterns import DEFAULT_PATTERNS
from costwise.utils.date_parser import month_end


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _run


def _created_id(output: str) -> int:
    return int(re.search(r"Created transaction (\d+)", output).group(1))


def _add(run, day, amount, description, category=None, txn_type="expense"):
    args = ["add", "--date", day, "--amount", amount, "--type", txn_type, "--description", description]
    if category:
        args += ["--category", category]
    result = run(*args)
    assert result.exit_code == 0, result.output
    return _created_id(result.output)


@pytest.fixture
def seeded_business(run):
    """Manufacturing profile, seeded patterns and a few transactions."""
    result = run("profile", "set", "--category", "Manufacturing", "--activities", "assembly,machining")
    assert "Saved business profile (category: Manufacturing)" in result.output

    result = run("pattern", "seed")
    assert f"Seeded {len(DEFAULT_PATTERNS)} cost patterns" in result.output

    ids = {
        "rent": _add(run, "2024-01-01", "2000", "Office Rent", "Facilities"),
        "sale": _add(run, "2024-01-05", "10000", "Product sales", txn_type="income"),
        "materials": _add(run, "2024-01-10", "3000", "Raw Materials Purchase", "Materials"),
        "campaign": _add(run, "today", "600", "Ad campaign", "Marketing"),
    }
    return ids


def test_profile_show(run):
    assert "No business profile set" in run("profile", "show").output

    run("profile", "set", "--category", "Services", "--revenue-streams", "consulting, retainers")
    result = run("profile", "show")

    assert result.exit_code == 0
    assert "Category:         Services" in result.output
    assert "consulting, retainers" in result.output


def test_pattern_seed_twice(run):
    run("pattern", "seed")
    result = run("pattern", "seed")

    assert "Pattern library already up to date." in result.output


def test_classify_workflow(run, seeded_business):
    result = run("classify", "run", "--workers", "2")
    assert result.exit_code == 0, result.output
    assert "Results: 3 classified, 0 skipped, 0 failed" in result.output

    result = run("classify", "run")
    assert "Results: 0 classified, 3 skipped, 0 failed" in result.output

    result = run("transactions", "--type", "expense")
    assert "fixed/indirect" in result.output
    assert "variable/direct" in result.output
    assert "Product sales" not in result.output


def test_override_and_clear(run, seeded_business):
    materials = seeded_business["materials"]

    result = run("classify", "override", str(materials), "--cost-type", "mixed", "--cost-nature", "direct")
    assert result.exit_code == 0
    assert f"Transaction {materials} manually classified as mixed/direct" in result.output

    # Bulk runs leave the override alone
    run("classify", "run", "--workers", "1")
    assert "mixed/direct *" in run("transactions").output

    result = run("classify", "clear", str(materials))
    assert f"Cleared classification for transaction {materials}" in result.output

    result = run("classify", "clear", str(materials))
    assert "has no stored classification" in result.output


def test_override_rejects_income(run, seeded_business):
    result = run(
        "classify", "override", str(seeded_business["sale"]), "--cost-type", "fixed", "--cost-nature", "direct"
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "only expense transactions can be classified" in result.output


def test_override_missing_transaction(run):
    result = run("classify", "override", "99", "--cost-type", "fixed", "--cost-nature", "direct")

    assert result.exit_code == 1
    assert "Transaction 99 not found" in result.output


def test_classify_text_uses_patterns(run, seeded_business):
    result = run("classify", "text", "Raw Materials Purchase", "--amount", "2500")

    assert result.exit_code == 0
    assert "Cost type:   variable" in result.output
    assert "Cost nature: direct" in result.output
    assert "Method:      pattern" in result.output
    assert "Matched keywords: raw material, materials" in result.output


def test_custom_rule_workflow(run, seeded_business):
    result = run("rule", "add", "aws", "--cost-type", "variable", "--cost-nature", "direct")
    assert result.exit_code == 0
    assert "Created rule 1: 'aws' -> variable/direct for Manufacturing" in result.output

    assert "aws" in run("rule", "list").output

    result = run("classify", "text", "AWS hosting")
    assert "Method:      custom_rule" in result.output

    assert "Deleted rule 1" in run("rule", "delete", "1").output
    assert "No custom rules found." in run("rule", "list").output

    result = run("rule", "delete", "1")
    assert result.exit_code == 1
    assert "Custom rule 1 not found" in result.output


def test_analytics_commands(run, seeded_business):
    run("classify", "run", "--workers", "1")

    result = run("analytics", "summary", "--start-date", "2024-01-01", "--end-date", "2024-01-31")
    assert result.exit_code == 0, result.output
    assert "Total revenue:           $10,000.00" in result.output
    assert "Total expenses:          $5,000.00" in result.output
    assert "Net profit:              $5,000.00" in result.output

    result = run("analytics", "expenses", "--start-date", "2024-01-01", "--end-date", "2024-01-31")
    assert result.exit_code == 0
    assert "Total costs: $5,000.00" in result.output
    assert "Materials" in result.output

    result = run("analytics", "trend", "--start-date", "2024-01-01", "--end-date", "2024-01-31")
    assert result.exit_code == 0
    assert "2024-01" in result.output

    result = run("analytics", "refresh", "--start-date", "2024-01-01", "--end-date", "2024-01-03")
    assert "Inserted 3 daily metric rows" in result.output
    result = run("analytics", "refresh", "--start-date", "2024-01-01", "--end-date", "2024-01-03")
    assert "Inserted 0 daily metric rows" in result.output

    result = run("analytics", "regenerate", "2024-01-05")
    assert "2024-01-05: revenue $10,000.00" in result.output


def test_analytics_summary_rejects_period_with_dates(run):
    result = run("analytics", "summary", "--period", "year", "--start-date", "2024-01-01")

    assert result.exit_code == 1
    assert "cannot be combined" in result.output


def test_analytics_summary_empty(run):
    result = run("analytics", "summary", "--period", "year")

    assert result.exit_code == 0
    assert "No transactions found." in result.output


def test_budget_workflow(run, seeded_business):
    today = date.today()
    result = run(
        "budget",
        "create",
        "Ads",
        "--category",
        "Marketing",
        "--amount",
        "500",
        "--start-date",
        today.replace(day=1).isoformat(),
        "--end-date",
        month_end(today).isoformat(),
    )
    assert result.exit_code == 0, result.output
    assert "Created budget 'Ads' (ID: 1)" in result.output

    result = run("budget", "variance")
    assert result.exit_code == 0
    assert "Marketing" in result.output
    assert "unfavorable" in result.output

    assert "Updated 1 budgets" in run("budget", "sync").output
    assert "Updated 0 budgets" in run("budget", "sync").output
    assert "$600.00" in run("budget", "list").output

    assert "Deleted budget 1" in run("budget", "delete", "1").output
    result = run("budget", "delete", "1")
    assert result.exit_code == 1
    assert "Budget 1 not found" in result.output


def test_budget_create_rejects_reversed_dates(run):
    result = run(
        "budget",
        "create",
        "Rent",
        "--category",
        "Facilities",
        "--amount",
        "1000",
        "--start-date",
        "2024-02-01",
        "--end-date",
        "2024-01-01",
    )

    assert result.exit_code == 1
    assert "is before its start date" in result.output


def test_package_exposes_main():
    import costwise
    from costwise.cli.main import main

    assert costwise.main is main


def test_help_does_not_open_database(cli_runner, tmp_path):
    db_file = tmp_path / "never.db"

    result = cli_runner.invoke(cli, ["--db-path", str(db_file), "--help"])

    assert result.exit_code == 0
    assert "cost classification" in result.output
    assert not db_file.exists()
