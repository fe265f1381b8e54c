from __future__ import annotations

from pathlib import Path

import pytest
from ledger_import.cli import app
from ledger_import.ingest.templates import EXPENSE_TEMPLATE, INCOME_TEMPLATE
from typer.testing import CliRunner

from tests.helpers.db import fetch_categories, fetch_rows

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # The root callback loads ./.env; run from an empty directory.
    monkeypatch.chdir(tmp_path)


def test_template_to_stdout():
    result = runner.invoke(app, ["template", "--kind", "income"])
    assert result.exit_code == 0
    assert result.stdout == INCOME_TEMPLATE


def test_template_to_file(tmp_path: Path):
    out = tmp_path / "expenses.csv"
    result = runner.invoke(app, ["template", "--kind", "expense", "-o", str(out)])
    assert result.exit_code == 0
    assert f"Wrote {out}" in result.stdout
    assert out.read_text(encoding="utf-8") == EXPENSE_TEMPLATE


def test_no_subcommand_exits_non_zero():
    result = runner.invoke(app, [])
    assert result.exit_code == 1


def test_import_csv_requires_user_id(tmp_path: Path, db_url: str):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text(EXPENSE_TEMPLATE, encoding="utf-8")
    result = runner.invoke(
        app, ["import-csv", "--csv-path", str(csv_path), "--database-url", db_url, "--yes"]
    )
    assert result.exit_code == 1
    assert "no user id given" in result.output


def test_import_csv_reports_missing_file(tmp_path: Path, db_url: str):
    missing = tmp_path / "nope.csv"
    result = runner.invoke(
        app,
        ["import-csv", "--csv-path", str(missing), "--user-id", "u1", "--database-url", db_url],
    )
    assert result.exit_code == 1
    assert f"File not found: {missing}" in result.output


def test_import_template_with_seeded_defaults(tmp_path: Path, db_url: str):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text(EXPENSE_TEMPLATE, encoding="utf-8")
    result = runner.invoke(
        app,
        [
            "import-csv",
            "--csv-path",
            str(csv_path),
            "--kind",
            "expense",
            "--user-id",
            "u1",
            "--database-url",
            db_url,
            "--yes",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Imported 3 row(s); created 0 categor(ies)." in result.stdout
    rows = fetch_rows(database_url=db_url, kind="expense")
    assert [r.payment_mode for r in rows] == ["credit_card", "cash", "paynow"]
    assert {r.user_id for r in rows} == {"u1"}


def test_import_with_accept_defaults_creates_unmatched_categories(
    tmp_path: Path, db_url: str, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("LEDGER_IMPORT_USER_ID", "u1")
    csv_path = tmp_path / "in.csv"
    csv_path.write_text(
        "date,amount,category,sub_category,description,notes\n"
        "2024-03-01,250,Freelance,Design,Logo job,\n",
        encoding="utf-8",
    )
    result = runner.invoke(
        app,
        [
            "import-csv",
            "--csv-path",
            str(csv_path),
            "--kind",
            "income",
            "--database-url",
            db_url,
            "--accept-defaults",
            "--yes",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Review complete: 0 mapped, 1 to create." in result.stdout
    cats = fetch_categories(database_url=db_url, kind="income", user_id="u1")
    assert cats[-2:] == [("Freelance", None), ("Freelance", "Design")]


def test_import_without_valid_rows_fails(tmp_path: Path, db_url: str):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text("date,amount\n2024-01-01,5\n", encoding="utf-8")
    result = runner.invoke(
        app,
        [
            "import-csv",
            "--csv-path",
            str(csv_path),
            "--user-id",
            "u1",
            "--database-url",
            db_url,
            "--yes",
        ],
    )
    assert result.exit_code == 1
    assert "Missing columns:" in result.stdout
    assert "No valid rows to import." in result.stdout


def test_seed_categories_command(db_url: str):
    args = ["seed-categories", "--kind", "income", "--user-id", "u9", "--database-url", db_url]
    first = runner.invoke(app, args)
    assert first.exit_code == 0
    assert "income categor(ies)." in first.stdout
    second = runner.invoke(app, args)
    assert "Inserted 0 income categor(ies)." in second.stdout
