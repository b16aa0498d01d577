import json

import pytest

from database.db_manager import DatabaseManager
from main import main


@pytest.fixture
def run(tmp_path, capsys):
    base = ["--db-folder", str(tmp_path / "db"), "--backup-folder", str(tmp_path / "backups")]

    def _run(*argv):
        code = main(base + list(argv))
        out, err = capsys.readouterr()
        return code, out, err

    return _run


def _add_rent(run):
    return run(
        "add", "expense", "--name", "Rent", "--amount", "1200",
        "--frequency", "monthly", "--date", "2024-01-31", "--category", "housing",
    )


def test_add_and_list(run):
    code, out, _ = _add_rent(run)
    assert code == 0
    assert out.startswith("Added expense ")
    assert "🏠 Rent $1,200.00" in out

    code, out, _ = run("list", "--type", "expense")
    assert code == 0
    assert "2024-01-31" in out
    assert "Monthly" in out


def test_validation_error_goes_to_stderr(run):
    code, out, err = run(
        "add", "expense", "--name", "R", "--amount", "10", "--frequency", "monthly",
    )
    assert code == 1
    assert out == ""
    assert err.startswith("Error: Name must be at least 2 characters.")


def test_bad_date_is_rejected_by_parser(run):
    with pytest.raises(SystemExit) as exc:
        run("day", "31/01/2024")
    assert exc.value.code == 2


def test_day_and_calendar(run):
    _add_rent(run)

    code, out, _ = run("day", "2024-02-29")
    assert code == 0
    assert "Expenses" in out
    assert "Net Total: -$1,200.00" in out

    _, out, _ = run("day", "2024-02-28")
    assert "No transactions on this date" in out

    code, out, _ = run("calendar", "2024-02")
    assert code == 0
    assert out.splitlines()[0] == "February 2024"
    assert "Total Expense: $1,200.00" in out
    assert "-$1.2k" in out


def test_delete_unknown_id(run):
    code, _, err = run("delete", "nope")
    assert code == 1
    assert "not found" in err


def test_backup_and_restore(run, tmp_path):
    _add_rent(run)
    code, out, _ = run("backup")
    assert code == 0
    assert "Backup created" in out

    _, out, _ = run("backups")
    assert "CSV Files (1)" in out
    name = out.splitlines()[1].strip()

    code, out, _ = run("restore", name)
    assert code == 0
    assert out.strip() == "Restored 1 transactions (0 skipped)"


def test_migrate_local_storage(run, tmp_path):
    dump = tmp_path / "storage.json"
    dump.write_text(json.dumps({
        "budget-tracker-income": [
            {"id": "1", "name": "Salary", "amount": 3000, "category": "salary",
             "frequency": "monthly", "receiveDate": "2024-01-05"},
        ],
    }), encoding="utf-8")

    code, out, _ = run("migrate", str(dump))
    assert code == 0
    assert "Imported 1 transactions" in out

    _, out, _ = run("list", "--type", "income")
    assert "Salary" in out


def test_forecast_and_chart_outputs(run, tmp_path):
    _add_rent(run)
    chart = tmp_path / "forecast.png"
    code, out, _ = run("forecast", "--months", "3", "--chart", str(chart))
    assert code == 0
    assert len(out.splitlines()) == 3
    assert chart.exists()

    code, out, _ = run("forecast", "--years", "2")
    assert len(out.splitlines()) == 2

    pie = tmp_path / "pie.png"
    code, _, _ = run("chart", str(pie))
    assert code == 0
    assert pie.exists()


def test_report_export(run, tmp_path):
    _add_rent(run)
    path = tmp_path / "report.csv"
    code, out, _ = run("report", str(path), "--sort", "amount", "--desc")
    assert code == 0
    assert "Exported 1 rows" in out
    assert path.read_text(encoding="utf-8").startswith("Name,Amount,Category")


def test_update_changes_only_given_fields(run):
    _, out, _ = _add_rent(run)
    tx_id = out.split()[2].rstrip(":")

    code, out, _ = run("update", tx_id, "--amount", "1300", "--frequency", "QUARTERLY")
    assert code == 0
    assert "🏠 Rent $1,300.00 Quarterly" in out

    _, out, _ = run("list")
    assert "Quarterly" in out
    assert "2024-01-31" in out
    assert "housing" in out

    _, out, _ = run("day", "2024-04-30")
    assert "Net Total: -$1,300.00" in out


def test_update_errors(run):
    code, _, err = run("update", "missing", "--name", "Rent")
    assert code == 1
    assert "not found" in err

    _, out, _ = _add_rent(run)
    tx_id = out.split()[2].rstrip(":")
    code, _, err = run("update", tx_id, "--amount", "0")
    assert code == 1
    assert "positive" in err


def test_list_labels_non_canonical_frequencies(run, tmp_path):
    db = DatabaseManager.open(db_folder=str(tmp_path / "db"))
    try:
        db.get_connection().execute(
            """INSERT INTO transactions (id, type, name, amount, category, frequency, date)
               VALUES ('legacy', 'expense', 'Legacy', 10, 'other', 'BI_WEEKLY', '2024-01-01')"""
        )
        db.get_connection().commit()
    finally:
        db.close()

    _, out, _ = run("list")
    assert "Bi-weekly" in out
