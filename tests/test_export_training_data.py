"""End-to-end tests for the export_training_data command against a SQLite file."""
import csv
from datetime import date

from export_training_data import build_aggregator, main
from models import EXPENSE


def _database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'finance.db'}"


def _seed(database_url, months):
    store = build_aggregator(database_url).store
    for month in months:
        store.add(100.0 * month, EXPENSE, date(2025, month, 12), "Groceries", "Safeway grocery store")


class TestExportCommand:
    def test_writes_table(self, tmp_path, capsys):
        url = _database_url(tmp_path)
        _seed(url, [1, 2, 3])
        output = tmp_path / "out" / "training.csv"

        assert main(["--database-url", url, "--output", str(output)]) == 0
        assert str(output) in capsys.readouterr().out

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert [float(r["totalAmount"]) for r in rows] == [100.0, 200.0, 300.0]
        assert float(rows[-1]["averageLastThreeMonths"]) == 150.0

    def test_fails_with_too_little_history(self, tmp_path, capsys):
        url = _database_url(tmp_path)
        _seed(url, [1, 2])
        output = tmp_path / "training.csv"

        assert main(["--database-url", url, "--output", str(output)]) == 1
        assert "at least 3 required" in capsys.readouterr().err
        assert not output.exists()

    def test_empty_database(self, tmp_path):
        assert main(["--database-url", _database_url(tmp_path), "--output", str(tmp_path / "t.csv")]) == 1
