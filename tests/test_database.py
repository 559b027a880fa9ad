"""Tests for DatabaseManager and SqliteLedger with real SQLite in tmpdir."""

import pytest

from database import DatabaseManager, SqliteLedger
from ledger import LedgerError
from models import FAILURE_SENTINEL, PortfolioRow, RunSummary


# ---------------------------------------------------------------------------
# Portfolio table
# ---------------------------------------------------------------------------

class TestPortfolio:
    def test_replace_and_count(self, tmp_db, sample_rows):
        assert tmp_db.replace_portfolio(sample_rows) == 4
        assert tmp_db.count_portfolio() == 4

    def test_replace_drops_previous(self, tmp_db, sample_rows):
        tmp_db.replace_portfolio(sample_rows)
        tmp_db.replace_portfolio(sample_rows[:1])
        rows = tmp_db.get_portfolio()
        assert len(rows) == 1
        assert rows[0]["symbol"] == "ES3"

    def test_order_by_position(self, tmp_db, sample_rows):
        tmp_db.replace_portfolio(sample_rows)
        assert [r["position"] for r in tmp_db.get_portfolio()] == [0, 1, 2, 3]

    def test_limit(self, tmp_db, sample_rows):
        tmp_db.replace_portfolio(sample_rows)
        assert len(tmp_db.get_portfolio(limit=2)) == 2

    def test_set_latest_prices(self, tmp_db, sample_rows):
        tmp_db.replace_portfolio(sample_rows)
        tmp_db.set_latest_prices([1.0, FAILURE_SENTINEL])
        rows = tmp_db.get_portfolio()
        assert rows[0]["latest_observed"] == pytest.approx(1.0)
        assert rows[1]["latest_observed"] == FAILURE_SENTINEL
        assert rows[2]["latest_observed"] is None

    def test_set_buffered_unknown_position(self, tmp_db, sample_rows):
        tmp_db.replace_portfolio(sample_rows)
        with pytest.raises(LedgerError):
            tmp_db.set_buffered_price(9, 1.0)


class TestMetaAndRuns:
    def test_meta_roundtrip(self, tmp_db):
        assert tmp_db.get_meta("last_run_at") is None
        tmp_db.set_meta("last_run_at", "a")
        tmp_db.set_meta("last_run_at", "b")
        assert tmp_db.get_meta("last_run_at") == "b"

    def test_insert_run(self, tmp_db):
        tmp_db.insert_run(RunSummary(run_at="t1", total=3, succeeded=2, failed=1, failed_rows=[2]))
        runs = tmp_db.get_runs()
        assert len(runs) == 1
        assert runs[0]["failed_rows"] == "2"
        assert runs[0]["total"] == 3


# ---------------------------------------------------------------------------
# SqliteLedger
# ---------------------------------------------------------------------------

class TestSqliteLedger:
    def test_read_rows(self, tmp_db, sample_rows):
        ledger = SqliteLedger(tmp_db)
        ledger.seed(sample_rows)
        assert ledger.row_count() == 4
        assert ledger.read_rows(4) == sample_rows

    def test_read_too_many(self, tmp_db, sample_rows):
        ledger = SqliteLedger(tmp_db)
        ledger.seed(sample_rows)
        with pytest.raises(LedgerError):
            ledger.read_rows(5)

    def test_numeric_symbol_survives(self, tmp_db):
        ledger = SqliteLedger(tmp_db)
        ledger.seed([PortfolioRow(symbol=2388, exchange="HKEX")])
        assert ledger.read_rows(1)[0].symbol == "2388"

    def test_timestamp(self, tmp_db):
        ledger = SqliteLedger(tmp_db)
        ledger.write_timestamp("09:30:00 10/19/26")
        assert tmp_db.get_meta(SqliteLedger.TIMESTAMP_KEY) == "09:30:00 10/19/26"

    def test_writes_persist_across_connections(self, tmp_path, sample_rows):
        path = str(tmp_path / "ledger.db")
        db = DatabaseManager(db_path=path)
        ledger = SqliteLedger(db)
        ledger.seed(sample_rows)
        ledger.write_latest([1.0, 2.0, 3.0, 4.0])
        ledger.write_buffered(3, 4.0)
        db.close()

        db2 = DatabaseManager(db_path=path)
        snap = SqliteLedger(db2).snapshot()
        assert [r.latest_observed for r in snap] == [1.0, 2.0, 3.0, 4.0]
        assert [r.buffered for r in snap] == [None, None, None, 4.0]
        db2.close()

    def test_latest_too_long(self, tmp_db, sample_rows):
        ledger = SqliteLedger(tmp_db)
        ledger.seed(sample_rows)
        with pytest.raises(LedgerError):
            ledger.write_latest([1.0] * 5)
