"""
SQLite storage for the portfolio ledger.

Holds the tracked portfolio with its two price columns, a key/value table for
scalar ledger cells (last run timestamp), and a history of refresh runs.

Usage:
    # Standalone: print the current portfolio
    python database.py [path/to/portfolio.db]

    # Programmatic
    from database import DatabaseManager, SqliteLedger
    ledger = SqliteLedger(DatabaseManager(db_path="data/portfolio.db"))
"""

import os
import sqlite3
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent))

from ledger import Ledger, LedgerError
from models import LedgerRow, PortfolioRow, RunSummary


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
DEFAULT_DB_PATH = os.path.join(DATA_DIR, "portfolio.db")


# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS portfolio (
    position        INTEGER PRIMARY KEY,
    symbol          TEXT NOT NULL,
    exchange        TEXT NOT NULL DEFAULT 'USA',
    latest_observed REAL,
    buffered        REAL
);

CREATE TABLE IF NOT EXISTS ledger_meta (
    key   TEXT PRIMARY KEY,
    value TEXT
);

CREATE TABLE IF NOT EXISTS refresh_runs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    run_at      TEXT NOT NULL,
    total       INTEGER NOT NULL,
    succeeded   INTEGER NOT NULL,
    failed      INTEGER NOT NULL,
    failed_rows TEXT DEFAULT ''
);
"""


class DatabaseManager:
    """SQLite database manager for the portfolio ledger."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.row_factory = sqlite3.Row
        self._create_schema()

    def _create_schema(self):
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()

    def close(self):
        self.conn.close()

    # ------------------------------------------------------------------
    # Portfolio
    # ------------------------------------------------------------------

    def replace_portfolio(self, rows: list[PortfolioRow]) -> int:
        """Drop all rows and insert the given ones at positions 0..n-1."""
        self.conn.execute("DELETE FROM portfolio")
        self.conn.executemany(
            "INSERT INTO portfolio (position, symbol, exchange) VALUES (?, ?, ?)",
            [(i, r.symbol, r.exchange) for i, r in enumerate(rows)],
        )
        self.conn.commit()
        return len(rows)

    def count_portfolio(self) -> int:
        cur = self.conn.execute("SELECT COUNT(*) FROM portfolio")
        return cur.fetchone()[0]

    def get_portfolio(self, limit: int = -1) -> list[dict]:
        cur = self.conn.execute(
            "SELECT * FROM portfolio ORDER BY position LIMIT ?", (limit,)
        )
        return [dict(r) for r in cur.fetchall()]

    def set_latest_prices(self, values: list[float]) -> int:
        """Write latest_observed for positions 0..len(values)-1 in one transaction."""
        self.conn.executemany(
            "UPDATE portfolio SET latest_observed = ? WHERE position = ?",
            [(v, i) for i, v in enumerate(values)],
        )
        self.conn.commit()
        return len(values)

    def set_buffered_price(self, position: int, value: float) -> None:
        cur = self.conn.execute(
            "UPDATE portfolio SET buffered = ? WHERE position = ?", (value, position)
        )
        self.conn.commit()
        if cur.rowcount == 0:
            raise LedgerError(f"No portfolio row at position {position}")

    # ------------------------------------------------------------------
    # Meta
    # ------------------------------------------------------------------

    def set_meta(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO ledger_meta (key, value) VALUES (?, ?)", (key, value)
        )
        self.conn.commit()

    def get_meta(self, key: str) -> str | None:
        cur = self.conn.execute("SELECT value FROM ledger_meta WHERE key = ?", (key,))
        row = cur.fetchone()
        return row["value"] if row else None

    # ------------------------------------------------------------------
    # Run history
    # ------------------------------------------------------------------

    def insert_run(self, summary: RunSummary) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO refresh_runs (run_at, total, succeeded, failed, failed_rows)
            VALUES (?, ?, ?, ?, ?)
            """,
            (summary.run_at, summary.total, summary.succeeded, summary.failed,
             ",".join(str(i) for i in summary.failed_rows)),
        )
        self.conn.commit()
        return cur.lastrowid

    def get_runs(self, limit: int = 20) -> list[dict]:
        cur = self.conn.execute(
            "SELECT * FROM refresh_runs ORDER BY id DESC LIMIT ?", (limit,)
        )
        return [dict(r) for r in cur.fetchall()]


class SqliteLedger(Ledger):
    """Ledger backed by the `portfolio` table. Every write commits immediately."""

    TIMESTAMP_KEY = "last_run_at"

    def __init__(self, db: DatabaseManager):
        self.db = db

    def row_count(self) -> int:
        return self.db.count_portfolio()

    def read_rows(self, n: int) -> list[PortfolioRow]:
        records = self.db.get_portfolio(limit=n)
        if len(records) < n:
            raise LedgerError(f"Asked for {n} rows, ledger holds {len(records)}")
        return [PortfolioRow(symbol=r["symbol"], exchange=r["exchange"]) for r in records]

    def write_latest(self, values: list[float]) -> None:
        if len(values) > self.row_count():
            raise LedgerError(f"{len(values)} values for {self.row_count()} rows")
        self.db.set_latest_prices(values)

    def write_buffered(self, index: int, value: float) -> None:
        self.db.set_buffered_price(index, float(value))

    def write_timestamp(self, text: str) -> None:
        self.db.set_meta(self.TIMESTAMP_KEY, text)

    def snapshot(self) -> list[LedgerRow]:
        return [
            LedgerRow(
                symbol=r["symbol"],
                exchange=r["exchange"],
                latest_observed=r["latest_observed"],
                buffered=r["buffered"],
            )
            for r in self.db.get_portfolio()
        ]

    def seed(self, rows: list[PortfolioRow]) -> None:
        self.db.replace_portfolio(rows)

    def record_run(self, summary: RunSummary) -> None:
        self.db.insert_run(summary)


if __name__ == "__main__":
    db = DatabaseManager(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DB_PATH)
    for row in db.get_portfolio():
        print(f"  {row['position']:>3}  {row['symbol']:<10} {row['exchange']:<5} "
              f"latest={row['latest_observed']}  buffered={row['buffered']}")
    print(f"\nLast run: {db.get_meta(SqliteLedger.TIMESTAMP_KEY)}")
    db.close()
