"""
Ledger: the row/column store holding the portfolio and its two price columns.

The refresh pipeline only depends on the abstract `Ledger` below. Two
implementations live here:

    MemoryLedger    in-process fake (tests, dry runs)
    WorkbookLedger  an .xlsx workbook laid out like the legacy "buffer" sheet

`database.SqliteLedger` provides a third, SQLite-backed implementation.

Rows are addressed by 0-based position. Position 0 is the first data row,
immediately after the single header row.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import openpyxl
from openpyxl import Workbook

from models import FAILURE_SENTINEL, LedgerRow, PortfolioRow, RunSummary


logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised when the ledger cannot satisfy a read or write."""
    pass


class Ledger(ABC):
    """Abstract base class for portfolio ledgers."""

    @abstractmethod
    def row_count(self) -> int:
        """Number of portfolio rows (contiguous, no gaps)."""
        pass

    @abstractmethod
    def read_rows(self, n: int) -> list[PortfolioRow]:
        """Read the first n portfolio rows."""
        pass

    @abstractmethod
    def write_latest(self, values: list[float]) -> None:
        """Batch-write the latest-observed column for rows 0..len(values)-1."""
        pass

    @abstractmethod
    def write_buffered(self, index: int, value: float) -> None:
        """Write one row's buffered price."""
        pass

    @abstractmethod
    def write_timestamp(self, text: str) -> None:
        """Record the run timestamp."""
        pass

    @abstractmethod
    def snapshot(self) -> list[LedgerRow]:
        """All rows with their current output columns."""
        pass

    @abstractmethod
    def seed(self, rows: list[PortfolioRow]) -> None:
        """Replace the portfolio rows, clearing both output columns."""
        pass

    def record_run(self, summary: RunSummary) -> None:
        """Keep a history entry for a finished run. No-op unless overridden."""
        pass

    def save(self) -> None:
        """Persist pending writes. No-op where writes are immediate."""
        pass

    def _check_index(self, index: int) -> None:
        n = self.row_count()
        if not 0 <= index < n:
            raise LedgerError(f"Row {index} outside ledger range 0..{n - 1}")


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class MemoryLedger(Ledger):
    """List-backed ledger. Keeps a simple write log for inspection."""

    def __init__(self, rows: list[PortfolioRow] = None, buffered: list[Optional[float]] = None):
        self.rows: list[PortfolioRow] = []
        self.latest: list[Optional[float]] = []
        self.buffered: list[Optional[float]] = []
        self.timestamp: Optional[str] = None
        self.runs: list[RunSummary] = []
        self.writes: list[str] = []
        self.seed(rows or [])
        if buffered is not None:
            if len(buffered) != len(self.rows):
                raise LedgerError("buffered column length does not match rows")
            self.buffered = list(buffered)

    def row_count(self) -> int:
        return len(self.rows)

    def read_rows(self, n: int) -> list[PortfolioRow]:
        if n > len(self.rows):
            raise LedgerError(f"Asked for {n} rows, ledger holds {len(self.rows)}")
        return list(self.rows[:n])

    def write_latest(self, values: list[float]) -> None:
        if len(values) > len(self.rows):
            raise LedgerError(f"{len(values)} values for {len(self.rows)} rows")
        self.latest[:len(values)] = list(values)
        self.writes.append("latest")

    def write_buffered(self, index: int, value: float) -> None:
        self._check_index(index)
        self.buffered[index] = value
        self.writes.append(f"buffered:{index}")

    def write_timestamp(self, text: str) -> None:
        self.timestamp = text
        self.writes.append("timestamp")

    def snapshot(self) -> list[LedgerRow]:
        return [
            LedgerRow(symbol=r.symbol, exchange=r.exchange, latest_observed=l, buffered=b)
            for r, l, b in zip(self.rows, self.latest, self.buffered)
        ]

    def seed(self, rows: list[PortfolioRow]) -> None:
        self.rows = list(rows)
        self.latest = [None] * len(self.rows)
        self.buffered = [None] * len(self.rows)

    def record_run(self, summary: RunSummary) -> None:
        self.runs.append(summary)


# ---------------------------------------------------------------------------
# Excel workbook
# ---------------------------------------------------------------------------

class WorkbookLedger(Ledger):
    """
    Ledger stored in one sheet of an .xlsx workbook.

    Layout (1-based rows/columns, header in row 1):
        A  symbol
        D  exchange
        F  latest observed price ("new_price"), -1 when the lookup failed
        G  buffered price ("price")
        K1 last data row number (may be a formula; then column A is scanned)
        K2 timestamp of the last run

    Writes stay in memory until save().
    """

    HEADER_ROW = 1
    FIRST_ROW = 2
    SYMBOL_COL = 1
    EXCHANGE_COL = 4
    LATEST_COL = 6
    BUFFERED_COL = 7
    META_COL = 11
    LAST_ROW_CELL = (1, META_COL)
    TIMESTAMP_CELL = (2, META_COL)

    HEADERS = {
        SYMBOL_COL: "symbol",
        EXCHANGE_COL: "exchange",
        LATEST_COL: "new_price",
        BUFFERED_COL: "price",
    }

    def __init__(self, path: str, sheet_name: str = "buffer"):
        self.path = path
        self.sheet_name = sheet_name

        if os.path.exists(path):
            self.wb = openpyxl.load_workbook(path)
            if sheet_name not in self.wb.sheetnames:
                raise LedgerError(f"{path} has no sheet named {sheet_name!r}")
            self.ws = self.wb[sheet_name]
        else:
            self.wb = Workbook()
            self.ws = self.wb.active
            self.ws.title = sheet_name
            self._write_headers()
            self._set_last_row(self.HEADER_ROW)

    def _write_headers(self) -> None:
        for col, title in self.HEADERS.items():
            self.ws.cell(self.HEADER_ROW, col).value = title

    def _set_last_row(self, last_row: int) -> None:
        self.ws.cell(*self.LAST_ROW_CELL).value = last_row

    def _last_row(self) -> int:
        raw = self.ws.cell(*self.LAST_ROW_CELL).value
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and float(raw).is_integer():
            return int(raw)
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())

        # Formula or blank: walk column A to the first empty cell
        row = self.FIRST_ROW
        while self.ws.cell(row, self.SYMBOL_COL).value not in (None, ""):
            row += 1
        return row - 1

    def row_count(self) -> int:
        return max(self._last_row() - self.HEADER_ROW, 0)

    def read_rows(self, n: int) -> list[PortfolioRow]:
        rows = []
        for r in range(self.FIRST_ROW, self.FIRST_ROW + n):
            symbol = self.ws.cell(r, self.SYMBOL_COL).value
            if symbol in (None, ""):
                raise LedgerError(f"{self.sheet_name}!A{r} is empty; rows must be contiguous")
            rows.append(PortfolioRow(symbol=symbol, exchange=self.ws.cell(r, self.EXCHANGE_COL).value))
        logger.debug(f"Read {len(rows)} rows from {self.path}:{self.sheet_name}")
        return rows

    def write_latest(self, values: list[float]) -> None:
        if len(values) > self.row_count():
            raise LedgerError(f"{len(values)} values for {self.row_count()} rows")
        for offset, value in enumerate(values):
            self.ws.cell(self.FIRST_ROW + offset, self.LATEST_COL).value = value

    def write_buffered(self, index: int, value: float) -> None:
        self._check_index(index)
        self.ws.cell(self.FIRST_ROW + index, self.BUFFERED_COL).value = float(value)

    def write_timestamp(self, text: str) -> None:
        self.ws.cell(*self.TIMESTAMP_CELL).value = text

    def read_timestamp(self) -> Optional[str]:
        return self.ws.cell(*self.TIMESTAMP_CELL).value

    def snapshot(self) -> list[LedgerRow]:
        out = []
        for offset, row in enumerate(self.read_rows(self.row_count())):
            r = self.FIRST_ROW + offset
            out.append(LedgerRow(
                symbol=row.symbol,
                exchange=row.exchange,
                latest_observed=self.ws.cell(r, self.LATEST_COL).value,
                buffered=self.ws.cell(r, self.BUFFERED_COL).value,
            ))
        return out

    def seed(self, rows: list[PortfolioRow]) -> None:
        old_last = self._last_row()
        for r in range(self.FIRST_ROW, max(old_last, self.HEADER_ROW) + 1):
            for col in self.HEADERS:
                self.ws.cell(r, col).value = None
        self._write_headers()
        for offset, row in enumerate(rows):
            r = self.FIRST_ROW + offset
            self.ws.cell(r, self.SYMBOL_COL).value = row.symbol
            self.ws.cell(r, self.EXCHANGE_COL).value = row.exchange
        self._set_last_row(self.HEADER_ROW + len(rows))

    def save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        self.wb.save(self.path)
        logger.info(f"Saved ledger workbook {self.path}")


def is_failure(value) -> bool:
    """True for a latest-observed cell that records a failed lookup."""
    return value is None or value == FAILURE_SENTINEL
