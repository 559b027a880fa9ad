"""
Portfolio Quote Refresh Pipeline

Reads (symbol, exchange) rows from the ledger, looks up a price for each one,
writes every outcome to the latest-observed column and only successful
prices to the buffered column. A failed row keeps its previous buffered
price.

Usage:
    python sources/quotes/pipeline.py                                  # Ledger from QUOTES_LEDGER_PATH
    python sources/quotes/pipeline.py --ledger data/portfolio.db       # SQLite ledger
    python sources/quotes/pipeline.py --seed portfolio.txt             # (Re)load rows, then refresh
    python sources/quotes/pipeline.py --symbols ES3:SGX 2388:HKEX DIS  # Rows from the command line
    python sources/quotes/pipeline.py --extractor soup --export data   # BeautifulSoup parse + xlsx export
"""

import argparse
import datetime
import os
import sys
from pathlib import Path
from typing import Callable

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent.parent))

from config import settings
from database import DatabaseManager, SqliteLedger
from ledger import Ledger, WorkbookLedger
from models import PortfolioRow, QuoteResult, RunSummary
from sources.quotes.fetcher import QuoteFetcher
from sources.quotes.providers import EXTRACTORS, get_extractor
from sources.quotes.resolver import ExchangeUrlResolver
from sources.quotes.service import QuoteLookupService
from utils import log
from utils.excel_formatter import ExcelFormatter
from utils.input_parser import parse_input_file, parse_pairs

logger = log.setup_verbose_logging("sources.quotes")


def locale_timestamp(now: datetime.datetime = None) -> str:
    """Locale-formatted "time date" string, e.g. '14:05:07 10/19/26'."""
    now = now or datetime.datetime.now()
    return f"{now.strftime('%X')} {now.strftime('%x')}"


class RefreshOrchestrator:
    """
    One sequential pass over the portfolio.

    Rows are looked up one at a time, in order. Results line up 1:1 with the
    input rows. The latest-observed column is written in a single batch; the
    buffered column only for rows that produced a price.
    """

    def __init__(self, service: QuoteLookupService = None, clock: Callable[[], str] = locale_timestamp):
        self.service = service or QuoteLookupService()
        self.clock = clock

    def refresh(self, rows: list[PortfolioRow], ledger: Ledger) -> RunSummary:
        run_at = self.clock()
        ledger.write_timestamp(run_at)
        logger.debug(f"Run at {run_at}: {[(r.symbol, r.exchange) for r in rows]}")

        results: list[QuoteResult] = []
        total = len(rows)
        for i, row in enumerate(rows, 1):
            result = self.service.lookup(row.symbol, row.exchange)
            results.append(result)
            if result.failed:
                log.symbol_msg(row.symbol, row.exchange, f"[{i}/{total}] {log.C.ERR}no price{log.C.RESET} (buffered value kept)")
            else:
                log.progress(i, total, row.symbol, f"{log.C.OK}{result.value:,.4f}{log.C.RESET}")

        ledger.write_latest([r.as_cell() for r in results])

        failed_rows = []
        for index, result in enumerate(results):
            if result.failed:
                failed_rows.append(index)
            else:
                ledger.write_buffered(index, result.value)

        summary = RunSummary(
            run_at=run_at,
            total=total,
            succeeded=total - len(failed_rows),
            failed=len(failed_rows),
            failed_rows=failed_rows,
        )
        logger.debug(f"Results: {[r.as_cell() for r in results]}")
        ledger.record_run(summary)
        ledger.save()
        return summary

    def run(self, ledger: Ledger) -> RunSummary:
        """Read every portfolio row from the ledger, then refresh."""
        rows = ledger.read_rows(ledger.row_count())
        return self.refresh(rows, ledger)


def open_ledger(path: str, sheet_name: str = None) -> Ledger:
    """Pick a ledger implementation from the file extension."""
    ext = os.path.splitext(path)[1].lower()
    if ext in (".db", ".sqlite", ".sqlite3"):
        return SqliteLedger(DatabaseManager(db_path=path))
    if ext in (".xlsx", ".xlsm"):
        return WorkbookLedger(path, sheet_name=sheet_name or settings.SHEET_NAME)
    raise ValueError(f"Unsupported ledger file: {path} (use .xlsx or .db)")


def main(argv: list[str] = None):
    parser = argparse.ArgumentParser(description="Refresh portfolio prices into the ledger")
    parser.add_argument("--ledger", type=str, default=settings.LEDGER_PATH,
                        help="Ledger file, .xlsx or .db (default: QUOTES_LEDGER_PATH)")
    parser.add_argument("--sheet", type=str, default=settings.SHEET_NAME, help="Workbook sheet name")
    rows_from = parser.add_mutually_exclusive_group()
    rows_from.add_argument("--seed", type=str, help="Replace ledger rows from a portfolio file before refreshing")
    rows_from.add_argument("--symbols", nargs="+", help="Replace ledger rows with SYMBOL[:EXCHANGE] tokens")
    parser.add_argument("--extractor", choices=sorted(EXTRACTORS), default=settings.EXTRACTOR,
                        help="Price extraction strategy")
    parser.add_argument("--strict", action="store_true", default=settings.STRICT_EXCHANGE,
                        help="Fail rows with unknown exchange codes instead of treating them as USA")
    parser.add_argument("--attempts", type=int, default=settings.MAX_ATTEMPTS, help="Fetch attempts per symbol")
    parser.add_argument("--timeout", type=float, default=settings.TIMEOUT, help="Per-request timeout in seconds")
    parser.add_argument("--export", type=str, metavar="DIR", help="Also write a snapshot workbook into DIR")
    args = parser.parse_args(argv)

    start = datetime.datetime.now()
    log.header("QUOTE REFRESH: Updating Portfolio Prices")

    ledger = open_ledger(args.ledger, args.sheet)
    log.info(f"Ledger: {args.ledger}")

    if args.symbols:
        ledger.seed(parse_pairs(args.symbols))
        log.step(f"Seeded {len(args.symbols)} rows from the command line")
    elif args.seed:
        rows = parse_input_file(args.seed)
        ledger.seed(rows)
        log.step(f"Seeded {len(rows)} rows from {args.seed}")

    n = ledger.row_count()
    if n == 0:
        log.warn("Ledger holds no portfolio rows, nothing to refresh")
        ledger.save()
        return None
    log.step(f"Processing {n} symbols")

    service = QuoteLookupService(
        resolver=ExchangeUrlResolver(strict=args.strict),
        fetcher=QuoteFetcher(max_attempts=args.attempts, timeout=args.timeout),
        extractor=get_extractor(args.extractor),
    )
    summary = RefreshOrchestrator(service).run(ledger)

    if args.export:
        os.makedirs(args.export, exist_ok=True)
        ef = ExcelFormatter()
        ef.add_ledger_snapshot(ledger.snapshot(), run_at=summary.run_at)
        xlsx_name = f"PORTFOLIO_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        spath = ef.save(xlsx_name, args.export)
        if spath:
            log.info(f"Excel: {spath}")

    log.summary_table("Quote Refresh Summary", [
        ("Run at", summary.run_at),
        ("Symbols", str(summary.total)),
        ("Prices found", str(summary.succeeded)),
        ("Failed (kept buffered)", str(summary.failed)),
        ("Elapsed", str(datetime.datetime.now() - start)),
    ])
    if summary.total and not summary.succeeded:
        log.err("No prices found, check the quote source and network")
    elif summary.failed:
        log.warn(f"{summary.failed} symbol(s) without a price this run")
    else:
        log.ok("Quote refresh complete")
    return summary


if __name__ == "__main__":
    main()
