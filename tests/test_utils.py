"""Tests for the utils helpers: portfolio file parsing, HTTP session, Excel export, console log."""

import openpyxl
import pytest
import requests
from unittest.mock import MagicMock, patch

from models import FAILURE_SENTINEL, LedgerRow
from utils import log
from utils.excel_formatter import ExcelFormatter
from utils.input_parser import parse_input_file, parse_line, parse_pairs
from utils.session import RequestSession


# ---------------------------------------------------------------------------
# input_parser
# ---------------------------------------------------------------------------

class TestInputParser:
    def test_file(self, tmp_path):
        f = tmp_path / "portfolio.txt"
        f.write_text(
            "# my portfolio\n"
            "\n"
            "es3 SGX\n"
            "2388   HKEX   # bank\n"
            "DIS\n"
            "600519,XSSC\n"
        )
        rows = parse_input_file(str(f))
        assert [(r.symbol, r.exchange) for r in rows] == [
            ("ES3", "SGX"), ("2388", "HKEX"), ("DIS", "USA"), ("600519", "XSSC"),
        ]

    def test_comment_line(self):
        assert parse_line("   # nothing here") is None

    def test_pairs(self):
        rows = parse_pairs(["es3:sgx", "DIS"])
        assert [(r.symbol, r.exchange) for r in rows] == [("ES3", "SGX"), ("DIS", "USA")]


# ---------------------------------------------------------------------------
# RequestSession
# ---------------------------------------------------------------------------

class TestRequestSession:
    def _make_session(self):
        with patch("utils.session.UserAgent") as ua:
            ua.return_value.random = "Mozilla/5.0 test"
            return RequestSession(timeout=5)

    def test_browser_user_agent(self):
        s = self._make_session()
        assert s.session.headers["User-Agent"] == "Mozilla/5.0 test"

    def test_returns_error_responses(self):
        s = self._make_session()
        resp = MagicMock(status_code=500)
        s.session = MagicMock()
        s.session.get.return_value = resp
        assert s.get("http://x") is resp

    def test_default_timeout_passed(self):
        s = self._make_session()
        s.session = MagicMock()
        s.get("http://x")
        assert s.session.get.call_args.kwargs["timeout"] == 5

    def test_transport_error_returns_none(self):
        s = self._make_session()
        s.session = MagicMock()
        s.session.get.side_effect = requests.exceptions.ConnectionError("reset")
        assert s.get("http://x") is None


# ---------------------------------------------------------------------------
# ExcelFormatter
# ---------------------------------------------------------------------------

class TestExcelFormatter:
    def test_snapshot_export(self, tmp_path):
        rows = [
            LedgerRow(symbol="ES3", exchange="SGX", latest_observed=3.41, buffered=3.41),
            LedgerRow(symbol="2388", exchange="HKEX", latest_observed=FAILURE_SENTINEL, buffered=27.0),
            LedgerRow(symbol="DIS", exchange="USA"),
        ]
        ef = ExcelFormatter()
        df = ef.add_ledger_snapshot(rows, run_at="09:30:00 10/19/26")
        assert list(df["status"]) == ["ok", "failed", "pending"]

        spath = ef.save("snapshot.xlsx", str(tmp_path))
        ws = openpyxl.load_workbook(spath)["Portfolio"]
        header = [c.value for c in ws[1]]
        assert header[:4] == ["symbol", "exchange", "latest_observed", "buffered"]
        assert ws["B3"].value == "HKEX"
        assert ws["D4"].value is None
        assert "Portfolio" in ws.tables

    def test_rejects_non_xlsx(self, tmp_path):
        ef = ExcelFormatter()
        ef.add_ledger_snapshot([LedgerRow(symbol="DIS", exchange="USA")])
        assert ef.save("snapshot.csv", str(tmp_path)) is None

    def test_rejects_missing_dir(self, tmp_path):
        ef = ExcelFormatter()
        ef.add_ledger_snapshot([LedgerRow(symbol="DIS", exchange="USA")])
        assert ef.save("snapshot.xlsx", str(tmp_path / "nope")) is None


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

class TestConsoleLog:
    def test_symbol_msg_names_row(self, capsys):
        log.symbol_msg("2388", "HKEX", "no price")
        out = capsys.readouterr().out
        assert "2388" in out
        assert "@HKEX" in out
        assert "no price" in out

    def test_err(self, capsys):
        log.err("No prices found")
        assert "ERR No prices found" in capsys.readouterr().out
