"""Tests for Pydantic data models (PortfolioRow, QuoteResult, RunSummary)."""

import pytest
from pydantic import ValidationError

from models import FAILURE_SENTINEL, Exchange, PortfolioRow, QuoteResult, RunSummary


# ---------------------------------------------------------------------------
# PortfolioRow
# ---------------------------------------------------------------------------

class TestPortfolioRow:
    def test_text_symbol(self):
        row = PortfolioRow(symbol="ES3", exchange="SGX")
        assert row.symbol == "ES3"
        assert row.exchange == "SGX"

    def test_integer_symbol_from_sheet(self):
        assert PortfolioRow(symbol=2388, exchange="HKEX").symbol == "2388"

    def test_float_symbol_drops_decimal(self):
        assert PortfolioRow(symbol=2388.0, exchange="HKEX").symbol == "2388"

    def test_leading_zero_text_kept(self):
        assert PortfolioRow(symbol="0700", exchange="HKEX").symbol == "0700"

    def test_whitespace_stripped(self):
        row = PortfolioRow(symbol="  DIS ", exchange=" usa ")
        assert row.symbol == "DIS"
        assert row.exchange == "USA"

    def test_exchange_enum_accepted(self):
        assert PortfolioRow(symbol="ES3", exchange=Exchange.SGX).exchange == "SGX"

    def test_unknown_exchange_not_rejected(self):
        assert PortfolioRow(symbol="X", exchange="nasdaq").exchange == "NASDAQ"

    def test_missing_exchange_defaults_to_usa(self):
        assert PortfolioRow(symbol="DIS").exchange == "USA"

    @pytest.mark.parametrize("exchange", [None, "", "   "])
    def test_blank_exchange_is_usa(self, exchange):
        assert PortfolioRow(symbol="DIS", exchange=exchange).exchange == "USA"

    def test_blank_symbol_raises(self):
        with pytest.raises(ValidationError):
            PortfolioRow(symbol="   ", exchange="USA")

    def test_frozen(self):
        row = PortfolioRow(symbol="DIS", exchange="USA")
        with pytest.raises(ValidationError):
            row.symbol = "AAPL"


# ---------------------------------------------------------------------------
# QuoteResult
# ---------------------------------------------------------------------------

class TestQuoteResult:
    def test_ok(self):
        r = QuoteResult.ok(28.2)
        assert not r.failed
        assert r.as_cell() == 28.2

    def test_failure(self):
        r = QuoteResult.failure()
        assert r.failed
        assert r.value is None
        assert r.as_cell() == FAILURE_SENTINEL

    def test_zero_is_a_price(self):
        assert not QuoteResult.ok(0.0).failed


class TestRunSummary:
    def test_defaults(self):
        s = RunSummary(run_at="10:00:00 01/02/26")
        assert s.total == 0
        assert s.failed_rows == []
