"""Shared fixtures for the test suite."""

import pytest
from unittest.mock import MagicMock

from database import DatabaseManager
from ledger import MemoryLedger
from models import PortfolioRow, QuoteResult


PRICE_PAGE = """<html><body>
<div id="quote-header-info">
<span class="Trsdu(0.3s) Fw(b) Fz(36px) Mb(-4px) D(ib)" data-reactid="50">{price}</span>
<span class="Trsdu(0.3s) Fw(500) Pstart(10px) Fz(24px) C($positiveColor)" data-reactid="51">+0.10 (+0.36%)</span>
</div>
</body></html>"""


@pytest.fixture
def tmp_db(tmp_path):
    """Fresh DatabaseManager backed by a real SQLite DB in tmp_path."""
    db_path = str(tmp_path / "test.db")
    db = DatabaseManager(db_path=db_path)
    yield db
    db.close()


@pytest.fixture
def mock_response():
    """Factory for mock HTTP responses."""
    def _make(status_code=200, text=""):
        resp = MagicMock()
        resp.status_code = status_code
        resp.text = text
        resp.__bool__ = lambda self: self.status_code == 200
        return resp
    return _make


@pytest.fixture
def price_page():
    """Factory for a quote page showing the given price text."""
    def _make(price="28.200"):
        return PRICE_PAGE.format(price=price)
    return _make


@pytest.fixture
def sample_rows():
    return [
        PortfolioRow(symbol="ES3", exchange="SGX"),
        PortfolioRow(symbol="2388", exchange="HKEX"),
        PortfolioRow(symbol="DIS", exchange="USA"),
        PortfolioRow(symbol="600519", exchange="XSSC"),
    ]


@pytest.fixture
def memory_ledger(sample_rows):
    return MemoryLedger(rows=sample_rows)


@pytest.fixture
def scripted_service():
    """
    Factory for a lookup service stub answering from a {symbol: value} map.
    None (or a missing symbol) means the lookup failed.
    """
    def _make(prices):
        service = MagicMock()

        def _lookup(symbol, exchange_code):
            value = prices.get(symbol)
            return QuoteResult.failure() if value is None else QuoteResult.ok(value)

        service.lookup.side_effect = _lookup
        return service
    return _make
