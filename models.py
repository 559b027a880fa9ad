"""
Pydantic data models for the portfolio quote refresh pipeline.

These models carry the typed values that flow between the resolver, fetcher,
extractor, lookup service and the ledger. None of them is persisted as its
own entity; the ledger only ever stores plain column values.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Written into the "latest observed" column when no usable price was obtained.
FAILURE_SENTINEL = -1.0


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Exchange(str, Enum):
    USA = "USA"
    SGX = "SGX"
    HKEX = "HKEX"
    XSSC = "XSSC"


class FailureReason(str, Enum):
    FETCH_EXHAUSTED = "fetch_exhausted"
    TRANSPORT_ERROR = "transport_error"


# ---------------------------------------------------------------------------
# Portfolio input
# ---------------------------------------------------------------------------

class PortfolioRow(BaseModel):
    """
    One tracked instrument, identified by its position in the ledger.

    Spreadsheets hand back all-digit tickers (HKEX) as numbers, so numeric
    symbols are rendered without a trailing decimal.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str
    exchange: str = Exchange.USA.value

    @field_validator("symbol", mode="before")
    @classmethod
    def _normalize_symbol(cls, v):
        if isinstance(v, bool):
            raise ValueError("symbol must be text or a number")
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        v = str(v).strip()
        if not v:
            raise ValueError("symbol must not be empty")
        return v

    @field_validator("exchange", mode="before")
    @classmethod
    def _normalize_exchange(cls, v):
        if isinstance(v, Exchange):
            return v.value
        v = "" if v is None else str(v).strip().upper()
        return v or Exchange.USA.value


# ---------------------------------------------------------------------------
# Fetch outcomes
# ---------------------------------------------------------------------------

class RawPage(BaseModel):
    """A page that loaded with HTTP 200."""
    url: str
    status_code: int = 200
    body: str
    attempts: int


class FetchFailure(BaseModel):
    """No attempt returned HTTP 200 (or the transport failed)."""
    url: str
    attempts: int
    reason: FailureReason
    last_status: Optional[int] = None


# ---------------------------------------------------------------------------
# Lookup + run results
# ---------------------------------------------------------------------------

class QuoteResult(BaseModel):
    """Either a price or a failure. Failures carry no detail."""
    model_config = ConfigDict(frozen=True)

    value: Optional[float] = None

    @property
    def failed(self) -> bool:
        return self.value is None

    @classmethod
    def ok(cls, value: float) -> "QuoteResult":
        return cls(value=value)

    @classmethod
    def failure(cls) -> "QuoteResult":
        return cls(value=None)

    def as_cell(self) -> float:
        """Value for the always-written latest column."""
        return FAILURE_SENTINEL if self.failed else self.value


class RunSummary(BaseModel):
    """Outcome of a single refresh pass."""
    run_at: str
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_rows: list[int] = Field(default_factory=list)


class LedgerRow(BaseModel):
    """Named view of one ledger row and its two output columns."""
    symbol: str
    exchange: str
    latest_observed: Optional[float] = None
    buffered: Optional[float] = None
