"""
Base interface for price extraction strategies, plus the quote error taxonomy.

An extractor turns the body of a quote page into a last-traded price. The
lookup service only talks to this interface, so the markup-scraping approach
can be swapped out without touching the fetch path or the orchestrator.
"""

import math
import re
from abc import ABC, abstractmethod


PRICE_TEXT = re.compile(r"[0-9.]+")


class PriceExtractor(ABC):
    """Abstract base class for price extractors."""

    def __init__(self):
        self.name = self.__class__.__name__

    @abstractmethod
    def extract(self, body: str) -> float:
        """
        Extract the last-traded price from a page body.

        Args:
            body: Page markup as text

        Returns:
            The price as a float

        Raises:
            ParseNotFoundError: If the price element could not be located
            ParseMalformedError: If the located text is not a number
        """
        pass

    @staticmethod
    def _to_float(text: str) -> float:
        """
        Strip thousands separators and delimiters, then parse.

        Only plain digits and periods are accepted, and the result must be a
        finite, non-negative number: -1 is the failure sentinel in the ledger.
        """
        cleaned = text.replace(",", "").replace("<", "").replace(">", "").strip()
        if not PRICE_TEXT.fullmatch(cleaned):
            raise ParseMalformedError(f"Not a price: {text!r}")
        try:
            value = float(cleaned)
        except ValueError:
            raise ParseMalformedError(f"Not a number: {text!r}")
        if not math.isfinite(value) or value < 0:
            raise ParseMalformedError(f"Out of range: {text!r}")
        return value


class QuoteError(Exception):
    """Base exception for quote lookup errors."""
    pass


class UnknownExchangeError(QuoteError):
    """Raised by a strict resolver for an exchange code outside the table."""
    pass


class FetchExhaustedError(QuoteError):
    """Raised when no attempt returned HTTP 200."""
    pass


class ExtractionError(QuoteError):
    """Base exception for price extraction failures."""
    pass


class ParseNotFoundError(ExtractionError):
    """Raised when the price element is missing from the page."""
    pass


class ParseMalformedError(ExtractionError):
    """Raised when the matched price text is not a number."""
    pass
