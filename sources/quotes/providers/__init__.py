"""
Price extraction strategies.
"""

from .base import (
    PriceExtractor,
    QuoteError,
    UnknownExchangeError,
    FetchExhaustedError,
    ExtractionError,
    ParseNotFoundError,
    ParseMalformedError,
)
from .pattern import PatternPriceExtractor
from .soup import SoupPriceExtractor


EXTRACTORS = {
    "pattern": PatternPriceExtractor,
    "soup": SoupPriceExtractor,
}


def get_extractor(name: str = "pattern") -> PriceExtractor:
    """Build an extractor by its short name."""
    try:
        return EXTRACTORS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown extractor: {name} (choose from {', '.join(EXTRACTORS)})")
