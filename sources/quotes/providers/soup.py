"""
BeautifulSoup price extractor.

Looks for the first <span> whose class list starts with the price class
prefix and parses its text. Slower than the pattern extractor but tolerant
of attribute order, line breaks and nested markup.
"""

import logging

from bs4 import BeautifulSoup

from .base import PriceExtractor, ParseNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_CLASS_PREFIX = "Trsdu"


class SoupPriceExtractor(PriceExtractor):
    """Structured-parse extractor."""

    def __init__(self, class_prefix: str = DEFAULT_CLASS_PREFIX, parser: str = "html.parser"):
        super().__init__()
        self.class_prefix = class_prefix
        self.parser = parser

    def _is_price_span(self, tag) -> bool:
        if tag.name != "span":
            return False
        classes = tag.get("class") or []
        return bool(classes) and classes[0].startswith(self.class_prefix)

    def extract(self, body: str) -> float:
        soup = BeautifulSoup(body, self.parser)
        span = soup.find(self._is_price_span)
        if span is None:
            raise ParseNotFoundError(f"No <span> with class prefix {self.class_prefix!r}")

        text = span.get_text(strip=True)
        logger.debug(f"Matched span text: {text!r}")
        if not text:
            raise ParseNotFoundError("Price span is empty")

        return self._to_float(text)
