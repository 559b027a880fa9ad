"""
Two-stage text-pattern price extractor for Yahoo Finance quote pages.

Stage 1 grabs the shortest span that opens with the price element's class
marker and closes at the next </span>. Stage 2 pulls the first run of
digits, periods and commas sitting between a '>' and a '<' inside it.

This is scraping, not parsing: it breaks whenever the upstream markup
changes. See SoupPriceExtractor for a structured alternative.
"""

import logging
import re

from .base import PriceExtractor, ParseNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_MARKER = '<span class="Trsdu'


class PatternPriceExtractor(PriceExtractor):
    """Regex-based extractor replicating the legacy sheet script."""

    NUMBER_PATTERN = re.compile(r">[\d.,]*<")

    def __init__(self, marker: str = DEFAULT_MARKER):
        super().__init__()
        self.marker = marker
        # no DOTALL: the element must open and close on one line
        self.element_pattern = re.compile(re.escape(marker) + r".*?</span>")

    def extract(self, body: str) -> float:
        element = self.element_pattern.search(body)
        if not element:
            raise ParseNotFoundError(f"No element starting with {self.marker!r}")
        logger.debug(f"Matched element: {element.group(0)}")

        number = self.NUMBER_PATTERN.search(element.group(0))
        if not number:
            raise ParseNotFoundError("Price element holds no numeric text")

        return self._to_float(number.group(0))
