"""
Map a (symbol, exchange code) pair to a quote page URL.
"""

import logging
import random
from typing import Optional

from config import settings
from models import Exchange
from sources.quotes.providers.base import UnknownExchangeError


logger = logging.getLogger(__name__)

SUFFIXES = {
    Exchange.USA.value: "",
    Exchange.SGX.value: ".SI",
    Exchange.HKEX.value: ".HK",
    Exchange.XSSC.value: ".SS",
}


class ExchangeUrlResolver:
    """
    Builds quote page URLs.

    Unknown exchange codes fall back to the USA form (no suffix) unless the
    resolver is strict, in which case UnknownExchangeError is raised.

    Every URL carries a random `p` query value in [0, 999] so upstream caches
    and rate-limit heuristics see distinct requests. It means nothing.
    """

    def __init__(self, base_url: str = None, strict: bool = False, rng: Optional[random.Random] = None):
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.strict = strict
        self.rng = rng or random.Random()

    def suffix_for(self, exchange_code: str) -> str:
        code = (exchange_code or "").strip().upper()
        if code in SUFFIXES:
            return SUFFIXES[code]
        if self.strict:
            raise UnknownExchangeError(f"Unknown exchange code: {exchange_code!r}")
        logger.warning(f"Unknown exchange code {exchange_code!r}, treating as {Exchange.USA.value}")
        return SUFFIXES[Exchange.USA.value]

    def resolve(self, symbol: str, exchange_code: str) -> str:
        suffix = self.suffix_for(exchange_code)
        return f"{self.base_url}/{symbol}{suffix}?p={self.rng.randint(0, 999)}"
