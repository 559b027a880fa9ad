"""
Per-symbol quote lookup: resolve, fetch, extract.
"""

import logging

from models import FetchFailure, QuoteResult
from sources.quotes.fetcher import QuoteFetcher
from sources.quotes.providers import get_extractor
from sources.quotes.providers.base import PriceExtractor, QuoteError
from sources.quotes.resolver import ExchangeUrlResolver


logger = logging.getLogger(__name__)


class QuoteLookupService:
    """
    Composes resolver -> fetcher -> extractor.

    Every failure, whatever stage it came from, collapses to
    QuoteResult.failure(). The cause is only logged.
    """

    def __init__(
        self,
        resolver: ExchangeUrlResolver = None,
        fetcher: QuoteFetcher = None,
        extractor: PriceExtractor = None,
    ):
        self.resolver = resolver or ExchangeUrlResolver()
        self.fetcher = fetcher or QuoteFetcher()
        self.extractor = extractor or get_extractor()

    def lookup(self, symbol: str, exchange_code: str) -> QuoteResult:
        try:
            url = self.resolver.resolve(symbol, exchange_code)
        except QuoteError as e:
            logger.warning(f"{symbol}: {e}")
            return QuoteResult.failure()

        page = self.fetcher.fetch(url)
        if isinstance(page, FetchFailure):
            logger.warning(
                f"{symbol}: page failed to load after {page.attempts} attempt(s) "
                f"({page.reason.value}, last status {page.last_status})"
            )
            return QuoteResult.failure()

        try:
            price = self.extractor.extract(page.body)
        except QuoteError as e:
            logger.warning(f"{symbol}: {type(e).__name__}: {e}")
            return QuoteResult.failure()

        logger.debug(f"{symbol}: {price} (attempt {page.attempts})")
        return QuoteResult.ok(price)
