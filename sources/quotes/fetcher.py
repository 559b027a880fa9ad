"""
Quote page retrieval with a bounded, early-exit retry loop.
"""

import logging
from typing import Union

from config import settings
from models import FailureReason, FetchFailure, RawPage
from sources.quotes.providers.base import FetchExhaustedError
from utils.session import RequestSession


logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200


class QuoteFetcher:
    """
    GETs a URL up to `max_attempts` times, stopping at the first HTTP 200.

    Anything other than an exact 200 counts as a failed attempt. There is no
    delay between attempts. A transport failure (no response at all) ends the
    fetch straight away.
    """

    def __init__(self, session: RequestSession = None, max_attempts: int = None, timeout: float = None):
        self.max_attempts = settings.MAX_ATTEMPTS if max_attempts is None else max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session = session or RequestSession(timeout=timeout or settings.TIMEOUT)

    def fetch(self, url: str) -> Union[RawPage, FetchFailure]:
        last_status = None
        for attempt in range(1, self.max_attempts + 1):
            resp = self.session.get(url)
            if resp is None:
                return FetchFailure(
                    url=url, attempts=attempt,
                    reason=FailureReason.TRANSPORT_ERROR, last_status=last_status,
                )

            last_status = resp.status_code
            if last_status == SUCCESS_STATUS:
                logger.debug(f"Loaded {url} on attempt {attempt}")
                return RawPage(url=url, status_code=last_status, body=resp.text, attempts=attempt)

            logger.debug(f"Attempt {attempt}/{self.max_attempts} for {url}: HTTP {last_status}")

        return FetchFailure(
            url=url, attempts=self.max_attempts,
            reason=FailureReason.FETCH_EXHAUSTED, last_status=last_status,
        )

    def fetch_or_raise(self, url: str) -> RawPage:
        """Like fetch(), but raise FetchExhaustedError instead of returning a failure."""
        result = self.fetch(url)
        if isinstance(result, FetchFailure):
            raise FetchExhaustedError(
                f"{url}: no HTTP 200 after {result.attempts} attempt(s) ({result.reason.value})"
            )
        return result
