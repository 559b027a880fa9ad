"""
Thin wrapper around requests.Session used by every HTTP caller.

Sends a realistic browser User-Agent (fake_useragent) and never raises on
HTTP error statuses, so callers can inspect `status_code` themselves.
Transport failures (DNS, connection reset, timeout) are logged and surface
as a None return.
"""

import logging
from typing import Optional

import requests
from fake_useragent import UserAgent

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


class RequestSession:
    """requests.Session with browser headers and mute-on-status semantics."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: Optional[str] = None):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or UserAgent().random,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def get(self, url: str, **kwargs) -> Optional[requests.Response]:
        """
        GET a URL and return the response whatever its status code.

        Returns None when the request itself could not be completed.
        """
        kwargs.setdefault("timeout", self.timeout)
        try:
            return self.session.get(url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"GET {url} failed: {e}")
            return None

    def close(self) -> None:
        self.session.close()
