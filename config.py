"""
Configuration management for the portfolio quote refresh pipeline.

Values come from environment variables (a `.env` file at the repo root is
loaded first), falling back to the defaults below.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR: Path = Path(__file__).parent
load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Pipeline configuration."""

    # Paths
    LEDGER_PATH: str = os.getenv("QUOTES_LEDGER_PATH", str(BASE_DIR / "data" / "portfolio.xlsx"))
    SHEET_NAME: str = os.getenv("QUOTES_SHEET_NAME", "buffer")
    LOG_DIR: str = os.getenv("QUOTES_LOG_DIR", str(BASE_DIR / "logs"))

    # Quote source
    BASE_URL: str = os.getenv("QUOTES_BASE_URL", "https://finance.yahoo.com/quote")
    MAX_ATTEMPTS: int = int(os.getenv("QUOTES_MAX_ATTEMPTS", "3"))
    TIMEOUT: float = float(os.getenv("QUOTES_TIMEOUT", "10"))  # seconds, per request

    # Parsing
    EXTRACTOR: str = os.getenv("QUOTES_EXTRACTOR", "pattern")
    STRICT_EXCHANGE: bool = _env_bool("QUOTES_STRICT_EXCHANGE", False)


settings = Settings()
