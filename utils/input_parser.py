"""
Parse portfolio lists from portfolio.txt or CLI arguments.

File format, one instrument per line:

    # symbol  exchange
    DIS       USA
    ES3       SGX
    2388      HKEX    # inline comments are fine
    AAPL              # exchange defaults to USA
"""

import os

from models import Exchange, PortfolioRow


BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_INPUT_FILE = os.path.join(BASE_DIR, "portfolio.txt")


def parse_line(line: str) -> PortfolioRow | None:
    """Parse one line into a PortfolioRow, or None for blanks and comments."""
    line = line.split("#")[0].strip()
    if not line:
        return None
    parts = line.replace(",", " ").split()
    symbol = parts[0].upper()
    exchange = parts[1] if len(parts) > 1 else Exchange.USA.value
    return PortfolioRow(symbol=symbol, exchange=exchange)


def parse_input_file(path: str = DEFAULT_INPUT_FILE) -> list[PortfolioRow]:
    """
    Read portfolio rows from a text file (# for comments, blank lines ignored).
    Order is preserved; it becomes the row order in the ledger.
    """
    rows = []
    with open(path, 'r') as f:
        for line in f:
            row = parse_line(line)
            if row:
                rows.append(row)
    return rows


def parse_pairs(pairs: list[str]) -> list[PortfolioRow]:
    """Parse CLI tokens like ['ES3:SGX', 'DIS'] into rows."""
    rows = []
    for token in pairs:
        symbol, _, exchange = token.partition(":")
        rows.append(PortfolioRow(symbol=symbol.upper(), exchange=exchange or Exchange.USA.value))
    return rows
