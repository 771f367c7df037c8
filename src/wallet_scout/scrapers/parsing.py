"""Text parsing helpers for values rendered on BullX."""

import re

_MULTIPLIERS = {"K": 1_000, "M": 1_000_000}

# Profit cells look like "$1,234.5" or "$0"
_CELL_NUMBER = re.compile(r"\$?\s*([\d.]+)")


def parse_amount(text: str | None) -> float:
    """Parse an amount like '$1.2M' or '430K' into dollars.

    Everything except digits, dots and K/M is dropped before parsing.
    Never raises: text with no usable number parses as 0.
    """
    if not text:
        return 0.0

    cleaned = re.sub(r"[^0-9.KkMm]", "", text)
    suffix = cleaned[-1:].upper()
    multiplier = _MULTIPLIERS.get(suffix, 1)

    # Only the leading number counts, stray letters in the middle are ignored
    match = re.match(r"\d*\.?\d+", cleaned)
    if not match:
        return 0.0

    try:
        value = float(match.group(0))
    except ValueError:
        return 0.0
    return value * multiplier if suffix in _MULTIPLIERS else value


def parse_cell_number(text: str | None) -> float | None:
    """Read the first number out of a table cell. Returns None if there is none."""
    if not text:
        return None
    match = _CELL_NUMBER.search(text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def extract_portfolio_id(href: str | None) -> str | None:
    """Extract the portfolio ID from a link like '/portfolio/AbC123'."""
    if not href or "/portfolio/" not in href:
        return None
    portfolio_id = href.split("/portfolio/", 1)[1]
    portfolio_id = re.split(r"[/?#]", portfolio_id, maxsplit=1)[0]
    return portfolio_id or None


def compute_roi(revenue: float, spent: float) -> float | None:
    """ROI in percent. None when nothing was spent."""
    if spent <= 0:
        return None
    return (revenue - spent) / spent * 100


def format_roi(roi: float) -> str:
    return f"{roi:.2f}%"


def format_pnl(pnl: float) -> str:
    """Render PnL as a plain number ('1600000', '1234.5')."""
    if float(pnl).is_integer():
        return str(int(pnl))
    return repr(float(pnl))
