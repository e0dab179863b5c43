"""Utility functions for handling ticker symbols."""

import re

# Letters, digits and the separators exchanges use (BRK.B, BTC-USD, RDS/A).
_SYMBOL_RE = re.compile(r"^[A-Z0-9][A-Z0-9.\-/^=]{0,19}$")


def normalize_symbol(symbol: str) -> str:
    """Trim and uppercase a ticker symbol.

    Raises:
        ValueError: If the symbol is empty or contains unexpected characters.
    """
    normalized = (symbol or "").strip().upper()
    if not _SYMBOL_RE.match(normalized):
        raise ValueError(f"Invalid symbol: {symbol!r}")
    return normalized


def symbols_match(a: str, b: str) -> bool:
    """Case-insensitive symbol comparison."""
    return a.strip().upper() == b.strip().upper()
