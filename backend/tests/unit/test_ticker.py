"""Tests for ticker symbol helpers."""

import pytest

from utils.ticker import normalize_symbol, symbols_match


@pytest.mark.parametrize(
    "raw, expected",
    [("aapl", "AAPL"), ("  brk.b ", "BRK.B"), ("btc-usd", "BTC-USD")],
)
def test_normalize_symbol(raw, expected):
    assert normalize_symbol(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "two words", "^GSPC", "A" * 25])
def test_invalid_symbols_rejected(raw):
    with pytest.raises(ValueError, match="Invalid symbol"):
        normalize_symbol(raw)


def test_symbols_match_ignores_case_and_space():
    assert symbols_match("aapl ", "AAPL")
    assert not symbols_match("AAPL", "AAP")
