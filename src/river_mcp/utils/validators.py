"""Validation utilities and parameter classes."""

import os
import re
from dataclasses import dataclass
from typing import Any

# Allowlists for provider requests
VALID_PERIODS = {"1mo", "3mo", "6mo", "1y", "2y", "5y", "10y", "ytd", "max"}
VALID_INTERVALS = {"1d", "5d", "1wk", "1mo"}

DEFAULT_PERIOD = os.environ.get("RIVER_PERIOD", "2y")
DEFAULT_INTERVAL = "1d"

# Suffix appended to bare numeric codes (Taiwan Stock Exchange)
NUMERIC_SYMBOL_SUFFIX = ".TW"

_LEADING_DIGIT = re.compile(r"^\d")

def format_symbol(raw: str) -> str:
    """
    Normalize user input into a provider symbol.

    Trims and uppercases. Symbols that already carry an exchange suffix
    are kept as-is; bare codes starting with a digit get ``.TW``.

    Examples:
        "2330" -> "2330.TW", " aapl " -> "AAPL", "0050.tw" -> "0050.TW"
    """
    symbol = raw.strip().upper()
    if "." in symbol:
        return symbol
    if _LEADING_DIGIT.match(symbol):
        return f"{symbol}{NUMERIC_SYMBOL_SUFFIX}"
    return symbol

@dataclass(frozen=True)
class FetchParams:
    """Immutable fetch parameters for one river request."""

    symbol: str
    period: str = DEFAULT_PERIOD
    interval: str = DEFAULT_INTERVAL

    def __post_init__(self) -> None:
        symbol = format_symbol(self.symbol)
        if not symbol:
            raise ValueError("Symbol must not be empty")
        object.__setattr__(self, "symbol", symbol)

        # Normalize period/interval: lowercase, strip whitespace, validate
        period = self.period.lower().strip()
        interval = self.interval.lower().strip()

        if period not in VALID_PERIODS:
            raise ValueError(f"Invalid period '{self.period}'. Must be one of: {VALID_PERIODS}")
        if interval not in VALID_INTERVALS:
            raise ValueError(
                f"Invalid interval '{self.interval}'. Must be one of: {VALID_INTERVALS}"
            )

        object.__setattr__(self, "period", period)
        object.__setattr__(self, "interval", interval)

    def to_history_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.Ticker.history()."""
        return {
            "period": self.period,
            "interval": self.interval,
            "auto_adjust": False,
            "actions": False,
        }
