"""Tests for validators and FetchParams."""

import pytest

from river_mcp.utils.validators import (
    VALID_INTERVALS,
    VALID_PERIODS,
    FetchParams,
    format_symbol,
)


class TestFormatSymbol:
    """Tests for format_symbol."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2330", "2330.TW"),
            ("aapl ", "AAPL"),
            ("0050.tw", "0050.TW"),
            ("  6488.two", "6488.TWO"),
            ("brk.b", "BRK.B"),
            ("^twii", "^TWII"),
        ],
    )
    def test_format(self, raw: str, expected: str) -> None:
        """Test trimming, uppercasing and the Taiwan suffix."""
        assert format_symbol(raw) == expected

    def test_empty(self) -> None:
        """Test blank input stays empty."""
        assert format_symbol("   ") == ""


class TestFetchParams:
    """Tests for FetchParams dataclass."""

    def test_defaults(self) -> None:
        """Test the river defaults to two years of daily bars."""
        params = FetchParams(symbol="AAPL")
        assert params.period == "2y"
        assert params.interval == "1d"

    def test_symbol_formatted(self) -> None:
        """Test symbol goes through format_symbol."""
        assert FetchParams(symbol=" 2330 ").symbol == "2330.TW"

    def test_period_normalization(self) -> None:
        """Test period is normalized to lowercase."""
        params = FetchParams(symbol="AAPL", period=" 5Y ")
        assert params.period == "5y"

    def test_interval_normalization(self) -> None:
        """Test interval is normalized to lowercase."""
        params = FetchParams(symbol="AAPL", interval="1WK")
        assert params.interval == "1wk"

    def test_invalid_period_raises(self) -> None:
        """Test invalid period raises ValueError."""
        with pytest.raises(ValueError, match="Invalid period"):
            FetchParams(symbol="AAPL", period="1d")

    def test_invalid_interval_raises(self) -> None:
        """Test intraday intervals are rejected."""
        with pytest.raises(ValueError, match="Invalid interval"):
            FetchParams(symbol="AAPL", interval="5m")

    def test_empty_symbol_raises(self) -> None:
        """Test empty symbol raises ValueError."""
        with pytest.raises(ValueError, match="Symbol"):
            FetchParams(symbol="  ")

    def test_frozen(self) -> None:
        """Test FetchParams is immutable."""
        params = FetchParams(symbol="AAPL")
        with pytest.raises(AttributeError):
            params.symbol = "MSFT"  # type: ignore[misc]

    def test_history_kwargs(self) -> None:
        """Test kwargs passed to yfinance use raw closes without actions."""
        kwargs = FetchParams(symbol="AAPL", period="1y").to_history_kwargs()
        assert kwargs == {"period": "1y", "interval": "1d", "auto_adjust": False, "actions": False}

    def test_allowlists(self) -> None:
        """Test allowlists cover the long lookbacks the river needs."""
        assert {"1y", "2y", "5y", "max"} <= VALID_PERIODS
        assert "1d" in VALID_INTERVALS
