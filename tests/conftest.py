"""Pytest configuration and fixtures."""

import pandas as pd
import pytest

from river_mcp.valuation.models import Fundamentals, PricePoint

# 2024-01-02 00:00:00 UTC
START_TS = 1704153600
DAY = 86400


@pytest.fixture
def sample_history_df() -> pd.DataFrame:
    """Sample yfinance-style history frame with a missing close."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-02", periods=6, freq="D", tz="UTC"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0],
            "Close": [100.5, 102.0, float("nan"), 102.0, 104.0, 103.5],
            "Volume": [1000000] * 6,
        }
    ).set_index("Date")


@pytest.fixture
def rising_points() -> list[PricePoint]:
    """250 daily points rising by 1 from 100, one missing close at index 210."""
    points = []
    for i in range(250):
        price = None if i == 210 else 100.0 + i
        points.append(PricePoint(timestamp=START_TS + i * DAY, price=price))
    return points


@pytest.fixture
def equity_fundamentals() -> Fundamentals:
    """Profitable equity, selects the earnings model."""
    return Fundamentals(
        trailing_eps=5.0,
        trailing_pe=20.0,
        instrument_type="EQUITY",
        display_name="Taiwan Semiconductor",
        currency="TWD",
        latest_price=100.0,
        latest_change_percent=1.25,
        exchange_timezone="Asia/Taipei",
    )


@pytest.fixture
def etf_fundamentals() -> Fundamentals:
    """ETF without earnings, selects the trend-center model."""
    return Fundamentals(
        trailing_eps=0.0,
        trailing_pe=None,
        instrument_type="ETF",
        display_name="Yuanta Taiwan 50",
        currency="TWD",
        latest_price=150.0,
    )
