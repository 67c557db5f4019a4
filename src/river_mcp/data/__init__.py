"""Data layer for the market data provider and the narrative generator."""

from river_mcp.data.narrative_client import generate_narrative
from river_mcp.data.yfinance_client import (
    ChartData,
    RetryResult,
    ServerShuttingDownError,
    YFinanceRetryError,
    fetch_chart,
    fetch_fundamentals,
    get_market_state,
    parse_fundamentals,
    shutdown_executor,
)

__all__ = [
    # Narrative
    "generate_narrative",
    # yfinance
    "ChartData",
    "RetryResult",
    "ServerShuttingDownError",
    "YFinanceRetryError",
    "fetch_chart",
    "fetch_fundamentals",
    "get_market_state",
    "parse_fundamentals",
    "shutdown_executor",
]
