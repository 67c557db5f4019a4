"""Valuation River MCP Server using FastMCP."""

import json
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from river_mcp import SCHEMA_VERSION, SERVER_VERSION
from river_mcp.data.yfinance_client import shutdown_executor
from river_mcp.prompts.templates import get_prompt
from river_mcp.tools import river_chart, river_commentary
from river_mcp.utils.validators import DEFAULT_PERIOD

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Stop the yfinance executor when the server shuts down."""
    try:
        yield {}
    finally:
        logger.info("Shutting down yfinance executor")
        await shutdown_executor()


# Create FastMCP server instance
mcp = FastMCP(
    name="valuation-river",
    lifespan=lifespan,
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_river_chart(
    symbol: str,
    period: str = DEFAULT_PERIOD,
    include_history: bool = True,
    warm_only: bool = True,
    history_limit: int | None = None,
) -> str:
    """
    Compute the valuation river (five price bands per day) and the current zone.

    Equities with positive trailing EPS use the PE River (EPS x 12/16/20/24/28);
    everything else uses the MA River (200-day average x 0.8/1.0/1.2/1.4/1.6).

    Args:
        symbol: Ticker symbol (e.g., AAPL, 2330, 0050.TW). Bare numeric codes get .TW
        period: Lookback period - 1mo, 3mo, 6mo, 1y, 2y, 5y, 10y, ytd, max (default: 2y)
        include_history: Include per-day records for charting (default: true)
        warm_only: Skip the first 199 records while the 200-day average warms up (default: true)
        history_limit: Return only the most recent N records (optional)

    Returns:
        JSON with zone, zone_label, model, latest bands and averages, and history rows
    """
    result = await river_chart(
        symbol=symbol,
        period=period,
        include_history=include_history,
        warm_only=warm_only,
        history_limit=history_limit,
    )
    return json.dumps(result, indent=2, default=str, ensure_ascii=False)


@mcp.tool
async def get_river_commentary(symbol: str, period: str = DEFAULT_PERIOD) -> str:
    """
    Get analyst-style commentary (Traditional Chinese) on the current river zone.

    Requires OPENAI_API_KEY; without it a fixed notice is returned instead.

    Args:
        symbol: Ticker symbol
        period: Lookback period (default: 2y)

    Returns:
        JSON with zone, the valuation summary sent to the model, and narrative text
    """
    result = await river_commentary(symbol=symbol, period=period)
    return json.dumps(result, indent=2, default=str, ensure_ascii=False)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def river_review(symbol: str) -> str:
    """Valuation river review with zone, bands and commentary."""
    result = get_prompt("river_review", {"symbol": symbol})
    if result:
        return result["messages"][0]["content"]
    return f"Review the valuation river for {symbol} using get_river_chart."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Valuation River MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
