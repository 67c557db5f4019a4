"""Valuation river tools."""

from river_mcp.tools.commentary import river_commentary
from river_mcp.tools.chart import load_river, river_chart

__all__ = [
    "load_river",
    "river_chart",
    "river_commentary",
]
