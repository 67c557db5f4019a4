"""Utility modules."""

from river_mcp.utils.indicators import (
    LONG_WINDOW,
    SHORT_WINDOW,
    compute_moving_average,
    compute_river_averages,
)
from river_mcp.utils.prices import frame_to_price_points, history_window, records_to_rows
from river_mcp.utils.provenance import (
    build_error_response,
    build_meta,
    build_narrative_provenance,
    build_provenance,
)
from river_mcp.utils.sanitize import sanitize_text
from river_mcp.utils.validators import FetchParams, format_symbol

__all__ = [
    "LONG_WINDOW",
    "SHORT_WINDOW",
    "compute_moving_average",
    "compute_river_averages",
    "frame_to_price_points",
    "history_window",
    "records_to_rows",
    "build_error_response",
    "build_meta",
    "build_narrative_provenance",
    "build_provenance",
    "sanitize_text",
    "FetchParams",
    "format_symbol",
]
