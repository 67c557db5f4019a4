"""Valuation river core: model selection, bands, zones and history."""

from river_mcp.valuation.history import analyze_river, assemble_history, build_summary
from river_mcp.valuation.models import (
    DayRecord,
    EarningsMultiple,
    Fundamentals,
    PricePoint,
    RiverAnalysis,
    TrendCenterMultiple,
    ValuationModel,
    ValuationSummary,
    Zone,
)
from river_mcp.valuation.river import (
    classify_record,
    classify_zone,
    generate_bands,
    select_model,
)

__all__ = [
    # Pipeline
    "analyze_river",
    "assemble_history",
    "build_summary",
    # Components
    "classify_record",
    "classify_zone",
    "generate_bands",
    "select_model",
    # Types
    "DayRecord",
    "EarningsMultiple",
    "Fundamentals",
    "PricePoint",
    "RiverAnalysis",
    "TrendCenterMultiple",
    "ValuationModel",
    "ValuationSummary",
    "Zone",
]
