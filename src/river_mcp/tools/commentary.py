"""Narrative commentary tool."""

from time import perf_counter
from typing import Any

from river_mcp.data.narrative_client import generate_narrative
from river_mcp.tools.chart import load_river
from river_mcp.utils.provenance import build_error_response, build_meta
from river_mcp.utils.validators import DEFAULT_PERIOD, FetchParams
from river_mcp.valuation.history import build_summary


async def river_commentary(symbol: str, period: str = DEFAULT_PERIOD) -> dict[str, Any]:
    """
    Summarize the latest river record and ask the language model about it.

    Args:
        symbol: Ticker symbol
        period: Lookback period

    Returns:
        Dict with zone, summary and narrative text
    """
    start_time = perf_counter()

    try:
        params = FetchParams(symbol=symbol, period=period)
    except ValueError as e:
        return build_error_response(
            error_type="invalid_parameters",
            message=str(e),
            symbol=symbol,
        )

    loaded = await load_river(params)
    if isinstance(loaded, dict):
        return loaded
    analysis, provenance = loaded

    summary = build_summary(analysis)
    if summary is None:
        return build_error_response(
            error_type="data_unavailable",
            message=f"No price history to summarize for {params.symbol}",
            symbol=params.symbol,
        )

    text, narrative_prov = await generate_narrative(summary)
    provenance["narrative"] = narrative_prov

    return {
        "meta": build_meta("river_commentary", (perf_counter() - start_time) * 1000),
        "data_provenance": provenance,
        "symbol": analysis.symbol,
        "zone": analysis.zone.value,
        "zone_label": analysis.zone.label,
        "model_label": analysis.model.label,
        "summary": summary.to_dict(),
        "narrative": text,
    }
