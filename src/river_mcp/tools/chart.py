"""Valuation river chart tool."""

from datetime import datetime
from time import perf_counter
from typing import Any

from river_mcp.data.yfinance_client import (
    ServerShuttingDownError,
    fetch_chart,
    fetch_fundamentals,
    get_market_state,
)
from river_mcp.utils.prices import history_window, records_to_rows
from river_mcp.utils.provenance import build_error_response, build_meta, build_provenance
from river_mcp.utils.validators import DEFAULT_PERIOD, FetchParams
from river_mcp.valuation.history import analyze_river
from river_mcp.valuation.models import RiverAnalysis


async def load_river(
    params: FetchParams,
) -> tuple[RiverAnalysis, dict[str, Any]] | dict[str, Any]:
    """
    Fetch chart and fundamentals, then run the river pipeline.

    Shared by the chart and commentary tools.

    Returns:
        Tuple of (RiverAnalysis, data_provenance) or an error response dict
    """
    try:
        chart, price_prov = await fetch_chart(params)
    except ServerShuttingDownError as e:
        return build_error_response("data_unavailable", str(e), params.symbol)
    except ValueError as e:
        return build_error_response(
            error_type="invalid_symbol",
            message=str(e),
            symbol=params.symbol,
        )
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch data: {e}",
            symbol=params.symbol,
        )

    try:
        fundamentals, fund_prov = await fetch_fundamentals(chart)
    except ServerShuttingDownError as e:
        return build_error_response("data_unavailable", str(e), params.symbol)

    analysis = analyze_river(params.symbol, chart.points, fundamentals)

    tz = fundamentals.exchange_timezone or "UTC"
    market_state = get_market_state(tz)
    latest = analysis.latest
    as_of = datetime.utcnow().isoformat() + "Z"

    provenance = {
        "price": build_provenance(
            as_of=as_of,
            bar_timezone=tz,
            market_state=market_state["state"],
            market_state_method=market_state["method"],
            last_bar_date=latest.date if latest else None,
            **price_prov,
        ),
        "fundamentals": build_provenance(as_of=as_of, **fund_prov),
    }
    return analysis, provenance


async def river_chart(
    symbol: str,
    period: str = DEFAULT_PERIOD,
    include_history: bool = True,
    warm_only: bool = True,
    history_limit: int | None = None,
) -> dict[str, Any]:
    """
    Compute the valuation river and classify the latest price.

    Args:
        symbol: Ticker symbol; bare numeric codes get the .TW suffix
        period: Lookback period (default: RIVER_PERIOD or 2y)
        include_history: Include per-day records (default: True)
        warm_only: Skip the long-average warm-up records (default: True)
        history_limit: Keep only the most recent N records (optional)

    Returns:
        Dict with zone, model, latest record, fundamentals and history
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

    if history_limit is not None and history_limit < 0:
        return build_error_response(
            error_type="invalid_parameters",
            message=f"history_limit must be >= 0, got {history_limit}",
            symbol=params.symbol,
        )

    loaded = await load_river(params)
    if isinstance(loaded, dict):
        return loaded
    analysis, provenance = loaded

    fundamentals = analysis.fundamentals
    latest = analysis.latest

    response: dict[str, Any] = {
        "meta": build_meta("river_chart", (perf_counter() - start_time) * 1000),
        "data_provenance": provenance,
        "symbol": analysis.symbol,
        "period": params.period,
        "interval": params.interval,
        "display_name": fundamentals.display_name,
        "currency": fundamentals.currency,
        "latest_price": fundamentals.latest_price,
        "latest_change_percent": fundamentals.latest_change_percent,
        "fundamentals": {
            "trailing_eps": fundamentals.trailing_eps,
            "trailing_pe": fundamentals.trailing_pe,
            "instrument_type": fundamentals.instrument_type or None,
        },
        "model": {
            "kind": analysis.model.kind,
            "label": analysis.model.label,
            "multipliers": list(analysis.model.multipliers),
        },
        "zone": analysis.zone.value,
        "zone_label": analysis.zone.label,
        "latest": records_to_rows([latest])[0] if latest else None,
        "record_count": len(analysis.history),
    }

    if include_history:
        window = history_window(analysis.history, warm_only=warm_only, limit=history_limit)
        response["history"] = records_to_rows(window)
        response["history_rows"] = len(window)

    return response
