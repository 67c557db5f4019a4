"""History assembly and the per-request river pipeline."""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo

import pytz

from river_mcp.utils.indicators import compute_river_averages
from river_mcp.valuation.models import (
    DayRecord,
    Fundamentals,
    PricePoint,
    RiverAnalysis,
    ValuationModel,
    ValuationSummary,
)
from river_mcp.valuation.river import classify_record, generate_bands, select_model

logger = logging.getLogger(__name__)


def _resolve_timezone(tz: str | None) -> tzinfo:
    """Exchange timezone when the provider supplied a valid one, else UTC."""
    if not tz:
        return pytz.utc
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown exchange timezone {tz!r}, dating records in UTC")
        return pytz.utc


def format_trading_date(timestamp: int, zone: tzinfo = pytz.utc) -> str:
    """Calendar date (YYYY-MM-DD) of an epoch timestamp in the given timezone."""
    return datetime.fromtimestamp(timestamp, tz=zone).strftime("%Y-%m-%d")


def assemble_history(
    points: Sequence[PricePoint],
    short_avg: Sequence[float],
    long_avg: Sequence[float],
    model: ValuationModel,
    tz: str | None = None,
) -> tuple[DayRecord, ...]:
    """
    Join prices, both averages and the day's bands into DayRecords.

    Pure join: one record per input index, same order, nothing filtered.

    Args:
        points: Chronological price points
        short_avg: Short-window average aligned with points
        long_avg: Long-window average aligned with points
        model: Valuation model chosen for this analysis
        tz: Exchange timezone name used to date the records (UTC if None)

    Returns:
        Tuple of DayRecords, empty when points is empty

    Raises:
        ValueError: If the input sequences differ in length
    """
    if not (len(points) == len(short_avg) == len(long_avg)):
        raise ValueError(
            f"Misaligned inputs: points={len(points)}, "
            f"short_avg={len(short_avg)}, long_avg={len(long_avg)}"
        )

    zone = _resolve_timezone(tz)
    return tuple(
        DayRecord(
            date=format_trading_date(point.timestamp, zone),
            timestamp=point.timestamp,
            price=point.price,
            short_avg=short,
            long_avg=center,
            bands=generate_bands(model, model.base_value(center)),
        )
        for point, short, center in zip(points, short_avg, long_avg)
    )


def analyze_river(
    symbol: str,
    points: Iterable[PricePoint],
    fundamentals: Fundamentals,
) -> RiverAnalysis:
    """
    Run the full river computation for one request.

    Args:
        symbol: Provider symbol
        points: Chronological price points (may be empty)
        fundamentals: Fundamentals for this request

    Returns:
        RiverAnalysis; empty history and Zone.UNKNOWN when there is no data
    """
    points = tuple(points)
    short_avg, long_avg = compute_river_averages(p.price for p in points)
    model = select_model(fundamentals)
    history = assemble_history(
        points, short_avg, long_avg, model, tz=fundamentals.exchange_timezone
    )
    zone = classify_record(history[-1] if history else None)

    logger.debug(f"analyze_river({symbol}): {len(history)} records, model={model.kind}, zone={zone.value}")

    return RiverAnalysis(
        symbol=symbol,
        fundamentals=fundamentals,
        model=model,
        history=history,
        zone=zone,
    )


def build_summary(analysis: RiverAnalysis) -> ValuationSummary | None:
    """
    Summary record for the narrative generator.

    Returns:
        ValuationSummary for the latest record, or None without history
    """
    latest = analysis.latest
    if latest is None:
        return None

    fundamentals = analysis.fundamentals
    price = latest.price if latest.price is not None else fundamentals.latest_price

    return ValuationSummary(
        symbol=analysis.symbol,
        display_name=fundamentals.display_name,
        price=price,
        currency=fundamentals.currency,
        trailing_eps=fundamentals.trailing_eps,
        model_kind=analysis.model.kind,
        zone=analysis.zone,
        bands=latest.bands,
        short_avg=latest.short_avg,
        long_avg=latest.long_avg,
    )
