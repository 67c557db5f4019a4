"""Conversion between provider frames, price points and response rows."""

from collections.abc import Sequence
from typing import Any

import pandas as pd

from river_mcp.utils.indicators import LONG_WINDOW, to_price_series
from river_mcp.valuation.models import DayRecord, PricePoint


def frame_to_price_points(df: pd.DataFrame) -> list[PricePoint]:
    """
    Extract (timestamp, close) pairs from a yfinance history frame.

    The frame index holds the bar datetimes (naive values are taken as
    UTC). Missing or non-numeric closes become None.

    Args:
        df: Raw DataFrame from yfinance

    Returns:
        Chronological list of PricePoints
    """
    if df.empty:
        return []

    df = df.copy()

    # Handle multi-index from yf.download
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    df.columns = [str(c).lower() for c in df.columns]
    if "close" not in df.columns:
        raise ValueError("Price history has no close column")

    df = df.sort_index()
    closes = to_price_series(df["close"].tolist())
    timestamps = [int(pd.Timestamp(ts).timestamp()) for ts in df.index]

    return [
        PricePoint(timestamp=ts, price=None if pd.isna(close) else float(close))
        for ts, close in zip(timestamps, closes)
    ]


def history_window(
    history: Sequence[DayRecord],
    warm_only: bool = True,
    limit: int | None = None,
) -> list[DayRecord]:
    """
    Slice the assembled history for display.

    warm_only drops the long-average warm-up (the first LONG_WINDOW - 1
    records); limit keeps only the most recent records.
    """
    records = list(history)
    if warm_only:
        records = records[LONG_WINDOW - 1:]
    if limit is not None and limit >= 0:
        records = records[-limit:] if limit else []
    return records


def records_to_rows(records: Sequence[DayRecord], decimals: int = 4) -> list[dict[str, Any]]:
    """Convert records to list of dicts with rounded floats."""
    rows = []
    for record in records:
        row = record.to_row()
        row["short_avg"] = round(row["short_avg"], decimals)
        row["long_avg"] = round(row["long_avg"], decimals)
        row["bands"] = [round(b, decimals) for b in row["bands"]]
        if row["price"] is not None:
            row["price"] = round(row["price"], decimals)
        rows.append(row)
    return rows
