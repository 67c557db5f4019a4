"""Moving average calculations tolerant of missing prices."""

from collections.abc import Iterable
from typing import Any

import numpy as np
import pandas as pd

SHORT_WINDOW = 60
LONG_WINDOW = 200


def to_price_series(prices: Iterable[Any]) -> pd.Series:
    """
    Coerce raw provider values into a float series.

    None, NaN, infinities and anything non-numeric become NaN, which
    the rolling calculations below skip.
    """
    series = pd.to_numeric(pd.Series(list(prices), dtype=object), errors="coerce")
    return series.astype(float).replace([np.inf, -np.inf], np.nan)


def _mean_of_present(window: np.ndarray) -> float:
    """Mean of the non-NaN values, summed left to right; NaN when none."""
    present = [v for v in window if not np.isnan(v)]
    if not present:
        return np.nan
    return sum(present) / len(present)


def compute_moving_average(prices: Iterable[Any], window: int) -> list[float]:
    """
    Calculate a simple moving average that never returns missing values.

    Two edge branches are part of the contract:

    - insufficient history (index < window - 1): the raw price is passed
      through, or 0.0 when that price is missing. Early values are
      under-smoothed on purpose.
    - all-missing window: when every price in the trailing window is
      missing the average is 0.0.

    Otherwise the value is the mean of the present prices in the trailing
    window ending at that index.

    Args:
        prices: Chronological closes, missing entries allowed
        window: Number of periods for the average

    Returns:
        List of floats with the same length as prices

    Raises:
        ValueError: If window is smaller than 1
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    series = to_price_series(prices)

    # Full window branch: every window summed from scratch, left to right;
    # all-missing windows come back as NaN -> 0.0
    averaged = (
        series.rolling(window=window, min_periods=1)
        .apply(_mean_of_present, raw=True)
        .fillna(0.0)
    )

    # Insufficient history branch
    passthrough = series.fillna(0.0)

    positions = np.arange(len(series))
    values = np.where(positions < window - 1, passthrough.to_numpy(), averaged.to_numpy())
    return [float(v) for v in values]


def compute_river_averages(prices: Iterable[Any]) -> tuple[list[float], list[float]]:
    """
    Calculate the short (60) and long (200) window averages.

    Returns:
        Tuple of (short_avg, long_avg), both aligned with prices
    """
    values = list(prices)
    return (
        compute_moving_average(values, SHORT_WINDOW),
        compute_moving_average(values, LONG_WINDOW),
    )
