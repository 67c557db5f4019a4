"""Async yfinance client with bounded concurrency and retry logic."""

import asyncio
import logging
import math
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

import pytz
import yfinance as yf
from requests.exceptions import HTTPError

from river_mcp.utils.prices import frame_to_price_points
from river_mcp.utils.sanitize import sanitize_text
from river_mcp.utils.validators import FetchParams
from river_mcp.valuation.models import Fundamentals, PricePoint

logger = logging.getLogger(__name__)

# Bounded concurrency for yfinance calls
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("YF_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("YF_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("YF_MAX_DELAY", "30.0"))  # seconds

# Currency used when neither the chart nor the quote reports one
DEFAULT_CURRENCY = "TWD"

# Shutdown coordination
shutdown_event = asyncio.Event()

T = TypeVar("T")


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""

    pass


class YFinanceRetryError(Exception):
    """Raised when yfinance fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


@dataclass(frozen=True)
class ChartData:
    """Daily closes plus the chart metadata block yfinance returns with them."""

    symbol: str
    points: list[PricePoint]
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def last_close(self) -> float | None:
        for point in reversed(self.points):
            if point.price is not None:
                return point.price
        return None


@dataclass
class RetryResult:
    """Result of a retry operation with provenance tracking."""

    result: Any
    attempts: int
    total_backoff_seconds: float
    source: str = "yfinance"

    def to_provenance(self) -> dict[str, Any]:
        """Convert to provenance fields for data_provenance."""
        return {
            "source": self.source,
            "attempts": self.attempts,
            "total_backoff_seconds": self.total_backoff_seconds,
        }


def _safe_float(value: Any) -> float | None:
    """
    Convert to a finite float or return None.

    yfinance often uses float("nan") for missing numerics, which passes
    `is not None` but should be treated as missing.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _is_retryable_error(error: Exception) -> tuple[bool, int]:
    """
    Check if an error is retryable (transient).

    Returns:
        Tuple of (is_retryable, max_retries_for_this_error)
    """
    if (
        isinstance(error, HTTPError)
        and hasattr(error, "response")
        and error.response is not None
    ):
        status_code = error.response.status_code
        if status_code == 401:
            # Invalid crumb rarely recovers with more retries
            return (True, 1)
        if status_code == 429 or 500 <= status_code < 600:
            return (True, _max_retries)

    error_str = str(error).lower()

    if "401" in error_str or "invalid crumb" in error_str:
        return (True, 2)

    retryable_patterns = [
        "rate limit",
        "too many requests",
        "connection",
        "timeout",
        "temporary",
    ]
    if any(pattern in error_str for pattern in retryable_patterns):
        return (True, _max_retries)

    return (False, 0)


def _calculate_backoff(attempt: int) -> float:
    """Calculate delay with exponential backoff and jitter."""
    delay = _base_delay * (2**attempt)
    # Jitter (+/-25%)
    delay = delay + delay * 0.25 * (2 * random.random() - 1)
    return min(delay, _max_delay)


async def _retry_with_backoff(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int = _max_retries,
) -> RetryResult:
    """
    Execute a synchronous function in the executor with retry logic.

    Args:
        operation_name: Name for logging (e.g., "fetch_chart(2330.TW)")
        sync_func: Synchronous function to execute
        max_retries: Maximum number of retry attempts

    Returns:
        RetryResult with result and provenance info

    Raises:
        YFinanceRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
    """
    last_error: Exception | None = None
    total_backoff = 0.0

    for attempt in range(max_retries + 1):
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(_executor, sync_func)
            return RetryResult(
                result=result,
                attempts=attempt + 1,
                total_backoff_seconds=round(total_backoff, 2),
            )
        except Exception as e:
            last_error = e

            is_retryable, error_max_retries = _is_retryable_error(e)
            if not is_retryable:
                raise

            effective_max_retries = min(max_retries, error_max_retries)
            if attempt >= effective_max_retries:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts "
                    f"(limit={effective_max_retries + 1}). Last error: {e}"
                )
                raise YFinanceRetryError(
                    f"Failed after {attempt + 1} attempts: {e}",
                    last_error=last_error,
                ) from e

            delay = _calculate_backoff(attempt)
            total_backoff += delay
            logger.info(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise YFinanceRetryError(
        f"Failed after {max_retries + 1} attempts",
        last_error=last_error,
    )


async def fetch_chart(params: FetchParams) -> tuple[ChartData, dict[str, Any]]:
    """
    Fetch daily closes and chart metadata.

    Args:
        params: Fetch parameters

    Returns:
        Tuple of (ChartData, retry provenance fields)

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If all retries exhausted for retryable errors
        ValueError: If the symbol is unknown or returned no history
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    def _fetch() -> ChartData:
        ticker = yf.Ticker(params.symbol)
        df = ticker.history(**params.to_history_kwargs())
        if df.empty:
            raise ValueError(
                f'No price history for "{params.symbol}". '
                "Check the symbol (Taiwan listings need the .TW suffix)."
            )
        meta = dict(ticker.history_metadata or {})
        return ChartData(symbol=params.symbol, points=frame_to_price_points(df), meta=meta)

    async with _fetch_semaphore:
        retry_result = await _retry_with_backoff(f"fetch_chart({params.symbol})", _fetch)
        return retry_result.result, retry_result.to_provenance()


def parse_fundamentals(
    symbol: str,
    info: dict[str, Any],
    chart_meta: dict[str, Any] | None = None,
    last_close: float | None = None,
) -> Fundamentals:
    """
    Build Fundamentals from a yfinance info dict and chart metadata.

    Quote fields win for EPS, P/E, name and instrument type; chart
    metadata wins for currency, latest price and exchange timezone.
    Any of them may be missing.

    Args:
        symbol: Provider symbol
        info: ticker.info (empty when the quote fetch failed)
        chart_meta: ticker.history_metadata
        last_close: Last present close, final fallback for the latest price

    Returns:
        Fundamentals record
    """
    meta = chart_meta or {}

    trailing_eps = _safe_float(info.get("trailingEps"))
    if trailing_eps is None:
        trailing_eps = _safe_float(info.get("epsTrailingTwelveMonths"))

    instrument_type = info.get("quoteType") or meta.get("instrumentType") or ""

    display_name = sanitize_text(
        info.get("longName") or info.get("shortName") or meta.get("symbol") or symbol
    )

    latest_price = _safe_float(meta.get("regularMarketPrice"))
    if latest_price is None:
        latest_price = _safe_float(info.get("regularMarketPrice") or info.get("currentPrice"))
    if latest_price is None:
        latest_price = last_close

    return Fundamentals(
        trailing_eps=trailing_eps,
        trailing_pe=_safe_float(info.get("trailingPE")),
        instrument_type=str(instrument_type).upper(),
        display_name=display_name or symbol,
        currency=meta.get("currency") or info.get("currency") or DEFAULT_CURRENCY,
        latest_price=latest_price,
        latest_change_percent=_safe_float(info.get("regularMarketChangePercent")) or 0.0,
        exchange_timezone=meta.get("exchangeTimezoneName") or info.get("exchangeTimezoneName"),
    )


async def fetch_fundamentals(
    chart: ChartData,
) -> tuple[Fundamentals, dict[str, Any]]:
    """
    Fetch quote fundamentals for a charted symbol. Never fails on data.

    A failed or empty quote degrades to chart-only fundamentals (which
    selects the trend-center model); the reason is returned as a
    provenance warning.

    Returns:
        Tuple of (Fundamentals, provenance fields with warnings)

    Raises:
        ServerShuttingDownError: If server is shutting down
    """
    symbol = chart.symbol
    warnings: list[str] = []

    def _fetch() -> dict[str, Any]:
        return dict(yf.Ticker(symbol).info or {})

    try:
        async with _fetch_semaphore:
            retry_result = await _retry_with_backoff(f"fetch_info({symbol})", _fetch)
        info = retry_result.result
        provenance = retry_result.to_provenance()
    except ServerShuttingDownError:
        raise
    except Exception as e:
        logger.warning(f"fetch_info({symbol}): fundamentals unavailable, using chart only ({e})")
        info = {}
        provenance = {"source": "yfinance", "attempts": None}
        warnings.append(f"fundamentals_unavailable: {e}")

    if not info and not warnings:
        warnings.append("fundamentals_empty")

    fundamentals = parse_fundamentals(symbol, info, chart.meta, chart.last_close)
    provenance["warnings"] = warnings
    return fundamentals, provenance


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    Determine market state for an exchange timezone. Clock-based only
    (no holiday calendar), using the 09:00-13:30 session for Taipei and
    the US regular session elsewhere.

    Args:
        tz: Exchange timezone name

    Returns:
        Dict with state, method, and checked_at timestamp
    """
    try:
        zone = pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        zone = pytz.timezone("America/New_York")
    now = datetime.now(zone)

    if zone.zone == "Asia/Taipei":
        session = (9 * 60, 13 * 60 + 30)
    else:
        session = (9 * 60 + 30, 16 * 60)

    time_minutes = now.hour * 60 + now.minute
    if now.weekday() >= 5:
        state = "closed"
    elif time_minutes < session[0]:
        state = "pre_market"
    elif time_minutes < session[1]:
        state = "regular"
    else:
        state = "closed"

    return {
        "state": state,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
