"""Value types for the valuation river."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

EARNINGS_MULTIPLIERS: tuple[float, ...] = (12.0, 16.0, 20.0, 24.0, 28.0)
TREND_CENTER_MULTIPLIERS: tuple[float, ...] = (0.8, 1.0, 1.2, 1.4, 1.6)

# Instrument type that qualifies for the earnings model
EQUITY = "EQUITY"


@dataclass(frozen=True)
class PricePoint:
    """One trading day from the provider. price is None when unreported."""

    timestamp: int
    price: float | None


@dataclass(frozen=True)
class Fundamentals:
    """Point-in-time fundamentals, captured once per analysis."""

    trailing_eps: float | None
    trailing_pe: float | None
    instrument_type: str
    display_name: str
    currency: str
    latest_price: float | None
    latest_change_percent: float = 0.0
    exchange_timezone: str | None = None


@dataclass(frozen=True)
class EarningsMultiple:
    """Bands are trailing EPS times fixed P/E multiples."""

    eps: float
    multipliers: tuple[float, ...] = EARNINGS_MULTIPLIERS

    kind = "earnings_multiple"
    label = "PE River"

    def base_value(self, long_avg: float) -> float:
        return self.eps


@dataclass(frozen=True)
class TrendCenterMultiple:
    """Bands are the day's long-window average times fixed ratios."""

    multipliers: tuple[float, ...] = TREND_CENTER_MULTIPLIERS

    kind = "trend_center"
    label = "MA River"

    def base_value(self, long_avg: float) -> float:
        return long_avg


ValuationModel = Union[EarningsMultiple, TrendCenterMultiple]


class Zone(Enum):
    """Valuation zone of a price against its five bands."""

    EXTREMELY_LOW = "extremely_low"
    LOW = "low"
    FAIR = "fair"
    HIGH = "high"
    EXTREMELY_HIGH = "extremely_high"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int | None:
        """Severity rank, 0 (extremely low) to 4 (extremely high)."""
        return _ZONE_RANKS.get(self)

    @property
    def label(self) -> str:
        """Traditional Chinese display label."""
        return _ZONE_LABELS[self]


_ZONE_RANKS = {
    Zone.EXTREMELY_LOW: 0,
    Zone.LOW: 1,
    Zone.FAIR: 2,
    Zone.HIGH: 3,
    Zone.EXTREMELY_HIGH: 4,
}

_ZONE_LABELS = {
    Zone.EXTREMELY_HIGH: "極高估",
    Zone.HIGH: "高估",
    Zone.FAIR: "合理",
    Zone.LOW: "低估",
    Zone.EXTREMELY_LOW: "極低",
    Zone.UNKNOWN: "未知",
}


@dataclass(frozen=True)
class DayRecord:
    """One assembled day of the river."""

    date: str
    timestamp: int
    price: float | None
    short_avg: float
    long_avg: float
    bands: tuple[float, ...]

    def to_row(self) -> dict[str, Any]:
        """Plain dict for JSON responses."""
        return {
            "date": self.date,
            "timestamp": self.timestamp,
            "price": self.price,
            "short_avg": self.short_avg,
            "long_avg": self.long_avg,
            "bands": list(self.bands),
        }


@dataclass(frozen=True)
class RiverAnalysis:
    """Result of one analysis request. Replaces any earlier result wholesale."""

    symbol: str
    fundamentals: Fundamentals
    model: ValuationModel
    history: tuple[DayRecord, ...]
    zone: Zone

    @property
    def latest(self) -> DayRecord | None:
        return self.history[-1] if self.history else None


@dataclass(frozen=True)
class ValuationSummary:
    """Structured record handed to the narrative generator."""

    symbol: str
    display_name: str
    price: float | None
    currency: str
    trailing_eps: float | None
    model_kind: str
    zone: Zone
    bands: tuple[float, ...]
    short_avg: float
    long_avg: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "display_name": self.display_name,
            "price": self.price,
            "currency": self.currency,
            "trailing_eps": self.trailing_eps,
            "model_kind": self.model_kind,
            "zone": self.zone.value,
            "zone_label": self.zone.label,
            "bands": list(self.bands),
            "short_avg": self.short_avg,
            "long_avg": self.long_avg,
        }
