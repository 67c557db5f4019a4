"""Model selection, band generation and zone classification."""

from collections.abc import Sequence

from river_mcp.valuation.models import (
    EQUITY,
    DayRecord,
    EarningsMultiple,
    Fundamentals,
    TrendCenterMultiple,
    ValuationModel,
    Zone,
)

# Checked top-down against bands[4], bands[3], bands[2], bands[1]
_ZONE_THRESHOLDS: tuple[tuple[int, Zone], ...] = (
    (4, Zone.EXTREMELY_HIGH),
    (3, Zone.HIGH),
    (2, Zone.FAIR),
    (1, Zone.LOW),
)


def select_model(fundamentals: Fundamentals) -> ValuationModel:
    """
    Choose the valuation model for a whole analysis.

    Equities with positive trailing EPS are valued on earnings multiples;
    everything else (ETFs, loss makers, missing fundamentals) on the
    long-window trend center.

    Args:
        fundamentals: Fundamentals captured for this request

    Returns:
        EarningsMultiple or TrendCenterMultiple
    """
    eps = fundamentals.trailing_eps
    if eps is not None and eps > 0 and fundamentals.instrument_type == EQUITY:
        return EarningsMultiple(eps=eps)
    return TrendCenterMultiple()


def generate_bands(model: ValuationModel, base_value: float) -> tuple[float, ...]:
    """
    Multiply the base value by the model's ascending multipliers.

    The base is EPS for the earnings model and the day's long-window
    average for the trend-center model. Zero or negative bases are not
    clamped; the bands collapse to zero or turn negative.
    """
    return tuple(base_value * m for m in model.multipliers)


def classify_zone(price: float, bands: Sequence[float]) -> Zone:
    """
    Map a price onto its zone. Comparisons are strict, so a price equal
    to a boundary falls into the lower zone.
    """
    for index, zone in _ZONE_THRESHOLDS:
        if price > bands[index]:
            return zone
    return Zone.EXTREMELY_LOW


def classify_record(record: DayRecord | None) -> Zone:
    """Classify an assembled day; UNKNOWN when there is no usable record."""
    if record is None or record.price is None:
        return Zone.UNKNOWN
    return classify_zone(record.price, record.bands)
