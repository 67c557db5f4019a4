"""Response metadata and provenance for river tool responses."""

from datetime import datetime
from typing import Any

from river_mcp import SCHEMA_VERSION, SERVER_VERSION
from river_mcp.utils.indicators import LONG_WINDOW, SHORT_WINDOW


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build the metadata block shared by every river response.

    Carries the averaging windows so clients can label the 60/200-day
    lines without hardcoding them.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info and averaging windows
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
        "windows": {"short": SHORT_WINDOW, "long": LONG_WINDOW},
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(
    source: str,
    as_of: datetime | str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Build provenance block for one collaborator (price, fundamentals, narrative).

    Args:
        source: Data source name (e.g., "yfinance", "openai")
        as_of: Timestamp of data freshness
        **kwargs: Additional provenance fields

    Returns:
        Provenance dict, always with a warnings list
    """
    prov: dict[str, Any] = {"source": source}

    if as_of is not None:
        prov["as_of"] = as_of.isoformat() if isinstance(as_of, datetime) else as_of

    prov.update(kwargs)
    prov.setdefault("warnings", [])
    return prov


def build_narrative_provenance(model: str, status: str, **kwargs: Any) -> dict[str, Any]:
    """
    Provenance for the narrative generator.

    status is ok, not_configured, error or empty. Anything but ok also
    lands in warnings as narrative_<status>, so clients see the fallback.
    """
    warnings = [] if status == "ok" else [f"narrative_{status}"]
    return build_provenance(
        "openai",
        as_of=datetime.utcnow().isoformat() + "Z",
        model=model,
        status=status,
        warnings=warnings,
        **kwargs,
    )


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: invalid_symbol, invalid_parameters or data_unavailable
        message: Human-readable error message
        symbol: Symbol that caused the error (if applicable)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }

    if symbol is not None:
        response["symbol"] = symbol

    return response
