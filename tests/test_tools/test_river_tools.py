"""Tests for the river chart and commentary tools with mocked collaborators."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

from river_mcp.data.yfinance_client import ChartData, YFinanceRetryError, parse_fundamentals
from river_mcp.tools import river_chart, river_commentary
from river_mcp.valuation.models import Fundamentals, PricePoint

START_TS = 1704153600
DAY = 86400


def _chart(symbol: str = "2330.TW", count: int = 250) -> ChartData:
    points = [PricePoint(START_TS + i * DAY, 100.0 + i) for i in range(count)]
    return ChartData(symbol=symbol, points=points, meta={"currency": "TWD"})


def _fundamentals(eps: float | None = 5.0) -> Fundamentals:
    return Fundamentals(
        trailing_eps=eps,
        trailing_pe=20.0,
        instrument_type="EQUITY",
        display_name="TSMC",
        currency="TWD",
        latest_price=349.0,
        exchange_timezone="Asia/Taipei",
    )


def _patch_provider(chart: ChartData, fundamentals: Fundamentals, warnings: list[str] | None = None):
    fetch_chart = AsyncMock(return_value=(chart, {"source": "yfinance", "attempts": 1}))
    fetch_fundamentals = AsyncMock(
        return_value=(
            fundamentals,
            {"source": "yfinance", "attempts": 1, "warnings": warnings or []},
        )
    )
    return (
        patch("river_mcp.tools.chart.fetch_chart", fetch_chart),
        patch("river_mcp.tools.chart.fetch_fundamentals", fetch_fundamentals),
    )


class TestRiverChart:
    """Tests for river_chart."""

    def test_response_shape(self) -> None:
        """Test meta, provenance, model, zone and warm history."""
        chart_patch, fund_patch = _patch_provider(_chart(), _fundamentals())
        with chart_patch, fund_patch:
            result = asyncio.run(river_chart("2330"))

        assert "error" not in result
        assert set(result["meta"]) == {
            "server_version",
            "schema_version",
            "tool",
            "windows",
            "duration_ms",
        }
        assert result["meta"]["tool"] == "river_chart"
        assert set(result["data_provenance"]) == {"price", "fundamentals"}
        assert result["data_provenance"]["price"]["bar_timezone"] == "Asia/Taipei"
        assert result["symbol"] == "2330.TW"
        assert result["model"] == {
            "kind": "earnings_multiple",
            "label": "PE River",
            "multipliers": [12.0, 16.0, 20.0, 24.0, 28.0],
        }
        assert result["zone"] == "extremely_high"
        assert result["zone_label"] == "極高估"
        assert result["latest"]["bands"] == [60.0, 80.0, 100.0, 120.0, 140.0]
        assert result["record_count"] == 250
        assert result["history_rows"] == 51
        assert result["history"][0]["price"] == 299.0

        # Response must serialize the way the server returns it
        json.dumps(result, default=str, ensure_ascii=False)

    def test_full_history_with_limit(self) -> None:
        """Test warm_only=False with a limit keeps the most recent rows."""
        chart_patch, fund_patch = _patch_provider(_chart(), _fundamentals())
        with chart_patch, fund_patch:
            result = asyncio.run(river_chart("2330", warm_only=False, history_limit=5))

        assert result["history_rows"] == 5
        assert result["history"][-1]["date"] == result["latest"]["date"]

    def test_without_history(self) -> None:
        """Test include_history=False omits rows."""
        chart_patch, fund_patch = _patch_provider(_chart(), _fundamentals())
        with chart_patch, fund_patch:
            result = asyncio.run(river_chart("2330", include_history=False))

        assert "history" not in result
        assert result["latest"] is not None

    def test_missing_fundamentals(self) -> None:
        """Test degraded fundamentals select the MA river and keep the warning."""
        chart_patch, fund_patch = _patch_provider(
            _chart(), parse_fundamentals("2330.TW", {}), ["fundamentals_unavailable: boom"]
        )
        with chart_patch, fund_patch:
            result = asyncio.run(river_chart("2330"))

        assert result["model"]["kind"] == "trend_center"
        assert result["model"]["label"] == "MA River"
        assert result["data_provenance"]["fundamentals"]["warnings"] == [
            "fundamentals_unavailable: boom"
        ]

    def test_invalid_period(self) -> None:
        """Test invalid parameters are reported, not raised."""
        result = asyncio.run(river_chart("2330", period="7w"))

        assert result["error"] is True
        assert result["error_type"] == "invalid_parameters"

    def test_negative_limit(self) -> None:
        """Test a negative history_limit is rejected."""
        result = asyncio.run(river_chart("2330", history_limit=-1))
        assert result["error_type"] == "invalid_parameters"

    def test_unknown_symbol(self) -> None:
        """Test an unknown symbol gives invalid_symbol."""
        with patch(
            "river_mcp.tools.chart.fetch_chart",
            AsyncMock(side_effect=ValueError('No price history for "NOPE".')),
        ):
            result = asyncio.run(river_chart("nope"))

        assert result["error_type"] == "invalid_symbol"
        assert result["symbol"] == "NOPE"

    def test_provider_down(self) -> None:
        """Test exhausted retries give data_unavailable."""
        with patch(
            "river_mcp.tools.chart.fetch_chart",
            AsyncMock(side_effect=YFinanceRetryError("Failed after 4 attempts")),
        ):
            result = asyncio.run(river_chart("AAPL"))

        assert result["error_type"] == "data_unavailable"


class TestRiverCommentary:
    """Tests for river_commentary."""

    def test_commentary(self) -> None:
        """Test the summary goes to the narrative generator and comes back."""
        narrative = AsyncMock(return_value=("估值偏高。", {"source": "openai", "status": "ok"}))
        chart_patch, fund_patch = _patch_provider(_chart(), _fundamentals())
        with chart_patch, fund_patch, patch(
            "river_mcp.tools.commentary.generate_narrative", narrative
        ):
            result = asyncio.run(river_commentary("2330"))

        assert result["narrative"] == "估值偏高。"
        assert result["zone"] == "extremely_high"
        assert result["model_label"] == "PE River"
        assert result["summary"]["price"] == 349.0
        assert result["summary"]["model_kind"] == "earnings_multiple"
        assert result["data_provenance"]["narrative"]["status"] == "ok"
        summary = narrative.call_args.args[0]
        assert summary.symbol == "2330.TW"

    def test_no_history(self) -> None:
        """Test an empty chart is reported without calling the model."""
        narrative = AsyncMock()
        chart_patch, fund_patch = _patch_provider(_chart(count=0), _fundamentals())
        with chart_patch, fund_patch, patch(
            "river_mcp.tools.commentary.generate_narrative", narrative
        ):
            result = asyncio.run(river_commentary("2330"))

        assert result["error_type"] == "data_unavailable"
        narrative.assert_not_called()
