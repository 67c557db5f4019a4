"""Prompt templates for river analysis."""

from typing import Any

from river_mcp.valuation.models import EarningsMultiple, TrendCenterMultiple, ValuationSummary

NARRATIVE_SYSTEM_PROMPT = "你是一位資深金融分析師，回答使用繁體中文 (zh-TW)，語氣專業且精簡。"

# Shown when the provider has no trailing EPS
NO_EPS_TEXT = "無數據"

MODEL_TITLES = {
    EarningsMultiple.kind: "本益比河流圖",
    TrendCenterMultiple.kind: "價值中心河流圖",
}

# Prompt definitions
PROMPTS = {
    "river_review": {
        "description": "Valuation river review with zone, bands and commentary",
        "arguments": [{"name": "symbol", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    symbol = arguments.get("symbol", "")
    return {
        "messages": [
            {
                "role": "user",
                "content": f"""Review the valuation river for {symbol}.

Execute these tools in order:
1. get_river_chart("{symbol}", include_history=false)
2. get_river_commentary("{symbol}")

Then present:
- HEADER: symbol, display name, currency, latest price and change percent
- ZONE: zone_label (zone) and the model label (PE River or MA River)
- BANDS: the five latest band values from low to high, marking where the price sits
- AVERAGES: short (60-day) and long (200-day) averages
- COMMENTARY: render the narrative text verbatim

If the response has error=true, show the message and stop.
If model.kind is trend_center because fundamentals were unavailable,
say so using data_provenance.fundamentals.warnings.""",
            }
        ]
    }


def _format_number(value: float | None, decimals: int) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}"


def build_narrative_prompt(summary: ValuationSummary) -> str:
    """
    Build the commentary request for the language model.

    EPS shows as "no data" when missing or zero; bands are listed low to
    high with one decimal, averages with two.
    """
    eps_text = summary.trailing_eps if summary.trailing_eps else NO_EPS_TEXT
    bands_text = ", ".join(f"{b:.1f}" for b in summary.bands)
    model_title = MODEL_TITLES.get(summary.model_kind, summary.model_kind)

    return f"""請基於以下數據提供深度解讀。
標的：{summary.symbol} ({summary.display_name})
價格：{_format_number(summary.price, 2)} {summary.currency}
真實 EPS (TTM)：{eps_text}
模型類型：{model_title}
當前位階：{summary.zone.label}

河流區間(由低到高)：[{bands_text}]
技術面：60MA={summary.short_avg:.2f}, 200MA={summary.long_avg:.2f}

請精簡回答：
1. 估值狀態解讀（便宜、合理或昂貴）。
2. 關鍵支撐與壓力位分析。
3. 中長期操作建議。"""
