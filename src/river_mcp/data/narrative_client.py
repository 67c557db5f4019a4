"""Narrative commentary from a chat-completion model."""

import logging
import os
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from river_mcp.prompts.templates import NARRATIVE_SYSTEM_PROMPT, build_narrative_prompt
from river_mcp.utils.provenance import build_narrative_provenance
from river_mcp.utils.sanitize import sanitize_text
from river_mcp.valuation.models import ValuationSummary

logger = logging.getLogger(__name__)

NARRATIVE_MODEL = os.environ.get("NARRATIVE_MODEL", "gpt-4o-mini")
NARRATIVE_MAX_CHARS = 4000

# Returned instead of commentary; the river itself is unaffected
MISSING_KEY_MESSAGE = "API Key 未設定，無法提供智慧診斷。"
UNAVAILABLE_MESSAGE = "AI 分析暫時不可用，請參考圖表位階。"


async def generate_narrative(
    summary: ValuationSummary,
    api_key: str | None = None,
    model: str | None = None,
) -> tuple[str, dict[str, Any]]:
    """
    Ask the language model for commentary on a valuation summary.

    Never raises for provider problems: a missing key or an API error
    yields a fixed fallback message.

    Args:
        summary: Summary of the latest river record
        api_key: OpenAI API key (default: OPENAI_API_KEY)
        model: Chat model name (default: NARRATIVE_MODEL)

    Returns:
        Tuple of (text, narrative provenance block)
    """
    if api_key is None:
        api_key = os.environ.get("OPENAI_API_KEY")
    model = model or NARRATIVE_MODEL

    if not api_key:
        logger.warning("No OpenAI API key, skipping narrative")
        return MISSING_KEY_MESSAGE, build_narrative_provenance(model, "not_configured")

    try:
        async with AsyncOpenAI(api_key=api_key) as client:
            logger.info(f"Generating narrative for {summary.symbol} via {model}...")
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": NARRATIVE_SYSTEM_PROMPT},
                    {"role": "user", "content": build_narrative_prompt(summary)},
                ],
                temperature=0.4,
            )
    except OpenAIError as e:
        logger.error(f"OpenAI API error for {summary.symbol}: {e}")
        return UNAVAILABLE_MESSAGE, build_narrative_provenance(model, "error", error=str(e))

    text = sanitize_text(
        response.choices[0].message.content if response.choices else None,
        max_length=NARRATIVE_MAX_CHARS,
        keep_newlines=True,
    )
    if not text:
        logger.error(f"Empty narrative for {summary.symbol}")
        return UNAVAILABLE_MESSAGE, build_narrative_provenance(model, "empty")

    return text, build_narrative_provenance(
        model, "ok", finish_reason=getattr(response.choices[0], "finish_reason", None)
    )
