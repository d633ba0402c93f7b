"""
llm_query/targets.py — LLM-assisted KPI target extraction.

Public API:
  extract_targets_with_llm(text, api_key, model, timeout) -> list[ExtractedTarget]
"""

from __future__ import annotations

import logging

from data_model import ExtractedTarget
from llm_query.gemini import DEFAULT_MODEL, DEFAULT_TIMEOUT, call_gemini
from llm_query.prompt import SYSTEM_INSTRUCTION, build_user_prompt
from llm_query.response import parse_llm_response

log = logging.getLogger(__name__)


def extract_targets_with_llm(
    text: str,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ExtractedTarget]:
    """
    Raises:
        LlmError: on any failure (key, transport, API, answer format).
    """
    log.debug("LLM extraction: %d chars, model %s", len(text), model)
    raw = call_gemini(
        build_user_prompt(text),
        system_instruction=SYSTEM_INSTRUCTION,
        model=model,
        api_key=api_key,
        timeout=timeout,
    )
    targets = parse_llm_response(raw)
    log.debug("LLM returned %d targets", len(targets))
    return targets
