"""
kpi/strategy.py — choice between rule-based and LLM-assisted extraction.

Variants:
  RuleBased    — regex tables (kpi.extractor), pure and deterministic
  LlmAssisted  — Gemini call; any LlmError falls back to its RuleBased

extract_targets() is the single entry point used by the pipeline and CLI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from data_model import ExtractedTarget
from kpi.extractor import deduplicate_targets, extract_targets_rule_based
from llm_query import (
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
    LlmError,
    extract_targets_with_llm,
    resolve_api_key,
)

log = logging.getLogger(__name__)

type LlmExtractFn = Callable[..., list[ExtractedTarget]]


class ExtractionStrategy(Protocol):
    name: str

    def extract(self, text: str) -> list[ExtractedTarget]:
        ...


@dataclass(frozen=True, slots=True)
class RuleBased:
    name: str = "rule_based"

    def extract(self, text: str) -> list[ExtractedTarget]:
        return extract_targets_rule_based(text)


@dataclass(frozen=True, slots=True)
class LlmAssisted:
    api_key: str
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT
    fallback: RuleBased = field(default_factory=RuleBased)
    llm_extract: LlmExtractFn = extract_targets_with_llm
    name: str = "llm_assisted"

    def extract(self, text: str) -> list[ExtractedTarget]:
        try:
            targets = self.llm_extract(
                text, api_key=self.api_key, model=self.model, timeout=self.timeout,
            )
        except LlmError as exc:
            log.warning("LLM extraction failed, using rule-based: %s", exc)
            return self.fallback.extract(text)
        return deduplicate_targets(targets)


def select_strategy(
    use_llm: bool = False,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> ExtractionStrategy:
    """LlmAssisted only when requested and a key is known; RuleBased otherwise."""
    if not use_llm:
        return RuleBased()
    key = resolve_api_key(api_key)
    if not key:
        log.warning("LLM extraction requested without an API key; using rule-based.")
        return RuleBased()
    return LlmAssisted(api_key=key, model=model, timeout=timeout)


def extract_targets(
    text: str,
    use_llm: bool = False,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ExtractedTarget]:
    return select_strategy(use_llm, api_key, model, timeout).extract(text)
