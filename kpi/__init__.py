"""
kpi — KPI target extraction from Vietnamese plan prose.

Public API:
  extract_targets(text, use_llm, api_key, model, timeout) -> list[ExtractedTarget]
  extract_targets_rule_based(text)  -> list[ExtractedTarget]
  select_strategy(use_llm, api_key) -> RuleBased | LlmAssisted
  parse_vietnamese_number(raw)      -> int | float | None
  parse_table_number(raw)           -> int | float | None
  parse_inline_number(raw)          -> int | float | None
"""

from .numbers import (
    parse_vietnamese_number,
    parse_international_number,
    parse_table_number,
    parse_inline_number,
)
from .extractor import (
    KpiMatch,
    extract_targets_rule_based,
    split_sentences,
    split_sub_clauses,
    find_kpi_matches,
    deduplicate_targets,
)
from .strategy import (
    ExtractionStrategy,
    RuleBased,
    LlmAssisted,
    select_strategy,
    extract_targets,
)
from .demo import DEMO_TEXT

__all__ = [
    "parse_vietnamese_number",
    "parse_international_number",
    "parse_table_number",
    "parse_inline_number",
    "KpiMatch",
    "extract_targets_rule_based",
    "split_sentences",
    "split_sub_clauses",
    "find_kpi_matches",
    "deduplicate_targets",
    "ExtractionStrategy",
    "RuleBased",
    "LlmAssisted",
    "select_strategy",
    "extract_targets",
    "DEMO_TEXT",
]
