"""
llm_query/response.py — parsing of the model's JSON answer into targets.

Accepted answer: one JSON array of objects, optionally wrapped in a
```json fence. Field names may be camelCase (as requested in the prompt)
or snake_case. Missing fields are defaulted, never rejected.

Public API:
  strip_code_fence(raw)       -> str
  parse_llm_response(raw)     -> list[ExtractedTarget]
  normalize_llm_target(item)  -> ExtractedTarget
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from data_model import ExtractedTarget, TargetType
from llm_query.errors import LlmError

_FENCE_OPEN_RE  = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")
_INT_PREFIX_RE  = re.compile(r"^\s*([+-]?\d+)")


def strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN_RE.sub("", text)
        text = _FENCE_CLOSE_RE.sub("", text)
    return text.strip()


def parse_llm_response(raw: str) -> list[ExtractedTarget]:
    """
    Raises:
        LlmError: the answer is not JSON or not a JSON array,
            or a field cannot be coerced.
    """
    text = strip_code_fence(raw)
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise LlmError(f"LLM response is not valid JSON: {text[:200]!r}") from exc

    if not isinstance(data, list):
        raise LlmError(f"LLM response is not a JSON array (got {type(data).__name__}).")

    try:
        return [normalize_llm_target(item) for item in data if isinstance(item, dict)]
    except (TypeError, ValueError, OverflowError) as exc:
        raise LlmError(f"LLM response has a malformed target: {exc}") from exc


def _field(raw: dict[str, Any], camel: str, snake: str) -> Any:
    value = raw.get(camel)
    if value is None:
        value = raw.get(snake)
    return value


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _INT_PREFIX_RE.match(str(value))
    return int(m.group(1)) if m else None


def normalize_llm_target(raw: dict[str, Any]) -> ExtractedTarget:
    raw_type = str(_field(raw, "targetType", "target_type") or "QUANTITATIVE").upper()
    try:
        target_type = TargetType(raw_type)
    except ValueError:
        target_type = TargetType.QUANTITATIVE

    name_en = _field(raw, "nameEn", "name_en")
    unit = raw.get("unit")
    metadata = raw.get("metadata")

    return ExtractedTarget(
        target_type=target_type,
        name_vi=str(_field(raw, "nameVi", "name_vi") or ""),
        name_en=str(name_en) if name_en is not None else None,
        unit=str(unit) if unit is not None else None,
        target_value=_to_float(_field(raw, "targetValue", "target_value")),
        target_min=_to_float(_field(raw, "targetMin", "target_min")),
        target_max=_to_float(_field(raw, "targetMax", "target_max")),
        target_year=_to_int(_field(raw, "targetYear", "target_year")),
        baseline_value=_to_float(_field(raw, "baselineValue", "baseline_value")),
        baseline_year=_to_int(_field(raw, "baselineYear", "baseline_year")),
        raw_text_vi=str(_field(raw, "rawTextVi", "raw_text_vi") or ""),
        metadata=metadata if isinstance(metadata, dict) else None,
    )
