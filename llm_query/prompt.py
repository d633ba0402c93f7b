"""
llm_query/prompt.py — prompt for LLM-assisted KPI target extraction.

The system instruction carries the extraction rules (number notation, field
meanings, comparison semantics); the user message carries the JSON shape and
the section text, truncated to MAX_INPUT_CHARS.

Public API:
  SYSTEM_INSTRUCTION
  MAX_INPUT_CHARS
  TRUNCATION_MARKER
  truncate_text(text, limit)  -> str
  build_user_prompt(text)     -> str
"""

from __future__ import annotations

MAX_INPUT_CHARS   = 30_000
TRUNCATION_MARKER = "\n\n[... text truncated ...]"

SYSTEM_INSTRUCTION = """\
You are a specialist in extracting KPI targets from Vietnamese government planning documents.

Given a section of Vietnamese text, extract ALL quantitative, qualitative, and milestone targets. Return a JSON array.

RULES:
1. Vietnamese number format: dot (.) = thousands separator, comma (,) = decimal separator.
   - "7.500" = 7500 (seven thousand five hundred)
   - "6,5" = 6.5 (six point five)
   - "1.234,56" = 1234.56
2. Extract the indicator/KPI name in Vietnamese (nameVi field).
3. Provide an English translation for nameEn when possible.
4. For ranges like "6,5 - 7,0%", set targetMin and targetMax. Also set targetValue to the midpoint.
5. For "đạt trên X%" (above), set targetMin = X and metadata.comparison = "above".
6. For "dưới X%" (below), set targetMax = X and metadata.comparison = "below".
7. For "đạt khoảng X%" (approximately), set targetValue = X and metadata.comparison = "approximately".
8. Extract the target year when mentioned (e.g., "đến năm 2030" → targetYear: 2030).
9. Include the complete original Vietnamese sentence in rawTextVi.
10. Set targetType: "QUANTITATIVE" for numeric targets, "QUALITATIVE" for non-numeric goals, "MILESTONE" for date-based targets.
11. Detect units: %, %/năm, USD, triệu USD, tỷ đồng, km, ha, etc.
12. If a baseline value/year is mentioned (e.g., "so với năm 2020"), extract it."""

_USER_TEMPLATE = """\
Extract all KPI targets from this Vietnamese government planning text. Return ONLY a valid JSON array of objects with these fields:

{
  "targetType": "QUANTITATIVE" | "QUALITATIVE" | "MILESTONE",
  "nameVi": "string (Vietnamese KPI name)",
  "nameEn": "string (English translation, optional)",
  "unit": "string (%, USD, km, etc., optional)",
  "targetValue": number | null,
  "targetYear": number | null,
  "targetMin": number | null,
  "targetMax": number | null,
  "baselineValue": number | null,
  "baselineYear": number | null,
  "rawTextVi": "string (the original sentence)",
  "metadata": {} | null
}

TEXT:
---
{{TEXT}}
---

Return ONLY the JSON array, no markdown fences, no explanation."""


def truncate_text(text: str, limit: int = MAX_INPUT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_user_prompt(text: str) -> str:
    """User message with the (possibly truncated) section text embedded."""
    return _USER_TEMPLATE.replace("{{TEXT}}", truncate_text(text))
