"""
llm_query — LLM-assisted extraction of KPI targets (Gemini).

Public API:
  extract_targets_with_llm(text, api_key, model, timeout) -> list[ExtractedTarget]
  call_gemini(prompt, system_instruction, model, api_key, timeout) -> str
  parse_llm_response(raw)                    -> list[ExtractedTarget]
  normalize_llm_target(item)                 -> ExtractedTarget
  build_user_prompt(text)                    -> str
  LlmError
"""

from .errors import LlmError
from .prompt import (
    SYSTEM_INSTRUCTION,
    MAX_INPUT_CHARS,
    TRUNCATION_MARKER,
    build_user_prompt,
    truncate_text,
)
from .gemini import call_gemini, resolve_api_key, DEFAULT_MODEL, DEFAULT_TIMEOUT
from .response import normalize_llm_target, parse_llm_response, strip_code_fence
from .targets import extract_targets_with_llm

__all__ = [
    "LlmError",
    "SYSTEM_INSTRUCTION",
    "MAX_INPUT_CHARS",
    "TRUNCATION_MARKER",
    "build_user_prompt",
    "truncate_text",
    "call_gemini",
    "resolve_api_key",
    "DEFAULT_MODEL",
    "DEFAULT_TIMEOUT",
    "normalize_llm_target",
    "parse_llm_response",
    "strip_code_fence",
    "extract_targets_with_llm",
]
