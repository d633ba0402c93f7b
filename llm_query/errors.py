"""llm_query/errors.py — single failure type for the LLM boundary."""

from __future__ import annotations


class LlmError(RuntimeError):
    """
    Any failure of an LLM-assisted extraction: missing key, transport error,
    timeout, API error, empty answer, malformed or non-array JSON.
    """
