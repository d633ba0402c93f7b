"""
llm_query/gemini.py — Gemini API call.

Environment variables:
  GEMINI_API_KEY    API key (required for LLM-assisted extraction)
  VNP_LLM_MODEL     model id (default: gemini-2.5-flash)
  VNP_LLM_TIMEOUT   request timeout in seconds (default: 60)

Optionally a .env file in the project root:
  GEMINI_API_KEY=AIza...

Public API:
  call_gemini(prompt, system_instruction, model, api_key, timeout, max_retries) -> str
"""

from __future__ import annotations

import functools
import logging
import os
import pathlib
import re
import time

import httpx
from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from llm_query.errors import LlmError

load_dotenv(pathlib.Path(__file__).resolve().parent.parent / ".env")

log = logging.getLogger(__name__)

DEFAULT_MODEL     = os.getenv("VNP_LLM_MODEL", "gemini-2.5-flash")
DEFAULT_TIMEOUT   = float(os.getenv("VNP_LLM_TIMEOUT", "60"))
DEFAULT_RETRIES   = 3
MAX_OUTPUT_TOKENS = 4096
_ENV_KEY          = "GEMINI_API_KEY"

# Seconds suggested by the API in a 429 message ("retry in 18.8s").
_RETRY_DELAY_RE = re.compile(r"retry[^\d]*(\d+(?:\.\d+)?)\s*s", re.IGNORECASE)


@functools.lru_cache(maxsize=4)
def _get_client(api_key: str, timeout_ms: int) -> genai.Client:
    """Cached client per (key, timeout); each client owns an HTTP pool."""
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=timeout_ms),
    )


def resolve_api_key(api_key: str | None = None) -> str | None:
    return api_key or os.getenv(_ENV_KEY) or None


def _parse_retry_delay(error: Exception) -> float | None:
    m = _RETRY_DELAY_RE.search(str(error))
    if m:
        return float(m.group(1))
    delay = getattr(error, "retry_delay", None)
    if delay is not None:
        return float(delay)
    return None


def _is_daily_quota(error: Exception) -> bool:
    return "PerDay" in str(error)


def call_gemini(
    prompt: str,
    system_instruction: str | None = None,
    model: str = DEFAULT_MODEL,
    api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_RETRIES,
) -> str:
    """
    Sends the prompt to Gemini and returns the answer text.

    On 429 (rate limit) waits the suggested delay and retries up to
    max_retries times. An exhausted daily quota is not retried.

    Raises:
        LlmError: missing key, API/transport error, timeout or empty answer.
    """
    key = resolve_api_key(api_key)
    if not key:
        raise LlmError(f"Missing Gemini API key. Set {_ENV_KEY} or pass api_key.")

    client = _get_client(key, int(timeout * 1000))
    config = types.GenerateContentConfig(
        system_instruction=system_instruction,
        max_output_tokens=MAX_OUTPUT_TOKENS,
        temperature=0.0,
    )
    attempt = 0

    while True:
        try:
            response = client.models.generate_content(
                model=model, contents=prompt, config=config,
            )
            text = response.text
            if not text:
                raise LlmError("Gemini returned an empty text response.")
            return text

        except genai_errors.ClientError as exc:
            if exc.code != 429:
                raise LlmError(f"Gemini API error ({exc.code}): {exc}") from exc

            if _is_daily_quota(exc):
                raise LlmError(f"Daily quota exhausted for model {model}: {exc}") from exc

            attempt += 1
            if attempt > max_retries:
                raise LlmError(f"Rate limit after {max_retries} retries.") from exc

            delay = _parse_retry_delay(exc) or (2 ** attempt * 5)
            log.warning("429 rate limit, waiting %.0fs (attempt %d/%d)",
                        delay, attempt, max_retries)
            time.sleep(delay)

        except genai_errors.APIError as exc:
            raise LlmError(f"Gemini API error ({exc.code}): {exc}") from exc

        except httpx.HTTPError as exc:
            raise LlmError(f"Gemini transport error: {exc}") from exc
