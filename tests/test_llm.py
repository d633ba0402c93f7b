"""LLM-assisted extraction: prompt, answer parsing and Gemini error mapping (no network)."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from google.genai import errors as genai_errors

from data_model import TargetType
from llm_query import (
    MAX_INPUT_CHARS,
    SYSTEM_INSTRUCTION,
    TRUNCATION_MARKER,
    LlmError,
    build_user_prompt,
    call_gemini,
    extract_targets_with_llm,
    normalize_llm_target,
    parse_llm_response,
    strip_code_fence,
    truncate_text,
)
from llm_query import gemini


ANSWER = json.dumps([
    {
        "targetType": "QUANTITATIVE",
        "nameVi": "GDP bình quân đầu người",
        "nameEn": "GDP per capita",
        "unit": "USD",
        "targetValue": 7500,
        "targetYear": 2030,
        "rawTextVi": "GDP bình quân đầu người đạt khoảng 7.500 USD",
        "metadata": {"comparison": "approximately"},
    }
], ensure_ascii=False)


def _fake_client(*answers):
    """Client whose generate_content returns/raises the given items in turn."""
    side_effects = [
        a if isinstance(a, Exception) else SimpleNamespace(text=a) for a in answers
    ]
    client = MagicMock()
    client.models.generate_content.side_effect = side_effects
    return client


class TestPrompt:

    def test_text_embedded(self):
        prompt = build_user_prompt("Tỷ lệ đô thị hóa đạt trên 50%.")
        assert "Tỷ lệ đô thị hóa đạt trên 50%." in prompt
        assert "{{TEXT}}" not in prompt

    def test_truncation(self):
        long_text = "a" * (MAX_INPUT_CHARS + 10)
        out = truncate_text(long_text)
        assert out.endswith(TRUNCATION_MARKER)
        assert len(out) == MAX_INPUT_CHARS + len(TRUNCATION_MARKER)

    def test_short_text_unchanged(self):
        assert truncate_text("abc") == "abc"

    def test_system_instruction_explains_number_notation(self):
        assert '"7.500" = 7500' in SYSTEM_INSTRUCTION


class TestResponseParsing:

    def test_strip_fence(self):
        assert strip_code_fence('```json\n[1]\n```') == "[1]"
        assert strip_code_fence("```\n[]\n```") == "[]"
        assert strip_code_fence("  [2] ") == "[2]"

    def test_parse_camel_case(self):
        t = parse_llm_response(ANSWER)[0]
        assert t.name_vi == "GDP bình quân đầu người"
        assert t.name_en == "GDP per capita"
        assert t.target_value == 7500.0
        assert t.target_year == 2030
        assert t.comparison == "approximately"

    def test_parse_fenced(self):
        assert len(parse_llm_response(f"```json\n{ANSWER}\n```")) == 1

    def test_snake_case_aliases(self):
        t = normalize_llm_target({
            "target_type": "milestone",
            "name_vi": "Hoàn thành cao tốc",
            "target_year": "2025",
            "raw_text_vi": "raw",
        })
        assert t.target_type is TargetType.MILESTONE
        assert t.target_year == 2025
        assert t.target_value is None

    def test_defaults_for_bad_fields(self):
        t = normalize_llm_target({"targetType": "OTHER", "targetValue": "n/a", "metadata": "x"})
        assert t.target_type is TargetType.QUANTITATIVE
        assert t.target_value is None
        assert t.metadata is None
        assert t.name_vi == ""

    def test_non_dict_items_ignored(self):
        assert len(parse_llm_response('[1, "x", {"nameVi": "A"}]')) == 1

    def test_invalid_json(self):
        with pytest.raises(LlmError):
            parse_llm_response("Here are the targets: ...")

    def test_not_an_array(self):
        with pytest.raises(LlmError):
            parse_llm_response('{"nameVi": "A"}')

    def test_non_finite_numbers_dropped(self):
        # json.loads accepts NaN, Infinity and overflowing exponents
        t = parse_llm_response(
            '[{"nameVi": "x", "targetYear": NaN, "baselineYear": 1e999,'
            ' "targetValue": Infinity, "targetMin": -Infinity, "targetMax": 5}]'
        )[0]
        assert t.target_year is None
        assert t.baseline_year is None
        assert t.target_value is None
        assert t.target_min is None
        assert t.target_max == 5.0

    def test_uncoercible_field_raises_llm_error(self):
        raw = json.dumps([{"nameVi": "x", "targetYear": "9" * 5000}])
        with pytest.raises(LlmError):
            parse_llm_response(raw)


class TestCallGemini:

    def setup_method(self):
        gemini._get_client.cache_clear()

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(LlmError, match="GEMINI_API_KEY"):
            call_gemini("prompt")

    def test_returns_text(self, monkeypatch):
        client = _fake_client("[]")
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: client)
        assert call_gemini("prompt", api_key="k") == "[]"
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["contents"] == "prompt"

    def test_empty_answer(self, monkeypatch):
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client(""))
        with pytest.raises(LlmError, match="empty"):
            call_gemini("prompt", api_key="k")

    def test_client_error_mapped(self, monkeypatch):
        error = genai_errors.ClientError(400, {"error": {"message": "bad request", "status": "INVALID_ARGUMENT"}})
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client(error))
        with pytest.raises(LlmError, match="400"):
            call_gemini("prompt", api_key="k")

    def test_rate_limit_retried(self, monkeypatch):
        error = genai_errors.ClientError(
            429, {"error": {"message": "Please retry in 2s", "status": "RESOURCE_EXHAUSTED"}}
        )
        sleeps = []
        monkeypatch.setattr(gemini.time, "sleep", sleeps.append)
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client(error, "[]"))
        assert call_gemini("prompt", api_key="k") == "[]"
        assert sleeps == [2.0]

    def test_rate_limit_exhausted(self, monkeypatch):
        error = genai_errors.ClientError(
            429, {"error": {"message": "Please retry in 1s", "status": "RESOURCE_EXHAUSTED"}}
        )
        monkeypatch.setattr(gemini.time, "sleep", lambda s: None)
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client(error, error))
        with pytest.raises(LlmError, match="retries"):
            call_gemini("prompt", api_key="k", max_retries=1)

    def test_transport_error_mapped(self, monkeypatch):
        error = httpx.ConnectTimeout("timed out")
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client(error))
        with pytest.raises(LlmError, match="transport"):
            call_gemini("prompt", api_key="k")


class TestExtractTargetsWithLlm:

    def test_end_to_end_with_fake_client(self, monkeypatch):
        client = _fake_client(f"```json\n{ANSWER}\n```")
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: client)
        targets = extract_targets_with_llm("GDP bình quân đầu người đạt khoảng 7.500 USD", api_key="k")
        assert [t.unit for t in targets] == ["USD"]
        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.system_instruction == SYSTEM_INSTRUCTION

    def test_bad_answer_raises(self, monkeypatch):
        monkeypatch.setattr(gemini, "_get_client", lambda key, timeout_ms: _fake_client("not json"))
        with pytest.raises(LlmError):
            extract_targets_with_llm("text", api_key="k")
