# tests/test_gemini_adapter.py
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

import functions.orchestrator.gemini_adapter as ga_mod
from functions.orchestrator.errors import ConfigurationMissing, MalformedResponse, OracleUnreachable
from functions.orchestrator.schema_contract import COMPANY_RESEARCH_SCHEMA, TAILOR_RESUME_SCHEMA
from functions.utils.settings import Settings


def _settings(**overrides: Any) -> Settings:
    base: Dict[str, Any] = dict(google_genai_api_key="test-key", gemini_model="gemini-test", thinking_budget=1024)
    base.update(overrides)
    return Settings(**base)


def _response(text: Optional[str], chunks: Optional[List[Any]] = None) -> SimpleNamespace:
    metadata = SimpleNamespace(grounding_chunks=chunks) if chunks is not None else None
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=metadata)])


class _FakeModels:
    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: Any, config: Any) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


class _FakeClient:
    """
    Mimics genai.Client used as:
      client = genai.Client(api_key=...)
      client.models.generate_content(model=..., contents=..., config=...)
    """

    def __init__(self, models: _FakeModels):
        self.models = models
        self.api_keys: List[str] = []


def _install(monkeypatch: pytest.MonkeyPatch, models: _FakeModels) -> _FakeClient:
    client = _FakeClient(models)

    def _factory(*, api_key: str) -> _FakeClient:
        client.api_keys.append(api_key)
        return client

    monkeypatch.setattr(ga_mod.genai, "Client", _factory)
    return client


def test_generate_json_parses_object_and_applies_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    models = _FakeModels(response=_response('{"tailoredSummary": "New"}'))
    client = _install(monkeypatch, models)

    reply = ga_mod.GeminiAdapter(_settings()).generate_json(
        prompt="tailor please",
        schema=TAILOR_RESUME_SCHEMA,
        call_name="tailor_resume",
    )

    assert reply.data == {"tailoredSummary": "New"}
    assert reply.raw_text == '{"tailoredSummary": "New"}'
    assert reply.sources == []

    assert client.api_keys == ["test-key"]
    assert len(models.calls) == 1
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == ["tailor please"]
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].thinking_config.thinking_budget == 1024
    assert not call["config"].tools


def test_generate_json_malformed_text_raises_malformed_response(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _FakeModels(response=_response('{"tailoredSummary": ')))

    with pytest.raises(MalformedResponse):
        ga_mod.GeminiAdapter(_settings()).generate_json(prompt="p", schema=TAILOR_RESUME_SCHEMA)


def test_generate_json_sdk_failure_raises_oracle_unreachable_after_one_attempt(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    models = _FakeModels(error=RuntimeError("connection reset"))
    _install(monkeypatch, models)

    with pytest.raises(OracleUnreachable) as excinfo:
        ga_mod.GeminiAdapter(_settings()).generate_json(prompt="p", schema=TAILOR_RESUME_SCHEMA)

    assert "connection reset" in excinfo.value.message
    assert len(models.calls) == 1  # no retries


def test_generate_json_missing_api_key_raises_before_any_call(monkeypatch: pytest.MonkeyPatch) -> None:
    models = _FakeModels(response=_response("{}"))
    client = _install(monkeypatch, models)

    with pytest.raises(ConfigurationMissing):
        ga_mod.GeminiAdapter(_settings(google_genai_api_key=None)).generate_json(
            prompt="p", schema=TAILOR_RESUME_SCHEMA
        )

    assert client.api_keys == []
    assert models.calls == []


def test_generate_json_grounded_collects_web_sources(monkeypatch: pytest.MonkeyPatch) -> None:
    chunks = [
        SimpleNamespace(web=SimpleNamespace(title="Acme - About", uri="https://acme.example/about")),
        SimpleNamespace(web=None),
        SimpleNamespace(web=SimpleNamespace(title=None, uri="https://news.example/acme")),
    ]
    models = _FakeModels(response=_response('{"summary": "Acme builds rockets."}', chunks))
    _install(monkeypatch, models)

    reply = ga_mod.GeminiAdapter(_settings()).generate_json(
        prompt="research",
        schema=COMPANY_RESEARCH_SCHEMA,
        grounded=True,
        call_name="company_research",
    )

    assert [(s.title, s.uri) for s in reply.sources] == [
        ("Acme - About", "https://acme.example/about"),
        ("", "https://news.example/acme"),
    ]
    assert models.calls[0]["config"].tools


def test_generate_json_passes_attachments_after_prompt(monkeypatch: pytest.MonkeyPatch) -> None:
    models = _FakeModels(response=_response("{}"))
    _install(monkeypatch, models)
    part = ga_mod.pdf_part(b"%PDF-1.4")

    ga_mod.GeminiAdapter(_settings()).generate_json(prompt="parse", schema=TAILOR_RESUME_SCHEMA, attachments=[part])

    assert models.calls[0]["contents"] == ["parse", part]


def test_parse_oracle_json_empty_text_is_sparse_not_malformed() -> None:
    assert ga_mod.parse_oracle_json("") == {}
    assert ga_mod.parse_oracle_json("   \n") == {}


def test_parse_oracle_json_rejects_non_object_json() -> None:
    with pytest.raises(MalformedResponse):
        ga_mod.parse_oracle_json('["a", "b"]')


def test_grounding_sources_without_candidates_is_empty() -> None:
    assert ga_mod.grounding_sources(SimpleNamespace(candidates=None)) == []
    assert ga_mod.grounding_sources(_response("{}")) == []
