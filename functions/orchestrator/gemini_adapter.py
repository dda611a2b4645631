"""
functions/orchestrator/gemini_adapter.py

WHAT THIS FILE IS FOR
---------------------
This module defines a *thin, synchronous adapter* for the generative model
(Google Gemini via the google-genai SDK).

It is responsible for:
- Building one generate_content request (prompt + attachments + schema)
- Applying model name and thinking budget from Settings
- Enforcing the API key before any call (ConfigurationMissing)
- Parsing the returned text as a JSON object
- Collecting grounding citations for search-grounded calls

CALL FLOW CONTEXT
-----------------
ResumeWorkflowService.<use-case>()
  -> GeminiAdapter.generate_json()
      -> client.models.generate_content(...)

ERROR HANDLING RULES
--------------------
- Exactly ONE call per invocation. No retries, no backoff.
- SDK / transport failure            -> OracleUnreachable
- Text that is not JSON              -> MalformedResponse
- JSON that is not an object         -> MalformedResponse
- Empty text                         -> {} (sparse reply, merge falls back)

Callers decide whether a failure propagates (every use-case) or is absorbed
(company research, see company_research.py).

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Merge model output into profiles
- Decide fallbacks for missing fields
- Log prompt or response bodies
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import structlog
from google import genai
from google.genai import types

from functions.orchestrator.errors import MalformedResponse, OracleUnreachable
from functions.utils.settings import Settings
from schemas.profile_schema import SearchSource

logger = structlog.get_logger(__name__)


@dataclass
class OracleReply:
    """
    Parsed model reply.

    `data` is the untrusted delta; `raw_text` is kept for diagnostics.
    """

    data: Dict[str, Any]
    raw_text: str
    sources: List[SearchSource] = field(default_factory=list)


class GeminiAdapter:
    """
    Thin client for the Gemini generate_content API.

    Responsibilities:
    - Construct request config (JSON mime type, schema, thinking budget, tools)
    - Translate SDK failures into OracleUnreachable
    - Parse reply text strictly as a JSON object
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def _client(self) -> genai.Client:
        api_key = self.settings.require_secret("google_genai_api_key")
        return genai.Client(api_key=api_key)

    def generate_json(
        self,
        *,
        prompt: str,
        schema: types.Schema,
        attachments: Sequence[types.Part] = (),
        grounded: bool = False,
        call_name: str = "generate",
    ) -> OracleReply:
        client = self._client()

        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
            thinking_config=types.ThinkingConfig(thinking_budget=self.settings.thinking_budget),
            tools=[types.Tool(google_search=types.GoogleSearch())] if grounded else None,
        )
        contents: List[Any] = [prompt, *attachments]

        started = time.perf_counter()
        try:
            response = client.models.generate_content(
                model=self.settings.gemini_model,
                contents=contents,
                config=config,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "oracle_call_failed",
                call=call_name,
                model=self.settings.gemini_model,
                error=str(exc),
            )
            raise OracleUnreachable(f"Model call failed ({call_name}): {exc}") from exc

        raw_text = response.text or ""
        logger.info(
            "oracle_call_completed",
            call=call_name,
            model=self.settings.gemini_model,
            elapsed_ms=round((time.perf_counter() - started) * 1000),
            response_chars=len(raw_text),
        )

        return OracleReply(
            data=parse_oracle_json(raw_text, call_name=call_name),
            raw_text=raw_text,
            sources=grounding_sources(response) if grounded else [],
        )


def parse_oracle_json(raw_text: str, *, call_name: str = "generate") -> Dict[str, Any]:
    """
    Strict parse of model text into a JSON object.

    Empty text is a sparse reply, not a malformed one.
    """
    if not raw_text.strip():
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        logger.warning("oracle_response_not_json", call=call_name, error=str(exc))
        raise MalformedResponse(f"AI response was incomplete or malformed ({call_name}).") from exc

    if not isinstance(data, dict):
        logger.warning("oracle_response_not_object", call=call_name, type=type(data).__name__)
        raise MalformedResponse(f"AI response was not a JSON object ({call_name}).")

    return data


def grounding_sources(response: Any) -> List[SearchSource]:
    """
    Extract web citations from the first candidate's grounding metadata.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: List[SearchSource] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        sources.append(SearchSource(title=getattr(web, "title", None) or "", uri=getattr(web, "uri", None) or ""))
    return sources


def pdf_part(pdf_bytes: bytes) -> types.Part:
    return types.Part.from_bytes(data=pdf_bytes, mime_type="application/pdf")
