# tests/test_resume_workflow_service.py
from __future__ import annotations

import base64
from typing import Any, Dict, List

import pytest

from functions.orchestrator.company_research import RESEARCH_FAILED_SUMMARY
from functions.orchestrator.errors import InvalidPayload, MalformedResponse, OracleUnreachable
from functions.orchestrator.gemini_adapter import OracleReply
from functions.orchestrator.merge_engine import COVER_LETTER_FAILED
from functions.orchestrator.resume_workflow_service import ResumeWorkflowService
from functions.utils.settings import Settings
from schemas.input_schema import (
    CondenseCoverLetterPayload,
    CondenseResumePayload,
    ParseResumePayload,
    TailorResumePayload,
)
from schemas.profile_schema import SearchSource


class ScriptedAdapter:
    """
    Stands in for GeminiAdapter. `script` maps call_name to an OracleReply
    or an exception to raise.
    """

    def __init__(self, script: Dict[str, Any]):
        self.script = script
        self.calls: List[Dict[str, Any]] = []

    def generate_json(self, **kwargs: Any) -> OracleReply:
        self.calls.append(kwargs)
        outcome = self.script[kwargs["call_name"]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _reply(data: Dict[str, Any], sources: List[SearchSource] | None = None) -> OracleReply:
    return OracleReply(data=data, raw_text="raw", sources=sources or [])


def _profile_dict() -> Dict[str, Any]:
    return {
        "fullName": "Ada Lovelace",
        "email": "ada@example.com",
        "summary": "Original.",
        "skills": ["Python", "SQL"],
        "experience": [
            {"id": "a", "company": "A", "role": "R", "startDate": "2020", "endDate": "2021", "description": ["a1"]},
            {"id": "b", "company": "B", "role": "S", "startDate": "2021", "endDate": "2022", "description": ["b1"]},
        ],
        "education": [],
        "links": [],
    }


def _service(script: Dict[str, Any], **settings: Any) -> tuple[ResumeWorkflowService, ScriptedAdapter]:
    adapter = ScriptedAdapter(script)
    svc = ResumeWorkflowService(Settings(google_genai_api_key="k", **settings), adapter=adapter)  # type: ignore[arg-type]
    return svc, adapter


# ---------------------------------------------------------------------
# parseResume
# ---------------------------------------------------------------------
def test_parse_resume_attaches_pdf_and_bootstraps_profile() -> None:
    svc, adapter = _service(
        {"parse_resume": _reply({"fullName": "Ada", "experience": [{"company": "A", "description": ["x"]}]})}
    )
    pdf_b64 = base64.b64encode(b"%PDF-1.4 fake").decode()

    result = svc.parse_resume(ParseResumePayload(base64_pdf=pdf_b64))

    assert result.full_name == "Ada"
    assert len(result.experience) == 1
    assert result.experience[0].id
    assert result.raw_response == "raw"
    assert result.diagnostics is None
    assert len(adapter.calls[0]["attachments"]) == 1


def test_parse_resume_rejects_invalid_base64_before_model_call() -> None:
    svc, adapter = _service({})

    with pytest.raises(InvalidPayload):
        svc.parse_resume(ParseResumePayload(base64_pdf="not base64!!"))

    assert adapter.calls == []


def test_parse_resume_malformed_model_output_propagates() -> None:
    svc, _ = _service({"parse_resume": MalformedResponse("AI response was incomplete or malformed")})

    with pytest.raises(MalformedResponse):
        svc.parse_resume(ParseResumePayload(base64_pdf=base64.b64encode(b"pdf").decode()))


# ---------------------------------------------------------------------
# tailorResume
# ---------------------------------------------------------------------
def _tailor_payload(**overrides: Any) -> TailorResumePayload:
    data: Dict[str, Any] = {
        "baseProfile": _profile_dict(),
        "jd": {"companyName": "Acme", "roleTitle": "Engineer", "rawText": "Python"},
    }
    data.update(overrides)
    return TailorResumePayload.model_validate(data)


def test_tailor_runs_research_first_and_feeds_summary_into_prompt() -> None:
    sources = [SearchSource(title="About", uri="https://acme.example")]
    svc, adapter = _service(
        {
            "company_research": _reply({"summary": "Acme values craft."}, sources),
            "tailor_resume": _reply(
                {
                    "tailoredExperience": [{"id": "b", "description": ["b2"]}, {"id": "a", "description": ["a2"]}],
                    "coverLetter": "Letter",
                    "matchScore": 91,
                }
            ),
        }
    )

    result = svc.tailor_resume(_tailor_payload(githubProjects=[{"html_url": "https://g.example/x"}]))

    assert [c["call_name"] for c in adapter.calls] == ["company_research", "tailor_resume"]
    assert "Acme values craft." in adapter.calls[1]["prompt"]
    assert [e.id for e in result.application.resume.experience] == ["b", "a"]
    assert result.application.search_sources == sources
    assert result.application.github_projects == [{"html_url": "https://g.example/x"}]
    assert result.application.match_score == 91


def test_tailor_proceeds_when_research_fails() -> None:
    svc, adapter = _service(
        {
            "company_research": OracleUnreachable("timeout"),
            "tailor_resume": _reply({}),
        },
        enable_debug_metadata=True,
    )

    result = svc.tailor_resume(_tailor_payload())

    assert RESEARCH_FAILED_SUMMARY in adapter.calls[1]["prompt"]
    assert result.application.search_sources == []
    assert result.application.cover_letter == COVER_LETTER_FAILED
    assert result.application.resume.experience[0].id == "a"
    assert "companyResearch" in result.diagnostics["fallbacks"]


def test_tailor_failure_of_main_call_propagates() -> None:
    svc, _ = _service(
        {
            "company_research": _reply({"summary": "ok"}),
            "tailor_resume": OracleUnreachable("down"),
        }
    )

    with pytest.raises(OracleUnreachable):
        svc.tailor_resume(_tailor_payload())


# ---------------------------------------------------------------------
# condenseResume / condenseCoverLetter
# ---------------------------------------------------------------------
def test_condense_resume_merges_indices_and_reports_when_debug_enabled() -> None:
    svc, _ = _service(
        {"condense_resume": _reply({"selectedSkillIndices": [1, 9], "condensedSummary": "Short."})},
        enable_debug_metadata=True,
    )

    result = svc.condense_resume(CondenseResumePayload.model_validate({"profile": _profile_dict()}))

    assert result.profile.skills == ["SQL"]
    assert result.profile.summary == "Short."
    assert result.diagnostics["dropped_skill_indices"] == [9]


def test_condense_cover_letter_keeps_original_on_empty_reply() -> None:
    svc, _ = _service({"condense_cover_letter": _reply({"condensedContent": ""})})

    result = svc.condense_cover_letter(
        CondenseCoverLetterPayload(content="Original letter", candidate_name="Ada", company_name="Acme")
    )

    assert result.content == "Original letter"
    assert result.raw_response == "raw"
