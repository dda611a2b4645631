"""
functions/orchestrator/resume_workflow_service.py

WHAT THIS FILE IS FOR
---------------------
The four use-cases of the Resume Tailoring API, each one:

    prompt (prompts.py) + schema (schema_contract.py)
      -> one model call (GeminiAdapter)
      -> pure merge against the caller's record (merge_engine.py)
      -> typed result (schemas/output_schema.py) with raw_response

CALL FLOW CONTEXT
-----------------
FastAPI (api.py)
  -> ActionRouter.dispatch()
      -> ResumeWorkflowService.<use-case>()

SEQUENCING
----------
tailor_resume() runs company research first and waits for it (or its
fallback) because the research summary is part of the tailoring prompt.
Nothing else is sequenced; there is no shared state between calls.

WHAT THIS FILE IS NOT FOR
-------------------------
- Authentication (session_verifier.py)
- Payload validation / dispatch (action_router.py)
- HTTP response shaping (api.py)
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Optional

import structlog

from functions.orchestrator.company_research import CompanyResearcher
from functions.orchestrator.errors import InvalidPayload
from functions.orchestrator.gemini_adapter import GeminiAdapter, pdf_part
from functions.orchestrator.merge_engine import (
    MergeReport,
    build_initial_profile,
    merge_condensed_cover_letter,
    merge_condensed_resume,
    merge_tailored,
)
from functions.orchestrator.prompts import (
    build_condense_cover_letter_prompt,
    build_condense_resume_prompt,
    build_parse_resume_prompt,
    build_tailor_resume_prompt,
)
from functions.orchestrator.schema_contract import (
    CONDENSE_COVER_LETTER_SCHEMA,
    CONDENSE_RESUME_SCHEMA,
    PARSE_RESUME_SCHEMA,
    TAILOR_RESUME_SCHEMA,
)
from functions.utils.settings import Settings
from schemas.input_schema import (
    CondenseCoverLetterPayload,
    CondenseResumePayload,
    ParseResumePayload,
    TailorResumePayload,
)
from schemas.output_schema import (
    CondenseCoverLetterResult,
    CondenseResumeResult,
    ParsedProfile,
    TailorResumeResult,
)

logger = structlog.get_logger(__name__)


class ResumeWorkflowService:
    def __init__(self, settings: Settings, adapter: Optional[GeminiAdapter] = None):
        self.settings = settings
        self.adapter = adapter or GeminiAdapter(settings)
        self.researcher = CompanyResearcher(self.adapter)

    def _diagnostics(self, report: MergeReport) -> Optional[Dict[str, Any]]:
        report.log()
        if self.settings.enable_debug_metadata:
            return report.as_dict()
        return None

    def parse_resume(self, payload: ParseResumePayload) -> ParsedProfile:
        try:
            pdf_bytes = base64.b64decode(payload.base64_pdf, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidPayload("base64Pdf is not valid base64") from exc

        reply = self.adapter.generate_json(
            prompt=build_parse_resume_prompt(),
            schema=PARSE_RESUME_SCHEMA,
            attachments=[pdf_part(pdf_bytes)],
            call_name="parse_resume",
        )
        profile, report = build_initial_profile(reply.data)

        logger.info(
            "resume_parsed",
            experience_count=len(profile.experience),
            education_count=len(profile.education),
            skill_count=len(profile.skills),
        )
        return ParsedProfile(
            **profile.model_dump(),
            raw_response=reply.raw_text,
            diagnostics=self._diagnostics(report),
        )

    def tailor_resume(self, payload: TailorResumePayload) -> TailorResumeResult:
        research = self.researcher.research(payload.jd.company_name)

        reply = self.adapter.generate_json(
            prompt=build_tailor_resume_prompt(
                profile=payload.base_profile,
                jd=payload.jd,
                research_summary=research.summary,
                github_projects=payload.github_projects,
                include_score=payload.include_score,
                target_page_count=payload.target_page_count,
                options=payload.options,
            ),
            schema=TAILOR_RESUME_SCHEMA,
            call_name="tailor_resume",
        )
        application, report = merge_tailored(
            payload.base_profile,
            reply.data,
            include_score=payload.include_score,
            search_sources=research.sources,
            github_projects=payload.github_projects,
        )
        if research.fell_back:
            report.fallbacks.append("companyResearch")

        logger.info(
            "resume_tailored",
            company=payload.jd.company_name,
            experience_count=len(application.resume.experience),
            match_score=application.match_score,
            research_fell_back=research.fell_back,
        )
        return TailorResumeResult(
            application=application,
            raw_response=reply.raw_text,
            diagnostics=self._diagnostics(report),
        )

    def condense_resume(self, payload: CondenseResumePayload) -> CondenseResumeResult:
        reply = self.adapter.generate_json(
            prompt=build_condense_resume_prompt(payload.profile),
            schema=CONDENSE_RESUME_SCHEMA,
            call_name="condense_resume",
        )
        profile, report = merge_condensed_resume(payload.profile, reply.data)

        logger.info(
            "resume_condensed",
            skills_before=len(payload.profile.skills),
            skills_after=len(profile.skills),
            experience_before=len(payload.profile.experience),
            experience_after=len(profile.experience),
        )
        return CondenseResumeResult(
            profile=profile,
            raw_response=reply.raw_text,
            diagnostics=self._diagnostics(report),
        )

    def condense_cover_letter(self, payload: CondenseCoverLetterPayload) -> CondenseCoverLetterResult:
        reply = self.adapter.generate_json(
            prompt=build_condense_cover_letter_prompt(
                payload.content,
                payload.candidate_name,
                payload.company_name,
            ),
            schema=CONDENSE_COVER_LETTER_SCHEMA,
            call_name="condense_cover_letter",
        )
        content, report = merge_condensed_cover_letter(payload.content, reply.data)

        logger.info("cover_letter_condensed", chars_before=len(payload.content), chars_after=len(content))
        return CondenseCoverLetterResult(
            content=content,
            raw_response=reply.raw_text,
            diagnostics=self._diagnostics(report),
        )
