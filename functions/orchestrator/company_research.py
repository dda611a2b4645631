"""
functions/orchestrator/company_research.py

Best-effort company research ahead of tailoring.

This is the one oracle call whose failure is absorbed locally: the result
type says so. research() never raises an OracleError; it returns a
ResearchOutcome whose `fell_back` flag tells the caller a neutral default
was used instead of real research.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from functions.orchestrator.errors import OracleError
from functions.orchestrator.gemini_adapter import GeminiAdapter
from functions.orchestrator.prompts import build_company_research_prompt
from functions.orchestrator.schema_contract import COMPANY_RESEARCH_SCHEMA
from schemas.profile_schema import SearchSource

logger = structlog.get_logger(__name__)

RESEARCH_FAILED_SUMMARY = "Could not retrieve company details."
RESEARCH_EMPTY_SUMMARY = "No specific company research found."


@dataclass(frozen=True)
class ResearchOutcome:
    summary: str
    sources: List[SearchSource] = field(default_factory=list)
    fell_back: bool = False
    error: Optional[str] = None

    @classmethod
    def fallback(cls, error: str) -> "ResearchOutcome":
        return cls(summary=RESEARCH_FAILED_SUMMARY, sources=[], fell_back=True, error=error)


class CompanyResearcher:
    def __init__(self, adapter: GeminiAdapter):
        self.adapter = adapter

    def research(self, company_name: str) -> ResearchOutcome:
        logger.info("company_research_started", company=company_name)

        try:
            reply = self.adapter.generate_json(
                prompt=build_company_research_prompt(company_name),
                schema=COMPANY_RESEARCH_SCHEMA,
                grounded=True,
                call_name="company_research",
            )
        except OracleError as exc:
            logger.warning("company_research_failed", company=company_name, error=exc.message)
            return ResearchOutcome.fallback(exc.message)

        summary = reply.data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = RESEARCH_EMPTY_SUMMARY

        logger.info("company_research_completed", company=company_name, source_count=len(reply.sources))
        return ResearchOutcome(summary=summary.strip(), sources=reply.sources)
