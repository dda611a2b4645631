# -------------------------------------------------------------------
# schemas/input_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **public request schemas** for the
# Resume Tailoring API.
#
# The HTTP body is a single envelope:
#
#   {
#     "action": "parseResume" | "tailorResume" | "condenseResume" | "condenseCoverLetter",
#     "payload": { ...action specific... },
#     "access_token": "<optional, if no Authorization header>"
#   }
#
# `action` is a plain string on purpose: an unknown action must surface
# as UnknownAction from the router, not as a body validation error.
#
# `payload` is validated per action by functions/orchestrator/action_router.py
# against the *Payload models below.
#
# KEY DESIGN DECISION
# -------------------
# Every schema accepts both camelCase and snake_case field names
# (alias=camelCase + populate_by_name=True).
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# This module does NOT:
# - Perform business logic
# - Call downstream services
# - Handle API routing or HTTP concerns
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.profile_schema import JobDescription, UserProfile


class ResumeActionRequest(BaseModel):
    """
    Request envelope for every action.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "action": "condenseCoverLetter",
                "payload": {
                    "content": "I am excited to apply...",
                    "candidateName": "Ada Lovelace",
                    "companyName": "Acme",
                },
            }
        },
    )

    action: str = Field(..., description="Use-case discriminator")
    payload: Dict[str, Any] = Field(default_factory=dict)
    access_token: Optional[str] = Field(
        None,
        alias="accessToken",
        description="Session token fallback when no Authorization header is sent",
    )


class ParseResumePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base64_pdf: str = Field(..., alias="base64Pdf", min_length=1)


class TailorOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tone: Optional[str] = None
    # "concise" | "detailed" | anything else -> balanced
    conciseness: Optional[str] = None
    focus_skill: Optional[str] = Field(None, alias="focusSkill")


class TailorResumePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_profile: UserProfile = Field(..., alias="baseProfile")
    jd: JobDescription
    github_projects: List[Dict[str, Any]] = Field(default_factory=list, alias="githubProjects")
    include_score: bool = Field(True, alias="includeScore")
    target_page_count: int = Field(1, alias="targetPageCount", ge=1)
    options: Optional[TailorOptions] = None


class CondenseResumePayload(BaseModel):
    profile: UserProfile


class CondenseCoverLetterPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = ""
    candidate_name: str = Field("", alias="candidateName")
    company_name: str = Field("", alias="companyName")
