# -------------------------------------------------------------------
# schemas/output_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **internal response schemas** for each
# use-case of the Resume Tailoring API.
#
# NAMING CONVENTION (IMPORTANT)
# -----------------------------
# All fields in this file use **snake_case**.
#
# At the API boundary (in api.py), response objects are converted to
# **camelCase JSON** using:
#     convert_keys_snake_to_camel()
#
# DO NOT rename fields here to camelCase.
#
# DIAGNOSTICS
# -----------
# Every result carries `raw_response` (the untouched model text).
# `diagnostics` holds the merge report and is only populated when
# settings.enable_debug_metadata is on.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from schemas.profile_schema import SearchSource, UserProfile


class ParsedProfile(UserProfile):
    """
    Result of parseResume: the bootstrap profile, flat, plus raw text.
    """

    raw_response: str = ""
    diagnostics: Optional[Dict[str, Any]] = None


class TailoredApplication(BaseModel):
    """
    A job-specific version of the profile plus its side artifacts.
    """

    resume: UserProfile
    cover_letter: str
    match_score: float = Field(0, ge=0, le=100)
    key_keywords: List[str] = Field(default_factory=list)
    search_sources: List[SearchSource] = Field(default_factory=list)
    github_projects: List[Dict[str, Any]] = Field(default_factory=list)
    show_match_score: bool = True


class TailorResumeResult(BaseModel):
    application: TailoredApplication
    raw_response: str = ""
    diagnostics: Optional[Dict[str, Any]] = None


class CondenseResumeResult(BaseModel):
    profile: UserProfile
    raw_response: str = ""
    diagnostics: Optional[Dict[str, Any]] = None


class CondenseCoverLetterResult(BaseModel):
    content: str
    raw_response: str = ""
    diagnostics: Optional[Dict[str, Any]] = None
