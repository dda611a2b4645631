# -------------------------------------------------------------------
# schemas/profile_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **authoritative domain records** exchanged
# between the browser client and the Resume Tailoring API:
#
#   UserProfile  (+ Experience, Education, SocialLink)
#   JobDescription
#   SearchSource
#
# NAMING CONVENTION
# -----------------
# Fields are snake_case internally. Each multi-word field carries a
# camelCase alias so the client can send either form:
#
#   - snake_case: full_name, start_date, base64_pdf
#   - camelCase:  fullName,  startDate,  base64Pdf
#
# Responses are converted back to camelCase at the API boundary by
# convert_keys_snake_to_camel() (see api.py).
#
# PASS-THROUGH FIELDS
# -------------------
# UserProfile allows extra keys. Anything the client stores on the
# profile that this service does not model (portfolio settings, new
# client-side fields) survives every merge untouched.
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# - Reading oracle output (oracle deltas are untrusted dicts, read
#   field by field in functions/orchestrator/merge_engine.py)
# - Business rules
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Experience(BaseModel):
    """
    One role on the resume.

    `id` is caller-assigned, unique within a profile and never reassigned.
    It is the join key for every oracle merge.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    company: str = ""
    role: str = ""
    start_date: str = Field("", alias="startDate")
    end_date: str = Field("", alias="endDate")
    description: List[str] = Field(default_factory=list)


class Education(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    institution: str = ""
    degree: str = ""
    year: str = ""


class SocialLink(BaseModel):
    model_config = ConfigDict(extra="allow")

    platform: str = ""
    url: str = ""


class UserProfile(BaseModel):
    """
    The authoritative, user-owned resume record.

    Created once by the parse use-case, afterwards changed only through
    merge_engine functions.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        json_schema_extra={
            "example": {
                "fullName": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "",
                "location": "London",
                "summary": "Analyst and programmer.",
                "skills": ["Python", "Mathematics"],
                "experience": [
                    {
                        "id": "exp-1",
                        "company": "Analytical Engines Ltd",
                        "role": "Programmer",
                        "startDate": "Jan 1842",
                        "endDate": "Dec 1843",
                        "description": ["Wrote the first published algorithm."],
                    }
                ],
                "education": [],
                "links": [],
            }
        },
    )

    full_name: str = Field("", alias="fullName")
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    links: List[SocialLink] = Field(default_factory=list)

    # Client-side fields this service never changes
    github_username: Optional[str] = Field(None, alias="githubUsername")
    other_experience: Optional[List[Experience]] = Field(None, alias="otherExperience")
    portfolio_template: Optional[str] = Field(None, alias="portfolioTemplate")
    portfolio_theme: Optional[str] = Field(None, alias="portfolioTheme")
    profile_photo_url: Optional[str] = Field(None, alias="profilePhotoUrl")
    github_projects: Optional[List[Dict[str, Any]]] = Field(None, alias="githubProjects")


class JobDescription(BaseModel):
    """Ephemeral tailoring input; never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field("", alias="companyName")
    role_title: str = Field("", alias="roleTitle")
    raw_text: str = Field("", alias="rawText")


class SearchSource(BaseModel):
    """Citation returned by the grounded company-research call."""

    title: str = ""
    uri: str = ""
