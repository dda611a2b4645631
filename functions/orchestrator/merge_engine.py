"""
functions/orchestrator/merge_engine.py

WHAT THIS FILE IS FOR
---------------------
Reconciles the model's JSON reply (an untrusted, possibly partial delta)
with the caller's authoritative records. Every function here is pure:

    (authoritative record, untrusted delta) -> (new record, MergeReport)

No I/O, no model calls; unit-testable on plain dicts.

MERGE POLICY (all use-cases)
----------------------------
- Identifiers from the model are only ever matched against existing
  entries. An unknown id is discarded, never turned into a new entry.
- Empty from the model means "no opinion": "" / [] / missing never
  overwrites a non-empty authoritative value.
- Reordering a list is accepted (it encodes relevance ranking). Shape
  corruption is not: non-list values, non-dict entries, wrong-typed items
  and foreign ids are filtered out.
- Sparse replies never raise. Only the adapter raises (malformed JSON).

The one exception is build_initial_profile(): there is no prior record
to protect, so the delta becomes the whole profile.

READING THE DELTA
-----------------
The delta is read with isinstance checks at every level, never validated
into a pydantic model: one wrong-typed field must not reject the rest.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog

from schemas.output_schema import TailoredApplication
from schemas.profile_schema import Education, Experience, SearchSource, SocialLink, UserProfile

logger = structlog.get_logger(__name__)

COVER_LETTER_FAILED = "Cover letter generation failed."

CONDENSED_EXPERIENCE_FALLBACK_COUNT = 4
CONDENSED_SKILLS_FALLBACK_COUNT = 8
CONDENSED_LINKS_LIMIT = 3


@dataclass
class MergeReport:
    """
    What a merge discarded or defaulted.

    Non-fatal quality signal: a growing number of foreign ids or bad
    indices usually means the prompt and the model have drifted apart.
    """

    use_case: str
    foreign_ids: List[str] = field(default_factory=list)
    dropped_skill_indices: List[Any] = field(default_factory=list)
    malformed_entries: int = 0
    fallbacks: List[str] = field(default_factory=list)

    @property
    def discarded_count(self) -> int:
        return len(self.foreign_ids) + len(self.dropped_skill_indices) + self.malformed_entries

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["discarded_count"] = self.discarded_count
        return data

    def log(self) -> None:
        if self.discarded_count:
            logger.warning("merge_discarded_oracle_entries", **self.as_dict())
        elif self.fallbacks:
            logger.info("merge_used_fallbacks", use_case=self.use_case, fallbacks=self.fallbacks)


# ------------------------------------------------------------------ #
# Delta readers
# ------------------------------------------------------------------ #
def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _non_blank(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _string_list(value: Any) -> List[str]:
    """List of non-blank strings; anything else in the list is dropped."""
    if not isinstance(value, list):
        return []
    out: List[str] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out


def _dict_entries(value: Any, report: MergeReport) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    entries: List[Dict[str, Any]] = []
    for item in value:
        if isinstance(item, dict):
            entries.append(item)
        else:
            report.malformed_entries += 1
    return entries


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _match_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, str):
        try:
            score = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(score) or math.isinf(score):
        return None
    return min(max(score, 0.0), 100.0)


def _new_id() -> str:
    return uuid.uuid4().hex


# ------------------------------------------------------------------ #
# Identifier-keyed reconciliation
# ------------------------------------------------------------------ #
def _reconcile_experience(
    originals: Iterable[Experience],
    delta_entries: Any,
    *,
    bullets_key: str,
    report: MergeReport,
) -> Optional[List[Experience]]:
    """
    Merge model entries into existing experience by id.

    Returns None when the model gave no usable list (caller falls back).
    Otherwise returns the matched entries in the model's order; may be
    empty when every id was foreign.
    """
    entries = _dict_entries(delta_entries, report)
    if not entries:
        return None

    by_id = {exp.id: exp for exp in originals}
    merged: List[Experience] = []
    seen: set[str] = set()

    for entry in entries:
        entry_id = entry.get("id")
        original = by_id.get(entry_id) if isinstance(entry_id, str) else None
        if original is None:
            report.foreign_ids.append(str(entry_id))
            continue
        if original.id in seen:
            continue
        seen.add(original.id)

        bullets = _string_list(entry.get(bullets_key))
        if bullets:
            merged.append(original.model_copy(update={"description": bullets}, deep=True))
        else:
            report.fallbacks.append(f"experience[{original.id}].description")
            merged.append(original.model_copy(deep=True))

    return merged


# ------------------------------------------------------------------ #
# Use-cases
# ------------------------------------------------------------------ #
def build_initial_profile(delta: Dict[str, Any]) -> Tuple[UserProfile, MergeReport]:
    """
    Parse bootstrap: the delta becomes the whole profile.

    Identifiers are generated here, never taken from the model. Missing
    fields become "" or [] (never None).
    """
    report = MergeReport(use_case="parseResume")

    for key in ("fullName", "email", "experience", "skills"):
        if key not in delta:
            report.fallbacks.append(key)

    experience = [
        Experience(
            id=_new_id(),
            company=_text(item.get("company")),
            role=_text(item.get("role")),
            start_date=_text(item.get("startDate")),
            end_date=_text(item.get("endDate")),
            description=_string_list(item.get("description")),
        )
        for item in _dict_entries(delta.get("experience"), report)
    ]
    education = [
        Education(
            id=_new_id(),
            institution=_text(item.get("institution")),
            degree=_text(item.get("degree")),
            year=_text(item.get("year")),
        )
        for item in _dict_entries(delta.get("education"), report)
    ]
    links = [
        SocialLink(platform=_text(item.get("platform")), url=_text(item.get("url")))
        for item in _dict_entries(delta.get("links"), report)
    ]

    profile = UserProfile(
        full_name=_text(delta.get("fullName")),
        email=_text(delta.get("email")),
        phone=_text(delta.get("phone")),
        location=_text(delta.get("location")),
        summary=_text(delta.get("summary")),
        skills=_string_list(delta.get("skills")),
        experience=experience,
        education=education,
        links=links,
    )
    return profile, report


def merge_tailored(
    profile: UserProfile,
    delta: Dict[str, Any],
    *,
    include_score: bool = True,
    search_sources: Optional[List[SearchSource]] = None,
    github_projects: Optional[List[Dict[str, Any]]] = None,
) -> Tuple[TailoredApplication, MergeReport]:
    """
    Tailor: rewrite summary, skills and bullets; reorder experience.

    Output experience order is exactly the model's tailoredExperience order.
    """
    report = MergeReport(use_case="tailorResume")

    experience = _reconcile_experience(
        profile.experience,
        delta.get("tailoredExperience"),
        bullets_key="description",
        report=report,
    )
    if experience is None:
        report.fallbacks.append("experience")
        experience = [exp.model_copy(deep=True) for exp in profile.experience]

    skills = _string_list(delta.get("tailoredSkills"))
    if not skills:
        report.fallbacks.append("skills")
        skills = list(profile.skills)

    summary = _non_blank(delta.get("tailoredSummary"))
    if summary is None:
        report.fallbacks.append("summary")
        summary = profile.summary

    cover_letter = _non_blank(delta.get("coverLetter"))
    if cover_letter is None:
        report.fallbacks.append("coverLetter")
        cover_letter = COVER_LETTER_FAILED

    match_score = _match_score(delta.get("matchScore"))
    if match_score is None:
        report.fallbacks.append("matchScore")
        match_score = 0.0

    resume = profile.model_copy(
        update={"summary": summary, "skills": skills, "experience": experience},
        deep=True,
    )
    application = TailoredApplication(
        resume=resume,
        cover_letter=cover_letter,
        match_score=match_score,
        key_keywords=_string_list(delta.get("keyKeywords")),
        search_sources=list(search_sources or []),
        github_projects=list(github_projects or []),
        show_match_score=include_score,
    )
    return application, report


def merge_condensed_resume(profile: UserProfile, delta: Dict[str, Any]) -> Tuple[UserProfile, MergeReport]:
    """
    Condense: project skills by index, trim bullets by id, filter education.

    Hard truncations (first 8 skills, first 4 roles, first 3 links) are
    formatting limits, applied as fallbacks or unconditionally (links).
    """
    report = MergeReport(use_case="condenseResume")

    # Skills: indices into the ORIGINAL skills list
    raw_indices = delta.get("selectedSkillIndices")
    skills: List[str] = []
    picked: set[int] = set()
    for raw in raw_indices if isinstance(raw_indices, list) else []:
        index = _as_index(raw)
        if index is None or not 0 <= index < len(profile.skills):
            report.dropped_skill_indices.append(raw)
            continue
        if index in picked:
            continue
        picked.add(index)
        skills.append(profile.skills[index])
    if not skills:
        report.fallbacks.append("skills")
        skills = profile.skills[:CONDENSED_SKILLS_FALLBACK_COUNT]

    experience = _reconcile_experience(
        profile.experience,
        delta.get("condensedExperience"),
        bullets_key="condensedBullets",
        report=report,
    )
    if not experience:
        report.fallbacks.append("experience")
        experience = [exp.model_copy(deep=True) for exp in profile.experience[:CONDENSED_EXPERIENCE_FALLBACK_COUNT]]

    # Education: keep named ids; naming none (or only unknown ids) keeps all
    known_ids = {edu.id for edu in profile.education}
    keep_ids = set()
    for edu_id in _string_list(delta.get("keepEducationIds")):
        if edu_id in known_ids:
            keep_ids.add(edu_id)
        else:
            report.foreign_ids.append(edu_id)
    if keep_ids:
        education = [edu.model_copy(deep=True) for edu in profile.education if edu.id in keep_ids]
    else:
        report.fallbacks.append("education")
        education = [edu.model_copy(deep=True) for edu in profile.education]

    summary = _non_blank(delta.get("condensedSummary"))
    if summary is None:
        report.fallbacks.append("summary")
        summary = profile.summary

    condensed = profile.model_copy(
        update={
            "summary": summary,
            "skills": skills,
            "experience": experience,
            "education": education,
            "links": [link.model_copy() for link in profile.links[:CONDENSED_LINKS_LIMIT]],
        },
        deep=True,
    )
    return condensed, report


def merge_condensed_cover_letter(content: str, delta: Dict[str, Any]) -> Tuple[str, MergeReport]:
    report = MergeReport(use_case="condenseCoverLetter")

    condensed = _non_blank(delta.get("condensedContent"))
    if condensed is None:
        report.fallbacks.append("content")
        return content, report
    return condensed, report
