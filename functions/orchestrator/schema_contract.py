"""
functions/orchestrator/schema_contract.py

WHAT THIS FILE IS FOR
---------------------
Declares, for every call made to the generative model, the JSON shape the
model must attempt to produce: field names, types and which fields are
required. The schemas are sent with the request as `response_schema`.

    parse            -> PARSE_RESUME_SCHEMA
    company research -> COMPANY_RESEARCH_SCHEMA
    tailor           -> TAILOR_RESUME_SCHEMA
    condense resume  -> CONDENSE_RESUME_SCHEMA
    condense letter  -> CONDENSE_COVER_LETTER_SCHEMA

CONTRACT
--------
- "required" is a request to the model, not a guarantee. A reply missing
  a required field is still accepted; merge_engine.py falls back per field.
- Only syntactically invalid JSON is fatal (gemini_adapter.MalformedResponse).
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from google.genai import types


def _string(description: Optional[str] = None) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


def _string_list() -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=_string())


def _object(
    properties: Dict[str, types.Schema],
    required: Optional[Sequence[str]] = None,
) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=list(required) if required else None,
    )


def _array_of(item: types.Schema) -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=item)


PARSE_RESUME_SCHEMA = _object(
    {
        "fullName": _string(),
        "email": _string(),
        "phone": _string(),
        "location": _string(),
        "summary": _string(),
        "skills": _string_list(),
        "experience": _array_of(
            _object(
                {
                    "company": _string(),
                    "role": _string(),
                    "startDate": _string(),
                    "endDate": _string(),
                    "description": _string_list(),
                }
            )
        ),
        "education": _array_of(
            _object(
                {
                    "institution": _string(),
                    "degree": _string(),
                    "year": _string(),
                }
            )
        ),
        "links": _array_of(
            _object(
                {
                    "platform": _string(),
                    "url": _string(),
                }
            )
        ),
    },
    required=["fullName", "email", "experience", "skills"],
)

COMPANY_RESEARCH_SCHEMA = _object({"summary": _string()})

TAILOR_RESUME_SCHEMA = _object(
    {
        "tailoredSummary": _string(),
        "tailoredSkills": _string_list(),
        "tailoredExperience": _array_of(
            _object(
                {
                    "id": _string("Must match original experience ID"),
                    "description": _string_list(),
                },
                required=["id", "description"],
            )
        ),
        "coverLetter": _string(),
        "matchScore": types.Schema(type=types.Type.NUMBER),
        "keyKeywords": _string_list(),
    },
    required=[
        "tailoredSummary",
        "tailoredSkills",
        "tailoredExperience",
        "coverLetter",
        "matchScore",
        "keyKeywords",
    ],
)

CONDENSE_RESUME_SCHEMA = _object(
    {
        "condensedSummary": _string(),
        "selectedSkillIndices": _array_of(types.Schema(type=types.Type.INTEGER)),
        "condensedExperience": _array_of(
            _object(
                {
                    "id": _string(),
                    "condensedBullets": _string_list(),
                },
                required=["id", "condensedBullets"],
            )
        ),
        "keepEducationIds": _string_list(),
    },
    required=["condensedSummary", "selectedSkillIndices", "condensedExperience"],
)

CONDENSE_COVER_LETTER_SCHEMA = _object(
    {"condensedContent": _string()},
    required=["condensedContent"],
)
