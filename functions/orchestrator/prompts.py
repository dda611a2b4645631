"""
functions/orchestrator/prompts.py

Instruction text for every call made to the generative model.

Templates are plain str.format() strings; the builders below fill them
from typed inputs. Context objects are embedded as compact JSON.
The JSON shape of each reply is NOT described here, it is sent separately
as the response schema (schema_contract.py).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from schemas.input_schema import TailorOptions
from schemas.profile_schema import JobDescription, UserProfile

PARSE_RESUME_PROMPT = """
Analyze the attached resume PDF and extract its data into the structured JSON format of the schema.

Rules:
1. Extract the full name, email, phone and location.
2. Extract the professional summary.
3. Extract the list of skills.
4. Extract every experience entry. Use one consistent date format (e.g. "Jan 2020").
   Split each job description into an array of distinct bullet points.
5. Extract the education history.
6. Extract social links (LinkedIn, portfolio, etc.) when present.
7. When a field is not found, return an empty string or an empty array.
8. Do not invent data. Only use what the document contains.
""".strip()

COMPANY_RESEARCH_PROMPT = """
Research the company "{company_name}".
Find:
1. Its mission statement and core values.
2. Recent significant news, product launches or strategic initiatives.
3. Its corporate culture and work environment.
4. The key business challenges it faces or the industry pain points it solves.

Summarize the findings in one concise paragraph covering culture, values AND business challenges.
Do not use trademarked or branded terms specific to the company.
""".strip()

TAILOR_RESUME_PROMPT = """
You are an elite resume strategist specializing in Applicant Tracking System (ATS) optimization.

OBJECTIVE: Tailor the candidate profile for the highest possible match against the job description,
using the company research for cultural alignment. The output must survive automated ATS parsing
and convince a human recruiter.

===== CORE RULES =====

RELEVANCE RULE: Order tailoredExperience by relevance to the target role, most relevant first.
An older role that matches the job better may be placed ahead of a recent one.

ID RULE: Every tailoredExperience entry must reuse the exact "id" of a role from the candidate profile.
Never invent ids.

LINGO RULE: Avoid company-specific jargon, internal terminology and non-standard shorthand.
Use professional, industry-standard language understood by recruiters and ATS systems.

PARSEABILITY RULE: Plain alphanumeric text only. No bullet glyphs, arrows, emojis or tables.

{tone_instruction}
{length_instruction}
{focus_instruction}

===== INPUT DATA =====

Candidate Profile:
{profile_json}

Selected GitHub Projects (highlight when relevant to technical skills):
{github_projects_json}

Target Job Description:
Company: {company_name}
Role: {role_title}
Raw Description: {raw_text}

Company Research:
{research_summary}

===== OUTPUT REQUIREMENTS =====

1. tailoredSummary: a 2-3 sentence pitch embedding the top 2-3 keywords of the job description
   and at least one quantifiable career highlight.

2. tailoredSkills: 6-8 skills with the strongest match to the job requirements, using the exact
   terminology of the job description where the candidate has the skill. Spell out acronyms once,
   e.g. "Continuous Integration/Continuous Deployment (CI/CD)".

3. tailoredExperience: one entry per relevant role with rewritten bullets.
   - Every bullet contains a quantifiable metric and at least one keyword from the job description.
   - At most {max_bullets} bullets per role.

4. coverLetter: three paragraphs using a problem-solution structure
   (business challenge, 2-3 matching achievements, forward-looking close).
   Under 350 words. No greeting and no sign-off.

5. matchScore: {score_instruction}

6. keyKeywords: the 5 most critical hard-skill keywords of the job description.

7. Fit the content within {target_page_count} page(s) by reducing bullets, not by dropping roles.
""".strip()

CONDENSE_RESUME_PROMPT = """
You are an expert resume editor specializing in ATS-optimized content density.

Condense this resume to fit on 1-2 pages while keeping the strongest signals.

Current Data:
- Summary: {summary}
- Skills ({skill_count} total, 0-based indices): {skills_json}
- Experience: {experience_json}
- Education: {education_json}

Return ONLY:
1. condensedSummary: 2-3 impactful sentences keeping quantifiable highlights and core keywords.
2. selectedSkillIndices: 0-based indices of the 6-8 skills to keep.
3. condensedExperience: an array of {{id, condensedBullets}} for the roles to keep, 2-3 bullets each,
   every bullet keeping at least one quantifiable metric.
4. keepEducationIds: ids of the education entries to keep (usually all).

CRITICAL: Return only the changes, not the full data. Use the exact ids from the input.

LINGO RULE: Keep professional, industry-standard terminology.
""".strip()

CONDENSE_COVER_LETTER_PROMPT = """
You are an expert cover letter editor specializing in ATS-optimized content.

Condense this cover letter to fit on a single page while keeping its persuasive impact.

Current Cover Letter:
{content}

Candidate: {candidate_name}
Company: {company_name}

Rules:
1. Exactly 3 short paragraphs: business challenge, 2-3 quantified achievements, confident close.
2. 2-4 sentences per paragraph.
3. Keep the hard-skill keywords of the original letter.
4. Never remove a number, percentage or dollar amount.
5. Remove filler and generic content.
6. Under 350 words.
7. No greeting and no sign-off.

Return ONLY the condensed body text in condensedContent.
""".strip()


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def build_parse_resume_prompt() -> str:
    return PARSE_RESUME_PROMPT


def build_company_research_prompt(company_name: str) -> str:
    return COMPANY_RESEARCH_PROMPT.format(company_name=company_name.strip())


def build_tailor_resume_prompt(
    *,
    profile: UserProfile,
    jd: JobDescription,
    research_summary: str,
    github_projects: Optional[List[Dict[str, Any]]] = None,
    include_score: bool = True,
    target_page_count: int = 1,
    options: Optional[TailorOptions] = None,
) -> str:
    options = options or TailorOptions()

    tone_instruction = f"TONE: Adopt a {options.tone} tone." if options.tone else ""
    if options.conciseness == "concise":
        length_instruction = "Be extremely concise and direct."
    elif options.conciseness == "detailed":
        length_instruction = "Provide detailed, in-depth explanations of achievements."
    else:
        length_instruction = "Maintain a balanced professional density."
    focus_instruction = (
        f'FOCUS: Emphasize experience and achievements related to "{options.focus_skill}".'
        if options.focus_skill
        else ""
    )

    if include_score:
        score_instruction = (
            "a 0-100 match score weighing keyword overlap, skills alignment, "
            "experience relevance and quantified achievement density."
        )
    else:
        score_instruction = "set to 0 (the user opted out)."

    return TAILOR_RESUME_PROMPT.format(
        tone_instruction=tone_instruction,
        length_instruction=length_instruction,
        focus_instruction=focus_instruction,
        profile_json=_compact_json(profile.model_dump(by_alias=True, exclude_none=True)),
        github_projects_json=_compact_json(github_projects or []),
        company_name=jd.company_name,
        role_title=jd.role_title,
        raw_text=jd.raw_text,
        research_summary=research_summary,
        max_bullets=3 if target_page_count == 1 else 4,
        score_instruction=score_instruction,
        target_page_count=target_page_count,
    )


def build_condense_resume_prompt(profile: UserProfile) -> str:
    experience_summary = [
        {
            "id": exp.id,
            "role": exp.role,
            "company": exp.company,
            "bulletCount": len(exp.description),
            "bullets": exp.description,
        }
        for exp in profile.experience
    ]
    education_summary = [
        {"id": edu.id, "institution": edu.institution, "degree": edu.degree}
        for edu in profile.education
    ]

    return CONDENSE_RESUME_PROMPT.format(
        summary=profile.summary,
        skill_count=len(profile.skills),
        skills_json=_compact_json(profile.skills),
        experience_json=_compact_json(experience_summary),
        education_json=_compact_json(education_summary),
    )


def build_condense_cover_letter_prompt(content: str, candidate_name: str, company_name: str) -> str:
    return CONDENSE_COVER_LETTER_PROMPT.format(
        content=content,
        candidate_name=candidate_name,
        company_name=company_name,
    )
