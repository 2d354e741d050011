"""All text sent to Gemini: embedding queries and reasoning prompts."""

from typing import Callable, NamedTuple

from config import ReasoningWeights
from models.requests import ModelTier
from models.responses import TRANSITION_TIMELINES
from models.schemas.career_candidate import CareerCandidate
from models.schemas.preferences import (
    EDUCATION_LABELS,
    SALARY_LABELS,
    TRAINING_LABELS,
    UserPreferences,
)
from models.schemas.user_profile import UserProfile


class QueryTexts(NamedTuple):
    task: str
    narrative: str
    skills: str


def build_query_texts(profile: UserProfile, preferences: UserPreferences) -> QueryTexts:
    """Three retrieval queries: what the user did, how they want to work, what they know."""
    background = ", ".join(preferences.work_background_labels) or "Entry level"
    titles = ", ".join(profile.job_titles) or "Entry level"
    styles = ", ".join(preferences.work_style_labels) or "Open to different kinds of work"

    task_lines = [
        f"Work Background: {background}",
        f"Previous Experience: {titles}",
        f"Preferred Work: {styles}",
    ]
    if profile.industries:
        task_lines.append(f"Industries: {', '.join(profile.industries)}")

    narrative_lines = [
        f"Work Style: {styles}",
        f"Salary Target: {SALARY_LABELS[preferences.salary_target]}",
        f"Training Willingness: {TRAINING_LABELS[preferences.training_willingness]}",
    ]
    if preferences.additional_context:
        narrative_lines.append(f"Context: {preferences.additional_context}")

    if profile.skills:
        skills = ", ".join(profile.skills)
    else:
        skills = f"{styles}, general professional skills"

    return QueryTexts(
        task="\n".join(task_lines),
        narrative="\n".join(narrative_lines),
        skills=skills,
    )


_MATCH_SCHEMA = """[
  {{
    "slug": "career-slug",
    "title": "Career Title",
    "category": "category",
    "matchScore": 85,
    "medianPay": 75000,
    "resilienceLabel": "AI-Resilient",
    "reasoning": "{reasoning_hint}",
    "skillsGap": ["Specific Skill 1", "Specific Skill 2", "Specific Skill 3"],
    "transitionTimeline": "6-12 months",
    "education": "Bachelor's degree"
  }}
]"""


def build_system_instruction(
    tier: ModelTier,
    weights: ReasoningWeights,
    score_ceiling: int,
    min_score: int = 60,
    max_matches: int = 15,
) -> str:
    """Fixed instruction for the reasoning service. Same contract for both tiers."""
    timelines = ", ".join(f'"{t}"' for t in TRANSITION_TIMELINES)

    if tier is ModelTier.FULL:
        intro = (
            "You are a warm, supportive career counselor speaking directly to someone "
            "exploring their career options.\n\n"
            "Write as if you're having an encouraging one-on-one conversation. Always use "
            '"you" and "your", never "the user" or "the candidate". Be optimistic but '
            "realistic, and be specific about how THEIR background connects to each career."
        )
        reasoning_hint = (
            "2-3 warm, encouraging sentences speaking directly to the person, referencing "
            "their selections and how this career delivers on them."
        )
    else:
        intro = (
            "You are a supportive career counselor helping someone explore career options. "
            'Write brief, encouraging reasoning using "you" and "your".'
        )
        reasoning_hint = "1-2 sentences about why this career fits their selections."

    schema = _MATCH_SCHEMA.format(reasoning_hint=reasoning_hint)

    return f"""{intro}

## CRITICAL: User Selections Are Non-Negotiable

The person made EXPLICIT selections. They MUST drive your scoring:
1. TRAINING WILLINGNESS: how much additional training they will invest before earning.
2. CURRENT EDUCATION: where they are starting from.
3. WORK BACKGROUND: experience that can transfer.
4. SALARY TARGET: the pay they need.
5. WORK STYLE: the kind of work they want to do day to day.
6. ADDITIONAL CONTEXT: personal circumstances to factor into your reasoning.

## Scoring Weights

1. Background transfer ({weights.background_transfer}%): does their work background or experience carry over?
2. Training feasibility ({weights.training_feasibility}%): can they qualify within the training they are willing to invest?
3. Salary fit ({weights.salary_fit}%): does the median pay meet their target?
4. Work-style alignment ({weights.work_style}%): does the daily work match their preferred style?

IMPORTANT: If a career requires more training than they are willing to invest, OR
shares no overlap with their background, cap its matchScore at {score_ceiling}.

Return a JSON array of up to {max_matches} career matches with this structure:
{schema}

Rules:
- Only recommend careers from the candidate list, using their exact slugs.
- matchScore is an integer from {min_score} to 100; omit careers that fit worse than {min_score}.
- skillsGap must be exactly 3 specific, learnable skills.
- transitionTimeline must be one of: {timelines}.
- Boost AI-Resilient careers slightly; penalize "High Disruption Risk" careers.
- Return ONLY the JSON array, with no other JSON anywhere in your answer."""


def _money(amount: int | None) -> str:
    return f"${amount:,}" if amount else "Unknown"


def build_reasoning_payload(
    candidates: list[CareerCandidate],
    profile: UserProfile,
    preferences: UserPreferences,
    tier: ModelTier,
    work_activities: Callable[[str], list[str]] | None = None,
    max_candidates: int | None = None,
) -> str:
    """User selections first, then resume background, then the shortlist."""
    parts: list[str] = ["# USER SELECTIONS (MUST PRIORITIZE THESE)", ""]

    parts.append(f"## Training Willingness: {TRAINING_LABELS[preferences.training_willingness]}")
    parts.append(f"## Current Education: {EDUCATION_LABELS[preferences.education_level]}")
    parts.append(f"## Salary Target: {SALARY_LABELS[preferences.salary_target]}")

    if preferences.work_background:
        parts.append("## Work Background:")
        parts.extend(f"- {label}" for label in preferences.work_background_labels)
    else:
        parts.append("## Work Background: Not specified")

    if preferences.work_style:
        parts.append("## Preferred Work Style:")
        parts.extend(f"- {label}" for label in preferences.work_style_labels)
    else:
        parts.append("## Preferred Work Style: Flexible")

    if preferences.additional_context:
        parts.append("## Additional Context (IMPORTANT - factor this in):")
        parts.append(f'"{preferences.additional_context}"')
    parts.append("")

    full = tier is ModelTier.FULL
    if full or profile.skills:
        parts.append("# USER BACKGROUND")
        skill_cap = 15 if full else 10
        parts.append(f"- Skills: {', '.join(profile.skills[:skill_cap]) or 'Not specified'}")
        parts.append(f"- Experience: {profile.experience_years:g} years")
        if full:
            fields = ", ".join(profile.education.fields) or "general field"
            parts.append(f"- Education: {profile.education.level.value} in {fields}")
            parts.append(f"- Previous Roles: {', '.join(profile.job_titles[:5]) or 'Not specified'}")
            parts.append(f"- Industries: {', '.join(profile.industries) or 'Not specified'}")
        parts.append("")

    parts.append("# CANDIDATE CAREERS")
    parts.append("")
    shortlist = [c for c in candidates if c.entry is not None]
    if max_candidates is not None:
        shortlist = shortlist[:max_candidates]

    for i, candidate in enumerate(shortlist, start=1):
        career = candidate.entry
        resilience = career.resilience.value if career.resilience else "Unknown"
        if full:
            parts.append(f"## {i}. {career.title}")
            parts.append(f"- Slug: {career.slug}")
            parts.append(f"- Category: {career.category}")
            parts.append(f"- Median Salary: {_money(career.median_pay)}")
            parts.append(f"- AI Resilience: {resilience}")
            parts.append(f"- Education Required: {career.required_education}")
            parts.append(f"- Typical Timeline: {career.timeline_bucket.value}")
            parts.append(f"- Initial Match Score: {(candidate.structured_score or 0) * 100:.0f}%")
            parts.append(f"- Key Tasks: {'; '.join(career.tasks[:3])}")
            parts.append(f"- Required Skills: {', '.join(career.technology_skills[:5])}")
            activities = work_activities(career.slug) if work_activities else []
            if activities:
                parts.append(f"- Work Activities: {'; '.join(activities[:3])}")
            parts.append("")
        else:
            parts.append(f"{i}. {career.title} ({career.slug})")
            parts.append(
                f"   Category: {career.category}, Salary: {_money(career.median_pay)}, "
                f"Timeline: {career.timeline_bucket.value}"
            )
            parts.append(f"   AI Resilience: {resilience}, Education: {career.required_education}")

    parts.append("")
    parts.append(
        "Analyze these careers against their EXPLICIT SELECTIONS and return the best "
        "matches as a single JSON array."
    )
    return "\n".join(parts)
