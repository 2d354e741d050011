"""Stage 4: Reasoning.

Sends the shortlist and the user's selections to Gemini and turns the reply
into validated ``CareerMatch`` objects.

Response contract: after removing an optional surrounding code fence, the
text must contain exactly one decodable top-level JSON array whose elements
validate against ``CareerMatch``. Bracketed prose that is not JSON is
ignored; zero arrays, two or more arrays, or any invalid element raise
``ResponseParseError``.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from config import ReasoningWeights
from models.requests import ModelTier
from models.responses import CareerMatch
from models.schemas.career_candidate import CareerCandidate
from models.schemas.preferences import UserPreferences
from models.schemas.user_profile import UserProfile
from services.errors import ResponseParseError
from services.gemini_client import GeminiClient
from services.pipeline.base import BaseStage
from services.prompt_builder import build_reasoning_payload, build_system_instruction

logger = logging.getLogger(__name__)

SKILLS_GAP_SIZE = 3
DEFAULT_SKILLS_GAP = ("General skills", "Industry knowledge", "Technical certifications")

_matches_adapter = TypeAdapter(list[CareerMatch])
_decoder = json.JSONDecoder()


def strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
        text = text.strip()
    return text


def find_json_arrays(text: str) -> list[list]:
    """Every top-level JSON array that decodes cleanly, in order of appearance."""
    arrays: list[list] = []
    start = text.find("[")
    while start != -1:
        try:
            value, end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("[", start + 1)
            continue
        if isinstance(value, list):
            arrays.append(value)
        start = text.find("[", end)
    return arrays


def parse_matches(raw: str) -> list[CareerMatch]:
    """Locate the single JSON array in ``raw`` and validate it."""
    arrays = find_json_arrays(strip_code_fence(raw))
    if not arrays:
        raise ResponseParseError("No JSON array found in reasoning response", raw_response=raw)
    if len(arrays) > 1:
        raise ResponseParseError(
            f"Ambiguous reasoning response: found {len(arrays)} JSON arrays", raw_response=raw
        )
    try:
        return _matches_adapter.validate_python(arrays[0])
    except ValidationError as e:
        raise ResponseParseError(
            f"Reasoning response failed schema validation: {e.error_count()} errors",
            raw_response=raw,
        ) from e


def normalize_skills_gap(skills: list[str]) -> list[str]:
    cleaned = [s.strip() for s in skills if s and s.strip()][:SKILLS_GAP_SIZE]
    for default in DEFAULT_SKILLS_GAP:
        if len(cleaned) >= SKILLS_GAP_SIZE:
            break
        if default not in cleaned:
            cleaned.append(default)
    return cleaned


class ReasoningStage(BaseStage):
    stage_name = "reasoning"

    def __init__(
        self,
        catalog,
        reasoner: GeminiClient,
        weights: ReasoningWeights | None = None,
        score_ceiling: int = 72,
        min_score: int = 60,
        max_matches: int = 15,
        light_tier_candidates: int = 20,
    ) -> None:
        super().__init__(catalog)
        self.reasoner = reasoner
        self.weights = weights or ReasoningWeights()
        self.score_ceiling = score_ceiling
        self.min_score = min_score
        self.max_matches = max_matches
        self.light_tier_candidates = light_tier_candidates

    def build_request(
        self,
        candidates: list[CareerCandidate],
        profile: UserProfile,
        preferences: UserPreferences,
        tier: ModelTier,
    ) -> tuple[str, str]:
        """(system instruction, payload) for one reasoning call."""
        system = build_system_instruction(
            tier,
            self.weights,
            score_ceiling=self.score_ceiling,
            min_score=self.min_score,
            max_matches=self.max_matches,
        )
        payload = build_reasoning_payload(
            candidates,
            profile,
            preferences,
            tier,
            work_activities=self.catalog.work_activities if tier is ModelTier.FULL else None,
            max_candidates=None if tier is ModelTier.FULL else self.light_tier_candidates,
        )
        return system, payload

    async def reason(
        self,
        candidates: list[CareerCandidate],
        profile: UserProfile,
        preferences: UserPreferences,
        tier: ModelTier,
    ) -> list[CareerMatch]:
        self.ensure_loaded()
        if not any(c.entry is not None for c in candidates):
            logger.warning("No candidate maps to a catalog record, nothing to reason about")
            return []
        system, payload = self.build_request(candidates, profile, preferences, tier)
        raw = await self.reasoner.complete(system, payload, tier)

        try:
            matches = parse_matches(raw)
        except ResponseParseError:
            logger.error("Failed to parse reasoning response: %.500s", raw)
            raise

        return self._finalize(matches, candidates)

    def _finalize(
        self,
        matches: list[CareerMatch],
        candidates: list[CareerCandidate],
    ) -> list[CareerMatch]:
        shortlist = {c.slug: c for c in candidates if c.entry is not None}
        final: list[CareerMatch] = []

        for match in matches:
            candidate = shortlist.get(match.slug)
            if candidate is None:
                logger.warning("Dropping match for unknown or unlisted slug '%s'", match.slug)
                continue
            if match.match_score < self.min_score:
                continue
            entry = candidate.entry
            final.append(match.model_copy(update={
                "title": match.title or entry.title,
                "category": entry.category or match.category,
                "median_pay": entry.median_pay if entry.median_pay is not None else match.median_pay,
                "resilience_label": entry.resilience.value if entry.resilience else match.resilience_label,
                "education": entry.required_education,
                "skills_gap": normalize_skills_gap(match.skills_gap),
            }))
            # One match per career.
            del shortlist[match.slug]

        final.sort(key=lambda m: m.match_score, reverse=True)
        final = final[: self.max_matches]
        logger.info("Reasoning produced %d of %d returned matches", len(final), len(matches))
        return final
