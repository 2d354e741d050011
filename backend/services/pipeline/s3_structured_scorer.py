"""Stage 3: Structured scorer.

Re-ranks retrieved candidates on catalog attributes:

    score = w_skill * jaccard(user skills, career skills + abilities)
          + w_edu   * education_fit
          + w_sal   * salary_fit
          + w_sim   * similarity
          + resilience_delta

A candidate whose catalog record cannot be resolved keeps a degraded
``similarity * 0.5`` instead of failing the stage.
"""

import logging

from config import ResilienceAdjustments, ScoringWeights
from models.schemas.career_candidate import CareerCandidate
from models.schemas.catalog_entry import CatalogEntry, ResilienceLabel
from models.schemas.preferences import UserPreferences
from models.schemas.user_profile import EducationLevel, UserProfile
from services.pipeline.base import BaseStage
from services.similarity import jaccard

logger = logging.getLogger(__name__)

UNRESOLVED_PENALTY = 0.5
MIN_SALARY_FIT = 0.3
UNKNOWN_SALARY_FIT = 0.7

# Checked in order; the first keyword found in the label decides the rank.
_REQUIRED_EDUCATION_KEYWORDS: list[tuple[tuple[str, ...], int]] = [
    (("high school", "less than", "no formal"), 1),
    (("some college", "certificate", "postsecondary nondegree"), 2),
    (("associate",), 3),
    (("bachelor",), 4),
    (("master",), 5),
    (("professional",), 6),
    (("doctor", "phd"), 7),
]
DEFAULT_REQUIRED_RANK = 4


def required_education_rank(label: str) -> int:
    """Map a free-text education requirement to the 1-7 ordinal scale."""
    lowered = label.lower()
    for keywords, rank in _REQUIRED_EDUCATION_KEYWORDS:
        if any(k in lowered for k in keywords):
            return rank
    return DEFAULT_REQUIRED_RANK


def education_fit(user_level: EducationLevel, required_label: str) -> float:
    gap = required_education_rank(required_label) - user_level.rank
    if gap <= 0:
        return 1.0
    if gap == 1:
        return 0.8
    if gap == 2:
        return 0.5
    return 0.3


def salary_fit(median_pay: int | None, target: int) -> float:
    if not median_pay:
        return UNKNOWN_SALARY_FIT
    if median_pay >= target:
        return 1.0
    return max(MIN_SALARY_FIT, median_pay / target)


def resilience_delta(label: ResilienceLabel | None, adjustments: ResilienceAdjustments) -> float:
    if label is ResilienceLabel.RESILIENT:
        return adjustments.resilient
    if label is ResilienceLabel.AUGMENTED:
        return adjustments.augmented
    if label is ResilienceLabel.HIGH_RISK:
        return adjustments.high_risk
    return 0.0


class StructuredScorer(BaseStage):
    stage_name = "structured_scorer"

    def __init__(
        self,
        catalog,
        weights: ScoringWeights | None = None,
        adjustments: ResilienceAdjustments | None = None,
        limit: int = 30,
    ) -> None:
        super().__init__(catalog)
        self.weights = weights or ScoringWeights()
        self.adjustments = adjustments or ResilienceAdjustments()
        self.limit = limit

    def score_entry(
        self,
        entry: CatalogEntry,
        similarity: float,
        profile: UserProfile,
        preferences: UserPreferences,
    ) -> float:
        w = self.weights
        return (
            w.skill_overlap * jaccard(profile.skill_set, entry.skill_set)
            + w.education_fit * education_fit(profile.education.level, entry.required_education)
            + w.salary_fit * salary_fit(entry.median_pay, preferences.salary_target_amount)
            + w.similarity * similarity
            + resilience_delta(entry.resilience, self.adjustments)
        )

    def score(
        self,
        candidates: list[CareerCandidate],
        profile: UserProfile,
        preferences: UserPreferences,
    ) -> list[CareerCandidate]:
        """At most ``limit`` candidates, sorted by non-increasing structured score."""
        self.ensure_loaded()
        scored: list[CareerCandidate] = []
        unresolved = 0

        for candidate in candidates:
            entry = candidate.entry or self.catalog.get(candidate.slug)
            if entry is None:
                unresolved += 1
                value = candidate.similarity * UNRESOLVED_PENALTY
            else:
                value = self.score_entry(entry, candidate.similarity, profile, preferences)
            scored.append(candidate.model_copy(update={"entry": entry, "structured_score": value}))

        if unresolved:
            logger.warning("%d candidates missing from catalog, scored on similarity only", unresolved)

        # sorted() is stable, so equal scores keep retrieval order.
        scored = sorted(scored, key=lambda c: c.structured_score, reverse=True)[: self.limit]
        logger.info("Re-ranked %d candidates to %d", len(candidates), len(scored))
        return scored
