"""Stage 1: Eligibility filter.

Keeps only careers the user can reach within the extra training they are
willing to invest, measured from their own starting point:

    additional_needed = max(0, required_years(bucket) - current_years(level))
    eligible          = additional_needed <= max_years(willingness)

The ``significant`` tier is unbounded and disables filtering entirely.
"""

import logging
import math

from models.schemas.catalog_entry import TimelineBucket
from models.schemas.preferences import CurrentEducation, TrainingWillingness
from services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

MAX_ADDITIONAL_YEARS: dict[TrainingWillingness, float] = {
    TrainingWillingness.MINIMAL: 0.5,
    TrainingWillingness.SHORT_TERM: 1.0,
    TrainingWillingness.MEDIUM: 2.0,
    TrainingWillingness.SIGNIFICANT: math.inf,
}

CURRENT_YEARS: dict[CurrentEducation, float] = {
    CurrentEducation.HIGH_SCHOOL: 0.0,
    CurrentEducation.SOME_COLLEGE: 1.0,
    CurrentEducation.BACHELORS: 4.0,
    CurrentEducation.MASTERS_PLUS: 6.0,
}

REQUIRED_YEARS: dict[TimelineBucket, float] = {
    TimelineBucket.ASAP: 0.0,
    TimelineBucket.SIX_TO_24_MONTHS: 1.0,
    TimelineBucket.TWO_TO_4_YEARS: 4.0,
    TimelineBucket.FOUR_PLUS_YEARS: 6.0,
}


def additional_years_needed(bucket: TimelineBucket, current: CurrentEducation) -> float:
    return max(0.0, REQUIRED_YEARS[bucket] - CURRENT_YEARS[current])


def is_eligible(
    bucket: TimelineBucket,
    willingness: TrainingWillingness,
    current: CurrentEducation,
) -> bool:
    return additional_years_needed(bucket, current) <= MAX_ADDITIONAL_YEARS[willingness]


class EligibilityFilter(BaseStage):
    stage_name = "eligibility"

    def __init__(self, catalog) -> None:
        super().__init__(catalog)
        self._buckets: dict[TimelineBucket, frozenset[str]] = {}

    def load(self) -> None:
        grouped: dict[TimelineBucket, set[str]] = {bucket: set() for bucket in TimelineBucket}
        for entry in self.catalog.entries():
            grouped[entry.timeline_bucket].add(entry.slug)
        self._buckets = {bucket: frozenset(slugs) for bucket, slugs in grouped.items()}

    def filter_eligible(
        self,
        willingness: TrainingWillingness | None,
        current: CurrentEducation,
    ) -> set[str] | None:
        """Slugs the user could plausibly reach, or None when nothing is filtered."""
        if willingness is None or math.isinf(MAX_ADDITIONAL_YEARS[willingness]):
            logger.info("Eligibility filter disabled (willingness=%s)", willingness)
            return None

        self.ensure_loaded()
        eligible: set[str] = set()
        for bucket, slugs in self._buckets.items():
            if is_eligible(bucket, willingness, current):
                eligible |= slugs

        logger.info(
            "Eligibility filter (%s, %s): %d of %d careers eligible",
            willingness.value, current.value, len(eligible), len(self.catalog),
        )
        return eligible
