"""Pipeline orchestrator: wires the four funnel stages together.

Flow:
    profile? + preferences + options
      ├─ synthesize_profile()           (questionnaire-only users)
      ├─ S1 EligibilityFilter           → set[slug] | None
      │       ↓
      ├─ S2 EmbeddingRetrievalStage     → ≤50 CareerCandidate (by similarity)
      │       ↓
      ├─ S3 StructuredScorer            → ≤30 CareerCandidate (by structured score)
      │       ↓
      └─ S4 ReasoningStage              → ≤15 CareerMatch (by matchScore)
                       ↓
         MatchingResult(matches, metadata)
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from config import Settings
from models.requests import MatchOptions, ModelTier
from models.responses import MatchingMetadata, MatchingResult
from models.schemas.preferences import UserPreferences
from models.schemas.user_profile import UserProfile
from services.catalog import CatalogRepository
from services.gemini_client import GeminiClient
from services.pipeline.s1_eligibility import EligibilityFilter
from services.pipeline.s2_retrieval import EmbeddingRetrievalStage
from services.pipeline.s3_structured_scorer import StructuredScorer
from services.pipeline.s4_reasoning import ReasoningStage
from services.profile_builder import has_resume_signal, synthesize_profile
from services.vector_store import LocalSnapshotStore, SupabaseVectorStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class _StageTimer:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self.timings_ms: dict[str, float] = {}
        self._started = clock()

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        start = self.clock()
        try:
            yield
        finally:
            self.timings_ms[name] = round((self.clock() - start) * 1000, 2)

    def total_ms(self) -> float:
        return round((self.clock() - self._started) * 1000, 2)


def select_tier(profile: UserProfile | None, options: MatchOptions) -> ModelTier:
    """An explicit option wins; otherwise resume-backed profiles get the full tier."""
    if options.model is not None:
        return options.model
    return ModelTier.FULL if has_resume_signal(profile) else ModelTier.LIGHT


class CareerMatchingEngine:
    """Single public entry point of the matching funnel.

    Every stage shares one read-only ``CatalogRepository``. Any fatal
    ``EngineError`` raised by a stage aborts the call unchanged.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        eligibility: EligibilityFilter,
        retrieval: EmbeddingRetrievalStage,
        scorer: StructuredScorer,
        reasoning: ReasoningStage,
        settings: Settings,
        clock: Clock = time.perf_counter,
    ) -> None:
        self.catalog = catalog
        self.eligibility = eligibility
        self.retrieval = retrieval
        self.scorer = scorer
        self.reasoning = reasoning
        self.settings = settings
        self.clock = clock

    def reasoning_cost(self, tier: ModelTier) -> float:
        if tier is ModelTier.FULL:
            return self.settings.reasoning_cost_full_usd
        return self.settings.reasoning_cost_light_usd

    async def match(
        self,
        profile: UserProfile | None,
        preferences: UserPreferences,
        options: MatchOptions | None = None,
    ) -> MatchingResult:
        options = options or MatchOptions()
        timer = _StageTimer(self.clock)

        tier = select_tier(profile, options)
        if profile is None:
            profile = synthesize_profile(preferences)
        willingness = options.training_willingness or preferences.training_willingness
        if willingness is not preferences.training_willingness:
            preferences = preferences.model_copy(update={"training_willingness": willingness})

        logger.info(
            "Matching request: tier=%s, willingness=%s, education=%s, skills=%d",
            tier.value, willingness.value, preferences.education_level.value, len(profile.skills),
        )

        with timer.stage("eligibility"):
            eligible = self.eligibility.filter_eligible(willingness, preferences.education_level)

        with timer.stage("retrieval"):
            outcome = await self.retrieval.retrieve(
                profile,
                preferences,
                eligible,
                limit=self.settings.retrieval_limit,
                use_vector_store=options.use_vector_store,
            )
        costs: dict[str, float] = {"retrieval": self.settings.embedding_cost_usd}

        with timer.stage("scoring"):
            shortlist = self.scorer.score(outcome.candidates, profile, preferences)

        matches = []
        if any(c.entry is not None for c in shortlist):
            with timer.stage("reasoning"):
                matches = await self.reasoning.reason(shortlist, profile, preferences, tier)
            costs["reasoning"] = self.reasoning_cost(tier)
        else:
            logger.warning("No scored candidate maps to a catalog record, skipping reasoning")

        metadata = MatchingMetadata(
            eligible_careers=len(eligible) if eligible is not None else None,
            stage1_candidates=len(outcome.candidates),
            stage2_candidates=len(shortlist),
            final_matches=len(matches),
            retrieval_source=outcome.source,
            model_tier=tier.value,
            stage_timings_ms=timer.timings_ms,
            processing_time_ms=timer.total_ms(),
            stage_costs_usd=costs,
            cost_usd=round(sum(costs.values()), 6),
        )
        logger.info(
            "Matching complete: %d -> %d -> %d matches in %.0fms via %s",
            metadata.stage1_candidates, metadata.stage2_candidates,
            metadata.final_matches, metadata.processing_time_ms, metadata.retrieval_source,
        )
        return MatchingResult(matches=matches, metadata=metadata)


def build_engine(settings: Settings) -> CareerMatchingEngine:
    """Construct the production object graph. Nothing is loaded until first use."""
    catalog = CatalogRepository(settings.catalog_path, settings.work_activities_path)
    gemini = GeminiClient(settings)
    providers = [
        SupabaseVectorStore(settings),
        LocalSnapshotStore(settings.embeddings_path),
    ]
    return CareerMatchingEngine(
        catalog=catalog,
        eligibility=EligibilityFilter(catalog),
        retrieval=EmbeddingRetrievalStage(
            catalog,
            embedder=gemini,
            providers=providers,
            weights=settings.retrieval_weights,
            limit=settings.retrieval_limit,
            overfetch=settings.retrieval_overfetch,
        ),
        scorer=StructuredScorer(
            catalog,
            weights=settings.scoring_weights,
            adjustments=settings.resilience_adjustments,
            limit=settings.scorer_limit,
        ),
        reasoning=ReasoningStage(
            catalog,
            reasoner=gemini,
            weights=settings.reasoning_weights,
            score_ceiling=settings.reasoning_score_ceiling,
            min_score=settings.min_match_score,
            max_matches=settings.max_matches,
            light_tier_candidates=settings.light_tier_candidates,
        ),
        settings=settings,
    )
