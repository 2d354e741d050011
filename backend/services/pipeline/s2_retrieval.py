"""Stage 2: Embedding retrieval.

Embeds three query strings built from the profile and selections, then asks
an ordered list of vector providers for the nearest careers. The first
provider that answers wins; the rest are fallbacks. Providers cannot filter
by eligibility, so a non-exhaustive provider is asked for extra rows when a
filter is active and the stage filters, then truncates.
"""

import logging
from dataclasses import dataclass, field

from config import RetrievalWeights
from models.schemas.career_candidate import CareerCandidate
from models.schemas.preferences import UserPreferences
from models.schemas.user_profile import UserProfile
from services.errors import CatalogValidationError
from services.gemini_client import GeminiClient
from services.pipeline.base import BaseStage
from services.prompt_builder import build_query_texts
from services.similarity import QueryVectors
from services.vector_store import StoreHit, VectorStoreProvider

logger = logging.getLogger(__name__)


@dataclass
class RetrievalOutcome:
    candidates: list[CareerCandidate]
    source: str
    failed_providers: list[str] = field(default_factory=list)


class EmbeddingRetrievalStage(BaseStage):
    stage_name = "retrieval"

    def __init__(
        self,
        catalog,
        embedder: GeminiClient,
        providers: list[VectorStoreProvider],
        weights: RetrievalWeights | None = None,
        limit: int = 50,
        overfetch: int = 100,
    ) -> None:
        super().__init__(catalog)
        if not providers:
            raise ValueError("At least one vector provider is required")
        self.embedder = embedder
        self.providers = providers
        self.weights = weights or RetrievalWeights()
        self.limit = limit
        self.overfetch = overfetch

    async def embed_queries(self, profile: UserProfile, preferences: UserPreferences) -> QueryVectors:
        texts = build_query_texts(profile, preferences)
        task, narrative, skills = await self.embedder.embed_batch(
            [texts.task, texts.narrative, texts.skills]
        )
        return QueryVectors(task=task, narrative=narrative, skills=skills)

    async def retrieve(
        self,
        profile: UserProfile,
        preferences: UserPreferences,
        eligible: set[str] | None,
        limit: int | None = None,
        use_vector_store: bool = True,
    ) -> RetrievalOutcome:
        """Top candidates by weighted similarity, sorted descending."""
        self.ensure_loaded()
        limit = limit or self.limit
        vectors = await self.embed_queries(profile, preferences)

        providers = [p for p in self.providers if use_vector_store or p.exhaustive]
        failed: list[str] = []
        last_error: Exception | None = None

        for provider in providers:
            if provider.exhaustive:
                fetch = None
            else:
                fetch = max(self.overfetch, limit) if eligible is not None else limit

            result = await provider.attempt(vectors, self.weights, fetch)
            if not result.ok:
                logger.warning(
                    "%s search failed, falling back: %s", provider.name, result.error
                )
                failed.append(provider.name)
                last_error = result.error
                continue

            candidates = self._to_candidates(result.hits, eligible, limit)
            logger.info(
                "Retrieved %d candidates via %s (%d raw hits)",
                len(candidates), provider.name, len(result.hits),
            )
            return RetrievalOutcome(candidates=candidates, source=provider.name, failed_providers=failed)

        if isinstance(last_error, CatalogValidationError):
            raise last_error
        raise CatalogValidationError(
            f"No candidate source available (tried: {', '.join(failed) or 'none'})"
        ) from last_error

    def _to_candidates(
        self,
        hits: list[StoreHit],
        eligible: set[str] | None,
        limit: int,
    ) -> list[CareerCandidate]:
        if eligible is not None:
            hits = [h for h in hits if h.career_slug in eligible]
        hits = sorted(hits, key=lambda h: h.similarity, reverse=True)[:limit]

        candidates = []
        for hit in hits:
            entry = self.catalog.get(hit.career_slug)
            candidates.append(CareerCandidate(
                slug=hit.career_slug,
                title=entry.title if entry else hit.title,
                category=entry.category if entry else hit.category,
                similarity=min(1.0, max(0.0, hit.similarity)),
                entry=entry,
            ))
        return candidates
