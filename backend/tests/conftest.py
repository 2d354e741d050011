"""Shared test configuration, fakes and fixtures.

Nothing here touches the network: the Gemini client, the vector providers
and the catalog are all replaced by in-memory fakes.
"""

import json

import pytest

from config import Settings
from models.requests import ModelTier
from models.schemas.catalog_entry import CatalogEntry, ResilienceLabel, TimelineBucket
from models.schemas.preferences import UserPreferences
from models.schemas.user_profile import Education, EducationLevel, UserProfile
from services.catalog import CatalogRepository
from services.pipeline.orchestrator import CareerMatchingEngine
from services.pipeline.s1_eligibility import EligibilityFilter
from services.pipeline.s2_retrieval import EmbeddingRetrievalStage
from services.pipeline.s3_structured_scorer import StructuredScorer
from services.pipeline.s4_reasoning import ReasoningStage
from services.vector_store import StoreHit, VectorStoreProvider

BUCKETS = list(TimelineBucket)
RESILIENCE = [
    ResilienceLabel.RESILIENT,
    ResilienceLabel.AUGMENTED,
    ResilienceLabel.IN_TRANSITION,
    ResilienceLabel.HIGH_RISK,
]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: exercises the full funnel with fakes at the network edge"
    )


def make_entry(slug: str, **overrides) -> CatalogEntry:
    data = {
        "slug": slug,
        "title": slug.replace("-", " ").title(),
        "category": "Technology",
        "tasks": ("Write and test code", "Review designs", "Fix defects"),
        "technology_skills": ("Python", "SQL"),
        "abilities": ("Deductive Reasoning",),
        "median_pay": 75000,
        "resilience": ResilienceLabel.AUGMENTED,
        "required_education": "Bachelor's degree",
        "timeline_bucket": TimelineBucket.TWO_TO_4_YEARS,
    }
    data.update(overrides)
    return CatalogEntry(**data)


def make_catalog_entries(count: int = 40) -> list[CatalogEntry]:
    return [
        make_entry(
            f"career-{i:02d}",
            timeline_bucket=BUCKETS[i % len(BUCKETS)],
            resilience=RESILIENCE[i % len(RESILIENCE)],
            median_pay=40000 + 2000 * i,
        )
        for i in range(count)
    ]


def make_hits(entries: list[CatalogEntry], top: float = 0.95, step: float = 0.01) -> list[StoreHit]:
    """Hits in catalog order with strictly decreasing similarity."""
    return [
        StoreHit(career_slug=e.slug, title=e.title, category=e.category, similarity=top - step * i)
        for i, e in enumerate(entries)
    ]


def make_match(slug: str, score: int = 80, **overrides) -> dict:
    data = {
        "slug": slug,
        "title": slug.replace("-", " ").title(),
        "category": "Technology",
        "matchScore": score,
        "medianPay": 1,
        "resilienceLabel": "whatever",
        "reasoning": "Your background carries over well.",
        "skillsGap": ["Python", "SQL", "Statistics"],
        "transitionTimeline": "1-2 years",
        "education": "unknown",
    }
    data.update(overrides)
    return data


def matches_json(matches: list[dict]) -> str:
    return json.dumps(matches)


class FakeGemini:
    """Deterministic stand-in for ``GeminiClient``."""

    def __init__(self, response: str | Exception = "[]", dimensions: int = 3) -> None:
        self.response = response
        self.dimensions = dimensions
        self.embed_calls: list[list[str]] = []
        self.complete_calls: list[tuple[str, str, ModelTier]] = []

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.embed_calls.append(list(texts))
        return [[1.0] + [0.0] * (self.dimensions - 1) for _ in texts]

    async def complete(self, system_instruction: str, payload: str, tier: ModelTier) -> str:
        self.complete_calls.append((system_instruction, payload, tier))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeProvider(VectorStoreProvider):
    def __init__(
        self,
        name: str,
        hits: list[StoreHit] | None = None,
        error: Exception | None = None,
        exhaustive: bool = False,
    ) -> None:
        self.name = name
        self.hits = hits or []
        self.error = error
        self.exhaustive = exhaustive
        self.limits: list[int | None] = []

    async def query(self, vectors, weights, limit):
        self.limits.append(limit)
        if self.error is not None:
            raise self.error
        hits = sorted(self.hits, key=lambda h: h.similarity, reverse=True)
        return hits if limit is None else hits[:limit]


class TickClock:
    """Advances by a fixed step on every read."""

    def __init__(self, step: float = 0.01) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key", supabase_url="", supabase_service_key="")


@pytest.fixture
def entries():
    return make_catalog_entries()


@pytest.fixture
def catalog(entries):
    activities = {entries[0].slug: ["Analyze data", "Write reports"]}
    return CatalogRepository.from_entries(entries, work_activities=activities)


@pytest.fixture
def profile():
    return UserProfile(
        skills=["Python", "SQL", "Excel"],
        job_titles=["Data Analyst"],
        education=Education(level=EducationLevel.BACHELORS, fields=["Statistics"]),
        industries=["Finance"],
        experience_years=4,
    )


@pytest.fixture
def preferences():
    return UserPreferences(
        training_willingness="short-term",
        education_level="bachelors",
        work_background=["technical", "finance"],
        salary_target="60-80k",
        work_style=["analytical"],
        additional_context="Prefer remote work",
    )


@pytest.fixture
def build_test_engine(catalog, entries, settings):
    """Factory for an engine whose network edges are fakes."""

    def _build(response="[]", providers=None, clock=None):
        gemini = FakeGemini(response)
        providers = providers or [
            FakeProvider("local_snapshot", hits=make_hits(entries), exhaustive=True)
        ]
        engine = CareerMatchingEngine(
            catalog=catalog,
            eligibility=EligibilityFilter(catalog),
            retrieval=EmbeddingRetrievalStage(catalog, embedder=gemini, providers=providers),
            scorer=StructuredScorer(catalog),
            reasoning=ReasoningStage(catalog, reasoner=gemini),
            settings=settings,
            clock=clock or TickClock(),
        )
        return engine, gemini

    return _build
