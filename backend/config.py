import os

from pydantic import BaseModel
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class RetrievalWeights(BaseModel):
    """Blend of the three per-career cosine similarities."""
    task: float = 0.5
    narrative: float = 0.3
    skills: float = 0.2


class ScoringWeights(BaseModel):
    skill_overlap: float = 0.35
    education_fit: float = 0.15
    salary_fit: float = 0.15
    similarity: float = 0.35


class ResilienceAdjustments(BaseModel):
    """Signed deltas added to the structured score, keyed by resilience label."""
    resilient: float = 0.10
    augmented: float = 0.05
    high_risk: float = -0.10


class ReasoningWeights(BaseModel):
    """Percentages the reasoning service is told to use for its own judgment."""
    background_transfer: int = 30
    training_feasibility: int = 30
    salary_fit: int = 25
    work_style: int = 15


class Settings(BaseSettings):
    # Credentials
    gemini_api_key: str = ""
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Models
    reasoning_model_full: str = "gemini-2.5-pro"
    reasoning_model_light: str = "gemini-2.5-flash"
    embedding_model: str = "gemini-embedding-001"
    embedding_dimensions: int = 1536

    # Read-only data sources
    catalog_path: str = "data/careers.json"
    embeddings_path: str = "data/career-embeddings.json"
    work_activities_path: str = "data/career-work-activities.json"

    # Network budgets (seconds)
    embedding_timeout: float = 10.0
    vector_store_timeout: float = 10.0
    reasoning_timeout_full: float = 60.0
    reasoning_timeout_light: float = 25.0
    rate_limit_retry_after: int = 20

    # Per-request cost estimates (USD)
    embedding_cost_usd: float = 0.0004
    reasoning_cost_full_usd: float = 0.01
    reasoning_cost_light_usd: float = 0.001

    # Funnel sizes
    retrieval_limit: int = 50
    retrieval_overfetch: int = 100
    scorer_limit: int = 30
    light_tier_candidates: int = 20
    max_matches: int = 15
    min_match_score: int = 60
    reasoning_score_ceiling: int = 72

    # Tunables
    retrieval_weights: RetrievalWeights = RetrievalWeights()
    scoring_weights: ScoringWeights = ScoringWeights()
    resilience_adjustments: ResilienceAdjustments = ResilienceAdjustments()
    reasoning_weights: ReasoningWeights = ReasoningWeights()

    # HTTP surface
    max_context_length: int = 2000
    rate_limit: str = "10/minute"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "protected_namespaces": ("settings_",),
    }


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
