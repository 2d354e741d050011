from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TransitionTimeline = Literal["6-12 months", "1-2 years", "2-4 years", "4-6 years", "6+ years"]

TRANSITION_TIMELINES: tuple[str, ...] = TransitionTimeline.__args__


class CareerMatch(BaseModel):
    """Final, narrated recommendation. Also the reasoning service's output schema."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slug: str = Field(min_length=1)
    title: str
    category: str = ""
    match_score: int = Field(ge=0, le=100)
    median_pay: int | None = None
    resilience_label: str = ""
    reasoning: str
    skills_gap: list[str] = []
    transition_timeline: TransitionTimeline
    education: str = ""

    @field_validator("skills_gap", mode="before")
    @classmethod
    def _null_skills_gap(cls, value):
        return [] if value is None else value


class MatchingMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    eligible_careers: int | None = None  # None when no eligibility filter applied
    stage1_candidates: int = 0
    stage2_candidates: int = 0
    final_matches: int = 0
    retrieval_source: str = ""
    model_tier: str = ""
    stage_timings_ms: dict[str, float] = {}
    processing_time_ms: float = 0.0
    stage_costs_usd: dict[str, float] = {}
    cost_usd: float = 0.0


class MatchingResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    matches: list[CareerMatch] = Field(default=[], max_length=15)
    metadata: MatchingMetadata = MatchingMetadata()


class RecommendResponse(BaseModel):
    success: Literal[True] = True
    recommendations: list[CareerMatch] = []
    metadata: MatchingMetadata = MatchingMetadata()


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: ErrorDetail
