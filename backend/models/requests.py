from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.schemas.preferences import TrainingWillingness, UserPreferences
from models.schemas.user_profile import UserProfile


class ModelTier(str, Enum):
    """Reasoning tier: full for resume-backed profiles, light otherwise."""
    FULL = "model-a"
    LIGHT = "model-b"


class MatchOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    use_vector_store: bool = True
    training_willingness: TrainingWillingness | None = None
    model: ModelTier | None = None


class RecommendRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    profile: UserProfile | None = Field(
        default=None, description="Resume-derived profile; omitted for questionnaire-only users"
    )
    preferences: UserPreferences
    options: MatchOptions = MatchOptions()
