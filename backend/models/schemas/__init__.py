"""Inter-stage pydantic contracts for the career matching funnel."""

from models.schemas.career_candidate import CareerCandidate
from models.schemas.catalog_entry import CatalogEntry, ResilienceLabel, TimelineBucket
from models.schemas.preferences import (
    CurrentEducation,
    SalaryTarget,
    TrainingWillingness,
    UserPreferences,
    WorkBackground,
    WorkStyle,
)
from models.schemas.user_profile import Education, EducationLevel, UserProfile

__all__ = [
    "CareerCandidate",
    "CatalogEntry",
    "CurrentEducation",
    "Education",
    "EducationLevel",
    "ResilienceLabel",
    "SalaryTarget",
    "TimelineBucket",
    "TrainingWillingness",
    "UserPreferences",
    "UserProfile",
    "WorkBackground",
    "WorkStyle",
]
