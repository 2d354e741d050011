"""Resume-derived (or questionnaire-synthesized) user profile."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class EducationLevel(str, Enum):
    """Highest completed education, ordered from lowest to highest."""
    HIGH_SCHOOL = "high_school"
    SOME_COLLEGE = "some_college"
    ASSOCIATES = "associates"
    BACHELORS = "bachelors"
    MASTERS = "masters"
    PROFESSIONAL_DEGREE = "professional_degree"
    DOCTORATE = "doctorate"

    @property
    def rank(self) -> int:
        """1-based ordinal used by the education-fit lookup."""
        return list(EducationLevel).index(self) + 1


class Education(BaseModel):
    level: EducationLevel = EducationLevel.HIGH_SCHOOL
    fields: list[str] = []


class UserProfile(BaseModel):
    """Structured profile produced by the resume parser or synthesized."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    skills: list[str] = []
    job_titles: list[str] = []
    education: Education = Education()
    industries: list[str] = []
    experience_years: float = Field(default=0, ge=0, le=50)
    confidence: float = Field(default=0.9, ge=0, le=1)

    @field_validator("skills")
    @classmethod
    def _dedupe_skills(cls, skills: list[str]) -> list[str]:
        # Skills behave as a set but keep first-seen order for prompts.
        seen: set[str] = set()
        unique = []
        for skill in skills:
            key = skill.strip().lower()
            if key and key not in seen:
                seen.add(key)
                unique.append(skill.strip())
        return unique

    @property
    def skill_set(self) -> set[str]:
        return {s.lower() for s in self.skills}
