"""Explicit questionnaire selections and their human-readable labels."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from config import settings


class TrainingWillingness(str, Enum):
    MINIMAL = "minimal"
    SHORT_TERM = "short-term"
    MEDIUM = "medium"
    SIGNIFICANT = "significant"


class CurrentEducation(str, Enum):
    """The user's current level as picked in the questionnaire."""
    HIGH_SCHOOL = "high-school"
    SOME_COLLEGE = "some-college"
    BACHELORS = "bachelors"
    MASTERS_PLUS = "masters-plus"


class SalaryTarget(str, Enum):
    UNDER_40K = "under-40k"
    FROM_40_TO_60K = "40-60k"
    FROM_60_TO_80K = "60-80k"
    FROM_80_TO_100K = "80-100k"
    OVER_100K = "100k-plus"


class WorkBackground(str, Enum):
    NONE = "none"
    SERVICE = "service"
    OFFICE = "office"
    TECHNICAL = "technical"
    HEALTHCARE = "healthcare"
    TRADES = "trades"
    SALES = "sales"
    FINANCE = "finance"
    EDUCATION = "education"
    CREATIVE = "creative"


class WorkStyle(str, Enum):
    HANDS_ON = "hands-on"
    PEOPLE = "people"
    ANALYTICAL = "analytical"
    CREATIVE = "creative"
    TECHNOLOGY = "technology"
    LEADERSHIP = "leadership"


TRAINING_LABELS: dict[TrainingWillingness, str] = {
    TrainingWillingness.MINIMAL: "Right away (minimal training, a few weeks max)",
    TrainingWillingness.SHORT_TERM: "Within 6 months (certificate or bootcamp)",
    TrainingWillingness.MEDIUM: "1-2 years (Associate's or technical program)",
    TrainingWillingness.SIGNIFICANT: "Can invest 4+ years (Bachelor's, Master's, or beyond)",
}

EDUCATION_LABELS: dict[CurrentEducation, str] = {
    CurrentEducation.HIGH_SCHOOL: "High school diploma or GED",
    CurrentEducation.SOME_COLLEGE: "Some college or Associate's degree",
    CurrentEducation.BACHELORS: "Bachelor's degree",
    CurrentEducation.MASTERS_PLUS: "Master's degree or higher",
}

SALARY_LABELS: dict[SalaryTarget, str] = {
    SalaryTarget.UNDER_40K: "Under $40,000",
    SalaryTarget.FROM_40_TO_60K: "$40,000 - $60,000",
    SalaryTarget.FROM_60_TO_80K: "$60,000 - $80,000",
    SalaryTarget.FROM_80_TO_100K: "$80,000 - $100,000",
    SalaryTarget.OVER_100K: "$100,000+",
}

# Representative annual figure for each bracket, used by salary fit.
SALARY_TARGETS: dict[SalaryTarget, int] = {
    SalaryTarget.UNDER_40K: 30000,
    SalaryTarget.FROM_40_TO_60K: 50000,
    SalaryTarget.FROM_60_TO_80K: 70000,
    SalaryTarget.FROM_80_TO_100K: 90000,
    SalaryTarget.OVER_100K: 110000,
}

WORK_BACKGROUND_LABELS: dict[WorkBackground, str] = {
    WorkBackground.NONE: "No significant work experience",
    WorkBackground.SERVICE: "Service, Retail, or Hospitality",
    WorkBackground.OFFICE: "Office, Administrative, or Clerical",
    WorkBackground.TECHNICAL: "Technical, IT, or Engineering",
    WorkBackground.HEALTHCARE: "Healthcare or Medical",
    WorkBackground.TRADES: "Trades, Construction, or Manufacturing",
    WorkBackground.SALES: "Sales & Marketing",
    WorkBackground.FINANCE: "Business & Finance",
    WorkBackground.EDUCATION: "Education or Social Services",
    WorkBackground.CREATIVE: "Creative, Media, or Design",
}

WORK_STYLE_LABELS: dict[WorkStyle, str] = {
    WorkStyle.HANDS_ON: "Hands-on work (building, fixing, operating equipment)",
    WorkStyle.PEOPLE: "Working with people (caring, teaching, helping, serving)",
    WorkStyle.ANALYTICAL: "Analysis & problem-solving (data, research, strategy)",
    WorkStyle.CREATIVE: "Creative & design (art, writing, media, innovation)",
    WorkStyle.TECHNOLOGY: "Technology & digital (coding, IT, systems, software)",
    WorkStyle.LEADERSHIP: "Leadership & business (managing, selling, organizing)",
}

MAX_WORK_STYLES = 2


class UserPreferences(BaseModel):
    """Explicit selections. These outrank anything inferred from a resume."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    training_willingness: TrainingWillingness = TrainingWillingness.SIGNIFICANT
    education_level: CurrentEducation = CurrentEducation.HIGH_SCHOOL
    work_background: list[WorkBackground] = []
    salary_target: SalaryTarget = SalaryTarget.FROM_40_TO_60K
    work_style: list[WorkStyle] = []
    additional_context: str | None = None

    @field_validator("work_background", "work_style")
    @classmethod
    def _unique(cls, values: list) -> list:
        return list(dict.fromkeys(values))

    @field_validator("work_style")
    @classmethod
    def _cap_work_style(cls, values: list[WorkStyle]) -> list[WorkStyle]:
        if len(values) > MAX_WORK_STYLES:
            raise ValueError(f"select at most {MAX_WORK_STYLES} work styles")
        return values

    @field_validator("additional_context")
    @classmethod
    def _strip_context(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if len(value) > settings.max_context_length:
            raise ValueError(
                f"additional context exceeds {settings.max_context_length} characters"
            )
        return value or None

    @property
    def work_background_labels(self) -> list[str]:
        return [WORK_BACKGROUND_LABELS[b] for b in self.work_background]

    @property
    def work_style_labels(self) -> list[str]:
        return [WORK_STYLE_LABELS[s] for s in self.work_style]

    @property
    def salary_target_amount(self) -> int:
        return SALARY_TARGETS[self.salary_target]
