"""Read-only occupation record from the static career catalog."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimelineBucket(str, Enum):
    """Coarse time needed to become qualified for a career."""
    ASAP = "asap"
    SIX_TO_24_MONTHS = "6-24-months"
    TWO_TO_4_YEARS = "2-4-years"
    FOUR_PLUS_YEARS = "4-plus-years"


class ResilienceLabel(str, Enum):
    """Robustness to automation, most resilient first."""
    RESILIENT = "AI-Resilient"
    AUGMENTED = "AI-Augmented"
    IN_TRANSITION = "In Transition"
    HIGH_RISK = "High Disruption Risk"


DEFAULT_EDUCATION = "Bachelor's degree"


class CatalogEntry(BaseModel):
    """One occupation record.

    Accepts the catalog file's nested shape (``wages.annual.median``,
    ``education.typical_entry_education``) as well as the flat field names.
    Entries without a timeline bucket are treated as the longest bucket.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    slug: str = Field(min_length=1)
    title: str = Field(min_length=1)
    category: str = ""
    description: str = ""
    tasks: tuple[str, ...] = ()
    technology_skills: tuple[str, ...] = ()
    abilities: tuple[str, ...] = ()
    median_pay: int | None = None
    resilience: ResilienceLabel | None = None
    required_education: str = DEFAULT_EDUCATION
    timeline_bucket: TimelineBucket = TimelineBucket.FOUR_PLUS_YEARS

    @model_validator(mode="before")
    @classmethod
    def _flatten_source_record(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        record = dict(data)

        wages = record.pop("wages", None)
        if "median_pay" not in record and isinstance(wages, dict):
            annual = wages.get("annual") or {}
            if isinstance(annual, dict) and annual.get("median") is not None:
                record["median_pay"] = annual["median"]

        education = record.pop("education", None)
        if "required_education" not in record and isinstance(education, dict):
            label = education.get("typical_entry_education")
            if label:
                record["required_education"] = label

        if "resilience" not in record and record.get("ai_resilience"):
            record["resilience"] = record["ai_resilience"]

        if record.get("timeline_bucket") is None:
            record.pop("timeline_bucket", None)
        if record.get("required_education") is None:
            record.pop("required_education", None)

        return record

    @property
    def skill_set(self) -> set[str]:
        """Lower-cased union of technology skills and abilities."""
        return {s.lower() for s in self.technology_skills} | {a.lower() for a in self.abilities}
