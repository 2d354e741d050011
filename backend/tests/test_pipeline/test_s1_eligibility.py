"""Tests for Stage 1: Eligibility filter."""

import itertools

import pytest

from conftest import make_entry
from models.schemas.catalog_entry import TimelineBucket
from models.schemas.preferences import CurrentEducation, TrainingWillingness
from services.catalog import CatalogRepository
from services.pipeline.s1_eligibility import (
    CURRENT_YEARS,
    MAX_ADDITIONAL_YEARS,
    REQUIRED_YEARS,
    EligibilityFilter,
    additional_years_needed,
    is_eligible,
)


@pytest.fixture
def bucket_catalog():
    return CatalogRepository.from_entries([
        make_entry("barista", timeline_bucket=TimelineBucket.ASAP),
        make_entry("phlebotomist", timeline_bucket=TimelineBucket.SIX_TO_24_MONTHS),
        make_entry("accountant", timeline_bucket=TimelineBucket.TWO_TO_4_YEARS),
        make_entry("physician", timeline_bucket=TimelineBucket.FOUR_PLUS_YEARS),
    ])


class TestIsEligible:
    def test_minimal_high_school_excludes_long_bucket(self):
        # 6 required years, 0 invested, at most 0.5 more
        assert additional_years_needed(TimelineBucket.FOUR_PLUS_YEARS, CurrentEducation.HIGH_SCHOOL) == 6
        assert not is_eligible(
            TimelineBucket.FOUR_PLUS_YEARS, TrainingWillingness.MINIMAL, CurrentEducation.HIGH_SCHOOL
        )

    def test_masters_short_term_includes_asap(self):
        assert additional_years_needed(TimelineBucket.ASAP, CurrentEducation.MASTERS_PLUS) == 0
        assert is_eligible(
            TimelineBucket.ASAP, TrainingWillingness.SHORT_TERM, CurrentEducation.MASTERS_PLUS
        )

    def test_highly_educated_user_keeps_entry_level_careers(self):
        for willingness in TrainingWillingness:
            assert is_eligible(TimelineBucket.ASAP, willingness, CurrentEducation.MASTERS_PLUS)

    def test_relative_to_starting_point(self):
        # 4 required years: out of reach from high school, zero extra from a bachelor's
        assert not is_eligible(
            TimelineBucket.TWO_TO_4_YEARS, TrainingWillingness.MEDIUM, CurrentEducation.HIGH_SCHOOL
        )
        assert is_eligible(
            TimelineBucket.TWO_TO_4_YEARS, TrainingWillingness.MINIMAL, CurrentEducation.BACHELORS
        )

    def test_significant_admits_every_bucket(self):
        for bucket, current in itertools.product(TimelineBucket, CurrentEducation):
            assert is_eligible(bucket, TrainingWillingness.SIGNIFICANT, current)

    def test_all_triples_follow_formula(self):
        for willingness, current, bucket in itertools.product(
            TrainingWillingness, CurrentEducation, TimelineBucket
        ):
            expected = (
                max(0, REQUIRED_YEARS[bucket] - CURRENT_YEARS[current])
                <= MAX_ADDITIONAL_YEARS[willingness]
            )
            assert is_eligible(bucket, willingness, current) == expected


class TestEligibilityFilter:
    def test_significant_disables_filter(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        assert stage.filter_eligible(TrainingWillingness.SIGNIFICANT, CurrentEducation.HIGH_SCHOOL) is None

    def test_none_disables_filter(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        assert stage.filter_eligible(None, CurrentEducation.BACHELORS) is None

    def test_minimal_from_high_school(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        eligible = stage.filter_eligible(TrainingWillingness.MINIMAL, CurrentEducation.HIGH_SCHOOL)
        assert eligible == {"barista"}

    def test_short_term_from_some_college(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        eligible = stage.filter_eligible(TrainingWillingness.SHORT_TERM, CurrentEducation.SOME_COLLEGE)
        assert eligible == {"barista", "phlebotomist"}

    def test_medium_from_masters(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        eligible = stage.filter_eligible(TrainingWillingness.MEDIUM, CurrentEducation.MASTERS_PLUS)
        assert eligible == {"barista", "phlebotomist", "accountant", "physician"}

    def test_loads_once(self, bucket_catalog):
        stage = EligibilityFilter(bucket_catalog)
        assert not stage.is_loaded
        stage.filter_eligible(TrainingWillingness.MINIMAL, CurrentEducation.HIGH_SCHOOL)
        assert stage.is_loaded
