import pytest
from pydantic import ValidationError

from models.requests import MatchOptions, ModelTier, RecommendRequest
from models.responses import CareerMatch, MatchingResult
from models.schemas.preferences import UserPreferences, WorkStyle
from models.schemas.user_profile import EducationLevel, UserProfile


class TestUserPreferences:
    def test_camel_case_input(self):
        prefs = UserPreferences.model_validate({
            "trainingWillingness": "medium",
            "educationLevel": "some-college",
            "salaryTarget": "100k-plus",
        })
        assert prefs.salary_target_amount == 110000

    def test_work_style_capped_at_two(self):
        with pytest.raises(ValidationError):
            UserPreferences(work_style=["people", "creative", "technology"])

    def test_duplicates_collapse_before_cap(self):
        prefs = UserPreferences(work_style=["people", "people", "creative"])
        assert prefs.work_style == [WorkStyle.PEOPLE, WorkStyle.CREATIVE]

    def test_blank_context_is_none(self):
        assert UserPreferences(additional_context="   ").additional_context is None

    def test_context_length_capped(self):
        assert len(UserPreferences(additional_context="x" * 2000).additional_context) == 2000
        assert UserPreferences(additional_context="  " + "x" * 2000 + "  ").additional_context == "x" * 2000
        with pytest.raises(ValidationError, match="2000 characters"):
            UserPreferences(additional_context="x" * 2001)

    def test_unknown_label_rejected(self):
        with pytest.raises(ValidationError):
            UserPreferences(work_background=["astronaut"])


class TestUserProfile:
    def test_education_ordering(self):
        ranks = [level.rank for level in EducationLevel]
        assert ranks == list(range(1, 8))

    def test_skills_deduplicated_case_insensitively(self):
        profile = UserProfile(skills=["Python", "python ", "SQL"])
        assert profile.skills == ["Python", "SQL"]
        assert profile.skill_set == {"python", "sql"}

    def test_experience_bounds(self):
        with pytest.raises(ValidationError):
            UserProfile(experience_years=51)


class TestRequestAndResult:
    def test_request_defaults(self):
        request = RecommendRequest.model_validate({"preferences": {}})
        assert request.profile is None
        assert request.options == MatchOptions()

    def test_options_aliases(self):
        options = MatchOptions.model_validate({"useVectorStore": False, "model": "model-b"})
        assert options.use_vector_store is False
        assert options.model is ModelTier.LIGHT

    def test_result_caps_matches(self):
        match = CareerMatch(
            slug="a", title="A", match_score=80, reasoning="fits",
            skills_gap=["x", "y", "z"], transition_timeline="1-2 years",
        )
        with pytest.raises(ValidationError):
            MatchingResult(matches=[match] * 16)

    def test_match_serializes_camel_case(self):
        match = CareerMatch(
            slug="a", title="A", match_score=80, reasoning="fits",
            skills_gap=["x", "y", "z"], transition_timeline="1-2 years",
        )
        data = match.model_dump(by_alias=True)
        assert data["matchScore"] == 80
        assert data["transitionTimeline"] == "1-2 years"
