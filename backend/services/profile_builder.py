"""Minimal profiles for users who skipped the resume upload."""

from models.schemas.preferences import CurrentEducation, UserPreferences, WorkBackground
from models.schemas.user_profile import Education, EducationLevel, UserProfile

CURRENT_TO_PROFILE_LEVEL: dict[CurrentEducation, EducationLevel] = {
    CurrentEducation.HIGH_SCHOOL: EducationLevel.HIGH_SCHOOL,
    CurrentEducation.SOME_COLLEGE: EducationLevel.SOME_COLLEGE,
    CurrentEducation.BACHELORS: EducationLevel.BACHELORS,
    CurrentEducation.MASTERS_PLUS: EducationLevel.MASTERS,
}

ASSUMED_EXPERIENCE_YEARS = 3
QUESTIONNAIRE_CONFIDENCE = 0.5


def synthesize_profile(preferences: UserPreferences) -> UserProfile:
    """Build a low-confidence profile from questionnaire answers alone."""
    no_experience = WorkBackground.NONE in preferences.work_background
    return UserProfile(
        education=Education(level=CURRENT_TO_PROFILE_LEVEL[preferences.education_level]),
        experience_years=0 if no_experience else ASSUMED_EXPERIENCE_YEARS,
        confidence=QUESTIONNAIRE_CONFIDENCE,
    )


def has_resume_signal(profile: UserProfile | None) -> bool:
    """True when the profile carries resume-derived content."""
    return profile is not None and bool(profile.skills or profile.job_titles)
