import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_engine
from api.router import limiter
from conftest import make_match, matches_json
from main import app
from services.errors import (
    CatalogValidationError,
    ConfigurationError,
    RateLimitedError,
    ResponseParseError,
    ServiceTimeoutError,
)

client = TestClient(app)

REQUEST = {
    "profile": {
        "skills": ["Python", "SQL"],
        "jobTitles": ["Data Analyst"],
        "education": {"level": "bachelors", "fields": ["Statistics"]},
        "experienceYears": 4,
    },
    "preferences": {
        "trainingWillingness": "short-term",
        "educationLevel": "bachelors",
        "workBackground": ["technical"],
        "salaryTarget": "60-80k",
        "workStyle": ["analytical"],
    },
}


class RaisingEngine:
    def __init__(self, error):
        self.error = error

    async def match(self, profile, preferences, options):
        raise self.error


@pytest.fixture(autouse=True)
def _reset():
    limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def engine(build_test_engine):
    engine, _ = build_test_engine(
        matches_json([make_match(f"career-{i:02d}", score=99 - i) for i in range(40)])
    )
    app.dependency_overrides[get_engine] = lambda: engine
    return engine


def test_health(engine):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["catalog_loaded"] is True
    assert data["vector_store_configured"] is False


def test_recommend(engine):
    response = client.post("/compass/recommend", json=REQUEST)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert 0 < len(data["recommendations"]) <= 15
    first = data["recommendations"][0]
    assert {"matchScore", "skillsGap", "transitionTimeline", "medianPay"} <= set(first)
    assert len(first["skillsGap"]) == 3
    assert data["metadata"]["modelTier"] == "model-a"
    assert data["metadata"]["retrievalSource"] == "local_snapshot"


def test_recommend_without_profile(engine):
    response = client.post("/compass/recommend", json={"preferences": REQUEST["preferences"]})
    assert response.status_code == 200
    assert response.json()["metadata"]["modelTier"] == "model-b"


def test_no_matches(build_test_engine):
    engine, _ = build_test_engine("[]")
    app.dependency_overrides[get_engine] = lambda: engine
    response = client.post("/compass/recommend", json=REQUEST)
    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["error"]["code"] == "NO_MATCHES"


def test_rejects_too_many_work_styles(engine):
    body = {**REQUEST, "preferences": {**REQUEST["preferences"], "workStyle": ["people", "creative", "analytical"]}}
    response = client.post("/compass/recommend", json=body)
    assert response.status_code == 422


def test_rejects_oversized_additional_context(engine):
    body = {**REQUEST, "preferences": {**REQUEST["preferences"], "additionalContext": "x" * 2001}}
    response = client.post("/compass/recommend", json=body)
    assert response.status_code == 422


@pytest.mark.parametrize(
    "error, status, code",
    [
        (ConfigurationError("Missing GEMINI_API_KEY"), 500, "CONFIGURATION_ERROR"),
        (CatalogValidationError("no snapshot"), 503, "CATALOG_UNAVAILABLE"),
        (ResponseParseError("bad", raw_response="secret raw text"), 502, "MATCHING_FAILED"),
        (ServiceTimeoutError("reasoning", 60), 504, "TIMEOUT"),
    ],
)
def test_engine_errors_are_mapped(error, status, code):
    app.dependency_overrides[get_engine] = lambda: RaisingEngine(error)
    response = client.post("/compass/recommend", json=REQUEST)
    assert response.status_code == status
    data = response.json()
    assert data["success"] is False
    assert data["error"]["code"] == code
    assert "secret raw text" not in response.text


def test_rate_limited_sets_retry_after():
    app.dependency_overrides[get_engine] = lambda: RaisingEngine(RateLimitedError("reasoning", 17))
    response = client.post("/compass/recommend", json=REQUEST)
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "17"
    assert response.json()["error"]["code"] == "RATE_LIMITED"
