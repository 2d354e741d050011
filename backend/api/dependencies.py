"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.pipeline.orchestrator import CareerMatchingEngine, build_engine


@lru_cache(maxsize=1)
def get_engine() -> CareerMatchingEngine:
    return build_engine(settings)
