"""Nearest-neighbour providers for the retrieval stage.

Providers are tried in order by the retrieval stage. None of them can apply
the eligibility filter natively; they only rank careers by weighted vector
similarity. ``attempt()`` turns an exception into a failed ``ProviderResult``
so the fallback order stays explicit in the caller.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import httpx
import numpy as np
from pydantic import BaseModel, ValidationError

from config import RetrievalWeights, Settings
from services.errors import (
    CatalogValidationError,
    ConfigurationError,
    ServiceTimeoutError,
    bounded,
)
from services.similarity import QueryVectors, weighted_similarity_matrix

logger = logging.getLogger(__name__)


class StoreHit(BaseModel):
    """One ranked row as returned by a provider."""
    career_slug: str
    title: str = ""
    category: str = ""
    similarity: float


@dataclass
class ProviderResult:
    provider: str
    hits: list[StoreHit] | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.hits is not None


class VectorStoreProvider(ABC):
    name: str = ""
    # Exhaustive providers score the whole catalog, so no over-fetch is needed.
    exhaustive: bool = False

    @abstractmethod
    async def query(
        self,
        vectors: QueryVectors,
        weights: RetrievalWeights,
        limit: int | None,
    ) -> list[StoreHit]:
        """Return hits sorted by descending similarity, at most ``limit``."""

    async def attempt(
        self,
        vectors: QueryVectors,
        weights: RetrievalWeights,
        limit: int | None,
    ) -> ProviderResult:
        try:
            hits = await self.query(vectors, weights, limit)
        except ServiceTimeoutError as e:
            if e.cancelled:
                raise
            return ProviderResult(provider=self.name, error=e)
        except Exception as e:
            return ProviderResult(provider=self.name, error=e)
        return ProviderResult(provider=self.name, hits=hits)


class SupabaseVectorStore(VectorStoreProvider):
    """pgvector search through the ``find_similar_careers`` PostgREST RPC."""

    name = "vector_store"
    rpc = "find_similar_careers"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = settings.supabase_url.rstrip("/")
        self.key = settings.supabase_service_key
        self.timeout = settings.vector_store_timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    async def query(
        self,
        vectors: QueryVectors,
        weights: RetrievalWeights,
        limit: int | None,
    ) -> list[StoreHit]:
        if not self.is_configured:
            raise ConfigurationError("Missing SUPABASE_URL or SUPABASE_SERVICE_KEY")

        payload = {
            "query_task": vectors.task,
            "query_narrative": vectors.narrative,
            "query_skills": vectors.skills,
            "task_weight": weights.task,
            "narrative_weight": weights.narrative,
            "skills_weight": weights.skills,
            "result_limit": limit,
        }
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await bounded(
                client.post(f"{self.url}/rest/v1/rpc/{self.rpc}", json=payload, headers=headers),
                service="vector_store",
                timeout=self.timeout,
            )
        response.raise_for_status()

        rows = response.json()
        if not isinstance(rows, list):
            raise ValueError(f"{self.rpc} returned {type(rows).__name__}, expected a list")
        hits = [StoreHit.model_validate(row) for row in rows]
        hits.sort(key=lambda h: h.similarity, reverse=True)
        return hits if limit is None else hits[:limit]


class LocalSnapshotStore(VectorStoreProvider):
    """In-process search over a precomputed embedding snapshot file.

    The snapshot is read once and kept as three row-aligned matrices.
    """

    name = "local_snapshot"
    exhaustive = True

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._rows: list[StoreHit] | None = None
        self._matrices: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None
        self._lock = threading.Lock()

    def _ensure_loaded(self) -> None:
        if self._rows is None:
            with self._lock:
                if self._rows is None:
                    self._load()

    def _load(self) -> None:
        logger.info("Loading local embedding snapshot from %s", self.path)
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CatalogValidationError(
                f"Career embeddings not found at {self.path}; generate the snapshot first"
            ) from e
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogValidationError(f"Embedding snapshot {self.path} is unreadable: {e}") from e

        records = data.get("embeddings", []) if isinstance(data, dict) else data
        if not records:
            raise CatalogValidationError(f"Embedding snapshot {self.path} is empty")

        rows, task, narrative, skills = [], [], [], []
        try:
            for record in records:
                rows.append(StoreHit(
                    career_slug=record["career_slug"],
                    title=record.get("title", ""),
                    category=record.get("category", ""),
                    similarity=0.0,
                ))
                task.append(record["task_embedding"])
                narrative.append(record["narrative_embedding"])
                skills.append(record["skills_embedding"])
            matrices = (
                np.asarray(task, dtype=np.float32),
                np.asarray(narrative, dtype=np.float32),
                np.asarray(skills, dtype=np.float32),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise CatalogValidationError(f"Malformed embedding snapshot record: {e}") from e

        if any(m.ndim != 2 for m in matrices):
            raise CatalogValidationError("Embedding snapshot vectors have inconsistent dimensions")

        self._matrices = matrices
        self._rows = rows
        logger.info("Embedding snapshot loaded: %d careers, dim=%d", len(rows), matrices[0].shape[1])

    async def query(
        self,
        vectors: QueryVectors,
        weights: RetrievalWeights,
        limit: int | None,
    ) -> list[StoreHit]:
        self._ensure_loaded()
        task_m, narrative_m, skills_m = self._matrices
        if len(vectors.task) != task_m.shape[1]:
            raise CatalogValidationError(
                f"Query dimension {len(vectors.task)} does not match snapshot dimension {task_m.shape[1]}"
            )

        scores = weighted_similarity_matrix(vectors, task_m, narrative_m, skills_m, weights)
        # Stable sort keeps snapshot order for ties, which keeps results deterministic.
        order = np.argsort(-scores, kind="stable")
        if limit is not None:
            order = order[:limit]
        return [
            self._rows[i].model_copy(update={"similarity": float(scores[i])})
            for i in order
        ]
