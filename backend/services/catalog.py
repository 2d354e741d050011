"""Read-only, lazily loaded career catalog.

One ``CatalogRepository`` is constructed per process and shared by every
request. The snapshot is loaded on first access under a lock and never
mutated afterwards, so concurrent readers need no further coordination.
"""

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from models.schemas.catalog_entry import CatalogEntry
from services.errors import CatalogValidationError

logger = logging.getLogger(__name__)


class CatalogRepository:
    def __init__(
        self,
        path: str | Path,
        work_activities_path: str | Path | None = None,
    ) -> None:
        self.path = Path(path)
        self.work_activities_path = Path(work_activities_path) if work_activities_path else None
        self._entries: dict[str, CatalogEntry] | None = None
        self._work_activities: dict[str, list[str]] | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_entries(
        cls,
        entries: list[CatalogEntry],
        work_activities: dict[str, list[str]] | None = None,
    ) -> "CatalogRepository":
        """Build an already-loaded repository (tests, scripts)."""
        repo = cls(path="<memory>")
        repo._entries = _index(entries, source="<memory>")
        repo._work_activities = dict(work_activities or {})
        return repo

    @property
    def is_loaded(self) -> bool:
        return self._entries is not None

    def _ensure_loaded(self) -> dict[str, CatalogEntry]:
        if self._entries is None:
            with self._lock:
                if self._entries is None:
                    self._entries = self._load()
        return self._entries

    def _load(self) -> dict[str, CatalogEntry]:
        logger.info("Loading career catalog from %s", self.path)
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CatalogValidationError(f"Catalog not found at {self.path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogValidationError(f"Catalog at {self.path} is unreadable: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("careers", [])
        if not isinstance(raw, list):
            raise CatalogValidationError("Catalog must be a list of career records")

        entries = []
        for i, record in enumerate(raw):
            try:
                entries.append(CatalogEntry.model_validate(record))
            except ValidationError as e:
                raise CatalogValidationError(f"Catalog record {i} failed validation: {e}") from e

        index = _index(entries, source=str(self.path))
        logger.info("Catalog loaded: %d careers", len(index))
        return index

    def get(self, slug: str) -> CatalogEntry | None:
        return self._ensure_loaded().get(slug)

    def entries(self) -> list[CatalogEntry]:
        return list(self._ensure_loaded().values())

    def slugs(self) -> set[str]:
        return set(self._ensure_loaded())

    def __len__(self) -> int:
        return len(self._ensure_loaded())

    def __contains__(self, slug: object) -> bool:
        return slug in self._ensure_loaded()

    def work_activities(self, slug: str) -> list[str]:
        """Detailed work activities for a career, if the enrichment table exists."""
        if self._work_activities is None:
            with self._lock:
                if self._work_activities is None:
                    self._work_activities = self._load_work_activities()
        return self._work_activities.get(slug, [])

    def _load_work_activities(self) -> dict[str, list[str]]:
        if self.work_activities_path is None:
            return {}
        try:
            data = json.loads(self.work_activities_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(
                "%s not found, proceeding without work activity enrichment",
                self.work_activities_path,
            )
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Skipping unreadable work activity table %s: %s", self.work_activities_path, e)
            return {}

        careers = data.get("careers", data) if isinstance(data, dict) else {}
        table: dict[str, list[str]] = {}
        for slug, mapping in careers.items():
            if isinstance(mapping, dict):
                activities = mapping.get("activities") or mapping.get("dwa_titles") or []
            else:
                activities = mapping
            if isinstance(activities, list):
                table[slug] = [str(a) for a in activities]
        logger.info("Loaded work activities for %d careers", len(table))
        return table


def _index(entries: list[CatalogEntry], source: str) -> dict[str, CatalogEntry]:
    index: dict[str, CatalogEntry] = {}
    for entry in entries:
        if entry.slug in index:
            raise CatalogValidationError(f"Duplicate catalog slug '{entry.slug}' in {source}")
        index[entry.slug] = entry
    return index
