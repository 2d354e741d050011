"""Base class for the matching funnel stages."""

import logging

from services.catalog import CatalogRepository

logger = logging.getLogger(__name__)


class BaseStage:
    """A funnel stage bound to the shared, read-only catalog.

    Subclasses may override ``load()`` to precompute lookup tables from the
    catalog; it runs once, on first use.
    """

    stage_name: str = ""

    def __init__(self, catalog: CatalogRepository) -> None:
        self.catalog = catalog
        self._loaded = False

    def load(self) -> None:
        """Make sure the catalog snapshot is in memory."""
        len(self.catalog)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load stage data if not already loaded."""
        if not self._loaded:
            logger.info("Loading stage: %s", self.stage_name)
            self.load()
            self._loaded = True
            logger.info("Stage loaded: %s", self.stage_name)
