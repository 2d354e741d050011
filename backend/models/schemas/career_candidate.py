"""A catalog entry moving through the matching funnel."""

from pydantic import BaseModel, Field

from models.schemas.catalog_entry import CatalogEntry


class CareerCandidate(BaseModel):
    """Retrieval sets ``similarity``; the structured scorer sets ``structured_score``.

    ``entry`` is None when the vector store returned a slug the catalog
    cannot resolve.
    """
    slug: str
    title: str = ""
    category: str = ""
    similarity: float = Field(ge=0.0, le=1.0)
    entry: CatalogEntry | None = None
    structured_score: float | None = None
