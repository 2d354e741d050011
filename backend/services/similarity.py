"""Vector and set similarity helpers shared by retrieval and scoring."""

from typing import NamedTuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sklearn_cosine

from config import RetrievalWeights


class QueryVectors(NamedTuple):
    """Parallel embeddings for the three query strings."""
    task: list[float]
    narrative: list[float]
    skills: list[float]


def weighted_similarity_matrix(
    query: QueryVectors,
    task_matrix: np.ndarray,
    narrative_matrix: np.ndarray,
    skills_matrix: np.ndarray,
    weights: RetrievalWeights,
) -> np.ndarray:
    """Score every row of the per-field career matrices in one pass.

    Returns a 1-D array with one weighted similarity per career row.
    """
    task_sim = sklearn_cosine(np.asarray([query.task]), task_matrix)[0]
    narrative_sim = sklearn_cosine(np.asarray([query.narrative]), narrative_matrix)[0]
    skills_sim = sklearn_cosine(np.asarray([query.skills]), skills_matrix)[0]
    return (
        weights.task * task_sim
        + weights.narrative * narrative_sim
        + weights.skills * skills_sim
    )


def jaccard(a: set[str], b: set[str]) -> float:
    """|a ∩ b| / |a ∪ b|, 0.0 for two empty sets."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)
