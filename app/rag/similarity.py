"""Brute-force cosine similarity ranking over a user's corpus"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


@dataclass
class CorpusEntry:
    """One stored chunk as seen by the ranker"""
    vector: Sequence[float]
    document_id: str
    filename: str
    chunk_text: str
    chunk_index: int = 0


@dataclass
class RankedChunk:
    score: float
    entry: CorpusEntry


def _as_vector(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(-1) if values is not None else np.empty(0)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors

    Returns 0.0 for empty, zero-magnitude, mismatched-length, non-numeric or
    non-finite input instead of raising, so one corrupt row cannot fail a
    ranking pass.
    """
    try:
        va = _as_vector(a)
        vb = _as_vector(b)
    except (TypeError, ValueError):
        return 0.0

    if va.size == 0 or va.shape != vb.shape:
        return 0.0
    if not (np.all(np.isfinite(va)) and np.all(np.isfinite(vb))):
        return 0.0

    denominator = np.linalg.norm(va) * np.linalg.norm(vb)
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0

    score = float(np.dot(va, vb) / denominator)
    return min(1.0, max(-1.0, score))


def rank(query_vector: Sequence[float], corpus: Sequence[CorpusEntry], k: int = 3) -> List[RankedChunk]:
    """
    Score every corpus entry against the query and keep the top ``k``

    Ties keep their corpus order.
    """
    if not corpus or k <= 0:
        return []

    scored = [RankedChunk(score=cosine_similarity(query_vector, entry.vector), entry=entry) for entry in corpus]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:k]
