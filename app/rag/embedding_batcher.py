"""Batched embedding generation with partial-failure tolerance"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence
import logging
import time

from app.exceptions import EmbeddingUnavailable
from app.rag.config import rag_config
from app.utils.logger import log_event

logger = logging.getLogger(__name__)

EmbedFn = Callable[[List[str]], List[List[float]]]


@dataclass
class EmbeddingBatch:
    """A contiguous slice of chunks sent to the model in one call"""
    batch_index: int
    start: int
    texts: List[str]


@dataclass
class BatchOutcome:
    """Result of one batch call; exactly one of ``vectors``/``error`` is set"""
    batch: EmbeddingBatch
    vectors: List[List[float]] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EmbeddedChunk:
    """A chunk paired with its vector and its position in the document"""
    chunk_index: int
    text: str
    vector: List[float]


def plan_batches(chunks: Sequence[str], batch_size: int) -> List[EmbeddingBatch]:
    """Partition chunks into fixed-size batches"""
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    return [
        EmbeddingBatch(batch_index=n, start=start, texts=list(chunks[start:start + batch_size]))
        for n, start in enumerate(range(0, len(chunks), batch_size))
    ]


def run_batches(
    batches: Sequence[EmbeddingBatch],
    embed_fn: EmbedFn,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[BatchOutcome]:
    """
    Call the embedding model once per batch, one batch at a time

    A failing batch is recorded and skipped; later batches still run. A
    fixed delay separates consecutive calls to stay under upstream rate
    limits.
    """
    outcomes = []
    for position, batch in enumerate(batches):
        if position > 0 and delay > 0:
            sleep(delay)

        started = time.monotonic()
        try:
            vectors = embed_fn(batch.texts)
            if len(vectors) != len(batch.texts):
                raise ValueError(f"expected {len(batch.texts)} vectors, got {len(vectors)}")
            outcome = BatchOutcome(batch=batch, vectors=list(vectors))
        except Exception as e:
            logger.error(f"Embedding batch {batch.batch_index} failed: {e}")
            outcome = BatchOutcome(batch=batch, error=e)

        log_event(
            logger, "embedding.batch",
            level=logging.INFO if outcome.ok else logging.WARNING,
            batch=batch.batch_index,
            size=len(batch.texts),
            ok=outcome.ok,
            ms=int((time.monotonic() - started) * 1000),
        )
        outcomes.append(outcome)

    return outcomes


def collect_embeddings(outcomes: Sequence[BatchOutcome]) -> List[EmbeddedChunk]:
    """Flatten successful batches into chunk/vector pairs, in document order"""
    embedded = []
    for outcome in sorted(outcomes, key=lambda o: o.batch.start):
        if not outcome.ok:
            continue
        for offset, (text, vector) in enumerate(zip(outcome.batch.texts, outcome.vectors)):
            embedded.append(EmbeddedChunk(chunk_index=outcome.batch.start + offset, text=text, vector=vector))
    return embedded


class EmbeddingBatcher:
    """Embed document chunks and queries through the embedding collaborator"""

    def __init__(self, embeddings, batch_size: int = None, delay: float = None, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            embeddings: Collaborator exposing ``embed(texts) -> vectors``
            batch_size: Chunks per model call
            delay: Seconds to wait between calls
            sleep: Sleep function (injectable for tests)
        """
        self.embeddings = embeddings
        self.batch_size = batch_size or rag_config.batch_size
        self.delay = rag_config.batch_delay if delay is None else delay
        self.sleep = sleep

    def embed_batch(self, chunks: Sequence[str]) -> List[EmbeddedChunk]:
        """
        Embed all chunks, skipping batches that fail

        Returns:
            Embedded chunks for every successful batch; fewer than ``chunks``
            when some batches failed

        Raises:
            EmbeddingUnavailable: every batch failed
        """
        if not chunks:
            return []

        batches = plan_batches(chunks, self.batch_size)
        outcomes = run_batches(batches, self.embeddings.embed, delay=self.delay, sleep=self.sleep)
        embedded = collect_embeddings(outcomes)

        failed = [o for o in outcomes if not o.ok]
        if len(failed) == len(outcomes):
            last_error = failed[-1].error
            raise EmbeddingUnavailable(
                details=f"all {len(outcomes)} batches failed; last error: {last_error}"
            ) from last_error

        logger.info(
            f"Embedded {len(embedded)}/{len(chunks)} chunks "
            f"({len(outcomes) - len(failed)}/{len(outcomes)} batches succeeded)"
        )
        return embedded

    def embed_one(self, text: str) -> List[float]:
        """Embed a single query text"""
        try:
            vectors = self.embeddings.embed([text])
        except Exception as e:
            logger.error(f"Query embedding failed: {e}")
            raise EmbeddingUnavailable(details=str(e)) from e

        if len(vectors) != 1:
            raise EmbeddingUnavailable(details=f"expected 1 vector, got {len(vectors)}")
        return vectors[0]
