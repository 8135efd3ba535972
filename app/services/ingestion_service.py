"""Document ingestion: extract, chunk, embed and persist"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging
import time
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import (
    DocumentLimitReached,
    NoContent,
    StorageFailure,
    TooLarge,
)
from app.models.document import NO_BLOB, Document
from app.models.embedding import Embedding
from app.rag.chunker import chunk_text
from app.rag.config import RAGConfig, rag_config
from app.rag.embedding_batcher import EmbeddingBatcher
from app.services.user_service import user_service
from app.storage.blob_store import build_blob_key
from app.utils.logger import log_event

logger = logging.getLogger(__name__)


class IngestionState(str, Enum):
    VALIDATING = "validating"
    EXTRACTING = "extracting"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class IngestionResult:
    document_id: str
    filename: str
    chunks_created: int


@dataclass
class _Source:
    """What is being ingested, independent of how its text is obtained"""
    filename: str
    doc_type: str
    size_bytes: int
    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    source_url: Optional[str] = None


class _Run:
    """Tracks one ingestion's state transitions for logging"""

    def __init__(self, user_id: str, doc_type: str):
        self.user_id = user_id
        self.doc_type = doc_type
        self.state = IngestionState.VALIDATING
        self.started = time.monotonic()
        self._log()

    def advance(self, state: IngestionState, **fields) -> None:
        self.state = state
        self._log(**fields)

    def fail(self, reason: str) -> None:
        failed_in = self.state
        self.state = IngestionState.FAILED
        self._log(level=logging.WARNING, reason=reason, failed_in=failed_in.value)

    def _log(self, level: int = logging.INFO, **fields) -> None:
        log_event(
            logger, "ingestion.state",
            level=level,
            state=self.state.value,
            user_id=self.user_id,
            doc_type=self.doc_type,
            ms=int((time.monotonic() - self.started) * 1000),
            **fields,
        )


class IngestionService:
    """Turn an uploaded file, link or text snippet into searchable chunks"""

    def __init__(self, extractor, batcher: EmbeddingBatcher, blob_store, config: RAGConfig = None):
        """
        Args:
            extractor: ``TextExtractor``
            batcher: ``EmbeddingBatcher``
            blob_store: Collaborator exposing ``put(key, data, content_type)``
            config: Pipeline limits
        """
        self.extractor = extractor
        self.batcher = batcher
        self.blob_store = blob_store
        self.config = config or rag_config

    def ingest_file(
        self,
        db: Session,
        data: bytes,
        filename: str,
        mime_type: Optional[str],
        user_id: str
    ) -> IngestionResult:
        """
        Ingest an uploaded file (TXT, PDF, CSV or image)

        Args:
            db: Database session
            data: Raw file bytes
            filename: Original filename
            mime_type: Declared MIME type, may be empty
            user_id: Owner

        Returns:
            IngestionResult
        """
        source = _Source(filename=filename, doc_type="file", size_bytes=len(data), data=data, mime_type=mime_type)
        return self._ingest(db, user_id, source, lambda: self.extractor.extract_file(data, filename, mime_type))

    def ingest_link(self, db: Session, url: str, user_id: str) -> IngestionResult:
        """Ingest the readable text of a web page; the page title becomes the filename"""
        source = _Source(filename=url, doc_type="link", size_bytes=0, source_url=url)

        def extract() -> str:
            page = self.extractor.extract_link(url)
            source.filename = page.title or url
            source.size_bytes = len(page.text.encode("utf-8"))
            return page.text

        return self._ingest(db, user_id, source, extract)

    def ingest_text(self, db: Session, title: str, content: str, user_id: str) -> IngestionResult:
        """Ingest a pasted text snippet under ``title``"""
        filename = (title or "").strip() or "Untitled text"
        source = _Source(filename=filename, doc_type="text", size_bytes=len((content or "").encode("utf-8")))
        return self._ingest(db, user_id, source, lambda: self.extractor.extract_snippet(content or ""))

    def _ingest(self, db: Session, user_id: str, source: _Source, extract: Callable[[], str]) -> IngestionResult:
        run = _Run(user_id, source.doc_type)
        try:
            self._validate(db, user_id)

            run.advance(IngestionState.EXTRACTING)
            text = extract()

            run.advance(IngestionState.CHUNKING, chars=len(text))
            chunks = chunk_text(text, self.config.chunk_size, self.config.chunk_overlap)
            if not chunks:
                raise NoContent(details=f"filename={source.filename}")
            if len(chunks) > self.config.max_chunks:
                raise TooLarge(
                    f"This document is too large ({len(chunks)} sections, max {self.config.max_chunks}). "
                    "Try a shorter document or split it into multiple files.",
                    details=f"chunks={len(chunks)} limit={self.config.max_chunks}",
                )

            run.advance(IngestionState.EMBEDDING, chunks=len(chunks))
            embedded = self.batcher.embed_batch(chunks)

            run.advance(IngestionState.PERSISTING, embedded=len(embedded))
            document_id = self._persist(db, user_id, source, embedded)
        except Exception as e:
            run.fail(getattr(e, "code", type(e).__name__))
            raise

        run.advance(IngestionState.DONE, document_id=document_id)
        logger.info(f"Ingested {source.doc_type} '{source.filename}' for user {user_id}: {len(embedded)} chunks")
        return IngestionResult(document_id=document_id, filename=source.filename, chunks_created=len(embedded))

    def _validate(self, db: Session, user_id: str) -> None:
        """Owner exists and is under the document cap; runs before any extraction work"""
        user_service.ensure_user(db, user_id)

        count = db.query(Document).filter(Document.user_id == user_id).count()
        if count >= self.config.max_documents:
            raise DocumentLimitReached(
                f"Document limit reached ({self.config.max_documents} max). "
                "Delete a document before adding another.",
                details=f"user_id={user_id} documents={count}",
            )

    def _persist(self, db: Session, user_id: str, source: _Source, embedded) -> str:
        document_id = str(uuid.uuid4())

        file_path = NO_BLOB
        if source.data is not None:
            file_path = build_blob_key(user_id, document_id, source.filename)
            try:
                self.blob_store.put(file_path, source.data, source.mime_type or "application/octet-stream")
            except Exception as e:
                logger.error(f"Failed to store blob {file_path}: {e}")
                raise StorageFailure(details=f"blob put failed: {e}") from e

        try:
            db.add(Document(
                id=document_id,
                user_id=user_id,
                filename=source.filename,
                file_path=file_path,
                size_bytes=source.size_bytes,
                doc_type=source.doc_type,
                source_url=source.source_url,
            ))
            db.flush()
            db.add_all([
                Embedding(
                    id=str(uuid.uuid4()),
                    document_id=document_id,
                    chunk_text=chunk.text,
                    embedding=Embedding.serialize_vector(chunk.vector),
                    chunk_index=chunk.chunk_index,
                )
                for chunk in embedded
            ])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            if file_path != NO_BLOB:
                # Blob is left behind; no compensating delete
                logger.error(f"Orphaned blob {file_path} after database failure")
            logger.error(f"Failed to persist document {document_id}: {e}")
            raise StorageFailure(details=f"database write failed: {e}") from e

        log_event(logger, "ingestion.persisted", document_id=document_id, chunks=len(embedded))
        return document_id


def get_ingestion_service() -> IngestionService:
    """Ingestion service wired to the configured collaborators"""
    from app.rag.factory import get_blob_store, get_embeddings_service, get_text_extractor
    return IngestionService(
        extractor=get_text_extractor(),
        batcher=EmbeddingBatcher(get_embeddings_service()),
        blob_store=get_blob_store(),
    )
