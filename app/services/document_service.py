"""Document management service"""

from typing import List
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFound, StorageFailure
from app.models.document import Document
from app.models.embedding import Embedding

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for document management operations"""

    def __init__(self, blob_store):
        self.blob_store = blob_store

    def list_documents(self, db: Session, user_id: str) -> List[dict]:
        """
        List a user's documents, newest first

        Args:
            db: Database session
            user_id: Owner

        Returns:
            Document rows with their chunk counts
        """
        chunk_counts = (
            db.query(Embedding.document_id, func.count(Embedding.id).label("chunks"))
            .group_by(Embedding.document_id)
            .subquery()
        )
        rows = (
            db.query(Document, func.coalesce(chunk_counts.c.chunks, 0))
            .outerjoin(chunk_counts, chunk_counts.c.document_id == Document.id)
            .filter(Document.user_id == user_id)
            .order_by(Document.upload_date.desc(), Document.id)
            .all()
        )

        return [
            {
                "id": doc.id,
                "filename": doc.filename,
                "doc_type": doc.doc_type,
                "size_bytes": doc.size_bytes,
                "source_url": doc.source_url,
                "upload_date": doc.upload_date,
                "chunks_count": chunks,
            }
            for doc, chunks in rows
        ]

    def delete_document(self, db: Session, document_id: str) -> None:
        """
        Delete a document, its chunks and its stored file

        A failing blob delete is logged and does not stop the row deletes.

        Raises:
            NotFound: no such document
            StorageFailure: database error
        """
        document = db.query(Document).filter(Document.id == document_id).first()
        if not document:
            raise NotFound("Document not found.", details=f"document_id={document_id}")

        if document.has_blob:
            self.delete_blob(document.file_path)

        try:
            deleted_chunks = (
                db.query(Embedding)
                .filter(Embedding.document_id == document_id)
                .delete(synchronize_session=False)
            )
            db.delete(document)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete document {document_id}: {e}")
            raise StorageFailure(details=str(e)) from e

        logger.info(f"Deleted document {document_id} ({deleted_chunks} chunks)")

    def delete_blob(self, key: str) -> bool:
        """Best-effort blob delete; returns False when the store failed"""
        try:
            self.blob_store.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Failed to delete blob {key}: {e}")
            return False


def get_document_service() -> DocumentService:
    """Document service wired to the configured blob store"""
    from app.rag.factory import get_blob_store
    return DocumentService(get_blob_store())
