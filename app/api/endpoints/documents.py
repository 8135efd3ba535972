"""Document ingestion and management API endpoints"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
import logging

from app.database.session import get_db
from app.exceptions import ValidationException
from app.schemas.document import (
    DocumentListItem,
    DocumentListResponse,
    IngestionResponse,
    LinkCreate,
    TextCreate,
)
from app.schemas.response import DeleteResponse
from app.services.document_service import DocumentService, get_document_service
from app.services.ingestion_service import IngestionService, get_ingestion_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_user(user_id: str) -> str:
    user_id = (user_id or "").strip()
    if not user_id:
        raise ValidationException("Missing user_id.")
    return user_id


@router.post("/upload", response_model=IngestionResponse, status_code=201)
def upload_document(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    db: Session = Depends(get_db),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """
    Upload and index a document

    Supports: TXT, PDF, CSV, PNG, JPEG, HEIC, HEIF (images are OCR'd, max 1 MB)
    """
    user_id = _require_user(user_id)
    if not file.filename:
        raise ValidationException("Missing file.")

    data = file.file.read()
    logger.info(f"Upload from {user_id}: {file.filename} ({len(data)} bytes, {file.content_type})")

    result = ingestion.ingest_file(db, data, file.filename, file.content_type, user_id)
    return IngestionResponse(
        document_id=result.document_id,
        filename=result.filename,
        chunks_created=result.chunks_created
    )


@router.post("/links", response_model=IngestionResponse, status_code=201)
def add_link(
    payload: LinkCreate,
    db: Session = Depends(get_db),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """Fetch a web page and index its text"""
    user_id = _require_user(payload.user_id)
    url = payload.url.strip()
    if not url:
        raise ValidationException("Missing url.")

    result = ingestion.ingest_link(db, url, user_id)
    return IngestionResponse(
        document_id=result.document_id,
        filename=result.filename,
        chunks_created=result.chunks_created
    )


@router.post("/texts", response_model=IngestionResponse, status_code=201)
def add_text(
    payload: TextCreate,
    db: Session = Depends(get_db),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """Index a pasted text snippet"""
    user_id = _require_user(payload.user_id)

    result = ingestion.ingest_text(db, payload.title, payload.content, user_id)
    return IngestionResponse(
        document_id=result.document_id,
        filename=result.filename,
        chunks_created=result.chunks_created
    )


@router.get("/documents", response_model=DocumentListResponse)
def list_documents(
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service)
):
    """List a user's documents, newest first"""
    items = documents.list_documents(db, _require_user(user_id))
    return DocumentListResponse(
        documents=[DocumentListItem(**item) for item in items],
        total=len(items)
    )


@router.delete("/documents/{document_id}", response_model=DeleteResponse)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service)
):
    """Delete a document with its chunks and stored file"""
    documents.delete_document(db, document_id)
    return DeleteResponse(message="Document deleted successfully")
