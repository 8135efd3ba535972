"""Document schemas"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class LinkCreate(BaseModel):
    """Ingest link request"""
    url: str
    user_id: str


class TextCreate(BaseModel):
    """Ingest text snippet request"""
    title: Optional[str] = None
    content: str
    user_id: str


class IngestionResponse(BaseModel):
    """Result of a successful ingestion"""
    success: bool = True
    document_id: str
    filename: str
    chunks_created: int


class DocumentListItem(BaseModel):
    """Document list item (summary)"""
    id: str
    filename: str
    doc_type: str
    size_bytes: int
    source_url: Optional[str] = None
    upload_date: datetime
    chunks_count: int


class DocumentListResponse(BaseModel):
    """Documents owned by one user"""
    documents: List[DocumentListItem]
    total: int
