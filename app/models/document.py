"""Document model"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.base import Base

# Storage locator for documents that have no raw blob (links, text snippets)
NO_BLOB = "none"


class Document(Base):
    """One ingested unit: uploaded file, link, or text snippet"""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    filename = Column(String(500), nullable=False)
    file_path = Column(String(1000), nullable=False, default=NO_BLOB)
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    size_bytes = Column(Integer, nullable=False, default=0)
    doc_type = Column(String(10), nullable=False, default="file")  # file, link, text
    source_url = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="documents")
    embeddings = relationship("Embedding", back_populates="document", passive_deletes=True)

    __table_args__ = (
        Index('idx_user_upload', 'user_id', 'upload_date'),
    )

    @property
    def has_blob(self) -> bool:
        return bool(self.file_path) and self.file_path != NO_BLOB

    def __repr__(self):
        return f"<Document(id={self.id}, filename={self.filename}, type={self.doc_type})>"
