"""Chunk embedding model"""

import json
import logging
from typing import List

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database.base import Base

logger = logging.getLogger(__name__)


class Embedding(Base):
    """One retrievable chunk of a document and its vector"""

    __tablename__ = "embeddings"

    id = Column(String(36), primary_key=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    chunk_text = Column(Text, nullable=False)
    embedding = Column(Text, nullable=False)  # JSON-encoded list of floats
    chunk_index = Column(Integer, nullable=False)

    # Relationships
    document = relationship("Document", back_populates="embeddings")

    __table_args__ = (
        Index('idx_document_chunk', 'document_id', 'chunk_index'),
    )

    @staticmethod
    def serialize_vector(vector: List[float]) -> str:
        return json.dumps([float(x) for x in vector])

    @property
    def vector(self) -> List[float]:
        """Decoded vector; a corrupt row decodes to an empty vector (scores as no match)"""
        try:
            value = json.loads(self.embedding)
        except (TypeError, ValueError) as e:
            logger.warning(f"Corrupt embedding {self.id}: {e}")
            return []
        return value if isinstance(value, list) else []

    def __repr__(self):
        return f"<Embedding(id={self.id}, document_id={self.document_id}, index={self.chunk_index})>"
