"""User model"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.base import Base

# Users created implicitly by ingestion get a placeholder address
ANONYMOUS_EMAIL_DOMAIN = "temp.local"


class User(Base):
    """Owner of documents and chat history"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    documents = relationship("Document", back_populates="user")
    messages = relationship("Message", back_populates="user")

    @property
    def is_anonymous(self) -> bool:
        return self.email.endswith(f"@{ANONYMOUS_EMAIL_DOMAIN}")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
