"""Database models package"""

from app.models.user import User
from app.models.document import Document
from app.models.embedding import Embedding
from app.models.message import Message

__all__ = [
    "User",
    "Document",
    "Embedding",
    "Message"
]
