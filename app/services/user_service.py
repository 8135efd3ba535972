"""User registration and lookup"""

from typing import Optional
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFound, StorageFailure, ValidationException
from app.models.user import ANONYMOUS_EMAIL_DOMAIN, User

logger = logging.getLogger(__name__)


class UserService:
    """Service for user records"""

    def get_user(self, db: Session, user_id: str) -> User:
        """Raises ``NotFound`` for unknown ids"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found.", details=f"user_id={user_id}")
        return user

    def ensure_user(self, db: Session, user_id: str) -> User:
        """Return the user, creating an anonymous record when it does not exist yet"""
        user = db.query(User).filter(User.id == user_id).first()
        if user:
            return user

        user = User(id=user_id, email=f"{user_id}@{ANONYMOUS_EMAIL_DOMAIN}")
        self._save(db, user)
        logger.info(f"Created anonymous user {user_id}")
        return user

    def register_user(self, db: Session, email: str, user_id: Optional[str] = None) -> tuple:
        """
        Get or create a user by id, then by email

        Args:
            db: Database session
            email: User email
            user_id: Client-held id to keep existing data linked

        Returns:
            ``(user, created)``
        """
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationException("Invalid email format.")

        if user_id:
            existing = db.query(User).filter(User.id == user_id).first()
            if existing:
                return existing, False
            user = User(id=user_id, email=email)
        else:
            existing = db.query(User).filter(User.email == email).first()
            if existing:
                return existing, False
            user = User(id=str(uuid.uuid4()), email=email)

        self._save(db, user)
        logger.info(f"Registered user {user.id}")
        return user, True

    def _save(self, db: Session, user: User) -> None:
        try:
            db.add(user)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save user {user.id}: {e}")
            raise StorageFailure(details=str(e)) from e
        db.refresh(user)


# Global user service instance
user_service = UserService()
