"""Admin reporting, account removal and storage maintenance"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFound, StorageFailure
from app.models.document import Document
from app.models.embedding import Embedding
from app.models.message import Message
from app.models.user import User
from app.services.document_service import DocumentService
from app.utils.logger import log_event

logger = logging.getLogger(__name__)

MESSAGES_PER_CHAT = 10
ACTIVE_WINDOW_DAYS = 30


def estimate_chats(timestamps: Sequence[datetime]) -> Tuple[int, float]:
    """
    Estimate chat sessions from message times

    Messages are not grouped into sessions, so a chat is approximated as at
    least one per active day, or one per ten messages when that is higher.

    Returns:
        ``(total_chats, average_chats_per_day)``
    """
    if not timestamps:
        return 0, 0.0

    unique_days = len({ts.date() for ts in timestamps})
    total = max(unique_days, math.ceil(len(timestamps) / MESSAGES_PER_CHAT))

    span_days = (max(timestamps).date() - min(timestamps).date()).days + 1
    return total, total / max(1, span_days)


class AdminService:
    """Usage statistics across all users"""

    def __init__(self, document_service: DocumentService, now: Callable[[], datetime] = datetime.utcnow):
        self.document_service = document_service
        self.now = now

    def get_usage_stats(self, db: Session) -> dict:
        """
        Per-user usage and overall totals

        Args:
            db: Database session

        Returns:
            ``{"users": [...], "totals": {...}}``
        """
        active_since = self.now() - timedelta(days=ACTIVE_WINDOW_DAYS)
        users = []
        signed_in = anonymous = active = total_chats = 0

        for user in db.query(User).order_by(User.created_at).all():
            document_count = db.query(Document).filter(Document.user_id == user.id).count()
            timestamps = [
                row.created_at
                for row in db.query(Message.created_at).filter(Message.user_id == user.id).all()
                if row.created_at
            ]
            chats, chats_per_day = estimate_chats(timestamps)
            total_chats += chats

            last_activity = self._last_activity(db, user.id, timestamps)
            if last_activity and last_activity >= active_since:
                active += 1

            if user.is_anonymous:
                anonymous += 1
            else:
                signed_in += 1

            users.append({
                "user_id": user.id,
                "email": None if user.is_anonymous else user.email,
                "document_count": document_count,
                "message_count": len(timestamps),
                "total_chats": chats,
                "average_chats_per_day": chats_per_day,
                "last_activity": last_activity,
            })

        average = sum(u["average_chats_per_day"] for u in users) / len(users) if users else 0.0
        return {
            "users": users,
            "totals": {
                "total_users": len(users),
                "signed_in_users": signed_in,
                "anonymous_users": anonymous,
                "active_users": active,
                "total_documents": db.query(Document).count(),
                "total_chats": total_chats,
                "average_chats_per_day": average,
            },
        }

    def _last_activity(self, db: Session, user_id: str, message_times: List[datetime]) -> Optional[datetime]:
        last_upload = (
            db.query(Document.upload_date)
            .filter(Document.user_id == user_id)
            .order_by(Document.upload_date.desc())
            .first()
        )
        candidates = list(message_times)
        if last_upload:
            candidates.append(last_upload.upload_date)
        return max(candidates) if candidates else None

    def delete_user(self, db: Session, user_id: str) -> dict:
        """
        Remove a user with their files, chunks, documents and messages

        Raises:
            NotFound: unknown user
            StorageFailure: database error
        """
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found.", details=f"user_id={user_id}")

        documents = db.query(Document).filter(Document.user_id == user_id).all()
        document_ids = [doc.id for doc in documents]

        deleted_files = failed_files = 0
        for doc in documents:
            if not doc.has_blob:
                continue
            if self.document_service.delete_blob(doc.file_path):
                deleted_files += 1
            else:
                failed_files += 1

        try:
            if document_ids:
                db.query(Embedding).filter(Embedding.document_id.in_(document_ids)).delete(synchronize_session=False)
            db.query(Document).filter(Document.user_id == user_id).delete(synchronize_session=False)
            db.query(Message).filter(Message.user_id == user_id).delete(synchronize_session=False)
            db.delete(user)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise StorageFailure(details=str(e)) from e

        logger.info(
            f"Deleted user {user_id}: {len(document_ids)} documents, "
            f"{deleted_files} files ({failed_files} failed)"
        )
        return {
            "user_id": user_id,
            "deleted_documents": len(document_ids),
            "deleted_files": deleted_files,
            "failed_files": failed_files,
        }

    def clear_blobs(self) -> dict:
        """
        Delete every stored file for every user

        Document and chunk rows are left in place; only the original uploads
        are removed. Each delete is attempted independently.

        Returns:
            ``{"deleted": int, "failed": int, "total": int}``
        """
        keys = self.document_service.blob_store.list_keys()

        deleted = failed = 0
        for key in keys:
            if self.document_service.delete_blob(key):
                deleted += 1
            else:
                failed += 1

        log_event(logger, "admin.blobs_cleared", deleted=deleted, failed=failed, total=len(keys))
        return {"deleted": deleted, "failed": failed, "total": len(keys)}


def get_admin_service() -> AdminService:
    """Admin service wired to the configured blob store"""
    from app.services.document_service import get_document_service
    return AdminService(get_document_service())
