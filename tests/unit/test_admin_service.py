"""Test admin reporting and user removal"""

from datetime import datetime, timedelta

import pytest

from app.exceptions import NotFound
from app.models.document import Document
from app.models.embedding import Embedding
from app.models.message import Message
from app.models.user import User
from app.services.admin_service import AdminService, estimate_chats
from app.services.document_service import DocumentService
from tests.fakes import FakeBlobStore

NOW = datetime(2026, 3, 15, 12, 0, 0)


def test_estimate_chats_by_active_days():
    times = [NOW, NOW + timedelta(hours=1), NOW + timedelta(days=2)]
    total, per_day = estimate_chats(times)
    assert total == 2
    assert per_day == pytest.approx(2 / 3)


def test_estimate_chats_by_volume():
    times = [NOW + timedelta(minutes=i) for i in range(25)]
    assert estimate_chats(times) == (3, 3.0)


def test_estimate_chats_no_messages():
    assert estimate_chats([]) == (0, 0.0)


def seed(db):
    db.add(User(id="signed", email="ada@example.com", created_at=NOW - timedelta(days=90)))
    db.add(User(id="anon", email="anon@temp.local", created_at=NOW - timedelta(days=80)))
    db.add(Document(id="d1", user_id="signed", filename="a.txt", file_path="signed/d1/a.txt", upload_date=NOW - timedelta(days=60)))
    db.add(Document(id="d2", user_id="signed", filename="b.txt", upload_date=NOW - timedelta(days=50)))
    db.add(Document(id="d3", user_id="anon", filename="c.txt", upload_date=NOW - timedelta(days=45)))
    db.add(Embedding(id="e1", document_id="d1", chunk_text="t", embedding="[1]", chunk_index=0))
    for i in range(3):
        db.add(Message(id=f"m{i}", user_id="signed", question="q", answer="a", created_at=NOW - timedelta(days=i)))
    db.commit()


def test_usage_stats(db):
    seed(db)
    service = AdminService(DocumentService(FakeBlobStore()), now=lambda: NOW)

    stats = service.get_usage_stats(db)

    users = {u["user_id"]: u for u in stats["users"]}
    assert users["signed"]["email"] == "ada@example.com"
    assert users["signed"]["document_count"] == 2
    assert users["signed"]["message_count"] == 3
    assert users["signed"]["total_chats"] == 3
    assert users["signed"]["last_activity"] == NOW
    assert users["anon"]["email"] is None
    assert users["anon"]["total_chats"] == 0

    totals = stats["totals"]
    assert totals["total_users"] == 2
    assert totals["signed_in_users"] == 1
    assert totals["anonymous_users"] == 1
    assert totals["active_users"] == 1
    assert totals["total_documents"] == 3
    assert totals["total_chats"] == 3


def test_delete_user_cascades(db):
    seed(db)
    blob_store = FakeBlobStore()
    service = AdminService(DocumentService(blob_store))

    result = service.delete_user(db, "signed")

    assert result == {"user_id": "signed", "deleted_documents": 2, "deleted_files": 1, "failed_files": 0}
    assert blob_store.deleted == ["signed/d1/a.txt"]
    assert db.get(User, "signed") is None
    assert db.query(Document).filter(Document.user_id == "signed").count() == 0
    assert db.query(Embedding).count() == 0
    assert db.query(Message).count() == 0
    assert db.get(User, "anon") is not None


def test_delete_user_counts_blob_failures(db):
    seed(db)
    service = AdminService(DocumentService(FakeBlobStore(fail_delete=True)))

    result = service.delete_user(db, "signed")

    assert result["failed_files"] == 1
    assert db.get(User, "signed") is None


def test_delete_unknown_user(db, admin_service):
    with pytest.raises(NotFound):
        admin_service.delete_user(db, "ghost")


def test_clear_blobs_counts_failures(db):
    store = FakeBlobStore(fail_keys=["u2/d3/locked.png"])
    store.blobs = {"u1/d1/a.txt": b"a", "u1/d2/b.pdf": b"b", "u2/d3/locked.png": b"c"}
    seed(db)
    documents_before = db.query(Document).count()

    result = AdminService(DocumentService(store)).clear_blobs()

    assert result == {"deleted": 2, "failed": 1, "total": 3}
    assert list(store.blobs) == ["u2/d3/locked.png"]
    assert db.query(Document).count() == documents_before


def test_clear_blobs_empty_store(admin_service):
    assert admin_service.clear_blobs() == {"deleted": 0, "failed": 0, "total": 0}
