"""Pytest configuration and fixtures"""

import os

# Point settings at the test database before the app is imported
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.main import app
from app.database.base import Base
from app.database.session import get_db
from app.rag.config import RAGConfig
from app.rag.embedding_batcher import EmbeddingBatcher
from app.rag.extractor import TextExtractor
from app.rag.generator import AnswerSynthesizer
from app.services.admin_service import AdminService, get_admin_service
from app.services.document_service import DocumentService, get_document_service
from app.services.ingestion_service import IngestionService, get_ingestion_service
from app.services.query_service import QueryService, get_query_service
from tests.fakes import FakeBlobStore, FakeChat, FakeEmbeddings, FakeFetcher, FakeOCR, no_sleep

# Test database URL
TEST_DATABASE_URL = "sqlite:///./test.db"

# Create test engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Database session fixture"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rag_settings():
    """Pipeline config with no inter-batch delay"""
    return RAGConfig(batch_delay=0.0)


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def fake_ocr():
    return FakeOCR()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def extractor(fake_ocr, fake_fetcher):
    return TextExtractor(ocr=fake_ocr, fetcher=fake_fetcher)


@pytest.fixture
def batcher(fake_embeddings):
    return EmbeddingBatcher(fake_embeddings, batch_size=10, delay=0.0, sleep=no_sleep)


@pytest.fixture
def ingestion_service(extractor, batcher, blob_store, rag_settings):
    return IngestionService(extractor=extractor, batcher=batcher, blob_store=blob_store, config=rag_settings)


@pytest.fixture
def query_service(batcher, fake_chat, rag_settings):
    return QueryService(batcher=batcher, synthesizer=AnswerSynthesizer(fake_chat), config=rag_settings)


@pytest.fixture
def document_service(blob_store):
    return DocumentService(blob_store)


@pytest.fixture
def admin_service(document_service):
    return AdminService(document_service)


@pytest.fixture(scope="function")
def client(db, ingestion_service, query_service, document_service, admin_service):
    """Test client fixture"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ingestion_service] = lambda: ingestion_service
    app.dependency_overrides[get_query_service] = lambda: query_service
    app.dependency_overrides[get_document_service] = lambda: document_service
    app.dependency_overrides[get_admin_service] = lambda: admin_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
