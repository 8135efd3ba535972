"""Factory for external collaborators"""

import logging
from app.rag.config import rag_config

logger = logging.getLogger(__name__)


class CollaboratorFactory:
    """Lazily build and cache one instance of each collaborator"""

    _embeddings_service = None
    _chat_service = None
    _text_extractor = None
    _blob_store = None

    @classmethod
    def get_embeddings_service(cls):
        """Get embeddings service"""
        if cls._embeddings_service is None:
            from app.rag.embeddings import EmbeddingsService
            cls._embeddings_service = EmbeddingsService()
            logger.info(f"Embeddings service loaded: {rag_config.embedding_model}")
        return cls._embeddings_service

    @classmethod
    def get_chat_service(cls):
        """Get chat-completion service"""
        if cls._chat_service is None:
            from app.rag.generator import ChatCompletionService
            cls._chat_service = ChatCompletionService()
            logger.info(f"Chat service loaded: {rag_config.chat_model}")
        return cls._chat_service

    @classmethod
    def get_text_extractor(cls):
        """Get text extractor wired to OCR and page fetch"""
        if cls._text_extractor is None:
            from app.rag.extractor import TextExtractor
            from app.rag.fetcher import PageFetcher
            from app.rag.ocr import TesseractOCR
            cls._text_extractor = TextExtractor(ocr=TesseractOCR(), fetcher=PageFetcher())
        return cls._text_extractor

    @classmethod
    def get_blob_store(cls):
        """Get blob store"""
        if cls._blob_store is None:
            from app.storage.blob_store import LocalBlobStore
            cls._blob_store = LocalBlobStore()
            logger.info(f"Blob store at {cls._blob_store.root}")
        return cls._blob_store


# Convenience functions
def get_embeddings_service():
    """Get the configured embeddings service"""
    return CollaboratorFactory.get_embeddings_service()


def get_chat_service():
    """Get the configured chat-completion service"""
    return CollaboratorFactory.get_chat_service()


def get_text_extractor():
    """Get the configured text extractor"""
    return CollaboratorFactory.get_text_extractor()


def get_blob_store():
    """Get the configured blob store"""
    return CollaboratorFactory.get_blob_store()
