"""RAG system configuration"""

from app.config import settings
from dataclasses import dataclass


@dataclass
class RAGConfig:
    """Configuration for RAG system"""

    # Model endpoints (any OpenAI-compatible API)
    openai_api_key: str = settings.OPENAI_API_KEY
    openai_base_url: str = settings.OPENAI_BASE_URL
    request_timeout: float = settings.OPENAI_TIMEOUT
    embedding_model: str = settings.EMBEDDING_MODEL
    chat_model: str = settings.CHAT_MODEL
    max_tokens: int = settings.CHAT_MAX_TOKENS
    temperature: float = settings.CHAT_TEMPERATURE

    # Chunking
    chunk_size: int = settings.RAG_CHUNK_SIZE
    chunk_overlap: int = settings.RAG_CHUNK_OVERLAP
    max_chunks: int = settings.RAG_MAX_CHUNKS

    # Ingestion limits
    max_documents: int = settings.RAG_MAX_DOCUMENTS

    # Embedding batches
    batch_size: int = settings.RAG_EMBED_BATCH_SIZE
    batch_delay: float = settings.RAG_EMBED_BATCH_DELAY

    # Retrieval
    top_k: int = settings.RAG_TOP_K
    preview_length: int = 200

    # Extraction
    ocr_max_bytes: int = settings.OCR_MAX_BYTES
    ocr_languages: str = settings.OCR_LANGUAGES
    link_user_agent: str = settings.LINK_USER_AGENT
    link_timeout: float = settings.LINK_TIMEOUT

    # Redis Cache
    enable_cache: bool = settings.RAG_ENABLE_CACHE
    redis_url: str = settings.REDIS_URL
    cache_ttl: int = settings.RAG_CACHE_TTL


# Global RAG config instance
rag_config = RAGConfig()
