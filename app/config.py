"""Application configuration"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from pathlib import Path

# Get the backend directory (parent of app directory)
BACKEND_DIR = Path(__file__).parent.parent
ENV_FILE = BACKEND_DIR / ".env"


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Document Q&A"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:5173"

    # Database
    DATABASE_URL: str = "sqlite:///./docqa.db"

    # Redis (embedding cache)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Blob storage for raw uploads
    BLOB_STORAGE_DIR: str = "uploads"

    # OpenAI-compatible model endpoints
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = ""
    OPENAI_TIMEOUT: float = 60.0
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    CHAT_MODEL: str = "gpt-4o-mini"
    CHAT_MAX_TOKENS: int = 500
    CHAT_TEMPERATURE: float = 0.3

    # RAG Settings
    RAG_CHUNK_SIZE: int = 1500
    RAG_CHUNK_OVERLAP: int = 100
    RAG_MAX_CHUNKS: int = 50
    RAG_MAX_DOCUMENTS: int = 50
    RAG_TOP_K: int = 3
    RAG_EMBED_BATCH_SIZE: int = 10
    RAG_EMBED_BATCH_DELAY: float = 0.2
    RAG_ENABLE_CACHE: bool = False
    RAG_CACHE_TTL: int = 3600

    # OCR
    OCR_MAX_BYTES: int = 1024 * 1024
    OCR_LANGUAGES: str = "eng"

    # Link fetching
    LINK_USER_AGENT: str = "Mozilla/5.0 (compatible; DocQABot/1.0; +https://example.com/bot)"
    LINK_TIMEOUT: float = 15.0

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"  # Ignore extra fields in .env
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
