"""OpenAI embeddings service"""

from typing import Dict, List, Optional
from openai import OpenAI
import redis
import json
import hashlib
import logging
from app.rag.config import rag_config

logger = logging.getLogger(__name__)


class EmbeddingsService:
    """Embedding model collaborator using an OpenAI-compatible API"""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None, cache_enabled: Optional[bool] = None):
        self.client = client or OpenAI(
            api_key=rag_config.openai_api_key,
            base_url=rag_config.openai_base_url or None,
            timeout=rag_config.request_timeout,
        )
        self.model = model or rag_config.embedding_model

        # Redis cache for embeddings
        self.cache_enabled = rag_config.enable_cache if cache_enabled is None else cache_enabled
        self.redis_client = None
        if self.cache_enabled:
            try:
                self.redis_client = redis.from_url(
                    rag_config.redis_url,
                    decode_responses=False  # Store bytes for embeddings
                )
                logger.info("Redis cache enabled for embeddings")
            except Exception as e:
                logger.warning(f"Failed to connect to Redis cache: {e}")
                self.cache_enabled = False

    def _get_cache_key(self, text: str) -> str:
        """Generate cache key for text"""
        digest = hashlib.md5(text.encode()).hexdigest()
        return f"emb:{self.model}:{digest}"

    def _get_from_cache(self, text: str) -> Optional[List[float]]:
        """Get embedding from cache"""
        if not self.cache_enabled:
            return None

        try:
            cached = self.redis_client.get(self._get_cache_key(text))
            if cached:
                logger.debug("Cache hit for embedding")
                return json.loads(cached)
        except Exception as e:
            logger.warning(f"Cache retrieval error: {e}")

        return None

    def _save_to_cache(self, text: str, embedding: List[float]):
        """Save embedding to cache"""
        if not self.cache_enabled:
            return

        try:
            self.redis_client.setex(
                self._get_cache_key(text),
                rag_config.cache_ttl,
                json.dumps(embedding)
            )
        except Exception as e:
            logger.warning(f"Cache save error: {e}")

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of texts in one API call

        Cached texts are served from Redis; only misses are sent upstream.

        Args:
            texts: Texts to embed

        Returns:
            One vector per input text, in input order
        """
        if not texts:
            return []

        vectors: Dict[int, List[float]] = {}
        misses = []
        for i, text in enumerate(texts):
            cached = self._get_from_cache(text)
            if cached:
                vectors[i] = cached
            else:
                misses.append(i)

        if misses:
            response = self.client.embeddings.create(
                model=self.model,
                input=[texts[i] for i in misses]
            )
            data = sorted(response.data, key=lambda item: item.index)
            if len(data) != len(misses):
                raise ValueError(f"Embedding API returned {len(data)} vectors for {len(misses)} inputs")

            for i, item in zip(misses, data):
                vectors[i] = item.embedding
                self._save_to_cache(texts[i], item.embedding)

        logger.debug(f"Embedded {len(texts)} texts ({len(texts) - len(misses)} cached)")
        return [vectors[i] for i in range(len(texts))]
