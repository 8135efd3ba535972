"""RAG module - extraction, chunking, embedding, ranking and answer synthesis"""

from app.rag.chunker import chunk_text
from app.rag.embedding_batcher import EmbeddingBatcher
from app.rag.extractor import TextExtractor
from app.rag.generator import AnswerSynthesizer
from app.rag.similarity import cosine_similarity, rank

__all__ = [
    'chunk_text',
    'EmbeddingBatcher',
    'TextExtractor',
    'AnswerSynthesizer',
    'cosine_similarity',
    'rank'
]
