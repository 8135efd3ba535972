"""Question answering over a user's documents"""

from dataclasses import asdict, dataclass, field
from typing import List
import json
import logging
import time
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NoContent, StorageFailure
from app.models.document import Document
from app.models.embedding import Embedding
from app.models.message import Message
from app.rag.config import RAGConfig, rag_config
from app.rag.embedding_batcher import EmbeddingBatcher
from app.rag.generator import AnswerSynthesizer
from app.rag.prompt_templates import NO_DOCUMENTS_ANSWER
from app.rag.similarity import CorpusEntry, RankedChunk, rank
from app.services.user_service import user_service
from app.utils.logger import log_event

logger = logging.getLogger(__name__)


@dataclass
class Citation:
    doc_id: str
    filename: str
    chunk_text: str


@dataclass
class ChatAnswer:
    answer: str
    sources: List[Citation] = field(default_factory=list)


def preview(text: str, length: int) -> str:
    """First ``length`` characters, with ``...`` when truncated"""
    if len(text) <= length:
        return text
    return text[:length] + "..."


class QueryService:
    """Embed a question, rank the user's chunks and synthesize an answer"""

    def __init__(self, batcher: EmbeddingBatcher, synthesizer: AnswerSynthesizer, config: RAGConfig = None):
        self.batcher = batcher
        self.synthesizer = synthesizer
        self.config = config or rag_config

    def load_corpus(self, db: Session, user_id: str) -> List[CorpusEntry]:
        """All stored chunks of a user, in document then chunk order"""
        rows = (
            db.query(Embedding, Document.filename)
            .join(Document, Embedding.document_id == Document.id)
            .filter(Document.user_id == user_id)
            .order_by(Document.upload_date, Document.id, Embedding.chunk_index)
            .all()
        )
        return [
            CorpusEntry(
                vector=embedding.vector,
                document_id=embedding.document_id,
                filename=filename,
                chunk_text=embedding.chunk_text,
                chunk_index=embedding.chunk_index,
            )
            for embedding, filename in rows
        ]

    def answer_question(self, db: Session, question: str, user_id: str) -> ChatAnswer:
        """
        Answer a question from the user's own documents

        Args:
            db: Database session
            question: Natural-language question
            user_id: Owner whose corpus is searched

        Returns:
            ChatAnswer with the answer text and one citation per chunk used

        Raises:
            NotFound: unknown user
            NoContent: empty question
            EmbeddingUnavailable: query embedding failed
            SynthesisUnavailable: chat model failed
        """
        question = (question or "").strip()
        if not question:
            raise NoContent("Please enter a question.")

        user_service.get_user(db, user_id)
        started = time.monotonic()

        corpus = self.load_corpus(db, user_id)
        if not corpus:
            logger.info(f"User {user_id} asked a question with no documents")
            return ChatAnswer(answer=NO_DOCUMENTS_ANSWER, sources=[])

        query_vector = self.batcher.embed_one(question)
        top_chunks = rank(query_vector, corpus, k=self.config.top_k)

        result = self.synthesizer.synthesize(question, top_chunks)
        answer = ChatAnswer(answer=result.answer_text, sources=self._cite(top_chunks))

        self._record(db, user_id, question, answer)
        log_event(
            logger, "query.answered",
            user_id=user_id,
            corpus=len(corpus),
            used=len(top_chunks),
            top_score=round(top_chunks[0].score, 4) if top_chunks else 0,
            ms=int((time.monotonic() - started) * 1000),
        )
        return answer

    def _cite(self, top_chunks: List[RankedChunk]) -> List[Citation]:
        return [
            Citation(
                doc_id=chunk.entry.document_id,
                filename=chunk.entry.filename,
                chunk_text=preview(chunk.entry.chunk_text, self.config.preview_length),
            )
            for chunk in top_chunks
        ]

    def _record(self, db: Session, user_id: str, question: str, answer: ChatAnswer) -> None:
        try:
            db.add(Message(
                id=str(uuid.uuid4()),
                user_id=user_id,
                question=question,
                answer=answer.answer,
                sources=json.dumps([asdict(source) for source in answer.sources]),
            ))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save message for user {user_id}: {e}")
            raise StorageFailure(details=str(e)) from e


def get_query_service() -> QueryService:
    """Query service wired to the configured collaborators"""
    from app.rag.factory import get_chat_service, get_embeddings_service
    return QueryService(
        batcher=EmbeddingBatcher(get_embeddings_service()),
        synthesizer=AnswerSynthesizer(get_chat_service()),
    )
