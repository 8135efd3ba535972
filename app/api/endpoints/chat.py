"""Question answering API endpoint"""

from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database.session import get_db
from app.exceptions import ValidationException
from app.schemas.chat import ChatRequest, ChatResponse, SourceItem
from app.services.query_service import QueryService, get_query_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    db: Session = Depends(get_db),
    queries: QueryService = Depends(get_query_service)
):
    """Answer a question using only the user's own documents"""
    if not payload.user_id.strip():
        raise ValidationException("Missing user_id.")

    answer = queries.answer_question(db, payload.question, payload.user_id.strip())
    return ChatResponse(
        answer=answer.answer,
        sources=[SourceItem(**asdict(source)) for source in answer.sources]
    )
