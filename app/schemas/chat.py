"""Chat schemas"""

from pydantic import BaseModel
from typing import List


class ChatRequest(BaseModel):
    """Question request"""
    question: str
    user_id: str


class SourceItem(BaseModel):
    """Chunk used to answer, with a short preview"""
    doc_id: str
    filename: str
    chunk_text: str


class ChatResponse(BaseModel):
    """Answer with its sources"""
    answer: str
    sources: List[SourceItem] = []
