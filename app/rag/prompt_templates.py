"""Prompt templates for RAG system"""

from typing import Sequence

CONTEXT_DELIMITER = "\n\n---\n\n"

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based only on the provided context. "
    "If the answer is not in the context, say so."
)

USER_PROMPT = """Context from documents:

{context}

Question: {question}

Answer based only on the context above:"""

NO_DOCUMENTS_ANSWER = "No documents found. Please upload documents first."


def build_context(chunk_texts: Sequence[str]) -> str:
    """Join chunk texts, keeping chunk boundaries visible to the model"""
    return CONTEXT_DELIMITER.join(text for text in chunk_texts if text)


def build_user_prompt(question: str, context: str) -> str:
    """Build the user turn embedding context and question"""
    return USER_PROMPT.format(context=context, question=question)
