"""LLM answer synthesis"""

from dataclasses import dataclass
from typing import Optional, Sequence
from openai import OpenAI
import logging

from app.exceptions import SynthesisUnavailable
from app.rag.config import rag_config
from app.rag.prompt_templates import SYSTEM_PROMPT, build_context, build_user_prompt
from app.rag.similarity import RankedChunk

logger = logging.getLogger(__name__)


class ChatCompletionService:
    """Chat-completion collaborator using an OpenAI-compatible API"""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.client = client or OpenAI(
            api_key=rag_config.openai_api_key,
            base_url=rag_config.openai_base_url or None,
            timeout=rag_config.request_timeout,
        )
        self.model = model or rag_config.chat_model
        self.max_tokens = rag_config.max_tokens
        self.temperature = rag_config.temperature

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Single-turn completion

        Raises:
            SynthesisUnavailable: response has no message content
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature
        )

        choices = getattr(response, "choices", None) or []
        message = choices[0].message if choices else None
        content = getattr(message, "content", None)
        if content is None:
            raise SynthesisUnavailable(details="chat completion response has no message content")

        usage = getattr(response, "usage", None)
        if usage:
            logger.info(f"Generated answer: {len(content)} chars, {usage.total_tokens} total tokens")
        return content


@dataclass
class SynthesisResult:
    answer_text: str


class AnswerSynthesizer:
    """Answer a question from retrieved chunks"""

    def __init__(self, chat):
        """
        Args:
            chat: Collaborator exposing ``complete(system_prompt, user_prompt) -> str``
        """
        self.chat = chat

    def synthesize(self, question: str, top_chunks: Sequence[RankedChunk]) -> SynthesisResult:
        """
        Ask the chat model for an answer grounded in ``top_chunks``

        Raises:
            SynthesisUnavailable: chat collaborator failed
        """
        context = build_context([chunk.entry.chunk_text for chunk in top_chunks])
        logger.info(f"Synthesizing answer from {len(top_chunks)} chunks ({len(context)} context chars)")

        try:
            answer = self.chat.complete(SYSTEM_PROMPT, build_user_prompt(question, context))
        except SynthesisUnavailable:
            raise
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise SynthesisUnavailable(details=str(e)) from e

        return SynthesisResult(answer_text=answer)
