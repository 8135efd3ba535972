"""Test answer synthesis"""

from types import SimpleNamespace

import pytest

from app.exceptions import SynthesisUnavailable
from app.rag.generator import AnswerSynthesizer, ChatCompletionService
from app.rag.prompt_templates import CONTEXT_DELIMITER, SYSTEM_PROMPT
from app.rag.similarity import CorpusEntry, RankedChunk
from tests.fakes import FakeChat


def ranked(text, score=0.9):
    return RankedChunk(score=score, entry=CorpusEntry(vector=[1.0], document_id="d1", filename="f.txt", chunk_text=text))


def test_prompt_contains_context_and_question():
    chat = FakeChat(answer="Paris")
    synthesizer = AnswerSynthesizer(chat)

    result = synthesizer.synthesize("What is the capital?", [ranked("France: Paris"), ranked("Spain: Madrid")])

    assert result.answer_text == "Paris"
    system_prompt, user_prompt = chat.calls[0]
    assert system_prompt == SYSTEM_PROMPT
    assert f"France: Paris{CONTEXT_DELIMITER}Spain: Madrid" in user_prompt
    assert "Question: What is the capital?" in user_prompt


def test_chat_failure_becomes_synthesis_unavailable():
    synthesizer = AnswerSynthesizer(FakeChat(error=TimeoutError("upstream timeout")))

    with pytest.raises(SynthesisUnavailable) as exc:
        synthesizer.synthesize("q", [ranked("text")])
    assert "upstream timeout" in exc.value.details


class _Completions:
    def __init__(self, response):
        self.response = response
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def _client(response):
    completions = _Completions(response)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_chat_completion_service_returns_content():
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="An answer"))],
        usage=SimpleNamespace(total_tokens=42),
    )
    client, completions = _client(response)

    service = ChatCompletionService(client=client, model="test-model")

    assert service.complete("system", "user") == "An answer"
    assert completions.kwargs["model"] == "test-model"
    assert completions.kwargs["messages"][1] == {"role": "user", "content": "user"}


def test_chat_completion_without_content():
    client, _ = _client(SimpleNamespace(choices=[], usage=None))

    with pytest.raises(SynthesisUnavailable):
        ChatCompletionService(client=client, model="test-model").complete("system", "user")
