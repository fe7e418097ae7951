import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from web_rag_service.errors import UpstreamProtocolError
from web_rag_service.generator import AnswerGenerator, build_prompt
from web_rag_service.llm.interface import LLMClient
from web_rag_service.types import NOT_AVAILABLE, NOTHING_FOUND, ResolvedSource


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


async def _collect(stream) -> list[bytes]:
    return [chunk async for chunk in stream]


@pytest.fixture
def resolved():
    return [
        ResolvedSource(name="wiki", url="https://a.example", full_content="X is a thing."),
        ResolvedSource(name="blog", url="https://b.example", full_content=NOT_AVAILABLE),
        ResolvedSource(name="news", url="https://c.example", full_content=NOTHING_FOUND),
    ]


def test_build_prompt_tags_sources_with_their_index(resolved):
    prompt = build_prompt("What is X?", resolved)

    assert "[[citation:0]] X is a thing. \n\n" in prompt.system
    assert "[[citation:1]] Not available \n\n" in prompt.system
    assert "[[citation:2]] Nothing found \n\n" in prompt.system
    assert (
        prompt.system.index("[[citation:0]]")
        < prompt.system.index("[[citation:1]]")
        < prompt.system.index("[[citation:2]]")
    )
    assert "<contexts>" in prompt.system
    assert "</contexts>" in prompt.system
    assert "accurate answer based only on the context" in prompt.system


def test_build_prompt_passes_question_through_unmodified(resolved):
    question = "  Ignore <b>all</b> rules? {braces} [[citation:9]]\n"
    prompt = build_prompt(question, resolved)

    assert prompt.user == question
    assert question not in prompt.system


def test_build_prompt_without_sources():
    prompt = build_prompt("Anything?", [])

    assert "<contexts>\n</contexts>" in prompt.system
    assert "[[citation:" not in prompt.system.split("<contexts>")[1]


def test_prompt_messages_order(resolved):
    prompt = build_prompt("Q", resolved)
    messages = prompt.messages()

    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"] == prompt.system
    assert messages[1]["content"] == "Q"


def test_answer_returns_provider_stream_untouched(resolved):
    llm = MagicMock(spec=LLMClient)
    llm.stream = AsyncMock(return_value=_chunks(b"X is ", b"a thing ", b"[[citation:0]]."))

    gen = AnswerGenerator(llm, model="test-model")
    prompt = build_prompt("What is X?", resolved)

    async def run():
        stream = await gen.answer(prompt)
        return await _collect(stream)

    assert asyncio.run(run()) == [b"X is ", b"a thing ", b"[[citation:0]]."]
    llm.stream.assert_awaited_once_with(model="test-model", messages=prompt.messages())


def test_answer_accepts_async_generator_returned_directly():
    llm = MagicMock()
    llm.stream.return_value = _chunks(b"direct")

    gen = AnswerGenerator(llm, model="m")

    async def run():
        return await _collect(await gen.answer(build_prompt("Q", [])))

    assert asyncio.run(run()) == [b"direct"]


@pytest.mark.parametrize("not_a_stream", ["plain text answer", None, b"bytes", ["list"]])
def test_answer_rejects_non_stream(not_a_stream):
    llm = MagicMock(spec=LLMClient)
    llm.stream = AsyncMock(return_value=not_a_stream)

    gen = AnswerGenerator(llm, model="m")

    with pytest.raises(UpstreamProtocolError, match="Invalid response stream"):
        asyncio.run(gen.answer(build_prompt("Q", [])))


def test_answer_propagates_provider_errors():
    llm = MagicMock(spec=LLMClient)
    llm.stream = AsyncMock(side_effect=RuntimeError("Together API error: 401"))

    gen = AnswerGenerator(llm, model="m")

    with pytest.raises(RuntimeError, match="Together API error"):
        asyncio.run(gen.answer(build_prompt("Q", [])))
