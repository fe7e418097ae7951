from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator

from web_rag_service import config
from web_rag_service.errors import UpstreamProtocolError
from web_rag_service.llm.interface import LLMClient
from web_rag_service.types import Prompt, ResolvedSource

logger = logging.getLogger(__name__)


def build_prompt(question: str, sources: list[ResolvedSource]) -> Prompt:
    """
    Build the grounding prompt.

    Each source is tagged with its position in the input list, so
    [[citation:N]] in the answer refers to sources[N]. The question is passed
    through untouched as the user message.
    """
    contexts = "".join(
        f"[[citation:{index}]] {source.full_content} \n\n"
        for index, source in enumerate(sources)
    )

    system = f"""Given a user question and some context, write a clean, concise, and accurate answer based only on the context.
Cite the contexts you use with their markers, e.g. [[citation:0]].

<contexts>
{contexts}</contexts>

Here is the user question:
"""
    return Prompt(system=system, user=question)


class AnswerGenerator:
    """
    Opens the answer stream for a prompt and hands it back untouched.
    """

    def __init__(self, llm_client: LLMClient, model: str | None = None):
        self.llm_client = llm_client
        self.model = model or config.LLM_MODEL_NAME

    async def answer(self, prompt: Prompt) -> AsyncIterator[bytes]:
        """
        Start streaming an answer.

        Raises:
            UpstreamProtocolError: The provider returned something that is not a stream.
        """
        logger.info(f"Fetching answer stream (model={self.model})...")
        stream = self.llm_client.stream(model=self.model, messages=prompt.messages())
        if inspect.isawaitable(stream):
            stream = await stream

        if not isinstance(stream, AsyncIterator):
            raise UpstreamProtocolError(
                f"Invalid response stream from LLM client: got {type(stream).__name__}"
            )
        return stream
