import logging
from collections.abc import AsyncIterator

from web_rag_service.llm.interface import LLMClient

logger = logging.getLogger(__name__)


class LLMClientImpl(LLMClient):
    """
    Placeholder LLM client that streams a canned answer. Useful for local runs
    without provider credentials.
    """

    CHUNKS = ("This is a dummy answer ", "from LLMClientImpl ", "[[citation:0]].")

    async def stream(self, model: str, messages: list[dict[str, str]]) -> AsyncIterator[bytes]:
        logger.warning("Using a dummy LLMClientImpl. Replace with a real LLM integration.")
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[bytes]:
        for chunk in self.CHUNKS:
            yield chunk.encode("utf-8")
