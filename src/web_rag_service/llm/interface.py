from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMClient(Protocol):
    """
    Abstract interface for a streaming LLM provider.

    stream() opens the completion request and returns once the provider has
    accepted it; the returned iterator yields UTF-8 encoded text deltas.
    """

    async def stream(self, model: str, messages: list[dict[str, str]]) -> AsyncIterator[bytes]: ...
