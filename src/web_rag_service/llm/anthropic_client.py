from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator

from anthropic import APIError, AsyncAnthropic

from web_rag_service import config
from web_rag_service.llm.interface import LLMClient

logger = logging.getLogger(__name__)


class AnthropicClient(LLMClient):
    """
    Adapter for Anthropic's streaming Messages API (Claude).
    """

    def __init__(self) -> None:
        api_key_var = config.ANTHROPIC_API_KEY_ENV
        api_key = os.getenv(api_key_var)
        if not api_key:
            logger.error(f"Anthropic API key not found in environment variable: {api_key_var}")
            raise ValueError(f"Anthropic API key not found. Please set {api_key_var}.")

        self.client = AsyncAnthropic(api_key=api_key)
        self.model = config.LLM_MODEL_NAME
        logger.info(f"Initialized AnthropicClient with model: {self.model}")

    async def stream(self, model: str, messages: list[dict[str, str]]) -> AsyncIterator[bytes]:
        """
        Open a streaming message and return its text deltas as bytes.
        """
        # Anthropic takes the system prompt as a top-level parameter.
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [m for m in messages if m["role"] != "system"]

        try:
            logger.debug(
                "Opening Anthropic stream (model=%s, temp=%s, max_tokens=%s)",
                model,
                config.LLM_TEMPERATURE,
                config.LLM_MAX_TOKENS,
            )
            response = await self.client.messages.create(
                model=model,
                system=system,
                messages=turns,
                temperature=config.LLM_TEMPERATURE,
                max_tokens=config.LLM_MAX_TOKENS,
                stream=True,
            )
        except APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise RuntimeError(f"Anthropic API error: {e}") from e

        return self._relay(response)

    async def _relay(self, response) -> AsyncIterator[bytes]:
        try:
            async for event in response:
                if event.type != "content_block_delta":
                    continue
                if event.delta.type == "text_delta" and event.delta.text:
                    yield event.delta.text.encode("utf-8")
        except APIError as e:
            logger.error(f"Anthropic stream interrupted: {e}")
            raise RuntimeError(f"Anthropic stream interrupted: {e}") from e
        finally:
            await response.close()
