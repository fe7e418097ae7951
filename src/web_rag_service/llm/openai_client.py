from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator

from openai import AsyncOpenAI, OpenAIError

from web_rag_service import config
from web_rag_service.llm.interface import LLMClient

logger = logging.getLogger(__name__)


class OpenAIClient(LLMClient):
    """
    Adapter for OpenAI-compatible streaming Chat Completions APIs.
    """

    provider_label = "OpenAI"

    def __init__(self) -> None:
        api_key_var = self._api_key_env()
        api_key = os.getenv(api_key_var)
        if not api_key:
            logger.error(
                f"{self.provider_label} API key not found in environment variable: {api_key_var}"
            )
            raise ValueError(
                f"{self.provider_label} API key not found. Please set {api_key_var}."
            )

        self.client = AsyncOpenAI(api_key=api_key, **self._client_options())
        self.model = config.LLM_MODEL_NAME
        logger.info(f"Initialized {type(self).__name__} with model: {self.model}")

    def _api_key_env(self) -> str:
        return config.OPENAI_API_KEY_ENV

    def _client_options(self) -> dict:
        return {}

    async def stream(self, model: str, messages: list[dict[str, str]]) -> AsyncIterator[bytes]:
        """
        Open a streaming chat completion and return its text deltas as bytes.
        """
        try:
            logger.debug(
                "Opening %s stream (model=%s, temp=%s, max_tokens=%s)",
                self.provider_label,
                model,
                config.LLM_TEMPERATURE,
                config.LLM_MAX_TOKENS,
            )
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=config.LLM_TEMPERATURE,
                max_tokens=config.LLM_MAX_TOKENS,
                stream=True,
            )
        except OpenAIError as e:
            logger.error(f"{self.provider_label} API error: {e}")
            raise RuntimeError(f"{self.provider_label} API error: {e}") from e

        return self._relay(response)

    async def _relay(self, response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta.encode("utf-8")
        except OpenAIError as e:
            logger.error(f"{self.provider_label} stream interrupted: {e}")
            raise RuntimeError(f"{self.provider_label} stream interrupted: {e}") from e
        finally:
            await response.close()


class TogetherClient(OpenAIClient):
    """
    Together AI through the Helicone gateway, which speaks the OpenAI protocol.
    """

    provider_label = "Together"

    def _api_key_env(self) -> str:
        return config.TOGETHER_API_KEY_ENV

    def _client_options(self) -> dict:
        helicone_key = os.getenv(config.HELICONE_API_KEY_ENV, "")
        if not helicone_key:
            logger.warning(
                f"{config.HELICONE_API_KEY_ENV} not set; Helicone gateway may reject requests."
            )
        return {
            "base_url": config.HELICONE_BASE_URL,
            "default_headers": {"Helicone-Auth": f"Bearer {helicone_key}"},
        }
