from __future__ import annotations

import logging

from web_rag_service import config
from web_rag_service.llm.dummy_client import LLMClientImpl
from web_rag_service.llm.interface import LLMClient

logger = logging.getLogger(__name__)


def get_llm_client() -> LLMClient:
    """
    Factory function to get the appropriate LLM client based on configuration.
    """
    if config.LLM_PROVIDER == "dummy":
        logger.info("Using Dummy LLM client.")
        return LLMClientImpl()
    elif config.LLM_PROVIDER == "together":
        from web_rag_service.llm.openai_client import TogetherClient

        logger.info("Using Together LLM client (via Helicone).")
        return TogetherClient()
    elif config.LLM_PROVIDER == "openai":
        from web_rag_service.llm.openai_client import OpenAIClient

        logger.info("Using OpenAI LLM client.")
        return OpenAIClient()
    elif config.LLM_PROVIDER == "anthropic":
        from web_rag_service.llm.anthropic_client import AnthropicClient

        logger.info("Using Anthropic LLM client.")
        return AnthropicClient()
    else:
        # This case should ideally be caught by config validation, but as a safeguard
        raise ValueError(f"Unknown LLM provider: {config.LLM_PROVIDER}")
