from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from web_rag_service.generator import AnswerGenerator, build_prompt
from web_rag_service.retrieval import SourceResolver
from web_rag_service.types import Source

logger = logging.getLogger(__name__)


class AnswerService:
    """
    Orchestrates the pipeline: Source resolution -> Prompt assembly -> Answer stream.
    """

    def __init__(self, resolver: SourceResolver, generator: AnswerGenerator) -> None:
        self.resolver = resolver
        self.generator = generator

    async def answer(self, question: str, sources: list[Source]) -> AsyncIterator[bytes]:
        """
        Answer a user question grounded on the given sources.

        Args:
            question: The user's question, passed to the model verbatim.
            sources: Pre-selected sources; list position is the citation index.

        Returns:
            The model's answer as an async stream of UTF-8 chunks.
        """
        logger.info(f"Processing question with {len(sources)} sources.")

        # 1. Resolve
        resolved = await self.resolver.resolve(sources)

        # 2. Assemble
        prompt = build_prompt(question, resolved)

        # 3. Stream
        return await self.generator.answer(prompt)
