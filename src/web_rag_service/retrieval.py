from __future__ import annotations

import asyncio
import logging

from web_rag_service.extraction import normalize_html
from web_rag_service.fetching import BoundedFetcher
from web_rag_service.types import NOT_AVAILABLE, NOTHING_FOUND, ResolvedSource, Source

logger = logging.getLogger(__name__)


class SourceResolver:
    """
    Fetches and normalizes every source concurrently, isolating failures.
    """

    def __init__(self, fetcher: BoundedFetcher) -> None:
        self.fetcher = fetcher

    async def resolve(self, sources: list[Source]) -> list[ResolvedSource]:
        """
        Resolve all sources at once.

        Args:
            sources: Caller-supplied sources; their order defines citation indices.

        Returns:
            One ResolvedSource per input source, at the same index.
        """
        if not sources:
            return []

        logger.info(f"Fetching text from {len(sources)} source URLs")
        resolved = await asyncio.gather(*(self._resolve_one(source) for source in sources))

        nothing = sum(1 for r in resolved if r.full_content == NOTHING_FOUND)
        missing = sum(1 for r in resolved if r.full_content == NOT_AVAILABLE)
        logger.info(
            f"Resolved {len(resolved) - nothing - missing}/{len(resolved)} sources "
            f"({nothing} nothing found, {missing} not available)."
        )
        return list(resolved)

    async def _resolve_one(self, source: Source) -> ResolvedSource:
        try:
            response = await self.fetcher.fetch(source.url)
            html = response.text
            # lxml parsing is CPU-bound; run it off the event loop. A parse already
            # running in the worker thread is not interrupted by cancellation.
            content = await asyncio.to_thread(normalize_html, html)
        except Exception as e:
            logger.error(f"Error parsing {source.name}: {e!r}")
            content = NOT_AVAILABLE
        return ResolvedSource.from_source(source, content)
