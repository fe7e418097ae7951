#!/usr/bin/env python3
"""
CLI script to stream a grounded answer to stdout.

Example:
  python scripts/ask.py "What is FastAPI?" \
      --source fastapi=https://fastapi.tiangolo.com/ \
      --source wiki=https://en.wikipedia.org/wiki/FastAPI
"""

import argparse
import asyncio
import logging
import sys

import httpx

from web_rag_service import config
from web_rag_service.fetching import BoundedFetcher
from web_rag_service.generator import AnswerGenerator
from web_rag_service.llm.factory import get_llm_client
from web_rag_service.retrieval import SourceResolver
from web_rag_service.service import AnswerService
from web_rag_service.types import Source


def parse_source(value: str) -> Source:
    name, sep, url = value.partition("=")
    if not sep or not name or not url:
        raise argparse.ArgumentTypeError(f"Expected NAME=URL, got: {value!r}")
    return Source(name=name, url=url)


async def run(question: str, sources: list[Source], timeout_s: float) -> None:
    async with httpx.AsyncClient() as http_client:
        service = AnswerService(
            resolver=SourceResolver(BoundedFetcher(http_client, timeout_s=timeout_s)),
            generator=AnswerGenerator(get_llm_client()),
        )
        stream = await service.answer(question, sources)
        async for chunk in stream:
            sys.stdout.write(chunk.decode("utf-8"))
            sys.stdout.flush()
    sys.stdout.write("\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Stream a cited answer from web sources.")

    parser.add_argument("question", type=str, help="Question to answer.")
    parser.add_argument(
        "--source",
        dest="sources",
        type=parse_source,
        action="append",
        default=[],
        help="Source as NAME=URL. Repeat for more sources; order sets citation indices.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.FETCH_TIMEOUT_S,
        help="Per-source fetch timeout in seconds.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log pipeline progress.")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    try:
        asyncio.run(run(args.question, args.sources, args.timeout))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
