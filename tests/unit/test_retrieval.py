import asyncio
import time
from unittest.mock import patch

import httpx

from web_rag_service.fetching import BoundedFetcher
from web_rag_service.retrieval import SourceResolver
from web_rag_service.types import NOT_AVAILABLE, NOTHING_FOUND, ResolvedSource, Source


def _resolve(handler, sources: list[Source], timeout_s: float = 1.0) -> list[ResolvedSource]:
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            resolver = SourceResolver(BoundedFetcher(client, timeout_s=timeout_s))
            return await resolver.resolve(sources)

    return asyncio.run(run())


def _echo_body(html: str) -> str:
    # Stand-in for extraction: the page body already is the "article text".
    return html.strip()


def test_resolve_empty_sources():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert _resolve(handler, []) == []


def test_resolve_preserves_order_regardless_of_completion_order():
    delays = {"/a": 0.3, "/b": 0.0, "/c": 0.15}

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delays[request.url.path])
        return httpx.Response(200, text=f"content of {request.url.path}")

    sources = [Source(name=p.strip("/"), url=f"https://example.com{p}") for p in delays]

    with patch("web_rag_service.retrieval.normalize_html", side_effect=_echo_body):
        resolved = _resolve(handler, sources)

    assert len(resolved) == len(sources)
    assert [r.name for r in resolved] == ["a", "b", "c"]
    assert [r.url for r in resolved] == [s.url for s in sources]
    assert [r.full_content for r in resolved] == [
        "content of /a",
        "content of /b",
        "content of /c",
    ]


def test_resolve_timeout_does_not_affect_other_sources():
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "slow.example.com":
            await asyncio.sleep(10)
        else:
            await asyncio.sleep(0.5)
        return httpx.Response(200, text="A succeeded")

    sources = [
        Source(name="A", url="https://fast.example.com/"),
        Source(name="B", url="https://slow.example.com/"),
    ]

    start = time.monotonic()
    with patch("web_rag_service.retrieval.normalize_html", side_effect=_echo_body):
        resolved = _resolve(handler, sources, timeout_s=1.0)
    elapsed = time.monotonic() - start

    assert resolved[0].full_content == "A succeeded"
    assert resolved[1].full_content == NOT_AVAILABLE
    # Bounded by the slowest source's own timeout, not the sum of both.
    assert elapsed < 1.45


def test_resolve_network_error_is_not_available():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down.example.com":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text="fine")

    sources = [
        Source(name="down", url="https://down.example.com/"),
        Source(name="up", url="https://up.example.com/"),
    ]

    with patch("web_rag_service.retrieval.normalize_html", side_effect=_echo_body):
        resolved = _resolve(handler, sources)

    assert [r.full_content for r in resolved] == [NOT_AVAILABLE, "fine"]


def test_resolve_parser_exception_is_contained():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=request.url.path)

    def flaky_normalize(html: str) -> str:
        if html == "/explodes":
            raise ValueError("parser blew up")
        return html

    sources = [
        Source(name="ok", url="https://example.com/ok"),
        Source(name="bad", url="https://example.com/explodes"),
    ]

    with patch("web_rag_service.retrieval.normalize_html", side_effect=flaky_normalize):
        resolved = _resolve(handler, sources)

    assert resolved[0].full_content == "/ok"
    assert resolved[1].full_content == NOT_AVAILABLE


def test_resolve_empty_page_is_nothing_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="")

    resolved = _resolve(handler, [Source(name="blank", url="https://example.com/blank")])

    assert resolved == [
        ResolvedSource(name="blank", url="https://example.com/blank", full_content=NOTHING_FOUND)
    ]
    assert resolved[0].available is False


def test_resolve_malformed_html_does_not_raise():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, text="<html><body><p>Broken &nope; <div><span>unterminated <b>tags"
        )

    resolved = _resolve(handler, [Source(name="broken", url="https://example.com/broken")])

    assert len(resolved) == 1
    assert isinstance(resolved[0].full_content, str)


def test_resolve_leaves_input_sources_untouched():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="body")

    sources = [Source(name="s1", url="https://example.com/")]

    with patch("web_rag_service.retrieval.normalize_html", side_effect=_echo_body):
        _resolve(handler, sources)

    assert sources[0].full_content is None
