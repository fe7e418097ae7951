from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from web_rag_service import config
from web_rag_service.fetching import BoundedFetcher
from web_rag_service.generator import AnswerGenerator
from web_rag_service.llm.factory import get_llm_client
from web_rag_service.retrieval import SourceResolver
from web_rag_service.service import AnswerService
from web_rag_service.types import Source

# Configure basic logging
logging.basicConfig(level=logging.INFO, stream=sys.stdout)
logger = logging.getLogger(__name__)


# Store the AnswerService instance globally
answer_service: AnswerService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown events.
    """
    global answer_service

    logger.info("Service startup: Initializing answer pipeline...")
    http_client = httpx.AsyncClient()
    try:
        # Phase 1: Source resolution
        resolver = SourceResolver(BoundedFetcher(http_client, timeout_s=config.FETCH_TIMEOUT_S))
        logger.info("SourceResolver initialized.")

        # Phase 2: Generator
        llm_client = get_llm_client()
        generator = AnswerGenerator(llm_client)
        logger.info("Generator initialized.")

        # Phase 3: AnswerService Orchestrator
        answer_service = AnswerService(resolver=resolver, generator=generator)
        logger.info("AnswerService fully initialized.")

    except Exception as e:
        await http_client.aclose()
        logger.error(f"Failed to initialize answer service: {e}")
        raise RuntimeError(f"Service initialization failed: {e}") from e

    yield  # Application runs

    logger.info("Service shutdown: Closing HTTP client...")
    answer_service = None
    await http_client.aclose()


app = FastAPI(
    title="Web RAG Answer Service",
    description=(
        "Answers a question from a handful of web pages, streaming a cited answer"
        " generated by an LLM."
    ),
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Health check endpoint.
    """
    if answer_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Answer service not initialized.",
        )
    return {"status": "ok"}


@app.get("/metadata", status_code=status.HTTP_200_OK)
async def metadata():
    """
    Deployment/debug metadata. Never includes credentials.
    """
    return {
        "llm_provider": config.LLM_PROVIDER,
        "llm_model_name": config.LLM_MODEL_NAME,
        "fetch_timeout_s": config.FETCH_TIMEOUT_S,
        "max_content_chars": config.MAX_CONTENT_CHARS,
        "request_timeout_s": config.REQUEST_TIMEOUT_S,
    }


class SourceIn(BaseModel):
    name: str
    url: str


class AnswerRequest(BaseModel):
    question: str
    sources: list[SourceIn] = Field(default_factory=list)


def _internal_error() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


async def _relay(stream: AsyncIterator[bytes], deadline: float) -> AsyncIterator[bytes]:
    """
    Forward the answer stream chunk by chunk until it ends or the deadline passes.

    Headers are already on the wire at this point, so failures can only end
    the body early.
    """
    try:
        while True:
            try:
                async with asyncio.timeout_at(deadline):
                    chunk = await anext(stream)
            except StopAsyncIteration:
                break
            yield chunk
    except TimeoutError:
        logger.error("Answer stream exceeded the request deadline; closing it.")
    except Exception:
        logger.exception("Answer stream failed mid-response.")
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()


@app.post("/api/getAnswer")
async def get_answer(request: Request):
    """
    Stream an answer to a question, grounded on the caller's sources.
    """
    deadline = asyncio.get_running_loop().time() + config.REQUEST_TIMEOUT_S

    try:
        if answer_service is None:
            raise RuntimeError("Answer service not initialized.")

        payload = AnswerRequest.model_validate(await request.json())
        sources = [Source(name=s.name, url=s.url) for s in payload.sources]

        async with asyncio.timeout_at(deadline):
            stream = await answer_service.answer(payload.question, sources)
    except Exception:
        logger.exception("Error in getAnswer.")
        return _internal_error()

    return StreamingResponse(
        _relay(stream, deadline),
        media_type="text/plain",
        headers={"Cache-Control": "no-cache"},
    )
