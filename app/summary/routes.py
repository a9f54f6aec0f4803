from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.config import Settings, get_settings
from app.llm import LLMClient, UsageTracker
from app.summary.pipeline import (
    InputValidationError,
    InvalidRequestError,
    MissingTextError,
    SummarizerConfig,
    SummaryError,
    SummaryPipeline,
    TextGenerator,
)
from app.summary.schemas import SummarizeRequest, WordCountRequest, WordCountResponse
from app.summary.text import count_words

router = APIRouter(prefix="/api", tags=["summary"])

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5

T = TypeVar("T")

SUGGESTED_MODELS = (
    ("gpt-4.1-mini", "fast & cost-efficient"),
    ("gpt-4.1", "very strong long-context"),
    ("gpt-4o", "multi-modal generalist"),
)


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings or get_settings()


def get_summarizer_config(settings: Settings = Depends(get_app_settings)) -> SummarizerConfig:
    return SummarizerConfig.from_settings(settings)


async def get_generator(settings: Settings = Depends(get_app_settings)) -> AsyncIterator[TextGenerator]:
    usage = UsageTracker()
    async with LLMClient(settings=settings, usage_tracker=usage) as llm:
        yield llm
    if usage.records:
        logger.info("LLM usage", extra=usage.totals())


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class ClientDisconnectedError(SummaryError):
    status_code = 499


async def run_until_disconnected(request: Request, work: Awaitable[T]) -> T:
    """Await ``work`` but cancel it as soon as the client goes away."""

    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise ClientDisconnectedError("Client disconnected before the summary was ready")
    finally:
        if not task.done():
            task.cancel()


def _parse_summarize_request(payload: Any) -> SummarizeRequest:
    if not isinstance(payload, dict):
        raise MissingTextError()
    text = payload.get("text")
    if not text or not isinstance(text, str):
        raise MissingTextError()
    try:
        return SummarizeRequest.model_validate(payload)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise InvalidRequestError(f"Invalid request: {details}") from exc


@router.post("/summarize")
async def summarize(
    request: Request,
    generator: TextGenerator = Depends(get_generator),
    config: SummarizerConfig = Depends(get_summarizer_config),
) -> JSONResponse:
    try:
        try:
            payload = await request.json()
        except ValueError:
            raise InvalidRequestError("Request body must be valid JSON") from None
        summarize_request = _parse_summarize_request(payload)
        result = await run_until_disconnected(request, SummaryPipeline(generator, config).run(summarize_request))
    except InputValidationError as exc:
        logger.info("Rejected summarize request", extra={"reason": str(exc)})
        return _error_response(exc.status_code, str(exc))
    except SummaryError as exc:
        logger.warning("Summarize request failed", extra={"reason": str(exc)})
        return _error_response(exc.status_code, str(exc))
    except Exception as exc:
        logger.exception("Summarize request failed")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error")

    return JSONResponse(content=result.model_dump(by_alias=True))


@router.post("/word-count")
async def word_count(
    body: WordCountRequest,
    config: SummarizerConfig = Depends(get_summarizer_config),
) -> dict[str, Any]:
    count = count_words(body.text)
    response = WordCountResponse(
        word_count=count,
        limit=config.max_input_words,
        within_limit=count <= config.max_input_words,
    )
    return response.model_dump(by_alias=True)


@router.get("/models")
async def list_models(config: SummarizerConfig = Depends(get_summarizer_config)) -> dict[str, Any]:
    return {
        "default": config.default_model,
        "models": [{"id": model_id, "description": description} for model_id, description in SUGGESTED_MODELS],
    }
