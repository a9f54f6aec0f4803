from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from app.config import Settings, get_settings
from app.llm.prompts import PartialSummary, build_merge_prompt, build_partial_prompt
from app.summary.schemas import SummarizeRequest, SummarizeResult
from app.summary.text import Chunk, build_chunks, count_words


logger = logging.getLogger("summary.pipeline")


class SummaryError(Exception):
    status_code = 500


class InputValidationError(SummaryError):
    status_code = 400


class MissingTextError(InputValidationError):
    def __init__(self) -> None:
        super().__init__("Missing 'text'")


class InvalidRequestError(InputValidationError):
    pass


class InputTooLongError(InputValidationError):
    status_code = 413

    def __init__(self, word_count: int, limit: int) -> None:
        super().__init__(f"Input too long: {word_count} words (limit ~20–22k).")
        self.word_count = word_count
        self.limit = limit


class SummaryTimeoutError(SummaryError):
    status_code = 504

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Summarization exceeded the {timeout:g}s deadline")
        self.timeout = timeout


class PipelineState(str, enum.Enum):
    VALIDATING = "validating"
    CHUNKING = "chunking"
    SUMMARIZING = "summarizing"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


class TextGenerator(Protocol):
    async def generate(self, model: str, prompt: str, *, stage: str = ...) -> str:
        ...


@dataclass(frozen=True, slots=True)
class SummarizerConfig:
    default_model: str = "gpt-4.1-mini"
    default_target_words: int = 7000
    chunk_words: int = 2500
    max_input_words: int = 22000
    max_concurrency: int = 1
    timeout_seconds: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SummarizerConfig":
        settings = settings or get_settings()
        return cls(
            default_model=settings.openai_model_default,
            default_target_words=settings.summary_target_words,
            chunk_words=settings.summary_chunk_words,
            max_input_words=settings.summary_max_input_words,
            max_concurrency=settings.summary_max_concurrency,
            timeout_seconds=settings.summary_timeout_seconds,
        )


def validate_text(text: Any, max_words: int) -> int:
    """Return the word count of ``text`` or raise if it cannot be summarized."""

    if not text or not isinstance(text, str):
        raise MissingTextError()
    word_count = count_words(text)
    if word_count > max_words:
        raise InputTooLongError(word_count, max_words)
    return word_count


class SummaryPipeline:
    """Chunk, summarize each chunk, then merge the partials into one document.

    One instance serves one request; ``state`` and ``transitions`` describe the
    progress of the most recent ``run``.
    """

    def __init__(self, generator: TextGenerator, config: Optional[SummarizerConfig] = None) -> None:
        self.generator = generator
        self.config = config or SummarizerConfig()
        self.state = PipelineState.VALIDATING
        self.transitions: list[PipelineState] = []

    async def run(self, request: SummarizeRequest, *, timeout: Optional[float] = None) -> SummarizeResult:
        timeout = timeout if timeout is not None else self.config.timeout_seconds
        self.transitions = []
        if timeout is None:
            return await self._run(request)
        try:
            async with asyncio.timeout(timeout) as deadline:
                return await self._run(request)
        except TimeoutError:
            # timeouts raised by the backend itself are collaborator errors
            if not deadline.expired():
                raise
            self._transition(PipelineState.FAILED)
            raise SummaryTimeoutError(timeout) from None

    async def _run(self, request: SummarizeRequest) -> SummarizeResult:
        model = request.model or self.config.default_model
        target_words = request.target_words or self.config.default_target_words
        try:
            self._transition(PipelineState.VALIDATING)
            word_count = validate_text(request.text, self.config.max_input_words)

            self._transition(PipelineState.CHUNKING)
            chunks = build_chunks(request.text, self.config.chunk_words)
            logger.info(
                "Chunked input",
                extra={"input_words": word_count, "chunks": len(chunks), "model": model},
            )
            if not chunks:
                logger.info("Input contained no words; skipping generation")
                self._transition(PipelineState.DONE)
                return SummarizeResult(summary="", word_count=0)

            self._transition(PipelineState.SUMMARIZING)
            partials = await self._summarize_chunks(chunks, model, request.preserve_quotes)

            self._transition(PipelineState.MERGING)
            summary = await self._merge(partials, model, target_words, request.preserve_quotes)
        except Exception:
            self._transition(PipelineState.FAILED)
            raise

        result = SummarizeResult(summary=summary, word_count=count_words(summary))
        self._transition(PipelineState.DONE)
        logger.info(
            "Summary complete",
            extra={"chunks": len(chunks), "summary_words": result.word_count, "target_words": target_words},
        )
        return result

    async def _summarize_chunk(self, chunk: Chunk, model: str, preserve_quotes: bool) -> PartialSummary:
        prompt = build_partial_prompt(chunk, preserve_quotes=preserve_quotes)
        logger.debug("Summarizing chunk", extra={"chunk": chunk.number, "total": chunk.total})
        text = await self.generator.generate(model, prompt, stage="partial")
        return PartialSummary(index=chunk.index, text=text)

    async def _summarize_chunks(
        self, chunks: Sequence[Chunk], model: str, preserve_quotes: bool
    ) -> list[PartialSummary]:
        if self.config.max_concurrency <= 1:
            return [await self._summarize_chunk(chunk, model, preserve_quotes) for chunk in chunks]

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def _guarded(chunk: Chunk) -> PartialSummary:
            async with semaphore:
                return await self._summarize_chunk(chunk, model, preserve_quotes)

        tasks = [asyncio.ensure_future(_guarded(chunk)) for chunk in chunks]
        try:
            partials = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return list(partials)

    async def _merge(
        self,
        partials: Sequence[PartialSummary],
        model: str,
        target_words: int,
        preserve_quotes: bool,
    ) -> str:
        prompt = build_merge_prompt(partials, target_words=target_words, preserve_quotes=preserve_quotes)
        return await self.generator.generate(model, prompt, stage="merge")

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.transitions.append(state)
        logger.debug("Pipeline state changed", extra={"state": state.value})
