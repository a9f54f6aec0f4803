from __future__ import annotations

import logging
import time
from typing import Any, Optional

from openai import AsyncOpenAI

from app.config import Settings, get_settings
from app.llm.usage import UsageTracker, response_to_dict

logger = logging.getLogger("llm.client")

STUB_RESPONSE_TEMPLATE = "Stub summary for {model} ({words} prompt words)."


def _extract_output_text(response: Any) -> str:
    if response is None:
        return ""

    if hasattr(response, "output_text") and response.output_text:
        return str(response.output_text)

    data = response_to_dict(response)
    if data.get("output_text"):
        return str(data["output_text"])
    output = data.get("output") or data.get("outputs")
    if isinstance(output, list):
        chunks: list[str] = []
        for item in output:
            content = item.get("content") if isinstance(item, dict) else None
            if not content and isinstance(item, list):
                content = item
            if isinstance(content, list):
                for part in content:
                    if isinstance(part, dict) and part.get("text"):
                        chunks.append(part["text"])
            elif isinstance(content, dict) and content.get("text"):
                chunks.append(content["text"])
        if chunks:
            return "\n".join(chunks).strip()

    # a response with no text content is degraded output, not an error
    return ""


class LLMClient:
    """Generation capability backed by the OpenAI Responses API.

    Each ``generate`` call is a single request: the client is built with
    ``max_retries=0`` so failures surface immediately to the caller.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        usage_tracker: Optional[UsageTracker] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.usage = usage_tracker or UsageTracker()
        self._stub_mode = getattr(self.settings, "llm_stub_mode", False)
        self._owns_client = client is None
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        # created on the first generate call
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.openai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.close()

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def generate(self, model: str, prompt: str, *, stage: str = "generate") -> str:
        if self._stub_mode:
            return STUB_RESPONSE_TEMPLATE.format(model=model, words=len(prompt.split()))

        started = time.perf_counter()
        response = await self._get_client().responses.create(model=model, input=prompt)
        self.usage.add_response(response, stage=stage, model=model)
        logger.debug(
            "Generation call finished",
            extra={
                "model": model,
                "stage": stage,
                "elapsed_ms": round((time.perf_counter() - started) * 1000),
            },
        )
        return _extract_output_text(response)
