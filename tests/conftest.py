from __future__ import annotations

import asyncio
import re
from typing import Callable, Optional

import pytest

from app.config import Settings

_CHUNK_INDEX = re.compile(r"CHUNK INDEX: (\d+) of (\d+)")


class FakeGenerator:
    """Records every generation call and returns canned text."""

    def __init__(
        self,
        *,
        merge_text: str = "Final merged summary in six words.",
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
        delay: Callable[[int], float] | None = None,
    ) -> None:
        self.merge_text = merge_text
        self.fail_on_call = fail_on_call
        self.error = error or RuntimeError("generation backend unavailable")
        self.delay = delay
        self.calls: list[tuple[str, str, str]] = []
        self.cancelled = 0

    @property
    def stages(self) -> list[str]:
        return [stage for stage, _, _ in self.calls]

    async def generate(self, model: str, prompt: str, *, stage: str = "generate") -> str:
        self.calls.append((stage, model, prompt))
        call_number = len(self.calls)
        match = _CHUNK_INDEX.search(prompt)
        chunk_number = int(match.group(1)) if match and stage == "partial" else 0
        if self.delay is not None and stage == "partial":
            try:
                await asyncio.sleep(self.delay(chunk_number))
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if self.fail_on_call is not None and call_number == self.fail_on_call:
            raise self.error
        if stage == "merge":
            return self.merge_text
        return f"partial summary of chunk {chunk_number}"


@pytest.fixture
def make_generator() -> Callable[..., FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def stub_settings() -> Settings:
    return Settings(LLM_STUB_MODE=True, OPENAI_API_KEY=None)
