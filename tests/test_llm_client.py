from __future__ import annotations

import asyncio
from types import SimpleNamespace

from app.llm.client import LLMClient, _extract_output_text
from app.llm.usage import UsageTracker


class DummyResponses:
    def __init__(self, response) -> None:
        self.response = response
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        return self.response


class DummyOpenAI:
    def __init__(self, response) -> None:
        self.responses = DummyResponses(response)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_extract_output_text_prefers_helper_attribute() -> None:
    response = SimpleNamespace(output_text="## Executive Summary")
    assert _extract_output_text(response) == "## Executive Summary"


def test_extract_output_text_walks_output_content() -> None:
    response = {
        "output": [
            {"type": "message", "content": [{"type": "output_text", "text": "first"}]},
            {"type": "message", "content": [{"type": "output_text", "text": "second"}]},
        ]
    }
    assert _extract_output_text(response) == "first\nsecond"


def test_extract_output_text_degrades_to_empty() -> None:
    assert _extract_output_text(None) == ""
    assert _extract_output_text({"output": []}) == ""


def test_generate_sends_prompt_and_tracks_usage(stub_settings) -> None:
    response = SimpleNamespace(
        model="gpt-4.1-mini",
        output_text="partial text",
        usage={"input_tokens": 120, "output_tokens": 30, "total_tokens": 150},
    )
    dummy = DummyOpenAI(response)
    usage = UsageTracker()
    settings = stub_settings.model_copy(update={"llm_stub_mode": False})

    async def _exercise() -> str:
        async with LLMClient(settings=settings, usage_tracker=usage, client=dummy) as llm:
            return await llm.generate("gpt-4.1-mini", "Summarize this", stage="partial")

    text = asyncio.run(_exercise())

    assert text == "partial text"
    assert dummy.responses.requests == [{"model": "gpt-4.1-mini", "input": "Summarize this"}]
    assert usage.totals() == {"input_tokens": 120, "output_tokens": 30, "total_tokens": 150, "requests": 1}
    assert usage.records[0].stage == "partial"
    # injected clients are owned by the caller
    assert dummy.closed is False


def test_stub_mode_never_touches_network(stub_settings) -> None:
    llm = LLMClient(settings=stub_settings)

    text = asyncio.run(llm.generate("gpt-4o", "one two three"))

    assert text == "Stub summary for gpt-4o (3 prompt words)."
    assert llm.usage.records == []


def test_usage_tracker_ignores_responses_without_usage() -> None:
    tracker = UsageTracker()
    tracker.add_response({"model": "gpt-4.1"})
    tracker.add_response({"model": "gpt-4.1", "usage": {"prompt_tokens": 10, "completion_tokens": 5}}, stage="merge")

    assert len(tracker.records) == 1
    assert tracker.records[0].total_tokens == 15
    assert tracker.records[0].stage == "merge"


def test_openai_client_is_created_lazily(stub_settings) -> None:
    settings = stub_settings.model_copy(update={"llm_stub_mode": False, "openai_api_key": "sk-test"})
    llm = LLMClient(settings=settings)

    assert llm._client is None
    asyncio.run(llm.close())
    assert llm._client is None
