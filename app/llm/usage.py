from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True)
class UsageRecord:
    model: str
    stage: str
    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass
class UsageTracker:
    """Accumulates token usage for the generation calls of one summarize request."""

    records: list[UsageRecord] = field(default_factory=list)

    def add_response(self, response: Any, *, stage: str = "generate", model: Optional[str] = None) -> None:
        data = response_to_dict(response)
        usage = data.get("usage") or {}
        if not isinstance(usage, dict):
            usage = response_to_dict(usage)
        input_tokens = int(usage.get("input_tokens") or usage.get("prompt_tokens") or 0)
        output_tokens = int(usage.get("output_tokens") or usage.get("completion_tokens") or 0)
        total_tokens = int(usage.get("total_tokens") or input_tokens + output_tokens)
        if total_tokens == 0 and not usage:
            return
        self.records.append(
            UsageRecord(
                model=data.get("model") or model or "unknown",
                stage=stage,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=total_tokens,
            )
        )

    def totals(self) -> dict[str, int]:
        return {
            "input_tokens": sum(record.input_tokens for record in self.records),
            "output_tokens": sum(record.output_tokens for record in self.records),
            "total_tokens": sum(record.total_tokens for record in self.records),
            "requests": len(self.records),
        }


def response_to_dict(response: Any) -> dict[str, Any]:
    if response is None:
        return {}

    if isinstance(response, dict):
        return response

    model_dump = getattr(response, "model_dump", None)
    if callable(model_dump):
        return model_dump()

    data = {}
    for attr in ("model", "usage", "output", "output_text", "input_tokens", "output_tokens", "total_tokens"):
        if hasattr(response, attr):
            data[attr] = getattr(response, attr)
    return data
