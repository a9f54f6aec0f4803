from app.llm.client import LLMClient
from app.llm.prompts import (
    MERGE_SECTIONS,
    PartialSummary,
    build_merge_prompt,
    build_partial_prompt,
)
from app.llm.usage import UsageRecord, UsageTracker

__all__ = [
    "LLMClient",
    "MERGE_SECTIONS",
    "PartialSummary",
    "build_merge_prompt",
    "build_partial_prompt",
    "UsageRecord",
    "UsageTracker",
]
