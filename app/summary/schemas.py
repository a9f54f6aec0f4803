from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SummarizeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = Field(description="Source text to summarize")
    target_words: Optional[int] = Field(
        default=None,
        ge=1,
        alias="targetWords",
        description="Approximate length of the merged summary; advisory only",
    )
    model: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Model identifier passed through to the generation backend",
    )
    preserve_quotes: bool = Field(
        default=True,
        alias="preserveQuotes",
        description="Keep short verbatim quotes instead of paraphrasing them",
    )


class SummarizeResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    word_count: int = Field(alias="wordCount", ge=0)


class WordCountRequest(BaseModel):
    text: str = ""


class WordCountResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word_count: int = Field(alias="wordCount")
    limit: int
    within_limit: bool = Field(alias="withinLimit")
