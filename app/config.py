from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: Optional[str] = Field(
        default=None, validation_alias="OPENAI_API_KEY"
    )
    openai_model_default: str = Field(
        default="gpt-4.1-mini", validation_alias="OPENAI_MODEL_DEFAULT"
    )
    openai_timeout_seconds: float = Field(
        default=600.0, validation_alias="OPENAI_TIMEOUT_SECONDS"
    )

    environment: str = Field(default="local", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    llm_stub_mode: bool = Field(default=False, validation_alias="LLM_STUB_MODE")

    summary_target_words: int = Field(
        default=7000, validation_alias="SUMMARY_TARGET_WORDS"
    )
    summary_chunk_words: int = Field(
        default=2500, validation_alias="SUMMARY_CHUNK_WORDS"
    )
    summary_max_input_words: int = Field(
        default=22000, validation_alias="SUMMARY_MAX_INPUT_WORDS"
    )
    summary_max_concurrency: int = Field(
        default=1, validation_alias="SUMMARY_MAX_CONCURRENCY"
    )
    summary_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias="SUMMARY_TIMEOUT_SECONDS"
    )

    @model_validator(mode="after")
    def _require_credentials(self) -> "Settings":
        if not self.llm_stub_mode and not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY must be set when LLM_STUB_MODE is false"
            )
        for name in (
            "summary_target_words",
            "summary_chunk_words",
            "summary_max_input_words",
            "summary_max_concurrency",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name.upper()} must be a positive integer")
        if self.summary_timeout_seconds is not None and self.summary_timeout_seconds <= 0:
            raise ValueError("SUMMARY_TIMEOUT_SECONDS must be positive when set")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
