import pytest
from pydantic import ValidationError

from app.config import Settings
from app.summary.pipeline import SummarizerConfig


def test_defaults_match_summarizer_constants() -> None:
    settings = Settings(LLM_STUB_MODE=True)
    config = SummarizerConfig.from_settings(settings)

    assert config == SummarizerConfig(
        default_model="gpt-4.1-mini",
        default_target_words=7000,
        chunk_words=2500,
        max_input_words=22000,
        max_concurrency=1,
        timeout_seconds=None,
    )


def test_summary_overrides_are_read_from_aliases() -> None:
    settings = Settings(
        LLM_STUB_MODE=True,
        SUMMARY_CHUNK_WORDS=1000,
        SUMMARY_MAX_CONCURRENCY=4,
        SUMMARY_TIMEOUT_SECONDS=30,
        OPENAI_MODEL_DEFAULT="gpt-4.1",
    )
    config = SummarizerConfig.from_settings(settings)

    assert config.chunk_words == 1000
    assert config.max_concurrency == 4
    assert config.timeout_seconds == 30
    assert config.default_model == "gpt-4.1"


def test_api_key_required_outside_stub_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(LLM_STUB_MODE=False, _env_file=None)


def test_non_positive_chunk_size_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(LLM_STUB_MODE=True, SUMMARY_CHUNK_WORDS=0)


def test_non_positive_timeout_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(LLM_STUB_MODE=True, SUMMARY_TIMEOUT_SECONDS=0)
