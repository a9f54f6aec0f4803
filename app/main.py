from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI

from app.config import Settings, get_settings
from app.logging import setup_logging
from app.summary.routes import get_app_settings, router as summary_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(settings.log_level)
    app.state.settings = settings
    yield


app = FastAPI(title="DeepDive Summarizer", lifespan=lifespan)
app.include_router(summary_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/config")
async def read_config(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    return {
        "environment": settings.environment,
        "default_model": settings.openai_model_default,
        "chunk_words": settings.summary_chunk_words,
        "max_input_words": settings.summary_max_input_words,
        "stub_mode": settings.llm_stub_mode,
    }
