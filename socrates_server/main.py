"""FastAPI application for the socrates explorer API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socrates_ai.providers.base import StreamFunction
from socrates_ai.stream import stream

from .config import Settings, settings as default_settings
from .routes import router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log provider configuration on startup."""
    settings: Settings = app.state.settings
    logger.info("Starting socrates API...")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; /api/generate will fail")
    if not settings.google_api_key:
        logger.warning("GOOGLE_API_KEY is not set; /api/chat will fail")

    yield

    logger.info("Shutting down socrates API...")


def create_app(
    settings: Optional[Settings] = None,
    stream_fn: Optional[StreamFunction] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Socrates",
        description="Infinite knowledge-graph explorer backed by LLM-generated topics",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.stream_fn = stream_fn or stream

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format=LOG_FORMAT,
    )

    uvicorn.run(
        "socrates_server.main:create_app",
        factory=True,
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.api_debug,
    )


if __name__ == "__main__":
    main()
