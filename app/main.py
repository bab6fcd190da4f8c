from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from app.web import router as web_router
from datasource.readings import build_default_source
from logging_config import configure_logging
from services.aggregator import build_default_aggregator
from settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_source()
    try:
        yield
    finally:
        build_default_source.cache_clear()
        build_default_aggregator.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Watcher Service",
        description="Temperature and humidity readings averaged by time bucket.",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Every route is a read-only GET; no credentials are involved.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
