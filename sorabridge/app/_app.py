# -*- coding: utf-8 -*-
"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ..constant import LOG_LEVEL_ENV
from ..providers import ConfigStore
from ..utils.logging import setup_logger
from .routers.sora import router as sora_router

logger = logging.getLogger(__name__)


def create_app(store: Optional[ConfigStore] = None) -> FastAPI:
    setup_logger(os.environ.get(LOG_LEVEL_ENV, "info"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        result = await app.state.sora_store.connect_if_enabled()
        if result is not None:
            logger.info("Startup connection test: %s", result.message)
        yield
        await app.state.sora_store.aclose()

    app = FastAPI(title="SoraBridge API", lifespan=lifespan)
    app.state.sora_store = store if store is not None else ConfigStore()
    app.include_router(sora_router)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    logger.debug("SoraBridge app created")
    return app
