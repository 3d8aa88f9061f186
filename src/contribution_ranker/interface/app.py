"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from contribution_ranker.interface.dependencies import shutdown, startup
from contribution_ranker.interface.error_handlers import register_error_handlers
from contribution_ranker.interface.routes import router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the result store for the lifetime of the app."""
    await startup()
    logger.info("Result store ready")
    try:
        yield
    finally:
        await shutdown()
        logger.info("Result store released")


def create_app() -> FastAPI:
    """Build the ranking API: analyses, recommendations and a liveness probe."""
    app = FastAPI(
        title="Contribution Ranker",
        version=API_VERSION,
        description=(
            "Scores a repository's files by dependency centrality and "
            "structural complexity, then ranks them per contributor skill "
            "profile into suitability, risk and an ordered learning path."
        ),
        lifespan=_lifespan,
    )
    register_error_handlers(app)
    app.include_router(router, tags=["ranking"])

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": API_VERSION}

    return app
