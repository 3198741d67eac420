"""
FastAPI application with assembled routers.

Initializes the FastAPI app, builds the component container in the
lifespan and configures the uvicorn server.

Dependencies: fastapi, bookrag.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from bookrag.application.container import RagContainer
from bookrag.configs import get_settings
from bookrag.observability import configure_logging
from bookrag.observability.middleware import RequestLoggingMiddleware

from .routers import (
    chat_stream_router,
    conversations_router,
    health_router,
    ingestion_router,
    search_router,
)

logger = logging.getLogger(__name__)


def create_app(container: RagContainer | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        container: Prebuilt components; built from settings at startup when omitted

    Returns:
        FastAPI: Configured application instance with all routers registered
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = container.settings if container else get_settings()
        configure_logging(settings.effective_log_level)

        components = container or RagContainer.build(settings)
        await components.startup()
        app.state.container = components
        logger.info(f"{__name__}:lifespan - Startup complete", extra={"environment": settings.environment})

        yield

        await components.shutdown()
        logger.info(f"{__name__}:lifespan - Shutdown complete")

    app = FastAPI(
        title="Book RAG API",
        description="Retrieval-augmented Q&A over ingested book text",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Register HTTP routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(search_router, prefix="/api/v1")
    app.include_router(conversations_router, prefix="/api/v1")
    app.include_router(ingestion_router, prefix="/api/v1")
    app.include_router(chat_stream_router)

    return app


def main() -> None:
    uvicorn.run(
        "bookrag.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    main()
