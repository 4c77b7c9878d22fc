"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from wikigraph import __version__
from wikigraph.api import articles_router, graph_router, imports_router, versions_router
from wikigraph.api.errors import register_exception_handlers
from wikigraph.core.config import settings
from wikigraph.core.logging import bind_context, clear_context, get_logger, setup_logging
from wikigraph.db import dispose_engine
from wikigraph.services import ArticleLockRegistry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    setup_logging()
    app.state.article_locks = ArticleLockRegistry()
    logger.info("Application started", environment=settings.environment)
    yield
    # Shutdown
    await dispose_engine()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Application factory for creating the FastAPI instance."""
    app = FastAPI(
        title="Wikigraph API",
        description=(
            "Content graph and revision engine of a markdown knowledge base.\n\n"
            "## Features\n"
            "- **Articles**: Create, edit and delete articles with [[wiki-links]]\n"
            "- **Versions**: Browse history, diff versions and revert\n"
            "- **Graph**: Backlinks, broken links and unlinked articles\n"
            "- **Import**: Create articles from markdown files\n"
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        debug=settings.api_debug,
        lifespan=lifespan,
    )

    # Set here as well so the app works when the lifespan is not run
    app.state.article_locks = ArticleLockRegistry()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_context(request: Request, call_next):
        # Fresh structlog context per request
        clear_context()
        bind_context(method=request.method, path=request.url.path)
        return await call_next(request)

    register_exception_handlers(app)

    # Register routers
    app.include_router(
        articles_router,
        prefix="/api/v1/articles",
        tags=["Articles"],
    )
    app.include_router(
        versions_router,
        prefix="/api/v1/articles",
        tags=["Versions"],
    )
    app.include_router(
        graph_router,
        prefix="/api/v1/graph",
        tags=["Graph"],
    )
    app.include_router(
        imports_router,
        prefix="/api/v1/import",
        tags=["Import"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {"status": "healthy", "version": __version__}

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": "Wikigraph API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wikigraph.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
