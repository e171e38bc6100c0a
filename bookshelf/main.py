"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookshelf.api.books import router as books_router
from bookshelf.core.config import get_settings
from bookshelf.core.database import close_db, engine, init_db
from bookshelf.core.errors import register_exception_handlers
from bookshelf.core.tracing import setup_tracing, shutdown_tracing

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Bookshelf API")
    await init_db()
    yield
    # Shutdown
    logger.info("Shutting down Bookshelf API")
    await close_db()
    shutdown_tracing()


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="Bookshelf",
    description="A REST API for managing a catalogue of books keyed by ISBN",
    version="0.1.0",
    lifespan=lifespan,
)

# Setup OpenTelemetry tracing (must be done before adding routes)
setup_tracing(app, engine, settings)

register_exception_handlers(app)

# Include routers
app.include_router(books_router)


@app.get("/")
async def root():
    return {
        "name": "Bookshelf",
        "version": app.version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookshelf.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
