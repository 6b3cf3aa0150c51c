"""
In-memory matchmaking queue and pairing service for the dice game.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from matchqueue.api.router import include_routers
from matchqueue.core.config import settings
from matchqueue.core.exception_handlers import register_exception_handlers
from matchqueue.core.startup import start_background_tasks, stop_background_tasks

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    # Startup
    logger.info("Starting matchmaking service...")
    start_background_tasks()

    yield

    # Shutdown
    logger.info("Shutting down matchmaking service...")
    await stop_background_tasks()


# Create FastAPI application
app = FastAPI(
    title="Matchmaking Queue",
    description="""
    Per-mode waiting pools that pair dice game players by skill, priority and wait time.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Register exception handlers
register_exception_handlers(app)


# Include routers
include_routers(app)

# CLI entry point
if __name__ == "__main__":
    import uvicorn

    # Development server configuration
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True
    )
