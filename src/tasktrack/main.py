"""TaskTrack main application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktrack import __version__
from tasktrack.api import auth_router, router, ws_router
from tasktrack.api.deps import validate_auth_config
from tasktrack.config import settings
from tasktrack.db.base import close_db, init_db
from tasktrack.notify import ChangeNotifier, ConnectionRegistry

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("tasktrack")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting TaskTrack server...")
    logger.info(f"Environment: {settings.env.value}")

    # Validate authentication configuration (fail fast if insecure)
    validate_auth_config()

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    # Push channel: one registry per process, injected into the notifier
    registry = ConnectionRegistry()
    notifier = ChangeNotifier(registry)
    app.state.registry = registry
    app.state.notifier = notifier
    await notifier.start()

    yield

    # Cleanup
    logger.info("Shutting down TaskTrack server...")
    await notifier.stop()
    await registry.close()
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="TaskTrack",
    description="Multi-user task tracking with audit trail and live updates",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)

app.include_router(auth_router)
app.include_router(router)
app.include_router(ws_router)


def main():
    """Entry point for the application."""
    uvicorn.run(
        "tasktrack.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
