# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
import logging

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local application imports
from .api.v1 import (
    device_gateway_router,
    nutrition_router,
    photo_router,
    session_router,
    user_router,
    worker_router,
)
from .core.config import get_settings
from .di.container import get_container
from .infrastructure.db.mongo_connection import close_database
from .infrastructure.http_client_factory import close_shared_http_client
from .processing.worker.messages import AUDIO_WORKER, IMAGE_WORKER
from .processing.worker.worker_manager import WorkerManager
from .session.session_manager import SessionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Starts the image and audio workers (when enabled). A worker that fails to
    start is logged and its tasks run in-process instead.
    """
    settings = get_settings()
    container = get_container()
    worker_manager = container.get(WorkerManager)

    if settings.enable_workers:
        for worker_type in (IMAGE_WORKER, AUDIO_WORKER):
            try:
                started = await worker_manager.initialize(worker_type)
            except Exception as e:
                logger.error(f"Failed to start {worker_type} worker: {e}", exc_info=True)
                started = False
            if not started:
                logger.warning(f"{worker_type} worker unavailable, tasks will run in-process")
    else:
        logger.info("Background workers disabled, all tasks run in-process")

    yield

    # Shutdown: sessions first so nothing new is dispatched
    try:
        await container.get(SessionManager).shutdown()
    except Exception as e:
        logger.error(f"Error stopping sessions: {e}", exc_info=True)

    try:
        await worker_manager.terminate_all()
    except Exception as e:
        logger.error(f"Error stopping workers: {e}", exc_info=True)

    await close_shared_http_client()
    close_database()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - CORS middleware configuration
    - API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    application = FastAPI(
        title="Nutrition Lens API",
        version="1.0.0",
        description="Smart-glasses nutrition analysis backend",
        lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://localhost:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    application.include_router(photo_router, prefix="/api")
    application.include_router(session_router, prefix="/api")
    application.include_router(nutrition_router, prefix="/api/nutrition")
    application.include_router(user_router, prefix="/api/users")
    application.include_router(worker_router, prefix="/api/workers")
    application.include_router(device_gateway_router)

    return application


# Create application instance
app = create_application()
