from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.api import api_router
from app.core.log import get_logger
from config.settings import settings

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the task table on startup when running against SQL storage,
    and closes pooled connections on shutdown.
    """
    logger.info(f"Starting task queue ({settings.ENVIRONMENT}, store={settings.TASK_STORE_BACKEND})")
    if settings.TASK_STORE_BACKEND == "sql":
        from app.db.session import engine, init_models
        await init_models()
    logger.info("Startup complete.")

    yield

    if settings.TASK_STORE_BACKEND == "sql":
        await engine.dispose()
    logger.info("Shutdown complete.")


# Create the main FastAPI application instance
app = FastAPI(
    title="Task Queue",
    description="Registers task definitions under caller-chosen taskIds and serves them back.",
    version="1.0.0",
    lifespan=lifespan,
)

# All routes from /api/__init__.py will be included.
# This results in routes like: /api/v1/task/{taskId}
app.include_router(api_router, prefix="/api")

# --- Root Endpoint ---
@app.get("/", tags=["Health Check"])
async def root():
    """
    A simple health check endpoint to confirm the API is running.
    """
    return {
        "status": "ok",
        "message": "Task queue is running"
    }
