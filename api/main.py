"""Task tracker API: FastAPI entry point.

Builds the owned components (task store, attachment registry, change
notifier, task service) once per app, registers middleware, routers,
the uploads static mount and lifecycle hooks.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.middleware import RequestContextMiddleware
from core.database import JsonDocumentFile
from core.errors import TaskTrackerError
from core.events.notifier import ChangeNotifier
from core.logging_setup import setup_logging
from core.observability.otel_setup import setup_otel
from patterns.domain_config import TaskTrackerConfig
from patterns.workflow_states import StatusPolicy
from verticals.tasks.attachments import AttachmentRegistry
from verticals.tasks.repository import TaskStore
from verticals.tasks.router import realtime_router, router as tasks_router
from verticals.tasks.service import TaskService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    config: TaskTrackerConfig = app.state.config
    setup_logging(config.log_level)
    setup_otel()

    app.state.attachments.ensure_dir()
    await app.state.store.initialize()

    logger.info("Task tracker API started")
    yield
    await app.state.notifier.drain()
    logger.info("Task tracker API shutting down")


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

async def handle_task_tracker_error(request: Request, exc: TaskTrackerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(config: Optional[TaskTrackerConfig] = None) -> FastAPI:
    config = config or TaskTrackerConfig.from_env()

    app = FastAPI(
        title="Task Tracker",
        description="Task tracking with attachments and realtime change notifications",
        version=VERSION,
        lifespan=lifespan,
    )

    # Owned state, built once and reached through app.state
    store = TaskStore(
        JsonDocumentFile(config.storage.db_file),
        initial_status=config.status.initial,
    )
    attachments = AttachmentRegistry(
        config.uploads.upload_dir,
        max_upload_bytes=config.uploads.max_upload_bytes,
        chunk_size=config.uploads.chunk_size,
    )
    notifier = ChangeNotifier()
    policy = StatusPolicy(statuses=config.status.statuses, mode=config.status.policy)

    app.state.config = config
    app.state.store = store
    app.state.attachments = attachments
    app.state.notifier = notifier
    app.state.task_service = TaskService(store, attachments, notifier, policy)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request id + access log
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(TaskTrackerError, handle_task_tracker_error)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------

    app.include_router(tasks_router, prefix="/api/tasks", tags=["Tasks"])
    app.include_router(realtime_router, tags=["Realtime"])

    # Uploaded payloads, read-only, keyed by stored name
    app.mount(
        config.uploads.public_prefix,
        StaticFiles(directory=config.uploads.upload_dir, check_dir=False),
        name="uploads",
    )

    # -----------------------------------------------------------------------
    # Health & root
    # -----------------------------------------------------------------------

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": VERSION}

    @app.get("/")
    async def root():
        return {
            "name": "Task Tracker",
            "version": VERSION,
            "docs": "/docs",
            "realtime": "/ws",
        }

    return app


app = create_app()


def serve() -> None:
    """Run under uvicorn (console script ``task-tracker``)."""
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )
