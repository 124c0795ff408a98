"""Task API router: list / create / update-status + realtime channel.

- GET /api/tasks: every task, newest first
- POST /api/tasks: multipart form fields plus 0..N files under ``files``
- PATCH /api/tasks/{task_id}: JSON ``{"status": ...}``
- WS /ws: receives ``{"event": "tasks_updated"}`` after every change

Domain errors (not found, storage, upload limit, invalid status) are
rendered by the app-level TaskTrackerError handler as ``{"error": ...}``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, WebSocket, WebSocketDisconnect
from starlette.datastructures import UploadFile as StarletteUploadFile

from core.events.notifier import ChangeNotifier, WebSocketObserver
from verticals.tasks.models.schemas import ErrorResponse, StatusUpdate, Task, TaskFields
from verticals.tasks.service import TaskService, get_task_service

logger = logging.getLogger(__name__)

router = APIRouter()
realtime_router = APIRouter()


# ============================================================================
# Task Endpoints
# ============================================================================

@router.get("", response_model=list[Task])
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """All tasks, most recently created first."""
    return await service.list_tasks()


@router.post(
    "",
    response_model=Task,
    responses={413: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def create_task(
    request: Request,
    ticket: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    deadline: Optional[str] = Form(None),
    service: TaskService = Depends(get_task_service),
):
    """Create a task, storing any attached files first.

    Files arrive as repeated ``files`` parts. A file input left empty in a
    browser form still sends one part with no filename; such parts are
    skipped, so they never count as an attachment.
    """
    fields = TaskFields(
        ticket=ticket, title=title, description=description, deadline=deadline
    )
    form = await request.form()
    uploads = [
        part for part in form.getlist("files")
        if isinstance(part, StarletteUploadFile) and part.filename
    ]
    return await service.create_task(fields, uploads)


@router.patch(
    "/{task_id}",
    response_model=Task,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def update_task_status(
    task_id: int,
    request: StatusUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Set a task's status to exactly the value given."""
    return await service.update_status(task_id, request.status)


# ============================================================================
# Realtime channel
# ============================================================================

@realtime_router.websocket("/ws")
async def tasks_channel(websocket: WebSocket):
    """Push a change signal to this client whenever the task set changes.

    Messages sent by the client are read and ignored; they only keep the
    receive loop alive until disconnect.
    """
    notifier: ChangeNotifier = websocket.app.state.notifier

    await websocket.accept()
    observer = WebSocketObserver(websocket)
    notifier.connect(observer)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect as exc:
        logger.debug("Websocket closed code=%s", exc.code)
    finally:
        notifier.disconnect(observer)
