"""Task service: the composition root the HTTP layer calls into.

Orchestrates one request end to end:
- fills missing text fields with defaults (never an error)
- stores and registers attachments, at creation time only
- mutates the task store
- signals the change notifier exactly once per successful mutation,
  never on failures and never on reads
"""

import logging
from typing import Sequence

from fastapi import Request

from core.events.notifier import ChangeNotifier
from patterns.workflow_states import StatusPolicy
from verticals.tasks.attachments import AttachmentRegistry, Upload
from verticals.tasks.models.schemas import Task, TaskFields
from verticals.tasks.repository import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        store: TaskStore,
        attachments: AttachmentRegistry,
        notifier: ChangeNotifier,
        policy: StatusPolicy | None = None,
    ):
        self.store = store
        self.attachments = attachments
        self.notifier = notifier
        self.policy = policy or StatusPolicy()

    async def list_tasks(self) -> list[Task]:
        return await self.store.list_tasks()

    async def create_task(
        self,
        fields: TaskFields | dict | None = None,
        uploads: Sequence[Upload] = (),
    ) -> Task:
        if not isinstance(fields, TaskFields):
            fields = TaskFields.model_validate(fields or {})

        stored = await self.attachments.store_uploads(uploads)
        attachments = self.attachments.register(stored)
        task = await self.store.create_task(fields, attachments)

        logger.debug("Notifying %d observers after create id=%d", self.notifier.observer_count, task.id)
        self.notifier.broadcast_changed()
        return task

    async def update_status(self, task_id: int, status: str) -> Task:
        check = None
        if self.policy.needs_current:
            check = lambda current: self.policy.check(current, status)  # noqa: E731
        else:
            self.policy.check(None, status)

        task = await self.store.update_status(task_id, status, check=check)

        logger.debug("Notifying %d observers after update id=%d", self.notifier.observer_count, task.id)
        self.notifier.broadcast_changed()
        return task


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_task_service(request: Request) -> TaskService:
    """FastAPI dependency: the service built once by create_app()."""
    return request.app.state.task_service
