"""Task store: the authoritative, persisted task collection.

Extends SnapshotRepository with the three task operations: list, create
and update-status. The collection is one JSON document rewritten in full
on every mutation; the repository lock keeps mutations single-writer.
"""

import logging
from typing import Any, Callable

from pydantic import ValidationError

from core.database import JsonDocumentFile
from core.errors import StorageUnavailable, TaskNotFound
from core.models.base import utcnow
from core.observability.otel_setup import get_tracer, start_store_span
from patterns.repository import SnapshotRepository
from patterns.workflow_states import TaskStatus
from verticals.tasks.models.schemas import Attachment, Task, TaskCollection, TaskFields

logger = logging.getLogger(__name__)


class TaskStore(SnapshotRepository[TaskCollection]):
    """Repository for the task collection."""

    def __init__(
        self,
        document: JsonDocumentFile,
        initial_status: str = TaskStatus.NEW.value,
    ):
        super().__init__(document)
        self.initial_status = initial_status
        self._tracer = get_tracer(__name__)

    # -- Snapshot hooks --

    def parse(self, raw: dict[str, Any]) -> TaskCollection:
        try:
            return TaskCollection.model_validate(
                raw, context={"initial_status": self.initial_status}
            )
        except ValidationError as exc:
            logger.error("Task document %s failed validation: %s", self.document.path, exc)
            raise StorageUnavailable(f"Invalid task document in {self.document.path}") from exc

    def dump(self, snapshot: TaskCollection) -> dict[str, Any]:
        return snapshot.to_dict()

    async def initialize(self) -> None:
        """Create the document if missing and load the first snapshot."""
        await self.document.ensure()
        collection = await self.read()
        logger.info(
            "TaskStore ready file=%s total=%d", self.document.path, len(collection.tasks)
        )

    # -- List --

    async def list_tasks(self) -> list[Task]:
        """All tasks, most recently created first."""
        collection = await self.read()
        return list(collection.tasks)

    # -- Create --

    async def create_task(
        self, fields: TaskFields, attachments: list[Attachment] | None = None
    ) -> Task:
        """Prepend a new task with a fresh id and persist the collection."""

        def change(collection: TaskCollection) -> Task:
            task = Task(
                id=collection.next_id(),
                ticket=fields.ticket,
                title=fields.title,
                description=fields.description,
                status=self.initial_status,
                deadline=fields.deadline,
                created_at=utcnow(),
                attachments=list(attachments or []),
            )
            collection.tasks.insert(0, task)
            return task

        with start_store_span(self._tracer, "create", attachments=len(attachments or [])):
            task = await self.mutate(change)
        logger.info("Created task id=%d attachments=%d", task.id, len(task.attachments))
        return task

    # -- Update status --

    async def update_status(
        self,
        task_id: int,
        status: str,
        check: Callable[[str], None] | None = None,
    ) -> Task:
        """Overwrite one task's status. Raises TaskNotFound for unknown ids.

        `check` receives the current status inside the write lock and may
        raise to reject the update before anything is written.
        """

        def change(collection: TaskCollection) -> Task:
            task = collection.find(task_id)
            if task is None:
                raise TaskNotFound(task_id)
            if check is not None:
                check(task.status)
            task.status = status
            return task

        with start_store_span(self._tracer, "update_status", task_id=task_id):
            task = await self.mutate(change)
        logger.info("Task id=%d status=%s", task.id, task.status)
        return task
