"""Pydantic schemas for task records, the persisted collection and API input."""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

from core.models.base import CamelModel, utcnow
from patterns.workflow_states import TaskStatus


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class Attachment(CamelModel):
    """Metadata for one uploaded file. Legacy keys are accepted on read."""

    stored_name: str = Field(
        validation_alias=AliasChoices("storedName", "stored_name", "filename"),
        serialization_alias="storedName",
    )
    original_name: str = Field(
        "",
        validation_alias=AliasChoices("originalName", "original_name", "original"),
        serialization_alias="originalName",
    )
    media_type: str = Field(
        "application/octet-stream",
        validation_alias=AliasChoices("mediaType", "media_type", "type"),
        serialization_alias="mediaType",
    )


class Task(CamelModel):
    id: int
    ticket: str = ""
    title: str = ""
    description: str = ""
    status: str = Field(None, validate_default=True)
    deadline: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    attachments: list[Attachment] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachments", "files"),
        serialization_alias="attachments",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status(cls, value, info: ValidationInfo):
        # Older documents can hold records whose status was never set or
        # was stored as a non-string value.
        if value is None:
            context = info.context or {}
            return context.get("initial_status", TaskStatus.NEW.value)
        if not isinstance(value, str):
            return str(value)
        return value


class TaskCollection(CamelModel):
    """The whole persisted document: tasks newest-first plus the id counter."""

    tasks: list[Task] = Field(default_factory=list)
    last_id: int = 0

    def next_id(self) -> int:
        """Advance the counter past every id ever handed out."""
        highest = max((t.id for t in self.tasks), default=0)
        self.last_id = max(self.last_id, highest) + 1
        return self.last_id

    def find(self, task_id: int) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class TaskFields(BaseModel):
    """Text fields of a new task. Missing values are never an error."""

    ticket: str = ""
    title: str = ""
    description: str = ""
    deadline: Optional[str] = None

    @field_validator("ticket", "title", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("deadline", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value


class StatusUpdate(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
