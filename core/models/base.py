"""Base model for all persisted and API-facing records.

Provides:
- CamelModel: pydantic base whose JSON keys are camelCase
  (``created_at`` is written as ``createdAt``) while Python code keeps
  snake_case attribute names
- utcnow: timezone-aware creation timestamps

Records are validated by alias or by field name, so both the persisted
document and in-process constructors work.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Declarative base for all task tracker models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
