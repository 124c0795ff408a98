"""Enum-based workflow state pattern for task status.

Defines the default task lifecycle as a Python enum plus a policy object
that decides whether a requested status change is accepted. Two modes:

- permissive: any non-empty value is stored as given
- strict: the value must belong to the configured status set, and a task
  that has left the initial status never returns to it

There are no terminal states in either mode: a ``done`` task can be moved
back to ``in_progress``.
"""

from dataclasses import dataclass
from enum import Enum

from core.errors import InvalidStatus


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Default task lifecycle states."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"


DEFAULT_STATUSES: tuple[str, ...] = tuple(s.value for s in TaskStatus)


class StatusPolicyMode(str, Enum):
    PERMISSIVE = "permissive"
    STRICT = "strict"


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusPolicy:
    """Decides which status updates are accepted.

    Usage::

        policy = StatusPolicy(statuses=("new", "in_progress", "done"),
                              mode=StatusPolicyMode.STRICT)
        policy.check(current="in_progress", requested="done")
    """

    statuses: tuple[str, ...] = DEFAULT_STATUSES
    mode: StatusPolicyMode = StatusPolicyMode.PERMISSIVE

    @property
    def initial(self) -> str:
        return self.statuses[0]

    @property
    def needs_current(self) -> bool:
        """Whether check() looks at the task's current status."""
        return self.mode == StatusPolicyMode.STRICT

    def allowed_from(self, current: str) -> list[str]:
        """Statuses a task in `current` may move to under strict mode."""
        if current == self.initial:
            return list(self.statuses)
        return [s for s in self.statuses if s != self.initial]

    def can_transition(self, current: str | None, requested: str) -> bool:
        if not requested:
            return False
        if self.mode == StatusPolicyMode.PERMISSIVE:
            return True
        if requested not in self.statuses:
            return False
        if current is None or current == requested:
            return True
        return requested in self.allowed_from(current)

    def check(self, current: str | None, requested: str) -> None:
        """Raise InvalidStatus if `requested` is not accepted."""
        if self.can_transition(current, requested):
            return

        if not requested:
            raise InvalidStatus("Status must not be empty")
        if requested not in self.statuses:
            raise InvalidStatus(
                f"Unknown status {requested!r}. Allowed: {list(self.statuses)}"
            )
        raise InvalidStatus(
            f"Cannot transition from {current} to {requested}. "
            f"Allowed: {self.allowed_from(current)}"
        )
