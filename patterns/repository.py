"""Single-writer snapshot repository pattern.

The whole collection lives in one persisted document. Every operation
reloads the document, and every mutation is a read-modify-write cycle
that rewrites the whole document. An asyncio.Lock guards both, so two
requests interleaving at an await point can never clobber each other's
writes (no lost updates).

Example: TaskStore extending SnapshotRepository.
"""

import asyncio
import copy
from typing import Any, Callable, Generic, TypeVar

from core.database import JsonDocumentFile

# ---------------------------------------------------------------------------
# Type variables for snapshot and mutation result
# ---------------------------------------------------------------------------

SnapshotT = TypeVar("SnapshotT")
ResultT = TypeVar("ResultT")


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class SnapshotRepository(Generic[SnapshotT]):
    """Generic repository over a whole-document snapshot.

    Subclass and implement `parse` and `dump`::

        class TaskStore(SnapshotRepository[TaskCollection]):
            def parse(self, raw):
                return TaskCollection.model_validate(raw)

            def dump(self, snapshot):
                return snapshot.model_dump(mode="json", by_alias=True)
    """

    def __init__(self, document: JsonDocumentFile):
        self.document = document
        self._lock = asyncio.Lock()
        self._snapshot: SnapshotT | None = None

    # -- Hooks --

    def parse(self, raw: dict[str, Any]) -> SnapshotT:
        raise NotImplementedError

    def dump(self, snapshot: SnapshotT) -> dict[str, Any]:
        raise NotImplementedError

    # -- Committed view --

    @property
    def snapshot(self) -> SnapshotT | None:
        """Last state known to match the persisted document."""
        return self._snapshot

    async def _reload(self) -> SnapshotT:
        self._snapshot = self.parse(await self.document.load())
        return self._snapshot

    # -- Read --

    async def read(self) -> SnapshotT:
        """Return the latest committed snapshot."""
        async with self._lock:
            return await self._reload()

    # -- Read-modify-write --

    async def mutate(
        self, change: Callable[[SnapshotT], ResultT]
    ) -> ResultT:
        """Apply `change` to a working copy and persist it.

        `change` edits the copy in place and returns the operation result.
        Exceptions from `change` or from the write leave both the document
        and the in-memory view untouched.
        """
        async with self._lock:
            current = await self._reload()
            working = copy.deepcopy(current)
            result = change(working)
            await self.document.save(self.dump(working))
            self._snapshot = working
            return result
