"""JSON document file: the persisted medium behind the task store.

Provides whole-document persistence with:
- Async file I/O via aiofiles (reads and writes yield to the event loop)
- Atomic replace on write (temp sibling file + os.replace)
- Missing or empty file treated as an empty document
- Storage failures surfaced as StorageUnavailable
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class JsonDocumentFile:
    """A single JSON object persisted in one file.

    Usage::

        doc = JsonDocumentFile(Path("db.json"))
        await doc.ensure()
        data = await doc.load()
        data["tasks"].insert(0, task)
        await doc.save(data)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def ensure(self) -> None:
        """Create the parent directory and an empty document if missing."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not await aiofiles.os.path.exists(self.path):
                await self.save({})
                logger.info("Created document file %s", self.path)
        except OSError as exc:
            logger.error("Cannot prepare document file %s: %s", self.path, exc)
            raise StorageUnavailable(f"Cannot prepare {self.path}") from exc

    async def load(self) -> dict[str, Any]:
        """Read the whole document."""
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.error("Cannot read %s: %s", self.path, exc)
            raise StorageUnavailable(f"Cannot read {self.path}") from exc

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.error("Malformed JSON in %s: %s", self.path, exc)
            raise StorageUnavailable(f"Malformed document in {self.path}") from exc

        if not isinstance(data, dict):
            raise StorageUnavailable(f"Document in {self.path} is not an object")
        return data

    async def save(self, data: dict[str, Any]) -> None:
        """Replace the whole document atomically."""
        body = json.dumps(data, indent=2, ensure_ascii=False)
        tmp = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
                await f.write(body)
                await f.flush()
            await aiofiles.os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Cannot write %s: %s", self.path, exc)
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageUnavailable(f"Cannot write {self.path}") from exc
