"""Attachment registry: upload persistence and attachment metadata.

Two steps, both run only while a task is being created:

1. store_uploads() streams each incoming payload into the upload directory
   under a unique stored name, enforcing the size ceiling. If any payload is
   too large, every file written for the request is removed and
   AttachmentLimitExceeded is raised, so no task gets created.
2. register() turns stored payloads into Attachment records, in input order.

Stored names are ``<time_ns>-<random hex>-<sanitised original name>`` and
double as the public retrieval key under the uploads prefix.
"""

import logging
import os
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

import aiofiles

from core.errors import AttachmentLimitExceeded
from verticals.tasks.models.schemas import Attachment

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class Upload(Protocol):
    """What the HTTP layer hands over (starlette's UploadFile fits)."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class StoredUpload:
    """A payload already written to the upload directory."""

    stored_name: str
    original_name: str
    media_type: str
    size: int


def sanitize_filename(name: str | None) -> str:
    """Basename only, with anything outside [A-Za-z0-9._-] replaced."""
    base = Path((name or "").replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base)
    return cleaned or "upload"


def derive_stored_name(original_name: str | None) -> str:
    return f"{time.time_ns()}-{secrets.token_hex(4)}-{sanitize_filename(original_name)}"


class AttachmentRegistry:
    """Writes upload payloads and derives their Attachment records."""

    def __init__(
        self,
        upload_dir: str | Path,
        max_upload_bytes: int = 10 * 1024 * 1024,
        chunk_size: int = 1024 * 1024,
    ):
        self.upload_dir = Path(upload_dir)
        self.max_upload_bytes = max_upload_bytes
        self.chunk_size = chunk_size

    def ensure_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, stored_name: str) -> Path:
        return self.upload_dir / stored_name

    # -- Upload handling --

    async def store_uploads(self, uploads: Sequence[Upload]) -> list[StoredUpload]:
        """Persist every payload, or none of them."""
        self.ensure_dir()
        stored: list[StoredUpload] = []
        written: list[Path] = []
        try:
            for upload in uploads:
                item = await self._store_one(upload, written)
                stored.append(item)
        except BaseException:
            for path in written:
                if path.exists():
                    os.unlink(path)
            raise
        return stored

    async def _store_one(self, upload: Upload, written: list[Path]) -> StoredUpload:
        original = upload.filename or ""
        stored_name, f = await self._open_unique(original)
        path = self.path_for(stored_name)
        written.append(path)

        size = 0
        try:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_upload_bytes:
                    logger.warning(
                        "Rejected upload %r: over %d bytes", original, self.max_upload_bytes
                    )
                    raise AttachmentLimitExceeded(original, self.max_upload_bytes)
                await f.write(chunk)
        finally:
            await f.close()

        logger.debug("Stored upload %r as %s (%d bytes)", original, stored_name, size)
        return StoredUpload(
            stored_name=stored_name,
            original_name=original,
            media_type=upload.content_type or DEFAULT_MEDIA_TYPE,
            size=size,
        )

    async def _open_unique(self, original: str):
        # "xb" fails on an existing name, so a stored name is never reused.
        # The caller owns the returned handle and must close it.
        while True:
            stored_name = derive_stored_name(original)
            try:
                f = await aiofiles.open(self.path_for(stored_name), "xb")
            except FileExistsError:
                continue
            return stored_name, f

    # -- Metadata --

    def register(self, stored: Sequence[StoredUpload]) -> list[Attachment]:
        """Attachment records for stored payloads, in the same order."""
        return [
            Attachment(
                stored_name=item.stored_name,
                original_name=item.original_name,
                media_type=item.media_type,
            )
            for item in stored
        ]
