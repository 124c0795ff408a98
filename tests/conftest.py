"""Shared fixtures and fakes for the task tracker tests."""
import asyncio
import io

import pytest

from core.database import JsonDocumentFile
from core.errors import StorageUnavailable
from core.events.notifier import ChangeNotifier
from patterns.workflow_states import StatusPolicy
from verticals.tasks.attachments import AttachmentRegistry
from verticals.tasks.repository import TaskStore
from verticals.tasks.service import TaskService


class FakeUpload:
    """Minimal stand-in for starlette's UploadFile."""

    def __init__(self, filename, data=b"payload", content_type="application/pdf"):
        self.filename = filename
        self.content_type = content_type
        self._buffer = io.BytesIO(data)

    async def read(self, size=-1):
        return self._buffer.read(size)


class RecordingObserver:
    def __init__(self):
        self.events = []

    async def send_event(self, event):
        self.events.append(event)


class FailingObserver:
    def __init__(self):
        self.attempts = 0

    async def send_event(self, event):
        self.attempts += 1
        raise ConnectionError("socket closed")


class SlowDocument(JsonDocumentFile):
    """Document whose writes yield to the loop, widening race windows."""

    async def save(self, data):
        await asyncio.sleep(0.01)
        await super().save(data)


class BrokenDocument(JsonDocumentFile):
    """Document that can be read but refuses every write."""

    async def save(self, data):
        raise StorageUnavailable(f"Cannot write {self.path}")


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture
def store(db_file):
    return TaskStore(JsonDocumentFile(db_file))


@pytest.fixture
def registry(tmp_path):
    return AttachmentRegistry(tmp_path / "uploads", max_upload_bytes=1024, chunk_size=64)


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def observer(notifier):
    obs = RecordingObserver()
    notifier.connect(obs)
    return obs


@pytest.fixture
def service(store, registry, notifier):
    return TaskService(store, registry, notifier, StatusPolicy())
