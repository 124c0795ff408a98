"""Test task service orchestration and notification contract."""
import pytest

from core.errors import AttachmentLimitExceeded, InvalidStatus, StorageUnavailable, TaskNotFound
from core.events.notifier import TASKS_UPDATED
from patterns.workflow_states import StatusPolicy, StatusPolicyMode
from verticals.tasks.attachments import AttachmentRegistry
from verticals.tasks.repository import TaskStore
from verticals.tasks.service import TaskService

from conftest import BrokenDocument, FakeUpload


@pytest.mark.asyncio
async def test_create_with_attachment(service, observer):
    task = await service.create_task(
        {"title": "Fix pump", "ticket": "T-42"},
        [FakeUpload("report.pdf", b"%PDF-1.4")],
    )
    await service.notifier.drain()

    assert task.status == "new"
    assert task.attachments[0].original_name == "report.pdf"
    assert task.attachments[0].media_type == "application/pdf"
    assert (await service.list_tasks())[0].id == task.id
    assert observer.events == [TASKS_UPDATED]


@pytest.mark.asyncio
async def test_missing_fields_default_to_empty(service):
    task = await service.create_task({"title": None, "deadline": "  "})
    assert task.title == ""
    assert task.ticket == ""
    assert task.description == ""
    assert task.deadline is None


@pytest.mark.asyncio
async def test_create_without_fields(service):
    task = await service.create_task()
    assert task.title == ""
    assert task.attachments == []


@pytest.mark.asyncio
async def test_update_notifies_once(service, observer):
    task = await service.create_task({"title": "t"})
    await service.notifier.drain()
    observer.events.clear()

    updated = await service.update_status(task.id, "in_progress")
    await service.notifier.drain()

    assert updated.status == "in_progress"
    assert observer.events == [TASKS_UPDATED]


@pytest.mark.asyncio
async def test_list_does_not_notify(service, observer):
    await service.list_tasks()
    await service.notifier.drain()
    assert observer.events == []


@pytest.mark.asyncio
async def test_update_unknown_id_does_not_notify(service, observer):
    await service.create_task({"title": "t"})
    await service.notifier.drain()
    observer.events.clear()

    with pytest.raises(TaskNotFound):
        await service.update_status(999999, "done")
    await service.notifier.drain()

    assert observer.events == []
    assert len(await service.list_tasks()) == 1


@pytest.mark.asyncio
async def test_oversized_upload_creates_nothing(service, observer):
    with pytest.raises(AttachmentLimitExceeded):
        await service.create_task({"title": "t"}, [FakeUpload("big.bin", b"x" * 2048)])
    await service.notifier.drain()

    assert await service.list_tasks() == []
    assert observer.events == []


@pytest.mark.asyncio
async def test_storage_failure_does_not_notify(db_file, registry, notifier, observer):
    service = TaskService(TaskStore(BrokenDocument(db_file)), registry, notifier)
    with pytest.raises(StorageUnavailable):
        await service.create_task({"title": "t"})
    await notifier.drain()
    assert observer.events == []


@pytest.mark.asyncio
async def test_permissive_accepts_any_status(service):
    task = await service.create_task({"title": "t"})
    updated = await service.update_status(task.id, "waiting-on-vendor")
    assert updated.status == "waiting-on-vendor"
    back = await service.update_status(task.id, "new")
    assert back.status == "new"


@pytest.mark.asyncio
async def test_empty_status_rejected(service, observer):
    task = await service.create_task({"title": "t"})
    await service.notifier.drain()
    observer.events.clear()

    with pytest.raises(InvalidStatus):
        await service.update_status(task.id, "")
    await service.notifier.drain()
    assert observer.events == []


@pytest.mark.asyncio
async def test_strict_policy(store, tmp_path, notifier, observer):
    registry = AttachmentRegistry(tmp_path / "uploads")
    service = TaskService(store, registry, notifier, StatusPolicy(mode=StatusPolicyMode.STRICT))
    task = await service.create_task({"title": "t"})

    with pytest.raises(InvalidStatus):
        await service.update_status(task.id, "archived")

    await service.update_status(task.id, "done")
    reopened = await service.update_status(task.id, "in_progress")
    assert reopened.status == "in_progress"

    with pytest.raises(InvalidStatus):
        await service.update_status(task.id, "new")
    assert (await service.list_tasks())[0].status == "in_progress"

    await notifier.drain()
    assert observer.events == [TASKS_UPDATED] * 3
