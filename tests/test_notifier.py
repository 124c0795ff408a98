"""Test the change notifier fan-out."""
import asyncio

import pytest

from core.events.notifier import TASKS_UPDATED, ChangeNotifier

from conftest import FailingObserver, RecordingObserver


class SlowObserver(RecordingObserver):
    async def send_event(self, event):
        await asyncio.sleep(0.05)
        await super().send_event(event)


@pytest.mark.asyncio
async def test_broadcast_reaches_every_observer():
    notifier = ChangeNotifier()
    a, b = RecordingObserver(), RecordingObserver()
    notifier.connect(a)
    notifier.connect(b)

    notifier.broadcast_changed()
    await notifier.drain()

    assert a.events == [TASKS_UPDATED]
    assert b.events == [TASKS_UPDATED]


@pytest.mark.asyncio
async def test_broadcast_without_observers_is_noop():
    notifier = ChangeNotifier()
    notifier.broadcast_changed()
    await notifier.drain()
    assert notifier.observer_count == 0


@pytest.mark.asyncio
async def test_broadcast_does_not_wait_for_delivery():
    notifier = ChangeNotifier()
    slow = SlowObserver()
    notifier.connect(slow)

    notifier.broadcast_changed()
    assert slow.events == []

    await notifier.drain()
    assert slow.events == [TASKS_UPDATED]


@pytest.mark.asyncio
async def test_failing_observer_is_dropped():
    notifier = ChangeNotifier()
    good, bad = RecordingObserver(), FailingObserver()
    notifier.connect(good)
    notifier.connect(bad)

    notifier.broadcast_changed()
    await notifier.drain()

    assert good.events == [TASKS_UPDATED]
    assert bad.attempts == 1
    assert notifier.observer_count == 1

    notifier.broadcast_changed()
    await notifier.drain()
    assert bad.attempts == 1
    assert good.events == [TASKS_UPDATED, TASKS_UPDATED]


@pytest.mark.asyncio
async def test_disconnected_observer_gets_nothing():
    notifier = ChangeNotifier()
    obs = RecordingObserver()
    notifier.connect(obs)
    notifier.disconnect(obs)

    notifier.broadcast_changed()
    await notifier.drain()
    assert obs.events == []


@pytest.mark.asyncio
async def test_late_observer_gets_no_backlog():
    notifier = ChangeNotifier()
    early = RecordingObserver()
    notifier.connect(early)
    notifier.broadcast_changed()
    await notifier.drain()

    late = RecordingObserver()
    notifier.connect(late)
    await notifier.drain()
    assert late.events == []


def test_disconnect_unknown_observer():
    notifier = ChangeNotifier()
    notifier.disconnect(RecordingObserver())
    assert notifier.observer_count == 0
