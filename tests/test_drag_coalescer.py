# tests/test_drag_coalescer.py

import asyncio

import pytest

from shortcut_dock.core.capabilities import DragEventHub
from shortcut_dock.core.drag_coalescer import (
    ConcurrencyGuard, DebounceState, Debouncer, DragEventCoalescer
)
from shortcut_dock.core.models import DragEvent, DragEventType

WINDOW = 0.05


def drop(*paths):
    return DragEvent(DragEventType.DROP, tuple(paths))


class BatchSpy:
    def __init__(self, gate=None, fail=False):
        self.calls = []
        self.gate = gate
        self.fail = fail

    async def __call__(self, paths):
        self.calls.append(list(paths))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("batch blew up")


class RecordingSource:
    """A drag source that keeps hold of its listener, like a platform still delivering late events."""

    def __init__(self):
        self.listener = None
        self.unsubscribed = False

    def subscribe(self, listener):
        self.listener = listener

        def unsubscribe():
            self.unsubscribed = True

        return unsubscribe


# --- Debouncer ---

@pytest.mark.asyncio
async def test_debouncer_state_machine():
    fired = []

    async def callback(value):
        fired.append(value)

    debouncer = Debouncer(callback, WINDOW)
    assert debouncer.state is DebounceState.IDLE

    debouncer.trigger("a")
    assert debouncer.state is DebounceState.ARMED
    assert debouncer.pending_args == ("a",)

    await debouncer.wait_idle()
    assert debouncer.state is DebounceState.IDLE
    assert fired == ["a"]


@pytest.mark.asyncio
async def test_debouncer_cancel_disarms():
    fired = []

    async def callback(value):
        fired.append(value)

    debouncer = Debouncer(callback, WINDOW)
    debouncer.trigger("a")
    debouncer.cancel()

    assert debouncer.state is DebounceState.IDLE
    await asyncio.sleep(WINDOW * 2)
    assert fired == []


@pytest.mark.asyncio
async def test_debouncer_reports_fired_while_callback_runs():
    gate = asyncio.Event()

    async def callback():
        await gate.wait()

    debouncer = Debouncer(callback, 0)
    debouncer.trigger()
    await asyncio.sleep(0.01)
    assert debouncer.state is DebounceState.FIRED

    gate.set()
    await debouncer.wait_idle()
    assert debouncer.state is DebounceState.IDLE


# --- Coalescer ---

@pytest.mark.asyncio
async def test_last_drop_in_a_burst_wins():
    spy = BatchSpy()
    coalescer = DragEventCoalescer(spy, WINDOW)

    coalescer.handle_event(drop("/p1/a", "/p1/b"))
    coalescer.handle_event(drop("/p2/c"))
    await coalescer.debouncer.wait_idle()

    assert spy.calls == [["/p2/c"]]


@pytest.mark.asyncio
async def test_hover_follows_the_drag_lifecycle():
    changes = []
    coalescer = DragEventCoalescer(BatchSpy(), WINDOW, on_hover_changed=changes.append)

    coalescer.handle_event(DragEvent(DragEventType.ENTER, position=(1, 2)))
    coalescer.handle_event(DragEvent(DragEventType.OVER, position=(3, 4)))
    assert coalescer.hover_active is True
    coalescer.handle_event(DragEvent(DragEventType.LEAVE))
    assert coalescer.hover_active is False
    coalescer.handle_event(DragEvent(DragEventType.ENTER))
    coalescer.handle_event(drop("/x"))
    assert coalescer.hover_active is False

    coalescer.debouncer.cancel()
    assert changes == [True, False, True, False]


@pytest.mark.asyncio
async def test_dispatch_is_discarded_while_guard_busy():
    spy = BatchSpy()
    guard = ConcurrencyGuard()
    processing = []
    coalescer = DragEventCoalescer(spy, WINDOW, guard=guard, on_processing_changed=processing.append)

    assert guard.try_acquire()
    coalescer.handle_event(drop("/x"))
    await coalescer.debouncer.wait_idle()

    assert spy.calls == []
    assert processing == []
    assert coalescer.processing is False
    assert guard.busy is True


@pytest.mark.asyncio
async def test_second_drop_during_a_batch_runs_no_second_batch():
    gate = asyncio.Event()
    spy = BatchSpy(gate=gate)
    coalescer = DragEventCoalescer(spy, WINDOW)

    coalescer.handle_event(drop("/first"))
    await asyncio.sleep(WINDOW * 2)
    assert coalescer.processing is True

    coalescer.handle_event(drop("/second"))
    await asyncio.sleep(WINDOW * 2)
    gate.set()
    await coalescer.debouncer.wait_idle()

    assert spy.calls == [["/first"]]
    assert coalescer.guard.busy is False
    assert coalescer.processing is False


@pytest.mark.asyncio
async def test_failed_batch_releases_the_guard():
    spy = BatchSpy(fail=True)
    coalescer = DragEventCoalescer(spy, 0)

    coalescer.handle_event(drop("/x"))
    await coalescer.debouncer.wait_idle()

    assert spy.calls == [["/x"]]
    assert coalescer.guard.busy is False


def test_guard_try_acquire_is_exclusive():
    guard = ConcurrencyGuard("test")
    assert guard.try_acquire() is True
    assert guard.try_acquire() is False
    guard.release()
    assert guard.busy is False
    assert guard.try_acquire() is True


# --- Scoped subscription ---

@pytest.mark.asyncio
async def test_subscription_delivers_hub_events_until_closed():
    hub = DragEventHub()
    spy = BatchSpy()
    coalescer = DragEventCoalescer(spy, WINDOW)

    with coalescer.attach(hub) as subscription:
        assert hub.listener_count == 1
        hub.publish(DragEvent(DragEventType.ENTER))
        assert coalescer.hover_active is True
        hub.publish(drop("/x"))
        assert coalescer.debouncer.state is DebounceState.ARMED

    assert subscription.active is False
    assert hub.listener_count == 0
    assert coalescer.debouncer.state is DebounceState.IDLE

    hub.publish(drop("/late"))
    await asyncio.sleep(WINDOW * 2)
    assert spy.calls == []


@pytest.mark.asyncio
async def test_late_events_after_close_are_ignored():
    source = RecordingSource()
    spy = BatchSpy()
    coalescer = DragEventCoalescer(spy, WINDOW)
    subscription = coalescer.attach(source)

    source.listener(DragEvent(DragEventType.ENTER))
    subscription.close()
    subscription.close()

    assert source.unsubscribed is True
    assert coalescer.hover_active is False
    source.listener(drop("/late"))
    source.listener(DragEvent(DragEventType.ENTER))

    assert coalescer.debouncer.state is DebounceState.IDLE
    assert coalescer.hover_active is False
    await asyncio.sleep(WINDOW * 2)
    assert spy.calls == []


def test_trigger_needs_a_running_loop():
    debouncer = Debouncer(BatchSpy(), WINDOW)

    with pytest.raises(RuntimeError):
        debouncer.trigger(["/x"])

    assert debouncer.state is DebounceState.IDLE
    assert debouncer.pending_args is None
