# tests/test_queue_controller.py

import asyncio

import pytest

from shortcut_dock.core.drag_coalescer import ConcurrencyGuard
from shortcut_dock.core.models import BatchResult, ItemStatus
from shortcut_dock.core.queue_controller import ManualQueueController


@pytest.fixture
def controller(processor, recorder):
    return ManualQueueController(
        processor,
        inter_item_delay=0,
        notify=recorder.notify,
        on_batch_complete=recorder.batch_complete,
        on_item_added=recorder.item_added,
    )


async def queue_paths(controller, *paths):
    return [await controller.add_path(path) for path in paths]


# --- Building the queue ---

@pytest.mark.asyncio
async def test_add_path_classifies_without_validating(controller, caps):
    item = await controller.add_path("/tmp/a.txt")

    assert item.status is ItemStatus.PENDING
    assert item.display_name == "a.txt"
    assert controller.session.items == [item]
    assert [call[0] for call in caps.calls] == ["get_path_info"]


@pytest.mark.asyncio
async def test_add_blank_path_is_ignored(controller, caps, recorder):
    assert await controller.add_path("   ") is None
    assert controller.session.items == []
    assert recorder.notices == []
    assert caps.calls == []


@pytest.mark.asyncio
async def test_add_unreadable_path_is_a_notice(controller, caps, recorder):
    caps.unreadable.add("/locked")

    assert await controller.add_path("/locked") is None
    assert controller.session.items == []
    assert recorder.notices == [("error", "Cannot read path info: /locked")]


@pytest.mark.asyncio
async def test_add_from_dialog(controller, caps, recorder):
    caps.dialog_answers = ["/projects"]

    item = await controller.add_from_dialog()
    assert item.is_directory is True

    assert await controller.add_from_dialog() is None
    assert len(controller.session) == 1
    assert recorder.notices == []


@pytest.mark.asyncio
async def test_dialog_failure_is_a_notice(controller, caps, recorder):
    async def broken():
        raise RuntimeError("no display")

    caps.open_file_dialog = broken
    assert await controller.add_from_dialog() is None
    assert recorder.notices[0][0] == "error"


# --- Running the queue ---

@pytest.mark.asyncio
async def test_start_processes_whole_queue(controller, recorder):
    running = []
    controller.on_running_changed = running.append
    await queue_paths(controller, "/x", "/missing", "/y")

    result = await controller.start()

    assert result == BatchResult(2, 1)
    assert recorder.completions == [(2, 1)]
    assert recorder.added == ["/x", "/y"]
    assert recorder.notices[-1] == ("error", "Batch complete: 2 added, 1 failed")
    assert running == [True, False]
    assert controller.session.current_index == 3


@pytest.mark.asyncio
async def test_start_on_empty_queue(controller, recorder):
    assert await controller.start() is None
    assert recorder.notices == [("error", "Add files before starting.")]
    assert recorder.completions == []


@pytest.mark.asyncio
async def test_start_when_everything_is_done(controller, recorder):
    await queue_paths(controller, "/x")
    await controller.start()

    assert await controller.start() is None
    assert recorder.notices[-1][0] == "info"
    assert recorder.completions == [(1, 0)]


@pytest.mark.asyncio
async def test_pause_after_first_item_then_resume(controller, caps, recorder):
    x, y = await queue_paths(controller, "/x", "/y")

    def pause_after_first(path):
        recorder.item_added(path)
        if path == "/x":
            controller.pause()

    controller.on_item_added = pause_after_first

    assert await controller.start() is None
    assert x.status is ItemStatus.SUCCESS
    assert y.status is ItemStatus.PENDING
    assert controller.session.current_index == 1
    assert controller.running is False
    assert recorder.completions == []

    result = await controller.resume()

    assert result == BatchResult(2, 0)
    assert y.status is ItemStatus.SUCCESS
    assert [call[1] for call in caps.called("create_shortcut")] == ["/x", "/y"]
    assert recorder.completions == [(2, 0)]


@pytest.mark.asyncio
async def test_pause_when_idle_does_nothing(controller):
    await queue_paths(controller, "/x")
    controller.pause()
    assert controller.session.paused is False


@pytest.mark.asyncio
async def test_reset_statuses(controller):
    good, bad = await queue_paths(controller, "/x", "/missing")
    await controller.start()
    assert good.icon_data is not None
    assert bad.error_detail

    assert controller.reset_statuses() is True

    for item in (good, bad):
        assert item.status is ItemStatus.PENDING
        assert item.error_detail is None
        assert item.icon_data is None
    assert controller.session.current_index == 0


@pytest.mark.asyncio
async def test_mutations_refused_while_running(controller, caps):
    caps.create_delay = 0.05
    x, _ = await queue_paths(controller, "/x", "/y")

    run = asyncio.ensure_future(controller.start())
    await asyncio.sleep(0.01)
    assert controller.running is True

    assert controller.remove_item(x.id) is False
    assert controller.clear_all() is False
    assert controller.reset_statuses() is False
    assert await controller.start() is None

    await run
    assert len(controller.session) == 2
    assert len(caps.called("create_shortcut")) == 2


@pytest.mark.asyncio
async def test_removing_before_the_cursor_keeps_the_next_item(controller, caps):
    x, y, z = await queue_paths(controller, "/x", "/y", "/z")
    controller.on_item_added = lambda path: controller.pause() if path == "/x" else None
    await controller.start()
    assert controller.session.current_index == 1

    assert controller.remove_item(x.id) is True
    assert controller.session.current_index == 0
    assert controller.remove_item(z.id) is True
    assert controller.session.current_index == 0

    await controller.resume()
    assert [call[1] for call in caps.called("create_shortcut")] == ["/x", "/y"]
    assert y.status is ItemStatus.SUCCESS


@pytest.mark.asyncio
async def test_remove_unknown_item(controller):
    assert controller.remove_item("nope") is False


@pytest.mark.asyncio
async def test_clear_all(controller):
    await queue_paths(controller, "/x", "/y")
    assert controller.clear_all() is True
    assert len(controller.session) == 0
    assert controller.session.current_index == 0


@pytest.mark.asyncio
async def test_busy_shared_guard_refuses_start(processor, recorder):
    guard = ConcurrencyGuard("shared")
    controller = ManualQueueController(processor, inter_item_delay=0, guard=guard, notify=recorder.notify)
    await controller.add_path("/x")

    guard.try_acquire()
    assert await controller.start() is None
    assert recorder.notices[-1][0] == "warning"
    assert controller.session.items[0].status is ItemStatus.PENDING

    guard.release()
    assert await controller.start() == BatchResult(1, 0)
    assert guard.busy is False


@pytest.mark.asyncio
async def test_inter_item_delay_only_between_items(processor, monkeypatch):
    sleeps = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay, *args):
        sleeps.append(delay)
        await real_sleep(0)

    controller = ManualQueueController(processor, inter_item_delay=0.1)
    await controller.add_path("/x")
    await controller.add_path("/y")
    await controller.add_path("/z")

    monkeypatch.setattr("shortcut_dock.core.queue_controller.asyncio.sleep", fake_sleep)
    await controller.start()

    assert sleeps == [0.1, 0.1]


@pytest.mark.asyncio
async def test_add_path_survives_a_crashing_collaborator(controller, caps, recorder):
    caps.crashing.add("/boom")

    assert await controller.add_path("/boom") is None
    assert controller.session.items == []
    assert recorder.notices == [("error", "Cannot read path info: /boom")]


@pytest.mark.asyncio
async def test_run_keeps_the_category_it_started_with(controller, caps, processor):
    processor.category_id = "work"
    caps.create_delay = 0.02
    await queue_paths(controller, "/x", "/y")

    run = asyncio.ensure_future(controller.start())
    await asyncio.sleep(0.005)
    processor.category_id = "home"
    await run

    assert [request.category_id for request in caps.created] == ["work", "work"]
