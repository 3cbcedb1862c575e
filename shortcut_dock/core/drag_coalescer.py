# shortcut_dock/core/drag_coalescer.py

import asyncio
import logging
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Optional, Sequence, Set, Tuple

from .capabilities import DragEventSource
from .models import DragEvent, DragEventType

logger = logging.getLogger(__name__)

# Reference quiescence window. The real value comes from the settings file.
DEFAULT_DEBOUNCE_SECONDS = 0.3


class DebounceState(Enum):
    IDLE = auto()
    ARMED = auto()
    FIRED = auto()


class Debouncer:
    """
    A trailing-edge debounce written as an explicit state machine.

        IDLE --trigger--> ARMED --quiet window elapses--> FIRED --callback done--> IDLE
                            ^ |
                            +-+ trigger again: previous argument superseded, timer restarted

    Only the argument of the last `trigger()` in a burst reaches the callback.
    Superseded arguments are dropped, never queued.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], wait_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        self.callback = callback
        self.wait_seconds = wait_seconds
        self._pending_args: Optional[Tuple] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline: float = 0.0
        self._tasks: Set[asyncio.Future] = set()

    @property
    def state(self) -> DebounceState:
        # Derived from what the debouncer holds: an armed timer, or running callbacks.
        if self._handle is not None:
            return DebounceState.ARMED
        if self._tasks:
            return DebounceState.FIRED
        return DebounceState.IDLE

    @property
    def pending_args(self) -> Optional[Tuple]:
        return self._pending_args

    def trigger(self, *args):
        """Arms the timer for `args`. Needs a running event loop; under the GUI that is the QtAsyncio loop."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Debounce re-armed; previous dispatch superseded.")

        self._pending_args = args
        self._deadline = loop.time() + self.wait_seconds
        self._handle = loop.call_later(self.wait_seconds, self._fire)

    def cancel(self):
        """Disarms a pending dispatch. An already running callback is left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending_args = None

    def _fire(self):
        args = self._pending_args or ()
        self._handle = None
        self._pending_args = None

        task = asyncio.get_running_loop().create_task(self._run(args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, args: Tuple):
        try:
            await self.callback(*args)
        except Exception as e:
            logger.error(f"Debounced dispatch failed: {e}", exc_info=True)

    async def wait_idle(self):
        """Waits until no dispatch is armed and every fired callback has finished."""
        loop = asyncio.get_running_loop()
        while self.state is not DebounceState.IDLE:
            if self._handle is not None:
                await asyncio.sleep(max(self._deadline - loop.time(), 0))
            else:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
                # Let the done-callbacks drop the finished tasks.
                await asyncio.sleep(0)


class ConcurrencyGuard:
    """
    At most one batch in flight. A trigger that finds the guard busy is dropped.

    `try_acquire` checks and sets the flag in a single synchronous step, so no
    other task can slip in between the check and the set on a single-threaded
    event loop.
    """

    def __init__(self, name: str = "batch"):
        self.name = name
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def try_acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self):
        self._busy = False


class DragEventCoalescer:
    """
    Turns the raw drag-lifecycle stream into two things the UI cares about:
    a `hover_active` flag and, after debouncing, a single batch dispatch.

    Args:
        run_batch: coroutine function called with the dropped path list.
        debounce_seconds: quiescence window for the trailing-edge debounce.
        guard: shared or private at-most-one-batch guard.
    """

    def __init__(
            self,
            run_batch: Callable[[Sequence[str]], Awaitable[Any]],
            debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
            guard: Optional[ConcurrencyGuard] = None,
            on_hover_changed: Optional[Callable[[bool], None]] = None,
            on_processing_changed: Optional[Callable[[bool], None]] = None,
    ):
        self.run_batch = run_batch
        self.guard = guard or ConcurrencyGuard("drop")
        self.debouncer = Debouncer(self._dispatch, debounce_seconds)
        self.on_hover_changed = on_hover_changed
        self.on_processing_changed = on_processing_changed
        self._hover_active = False
        self._processing = False

    @property
    def hover_active(self) -> bool:
        return self._hover_active

    @property
    def processing(self) -> bool:
        return self._processing

    def attach(self, source: DragEventSource) -> "DragSubscription":
        return DragSubscription(self, source)

    def handle_event(self, event: DragEvent):
        if event.type in (DragEventType.ENTER, DragEventType.OVER):
            self._set_hover(True)
        elif event.type is DragEventType.LEAVE:
            self._set_hover(False)
        elif event.type is DragEventType.DROP:
            self._set_hover(False)
            logger.debug(f"Drop received with {len(event.paths)} path(s); debouncing.")
            self.debouncer.trigger(tuple(event.paths))

    async def _dispatch(self, paths: Tuple[str, ...]):
        if not self.guard.try_acquire():
            logger.debug(f"Guard '{self.guard.name}' busy; discarding drop of {len(paths)} path(s).")
            return

        self._set_processing(True)
        try:
            await self.run_batch(list(paths))
        finally:
            self.guard.release()
            self._set_processing(False)

    def _set_hover(self, value: bool):
        if self._hover_active != value:
            self._hover_active = value
            if self.on_hover_changed:
                self.on_hover_changed(value)

    def _set_processing(self, value: bool):
        if self._processing != value:
            self._processing = value
            if self.on_processing_changed:
                self.on_processing_changed(value)


class DragSubscription:
    """
    The coalescer's scoped hold on a drag-event source.

    Acquired on session start, released deterministically by `close()` (or the
    end of a `with` block). After release, events still in transit from the
    source are ignored and any armed dispatch is disarmed.
    """

    def __init__(self, coalescer: DragEventCoalescer, source: DragEventSource):
        self._coalescer = coalescer
        self._active = True
        self._unsubscribe = source.subscribe(self._deliver)
        logger.info("Drag-event listener attached.")

    @property
    def active(self) -> bool:
        return self._active

    def _deliver(self, event: DragEvent):
        if self._active:
            self._coalescer.handle_event(event)

    def close(self):
        if not self._active:
            return
        self._active = False
        self._unsubscribe()
        self._coalescer.debouncer.cancel()
        self._coalescer._set_hover(False)
        logger.info("Drag-event listener released.")

    def __enter__(self) -> "DragSubscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
