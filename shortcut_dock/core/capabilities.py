# shortcut_dock/core/capabilities.py

import logging
from typing import Callable, List, Optional, Protocol

from .models import DragEvent, IconPayload, PathInfo, ShortcutCreationInput, ShortcutRecord

logger = logging.getLogger(__name__)

DragListener = Callable[[DragEvent], None]


class PathCapabilities(Protocol):
    """
    The narrow interface through which the pipeline reaches the outside world.

    Every method is a coroutine: each call is a suspension point and may take
    arbitrarily long without blocking the event loop.
    """

    async def get_path_info(self, path: str) -> PathInfo:
        """Raises `PathLookupError` when the path cannot be inspected."""
        ...

    async def validate_file_path(self, path: str) -> bool:
        ...

    async def validate_directory_path(self, path: str) -> bool:
        ...

    async def check_exists(self, path: str) -> bool:
        ...

    async def get_file_icon(self, path: str, high_res: bool) -> Optional[IconPayload]:
        ...

    async def get_directory_icon(self, path: str, high_res: bool) -> Optional[IconPayload]:
        ...

    async def create_shortcut(self, request: ShortcutCreationInput) -> ShortcutRecord:
        """Raises `CreationError` with a user-facing message on rejection."""
        ...

    async def open_file_dialog(self) -> Optional[str]:
        """Returns None when the user cancels."""
        ...


class DragEventSource(Protocol):
    """A process-wide drag-event stream. `subscribe` returns the matching unsubscribe."""

    def subscribe(self, listener: DragListener) -> Callable[[], None]:
        ...


class DragEventHub:
    """
    An in-process drag-event source.

    Widgets that receive native drag notifications publish them here; the
    coalescer subscribes. Listeners are called synchronously in subscription
    order.
    """

    def __init__(self):
        self._listeners: List[DragListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: DragListener) -> Callable[[], None]:
        self._listeners.append(listener)
        logger.debug(f"Drag listener subscribed ({len(self._listeners)} active).")

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
                logger.debug(f"Drag listener unsubscribed ({len(self._listeners)} active).")

        return unsubscribe

    def publish(self, event: DragEvent):
        # Iterate over a copy: a listener may unsubscribe while being notified.
        for listener in list(self._listeners):
            listener(event)


# User-visible notices ("toasts"). Levels: "info", "success", "warning", "error".
Notifier = Callable[[str, str], None]

_NOTICE_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_notifier(level: str, message: str):
    """The default notifier when no UI is attached: notices go to the log."""
    logger.log(_NOTICE_LEVELS.get(level, logging.INFO), f"[{level.upper()}] {message}")
