# shortcut_dock/gui/action_controller.py

import asyncio
import logging
from typing import Optional, Set

from PySide6.QtCore import QObject, QUrl, Signal, Slot
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QFileDialog, QWidget

from shortcut_dock.core.capabilities import DragEventHub
from shortcut_dock.core.config_manager import AppSettings, load_settings
from shortcut_dock.core.errors import LaunchError, StorageError
from shortcut_dock.core import launcher
from shortcut_dock.core.pipeline import build_pipeline
from shortcut_dock.core.shortcut_store import DEFAULT_CATEGORY_ID

logger = logging.getLogger(__name__)


class ActionController(QObject):
    """
    The non-visual side of the GUI.

    It owns the ingestion pipeline and turns its plain callbacks into Qt
    signals the tabs connect to. Slots that start pipeline work schedule a
    coroutine on the asyncio loop hosted by Qt and return immediately.
    """
    hover_changed = Signal(bool)
    processing_changed = Signal(bool)
    running_changed = Signal(bool)
    drop_session_changed = Signal(object)
    queue_session_changed = Signal(object)
    item_changed = Signal(object)
    notice = Signal(str, str)
    batch_complete = Signal(int, int)
    item_added = Signal(str)
    categories_changed = Signal()
    shortcuts_changed = Signal()

    def __init__(self, parent_widget: Optional[QWidget] = None, settings: Optional[AppSettings] = None):
        super().__init__()
        self.parent_widget = parent_widget
        self.settings = settings or load_settings()
        self.hub = DragEventHub()
        self._tasks: Set[asyncio.Future] = set()

        self.pipeline = build_pipeline(
            self.settings,
            file_dialog=self._open_file_dialog,
            on_item_changed=self.item_changed.emit,
        )
        self.orchestrator = self.pipeline.orchestrator(
            notify=self.notice.emit,
            on_batch_complete=self.batch_complete.emit,
            on_item_added=self.item_added.emit,
            on_session_changed=self.drop_session_changed.emit,
        )
        self.coalescer = self.pipeline.coalescer(
            self.orchestrator,
            on_hover_changed=self.hover_changed.emit,
            on_processing_changed=self.processing_changed.emit,
        )
        self.queue = self.pipeline.queue_controller(
            notify=self.notice.emit,
            on_batch_complete=self.batch_complete.emit,
            on_item_added=self.item_added.emit,
            on_session_changed=self.queue_session_changed.emit,
            on_running_changed=self.running_changed.emit,
        )
        self.subscription = self.coalescer.attach(self.hub)

    @property
    def store(self):
        return self.pipeline.store

    @property
    def category_id(self) -> str:
        return self.pipeline.processor.category_id

    def is_idle(self) -> bool:
        return not (self.queue.running or self.coalescer.processing)

    def _spawn(self, coro):
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Future):
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.critical(f"GUI task failed: {error}", exc_info=error)
            self.notice.emit("error", f"Unexpected error: {error}")

    async def _open_file_dialog(self) -> Optional[str]:
        file_path, _ = QFileDialog.getOpenFileName(self.parent_widget, "Select a File to Add")
        return file_path or None

    def _open_with_desktop(self, path: str):
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(path)):
            raise LaunchError(f"the desktop could not open '{path}'")

    # --- Categories ---

    @Slot(str)
    def set_category(self, category_id: str):
        if not category_id or category_id == self.category_id:
            return
        self.pipeline.processor.category_id = category_id
        logger.info(f"New shortcuts go to category '{category_id}'.")

    @Slot(str)
    def create_category(self, name: str):
        try:
            category = self.store.create_category(name)
        except StorageError as e:
            self.notice.emit("error", f"Could not create category: {e}")
            return
        self.notice.emit("success", f"Category '{category.name}' created.")
        self.categories_changed.emit()

    @Slot(str)
    def delete_category(self, category_id: str):
        try:
            removed = self.store.delete_category(category_id)
        except StorageError as e:
            self.notice.emit("error", f"Could not delete category: {e}")
            return
        if not removed:
            return
        if self.category_id == category_id:
            self.set_category(DEFAULT_CATEGORY_ID)
        self.notice.emit("info", "Category deleted. Its shortcuts moved to the default category.")
        self.categories_changed.emit()

    # --- Shortcuts ---

    @Slot(str)
    def delete_shortcut(self, shortcut_id: str):
        try:
            removed = self.store.delete_shortcut(shortcut_id)
        except StorageError as e:
            self.notice.emit("error", f"Could not remove shortcut: {e}")
            return
        if removed:
            self.notice.emit("info", "Shortcut removed.")
            self.shortcuts_changed.emit()

    @Slot(str)
    def launch_shortcut(self, shortcut_id: str):
        try:
            record = launcher.launch_shortcut(self.store, shortcut_id, self._open_with_desktop)
        except (LaunchError, StorageError) as e:
            self.notice.emit("error", f"Could not open shortcut: {e}")
            return
        self.notice.emit("info", f"Opened '{record.name}'.")
        self.shortcuts_changed.emit()

    # --- Manual queue ---

    @Slot(str)
    def add_path(self, path: str):
        self._spawn(self.queue.add_path(path))

    @Slot()
    def add_from_dialog(self):
        self._spawn(self.queue.add_from_dialog())

    @Slot(str)
    def remove_item(self, item_id: str):
        if not self.queue.remove_item(item_id):
            self.notice.emit("warning", "The item cannot be removed right now.")

    @Slot()
    def clear_queue(self):
        if not self.queue.clear_all():
            self.notice.emit("warning", "Pause or wait for the run to finish before clearing.")

    @Slot()
    def reset_queue(self):
        if not self.queue.reset_statuses():
            self.notice.emit("warning", "Pause or wait for the run to finish before resetting.")

    @Slot()
    def start_queue(self):
        self._spawn(self.queue.start())

    @Slot()
    def pause_queue(self):
        self.queue.pause()

    @Slot()
    def resume_queue(self):
        self._spawn(self.queue.resume())

    def shutdown(self):
        """Releases the drop listener and cancels outstanding work."""
        self.subscription.close()
        for task in list(self._tasks):
            task.cancel()
