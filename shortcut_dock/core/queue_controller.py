# shortcut_dock/core/queue_controller.py

import asyncio
import logging
from typing import Callable, Optional

from .batch_orchestrator import summarize
from .capabilities import Notifier, log_notifier
from .drag_coalescer import ConcurrencyGuard
from .errors import PathLookupError
from .item_processor import ItemProcessor
from .models import BatchResult, BatchSession, IngestItem, ItemStatus

logger = logging.getLogger(__name__)

# Reference pause between two items. The real value comes from the settings file.
DEFAULT_INTER_ITEM_DELAY_SECONDS = 0.1


class ManualQueueController:
    """
    The user-curated entry point: items are added one at a time, shown as a
    list, then processed in order under explicit start/pause/resume/reset.

    The controller owns its `BatchSession` exclusively. Pausing is cooperative:
    it is honoured at the next item boundary and an item already being
    processed always runs to completion.
    """

    def __init__(
            self,
            processor: ItemProcessor,
            inter_item_delay: float = DEFAULT_INTER_ITEM_DELAY_SECONDS,
            guard: Optional[ConcurrencyGuard] = None,
            notify: Notifier = log_notifier,
            on_batch_complete: Optional[Callable[[int, int], None]] = None,
            on_item_added: Optional[Callable[[str], None]] = None,
            on_session_changed: Optional[Callable[[BatchSession], None]] = None,
            on_running_changed: Optional[Callable[[bool], None]] = None,
    ):
        self.processor = processor
        self.inter_item_delay = inter_item_delay
        self.guard = guard or ConcurrencyGuard("queue")
        self.notify = notify
        self.on_batch_complete = on_batch_complete
        self.on_item_added = on_item_added
        self.on_session_changed = on_session_changed
        self.on_running_changed = on_running_changed
        self.session = BatchSession()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def _changed(self):
        if self.on_session_changed:
            self.on_session_changed(self.session)

    def _set_running(self, value: bool):
        self._running = value
        if self.on_running_changed:
            self.on_running_changed(value)

    def _refuse_while_running(self, action: str) -> bool:
        if self._running:
            logger.warning(f"Cannot {action} while the queue is being processed.")
            return True
        return False

    # --- Building the queue ---

    async def add_path(self, path: str) -> Optional[IngestItem]:
        """
        Classifies a path right away and appends it as a `pending` item.

        Validation and icons wait until processing. Returns the new item, or
        None when the input was blank or could not be inspected.
        """
        if not path or not path.strip():
            return None

        try:
            item = await self.processor.intake(path)
        except PathLookupError as e:
            logger.error(f"Could not add '{path}' to the queue: {e}")
            self.notify("error", f"Cannot read path info: {path.strip()}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error while adding '{path}' to the queue: {e}", exc_info=True)
            self.notify("error", f"Cannot read path info: {path.strip()}")
            return None

        self.session.items.append(item)
        logger.info(f"Queued '{item.display_name}' ({'directory' if item.is_directory else 'file'}).")
        self._changed()
        return item

    async def add_from_dialog(self) -> Optional[IngestItem]:
        """Asks the user for a path. Cancelling the dialog is a silent no-op."""
        try:
            path = await self.processor.capabilities.open_file_dialog()
        except Exception as e:
            logger.error(f"File dialog failed: {e}", exc_info=True)
            self.notify("error", "Could not open the file dialog.")
            return None

        if not path:
            logger.debug("File dialog cancelled.")
            return None
        return await self.add_path(path)

    def remove_item(self, item_id: str) -> bool:
        if self._refuse_while_running("remove an item"):
            return False

        index = self.session.index_of(item_id)
        if index < 0:
            logger.warning(f"No queued item with id '{item_id}'.")
            return False

        del self.session.items[index]
        # Keep the cursor on the same next item.
        if index < self.session.current_index:
            self.session.current_index -= 1
        self._changed()
        return True

    def clear_all(self) -> bool:
        if self._refuse_while_running("clear the queue"):
            return False

        self.session.items.clear()
        self.session.current_index = 0
        self.session.paused = False
        self._changed()
        return True

    def reset_statuses(self) -> bool:
        """The one way to send processed items back to `pending`."""
        if self._refuse_while_running("reset the queue"):
            return False

        for item in self.session.items:
            item.reset()
        self.session.current_index = 0
        self.session.paused = False
        logger.info(f"Queue reset: {len(self.session)} item(s) back to pending.")
        self._changed()
        return True

    # --- Running the queue ---

    def pause(self):
        if not self._running:
            return
        self.session.paused = True
        logger.info(f"Pause requested; stopping after item {self.session.current_index + 1}.")
        self._changed()

    async def resume(self) -> Optional[BatchResult]:
        return await self.start()

    async def start(self) -> Optional[BatchResult]:
        """
        Processes the queue from the cursor onwards.

        Returns:
            The session's totals when the end of the queue was reached, None
            when the run was paused or could not start.
        """
        if self._running:
            logger.debug("Start ignored: the queue is already running.")
            return None
        if not self.session.items:
            self.notify("error", "Add files before starting.")
            return None
        if not self.session.has_remaining:
            self.notify("info", "Every item has been processed. Reset to run the queue again.")
            return None
        if not self.guard.try_acquire():
            self.notify("warning", "Another batch is in progress. Try again when it finishes.")
            return None

        self.session.paused = False
        self._set_running(True)
        logger.info(f"Processing queue from item {self.session.current_index + 1} of {len(self.session)}.")
        try:
            await self._run_from_cursor(self.processor.category_id)
        finally:
            self.guard.release()
            self._set_running(False)

        if self.session.has_remaining:
            logger.info(f"Queue paused at item {self.session.current_index + 1} of {len(self.session)}.")
            return None

        result = BatchResult(self.session.success_count, self.session.error_count)
        logger.info(f"Queue complete: {summarize(result)}.")
        self.notify("error" if result.error_count else "success", f"Batch complete: {summarize(result)}")
        if self.on_batch_complete:
            self.on_batch_complete(result.success_count, result.error_count)
        return result

    async def _run_from_cursor(self, category_id: str):
        # A run keeps the category it started with, even if the picker changes meanwhile.
        session = self.session
        while session.has_remaining:
            if session.paused:
                break

            item = session.items[session.current_index]
            if item.status is ItemStatus.PENDING:
                if await self.processor.process(item, category_id) and self.on_item_added:
                    self.on_item_added(item.path)
            session.current_index += 1
            self._changed()

            if session.has_remaining and not session.paused and self.inter_item_delay > 0:
                await asyncio.sleep(self.inter_item_delay)
