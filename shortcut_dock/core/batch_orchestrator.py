# shortcut_dock/core/batch_orchestrator.py

import logging
from typing import Callable, Optional, Sequence

from .capabilities import Notifier, log_notifier
from .errors import PathLookupError
from .item_processor import ItemProcessor
from .models import BatchResult, BatchSession, IngestItem

logger = logging.getLogger(__name__)


def summarize(result: BatchResult) -> str:
    return f"{result.success_count} added, {result.error_count} failed"


class BatchOrchestrator:
    """
    The automatic path: runs the Item Processor over a dropped path list.

    Items are processed strictly one after another in the order the platform
    reported them. The collaborators never see two requests from the same
    batch at once, and progress only ever moves forward.
    """

    def __init__(
            self,
            processor: ItemProcessor,
            notify: Notifier = log_notifier,
            on_batch_complete: Optional[Callable[[int, int], None]] = None,
            on_item_added: Optional[Callable[[str], None]] = None,
            on_session_changed: Optional[Callable[[BatchSession], None]] = None,
    ):
        self.processor = processor
        self.notify = notify
        self.on_batch_complete = on_batch_complete
        self.on_item_added = on_item_added
        self.on_session_changed = on_session_changed
        # The most recent run stays readable after it finishes.
        self.session = BatchSession()

    def _session_changed(self):
        if self.on_session_changed:
            self.on_session_changed(self.session)

    async def run_batch(self, paths: Sequence[str]) -> BatchResult:
        """
        Processes every path and reports once.

        Returns:
            The success and error tallies. An empty list returns 0/0 after a
            notice, without firing the completion callback.
        """
        if not paths:
            logger.warning("Batch dispatched with no paths.")
            self.notify("error", "No files detected.")
            return BatchResult()

        logger.info(f"Starting batch of {len(paths)} item(s).")
        self.session = BatchSession()
        # New items keep going to the category chosen when the batch began.
        category_id = self.processor.category_id
        success_count = 0
        error_count = 0

        for index, path in enumerate(paths):
            self.session.current_index = index
            if await self._process_one(path, category_id):
                success_count += 1
                if self.on_item_added:
                    self.on_item_added(path)
            else:
                error_count += 1
            self.session.current_index = index + 1
            self._session_changed()

        result = BatchResult(success_count, error_count)
        logger.info(f"Batch complete: {summarize(result)}.")
        self.notify("error" if error_count else "success", summarize(result))
        if self.on_batch_complete:
            self.on_batch_complete(success_count, error_count)
        return result

    async def _process_one(self, path: str, category_id: str) -> bool:
        try:
            item = await self.processor.intake(path)
        except PathLookupError as e:
            logger.error(f"Could not inspect dropped path '{path}': {e}")
            return self._reject(path, f"path invalid: {e}")
        except Exception as e:
            logger.error(f"Unexpected error while inspecting dropped path '{path}': {e}", exc_info=True)
            return self._reject(path, f"path invalid: {str(e) or type(e).__name__}")

        self.session.items.append(item)
        self._session_changed()
        return await self.processor.process(item, category_id)

    def _reject(self, path: str, detail: str) -> bool:
        item = IngestItem.unresolved(path)
        self.session.items.append(item)
        return self.processor.reject(item, detail)
