# shortcut_dock/core/pipeline.py

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .batch_orchestrator import BatchOrchestrator
from .capabilities import Notifier, log_notifier
from .config_manager import AppSettings
from .drag_coalescer import ConcurrencyGuard, DragEventCoalescer
from .icon_cache import IconCache
from .item_processor import ItemObserver, ItemProcessor
from .local_capabilities import LocalCapabilities
from .queue_controller import ManualQueueController
from .shortcut_store import ShortcutStore

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """
    The wired-up ingestion components for one front end.

    Both entry points are built around the same `ItemProcessor`. When the
    settings ask for it they also share one `ConcurrencyGuard`, so a drop and a
    manual run never overlap.
    """
    settings: AppSettings
    store: ShortcutStore
    capabilities: LocalCapabilities
    processor: ItemProcessor
    guard: Optional[ConcurrencyGuard] = None

    def orchestrator(self, notify: Notifier = log_notifier, **callbacks) -> BatchOrchestrator:
        return BatchOrchestrator(self.processor, notify=notify, **callbacks)

    def queue_controller(self, notify: Notifier = log_notifier, **callbacks) -> ManualQueueController:
        return ManualQueueController(
            self.processor,
            inter_item_delay=self.settings.ingest.inter_item_delay_seconds,
            guard=self.guard,
            notify=notify,
            **callbacks,
        )

    def coalescer(self, orchestrator: BatchOrchestrator, **callbacks) -> DragEventCoalescer:
        return DragEventCoalescer(
            orchestrator.run_batch,
            debounce_seconds=self.settings.ingest.debounce_seconds,
            guard=self.guard,
            **callbacks,
        )


def build_pipeline(
        settings: AppSettings,
        category_id: Optional[str] = None,
        file_dialog: Optional[Callable[[], Awaitable[Optional[str]]]] = None,
        on_item_changed: Optional[ItemObserver] = None,
) -> Pipeline:
    """Creates the store, the local collaborators and the shared processor from the settings."""
    ingest = settings.ingest
    store = ShortcutStore(settings.data_path)
    cache = IconCache(ingest.icon_cache_max_entries, ingest.icon_cache_max_age_seconds)
    capabilities = LocalCapabilities(store, icon_cache=cache, file_dialog=file_dialog)
    processor = ItemProcessor(
        capabilities,
        category_id or settings.default_category_id,
        high_res_icons=ingest.high_res_icons,
        on_item_changed=on_item_changed,
    )
    guard = ConcurrencyGuard("ingest") if ingest.share_guard else None
    logger.debug(
        f"Pipeline built: store='{store.data_file}', category='{processor.category_id}', "
        f"shared guard={'yes' if guard else 'no'}.")
    return Pipeline(settings, store, capabilities, processor, guard)
