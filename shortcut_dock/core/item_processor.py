# shortcut_dock/core/item_processor.py

import logging
from typing import Callable, Optional

from .capabilities import PathCapabilities
from .errors import IngestError, NotFoundError, ValidationError
from .icon_resolver import IconResolver
from .models import IngestItem, ItemStatus, ShortcutCreationInput
from .path_inspector import PathInspector, derive_shortcut_name

logger = logging.getLogger(__name__)

ItemObserver = Callable[[IngestItem], None]


class ItemProcessor:
    """
    One unit of work for a single path: classify, validate, confirm existence,
    resolve an icon, and hand the shortcut to the creation collaborator.

    This is the only component that moves items through their states. Both the
    automatic (drop) path and the manual queue call it, so the two entry points
    cannot drift apart.
    """

    def __init__(
            self,
            capabilities: PathCapabilities,
            category_id: str,
            high_res_icons: bool = True,
            on_item_changed: Optional[ItemObserver] = None,
    ):
        self.capabilities = capabilities
        self.category_id = category_id
        self.inspector = PathInspector(capabilities)
        self.icon_resolver = IconResolver(capabilities, high_res=high_res_icons)
        self.on_item_changed = on_item_changed

    def _changed(self, item: IngestItem):
        if self.on_item_changed:
            self.on_item_changed(item)

    async def intake(self, path: str) -> IngestItem:
        """Classifies a path and wraps it in a fresh `pending` item. Raises `PathLookupError`."""
        descriptor = await self.inspector.classify(path)
        return IngestItem.from_descriptor(descriptor)

    def reject(self, item: IngestItem, detail: str) -> bool:
        """
        Fails a `pending` item that never reached processing proper, for example
        a dropped path the classifier could not inspect. Always returns False.
        """
        item.mark_processing()
        self._changed(item)
        item.mark_error(detail)
        self._changed(item)
        return False

    async def process(self, item: IngestItem, category_id: Optional[str] = None) -> bool:
        """
        Drives a `pending` item to `success` or `error`.

        Args:
            item: the `pending` item to process.
            category_id: where the shortcut goes. Callers running a batch pass
                the category they captured when the batch began; without it
                the processor's current category is used.

        Returns:
            True when the shortcut was created, False otherwise. Failures are
            recorded on the item and never raised.
        """
        # The status flips before the first await so any view rendered while
        # the collaborators are busy shows this item as in flight.
        item.mark_processing()
        self._changed(item)

        descriptor = item.descriptor
        kind = "directory" if descriptor.is_directory else "file"
        try:
            if not await self.inspector.validate(descriptor):
                raise ValidationError("path invalid")

            if not await self.inspector.check_exists(descriptor):
                raise NotFoundError(f"{kind} does not exist")

            icon = await self.icon_resolver.resolve_icon(descriptor)
            icon_data = icon.data if icon else None

            request = ShortcutCreationInput(
                name=derive_shortcut_name(descriptor),
                path=descriptor.path,
                category_id=category_id or self.category_id,
                icon_data=icon_data,
            )
            await self.capabilities.create_shortcut(request)

        except IngestError as e:
            logger.error(f"Failed to ingest '{descriptor.path}': {e}")
            item.mark_error(str(e))
        except Exception as e:
            logger.error(f"Unexpected error while ingesting '{descriptor.path}': {e}", exc_info=True)
            item.mark_error(str(e) or type(e).__name__)
        else:
            item.mark_success(icon_data)
            logger.info(f"Created shortcut '{request.name}' for '{descriptor.path}'.")

        self._changed(item)
        return item.status is ItemStatus.SUCCESS
