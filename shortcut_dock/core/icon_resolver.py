# shortcut_dock/core/icon_resolver.py

import logging
from typing import Optional

from .capabilities import PathCapabilities
from .errors import IconResolutionError
from .models import IconPayload, PathDescriptor

logger = logging.getLogger(__name__)


class IconResolver:
    """
    Best-effort icon acquisition for a classified path.

    Icons are advisory: whatever goes wrong here is logged and turned into
    `None` so the enclosing item carries on without one. No caching happens at
    this level; that belongs to the collaborator.
    """

    def __init__(self, capabilities: PathCapabilities, high_res: bool = True):
        self.capabilities = capabilities
        self.high_res = high_res

    async def resolve_icon(self, descriptor: PathDescriptor) -> Optional[IconPayload]:
        try:
            return await self._fetch(descriptor)
        except Exception as e:
            logger.warning(f"Icon lookup failed for '{descriptor.path}', continuing without icon: {e}")
            return None

    async def _fetch(self, descriptor: PathDescriptor) -> IconPayload:
        if descriptor.is_directory:
            payload = await self.capabilities.get_directory_icon(descriptor.path, self.high_res)
        else:
            payload = await self.capabilities.get_file_icon(descriptor.path, self.high_res)

        if payload is None or not payload.data:
            raise IconResolutionError(f"no icon data returned for '{descriptor.display_name}'")

        logger.debug(f"Resolved icon for '{descriptor.display_name}' (cached: {payload.from_cache}).")
        return payload
