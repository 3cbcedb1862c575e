# shortcut_dock/core/local_capabilities.py

import asyncio
import base64
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Optional

from .errors import CreationError, PathLookupError, StorageError
from .icon_cache import IconCache
from .models import IconPayload, PathInfo, ShortcutCreationInput, ShortcutRecord
from .shortcut_store import ShortcutStore

logger = logging.getLogger(__name__)

# Characters Windows refuses in a path. The drive colon is checked separately.
WINDOWS_INVALID_CHARS = ('<', '>', '"', '|', '?', '*')

DIRECTORY_GLYPH = "📁"

# Default glyph per extension when no native icon extractor is available.
EXTENSION_GLYPHS = {
    ("exe", "msi"): "⚙️",
    ("txt", "md", "doc", "docx"): "📄",
    ("pdf",): "📕",
    ("jpg", "jpeg", "png", "gif", "bmp"): "🖼️",
    ("mp3", "wav", "flac", "aac"): "🎵",
    ("mp4", "avi", "mkv", "mov"): "🎬",
    ("zip", "rar", "7z", "tar"): "📦",
    ("html", "htm"): "🌐",
    ("js", "ts", "py", "rs", "cpp", "c"): "💻",
}
FALLBACK_GLYPH = "📁"


def glyph_for_extension(extension: str) -> str:
    extension = extension.lower().lstrip(".")
    for extensions, glyph in EXTENSION_GLYPHS.items():
        if extension in extensions:
            return glyph
    return FALLBACK_GLYPH


def _encode_glyph(glyph: str) -> str:
    return base64.b64encode(glyph.encode("utf-8")).decode("ascii")


def check_path_legality(path: str, is_windows: bool = os.name == "nt") -> Optional[str]:
    """
    Returns the reason a path is illegal, or None when it is acceptable.

    Only the shape of the path is judged here; whether it exists is a separate
    question answered by `check_exists`.
    """
    if not path:
        return "path is empty"
    if "\x00" in path:
        return "path contains a NUL character"
    if is_windows:
        for ch in WINDOWS_INVALID_CHARS:
            if ch in path:
                return f"path contains invalid character: {ch}"
        if len(path) >= 2 and path[1] == ":" and not path[0].isalpha():
            return "invalid drive letter in path"
    return None


class LocalCapabilities:
    """
    The collaborators the pipeline uses when running on the local machine.

    Blocking filesystem work is pushed to a worker thread with
    `asyncio.to_thread` so the event loop (and the UI sharing it) stays free.

    Args:
        store: where created shortcuts are persisted.
        icon_cache: cache used by the icon lookups.
        file_dialog: coroutine function returning a chosen path or None. The GUI
            and CLI each provide their own.
    """

    def __init__(
            self,
            store: ShortcutStore,
            icon_cache: Optional[IconCache] = None,
            file_dialog: Optional[Callable[[], Awaitable[Optional[str]]]] = None,
    ):
        self.store = store
        self.icon_cache = icon_cache or IconCache()
        self.file_dialog = file_dialog

    # --- Path inspection ---

    async def get_path_info(self, path: str) -> PathInfo:
        return await asyncio.to_thread(self._path_info, path)

    @staticmethod
    def _path_info(path: str) -> PathInfo:
        candidate = Path(path)
        try:
            is_directory = candidate.is_dir()
        except OSError as e:
            raise PathLookupError(f"cannot inspect '{path}': {e}") from e
        # The name is lexical so a missing path still gets one.
        return PathInfo(display_name=candidate.name or str(candidate), is_directory=is_directory)

    async def validate_file_path(self, path: str) -> bool:
        return await asyncio.to_thread(self._validate, path, False)

    async def validate_directory_path(self, path: str) -> bool:
        return await asyncio.to_thread(self._validate, path, True)

    @staticmethod
    def _validate(path: str, expect_directory: bool) -> bool:
        reason = check_path_legality(path)
        if reason:
            logger.info(f"Rejected '{path}': {reason}")
            return False

        candidate = Path(path)
        if candidate.exists() and candidate.is_dir() != expect_directory:
            logger.info(f"Rejected '{path}': not a {'directory' if expect_directory else 'file'}")
            return False
        return True

    async def check_exists(self, path: str) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    # --- Icons ---

    async def get_file_icon(self, path: str, high_res: bool) -> Optional[IconPayload]:
        return await asyncio.to_thread(self._icon, path, high_res, False)

    async def get_directory_icon(self, path: str, high_res: bool) -> Optional[IconPayload]:
        return await asyncio.to_thread(self._icon, path, high_res, True)

    def _icon(self, path: str, high_res: bool, is_directory: bool) -> Optional[IconPayload]:
        cached = self.icon_cache.get(path, high_res)
        if cached is not None:
            return cached

        if not os.path.exists(path):
            return None
        glyph = DIRECTORY_GLYPH if is_directory else glyph_for_extension(Path(path).suffix)
        payload = IconPayload(data=_encode_glyph(glyph), format="text")
        self.icon_cache.put(path, high_res, payload)
        return payload

    # --- Shortcuts and dialogs ---

    async def create_shortcut(self, request: ShortcutCreationInput) -> ShortcutRecord:
        try:
            return await asyncio.to_thread(self.store.create_shortcut, request)
        except StorageError as e:
            raise CreationError(str(e)) from e

    async def open_file_dialog(self) -> Optional[str]:
        if self.file_dialog is None:
            logger.debug("No file dialog available in this front end.")
            return None
        return await self.file_dialog()
