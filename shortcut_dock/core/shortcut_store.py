# shortcut_dock/core/shortcut_store.py

import json
import logging
import shutil
import threading
from dataclasses import asdict, fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import StorageError
from .models import Category, ShortcutCreationInput, ShortcutRecord

logger = logging.getLogger(__name__)

STORE_VERSION = "1.0"
DEFAULT_CATEGORY_ID = "default"
DEFAULT_CATEGORY_NAME = "Default"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_dict(cls, raw: Dict[str, Any]):
    """Builds a dataclass from a stored dict, ignoring keys it does not know."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in raw.items() if k in known})


class ShortcutStore:
    """
    The JSON document that holds every shortcut and category.

    Reads are served from memory after the first load. Every write follows the
    same discipline: copy the current file to `*.json.bak`, write the new
    document, and restore the backup if the write fails.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)
        self.backup_file = self.data_file.with_suffix(".json.bak")
        self._shortcuts: List[ShortcutRecord] = []
        self._categories: List[Category] = []
        self._loaded = False
        # Mutations arrive from worker threads (asyncio.to_thread).
        self._lock = threading.RLock()

    # --- Loading and saving ---

    def load(self):
        with self._lock:
            if not self.data_file.exists():
                logger.info(f"No shortcut store at '{self.data_file}'. Starting with defaults.")
                self._shortcuts = []
                self._categories = [Category(name=DEFAULT_CATEGORY_NAME, id=DEFAULT_CATEGORY_ID)]
                self._loaded = True
                return

            try:
                with open(self.data_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise TypeError(f"expected a JSON object, found {type(data).__name__}")
                self._shortcuts = [_from_dict(ShortcutRecord, s) for s in data.get("shortcuts", [])]
                self._categories = [_from_dict(Category, c) for c in data.get("categories", [])]
            except (OSError, json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.error(f"Failed to read shortcut store '{self.data_file}': {e}", exc_info=True)
                raise StorageError(f"Failed to read shortcut store: {e}") from e

            if not any(c.id == DEFAULT_CATEGORY_ID for c in self._categories):
                self._categories.insert(0, Category(name=DEFAULT_CATEGORY_NAME, id=DEFAULT_CATEGORY_ID))
            self._loaded = True
            logger.info(
                f"Loaded {len(self._shortcuts)} shortcuts in {len(self._categories)} categories "
                f"from '{self.data_file}'.")

    def _ensure_loaded(self):
        if not self._loaded:
            self.load()

    def save(self):
        with self._lock:
            document = {
                "version": STORE_VERSION,
                "last_updated": _utc_now(),
                "categories": [asdict(c) for c in self._categories],
                "shortcuts": [asdict(s) for s in self._shortcuts],
            }
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            had_backup = False
            try:
                if self.data_file.exists():
                    shutil.copy(self.data_file, self.backup_file)
                    had_backup = True
                with open(self.data_file, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
            except OSError as e:
                logger.error(f"Failed to write shortcut store: {e}", exc_info=True)
                if had_backup and self.backup_file.exists():
                    shutil.copy(self.backup_file, self.data_file)
                    logger.warning("Restored shortcut store from backup after a failed save.")
                raise StorageError(f"Failed to save shortcuts: {e}") from e

    # --- Categories ---

    def list_categories(self) -> List[Category]:
        with self._lock:
            self._ensure_loaded()
            return sorted(self._categories, key=lambda c: c.sort_order)

    def get_category(self, category_id: str) -> Optional[Category]:
        with self._lock:
            self._ensure_loaded()
            return next((c for c in self._categories if c.id == category_id), None)

    def create_category(self, name: str) -> Category:
        name = name.strip()
        if not name:
            raise StorageError("category name is empty")

        with self._lock:
            self._ensure_loaded()
            if any(c.name.lower() == name.lower() for c in self._categories):
                raise StorageError(f"category '{name}' already exists")
            category = Category(name=name, sort_order=len(self._categories))
            self._categories.append(category)
            try:
                self.save()
            except StorageError:
                self._categories.remove(category)
                raise
            logger.info(f"Created category '{name}' ({category.id}).")
            return category

    def delete_category(self, category_id: str) -> bool:
        """
        Removes a category and moves its shortcuts to the default category.

        A moved shortcut whose path the default category already holds is
        dropped instead. Returns False when no such category exists.

        Raises:
            StorageError: for the default category, or if the save fails.
        """
        if category_id == DEFAULT_CATEGORY_ID:
            raise StorageError("the default category cannot be deleted")

        with self._lock:
            self._ensure_loaded()
            category = self.get_category(category_id)
            if category is None:
                return False

            old_categories, old_shortcuts = self._categories, self._shortcuts
            default_paths = {s.path for s in old_shortcuts if s.category_id == DEFAULT_CATEGORY_ID}
            shortcuts = []
            for shortcut in old_shortcuts:
                if shortcut.category_id != category_id:
                    shortcuts.append(shortcut)
                elif shortcut.path in default_paths:
                    logger.info(f"Dropping '{shortcut.name}': the default category already holds its path.")
                else:
                    shortcuts.append(replace(shortcut, category_id=DEFAULT_CATEGORY_ID, updated_at=_utc_now()))
                    default_paths.add(shortcut.path)

            self._categories = [c for c in old_categories if c.id != category_id]
            self._shortcuts = shortcuts
            try:
                self.save()
            except StorageError:
                self._categories, self._shortcuts = old_categories, old_shortcuts
                raise
            logger.info(f"Deleted category '{category.name}' ({category_id}).")
            return True

    # --- Shortcuts ---

    def get_shortcut(self, shortcut_id: str) -> Optional[ShortcutRecord]:
        with self._lock:
            self._ensure_loaded()
            return next((s for s in self._shortcuts if s.id == shortcut_id), None)

    def list_shortcuts(self, category_id: Optional[str] = None) -> List[ShortcutRecord]:
        with self._lock:
            self._ensure_loaded()
            shortcuts = [s for s in self._shortcuts if category_id is None or s.category_id == category_id]
            return sorted(shortcuts, key=lambda s: s.sort_order)

    def create_shortcut(self, request: ShortcutCreationInput) -> ShortcutRecord:
        with self._lock:
            self._ensure_loaded()
            if self.get_category(request.category_id) is None:
                raise StorageError(f"category '{request.category_id}' does not exist")
            if any(s.path == request.path and s.category_id == request.category_id for s in self._shortcuts):
                raise StorageError(f"shortcut already exists: {request.name}")

            record = ShortcutRecord(
                name=request.name,
                path=request.path,
                category_id=request.category_id,
                icon_data=request.icon_data,
                sort_order=len(self._shortcuts),
            )
            self._shortcuts.append(record)
            try:
                self.save()
            except StorageError:
                self._shortcuts.remove(record)
                raise
            logger.debug(f"Stored shortcut '{record.name}' -> '{record.path}'.")
            return record

    def delete_shortcut(self, shortcut_id: str) -> bool:
        with self._lock:
            self._ensure_loaded()
            before = len(self._shortcuts)
            self._shortcuts = [s for s in self._shortcuts if s.id != shortcut_id]
            if len(self._shortcuts) == before:
                return False
            self.save()
            return True

    def record_usage(self, shortcut_id: str) -> ShortcutRecord:
        """Counts one launch of a shortcut and stamps `last_used`. Raises `StorageError`."""
        with self._lock:
            self._ensure_loaded()
            index = next((i for i, s in enumerate(self._shortcuts) if s.id == shortcut_id), None)
            if index is None:
                raise StorageError(f"shortcut '{shortcut_id}' does not exist")

            previous = self._shortcuts[index]
            now = _utc_now()
            record = replace(previous, usage_count=previous.usage_count + 1, last_used=now, updated_at=now)
            self._shortcuts[index] = record
            try:
                self.save()
            except StorageError:
                self._shortcuts[index] = previous
                raise
            return record
