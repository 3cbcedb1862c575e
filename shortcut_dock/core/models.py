# shortcut_dock/core/models.py

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import List, Optional, Tuple

from .errors import InvalidTransitionError


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


class ItemStatus(Enum):
    """The four states an ingest item moves through, strictly forward."""
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.SUCCESS, ItemStatus.ERROR)


# The only forward moves an item may make without an explicit reset.
_ALLOWED_TRANSITIONS = {
    ItemStatus.PENDING: {ItemStatus.PROCESSING},
    ItemStatus.PROCESSING: {ItemStatus.SUCCESS, ItemStatus.ERROR},
    ItemStatus.SUCCESS: set(),
    ItemStatus.ERROR: set(),
}


@dataclass(frozen=True)
class PathDescriptor:
    """What the classifier learned about a path. Immutable once created."""
    path: str
    is_directory: bool
    display_name: str


@dataclass(frozen=True)
class PathInfo:
    """The raw answer of the `get_path_info` collaborator."""
    display_name: str
    is_directory: bool


@dataclass(frozen=True)
class IconPayload:
    """An icon as handed back by an icon collaborator (base64 data)."""
    data: str
    format: str = "png"
    from_cache: bool = False


@dataclass
class IngestItem:
    """
    One path travelling through the pipeline.

    The status is only ever changed through the `mark_*` methods, which
    enforce `pending -> processing -> success | error`. `reset()` is the
    single way back to `pending`.
    """
    path: str
    is_directory: bool
    display_name: str
    id: str = field(default_factory=new_id)
    status: ItemStatus = ItemStatus.PENDING
    error_detail: Optional[str] = None
    icon_data: Optional[str] = None

    @classmethod
    def from_descriptor(cls, descriptor: PathDescriptor) -> "IngestItem":
        return cls(
            path=descriptor.path,
            is_directory=descriptor.is_directory,
            display_name=descriptor.display_name,
        )

    @classmethod
    def unresolved(cls, path: str) -> "IngestItem":
        """An item for a path the classifier could not inspect."""
        name = PurePath(path).name if path and path.strip() else path
        return cls(path=path, is_directory=False, display_name=name or "")

    @property
    def descriptor(self) -> PathDescriptor:
        return PathDescriptor(self.path, self.is_directory, self.display_name)

    def _move_to(self, target: ItemStatus):
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Item {self.id} cannot move from {self.status.value} to {target.value}.")
        self.status = target

    def mark_processing(self):
        self._move_to(ItemStatus.PROCESSING)

    def mark_success(self, icon_data: Optional[str] = None):
        self._move_to(ItemStatus.SUCCESS)
        self.icon_data = icon_data
        self.error_detail = None

    def mark_error(self, detail: str):
        self._move_to(ItemStatus.ERROR)
        self.error_detail = detail

    def reset(self):
        self.status = ItemStatus.PENDING
        self.error_detail = None
        self.icon_data = None


@dataclass
class BatchSession:
    """The ordered run-state owned by exactly one controller."""
    items: List[IngestItem] = field(default_factory=list)
    current_index: int = 0
    paused: bool = False

    def __len__(self) -> int:
        return len(self.items)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items if item.status.is_terminal)

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.status is ItemStatus.SUCCESS)

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.items if item.status is ItemStatus.ERROR)

    @property
    def progress_percent(self) -> float:
        if not self.items:
            return 0.0
        return self.completed_count / len(self.items) * 100

    @property
    def has_remaining(self) -> bool:
        return self.current_index < len(self.items)

    def index_of(self, item_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return -1

    def get(self, item_id: str) -> Optional[IngestItem]:
        index = self.index_of(item_id)
        return self.items[index] if index >= 0 else None


@dataclass(frozen=True)
class ShortcutCreationInput:
    name: str
    path: str
    category_id: str
    icon_data: Optional[str] = None


@dataclass
class ShortcutRecord:
    """A persisted shortcut, as stored by the shortcut store."""
    name: str
    path: str
    category_id: str
    icon_data: Optional[str] = None
    id: str = field(default_factory=new_id)
    usage_count: int = 0
    last_used: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)


@dataclass
class Category:
    name: str
    id: str = field(default_factory=new_id)
    color: str = "#3B82F6"
    icon: str = "folder"
    sort_order: int = 0
    is_active: bool = True
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)


@dataclass(frozen=True)
class BatchResult:
    success_count: int = 0
    error_count: int = 0

    @property
    def total(self) -> int:
        return self.success_count + self.error_count


class DragEventType(Enum):
    ENTER = "enter"
    OVER = "over"
    DROP = "drop"
    LEAVE = "leave"


@dataclass(frozen=True)
class DragEvent:
    """A platform drag-lifecycle notification. `over` carries a position but no paths."""
    type: DragEventType
    paths: Tuple[str, ...] = ()
    position: Optional[Tuple[int, int]] = None
