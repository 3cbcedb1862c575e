# shortcut_dock/gui/queue_model.py

from typing import List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from shortcut_dock.core.models import BatchSession, IngestItem, ItemStatus
from .resources import get_icon


class QueueModel(QAbstractTableModel):
    """
    Table model over the items of a `BatchSession`.

    The model keeps its own list of rows and is refreshed from the session on
    every change notification, so a single item changing state only repaints
    that row.
    """

    COLUMN_STATUS, COLUMN_NAME, COLUMN_TYPE, COLUMN_PATH = range(4)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._items: List[IngestItem] = []
        self._current_index = 0
        self._headers = ["", "Name", "Type", "Path"]
        self._status_icons = {
            ItemStatus.PENDING: get_icon("pending"),
            ItemStatus.PROCESSING: get_icon("processing"),
            ItemStatus.SUCCESS: get_icon("success"),
            ItemStatus.ERROR: get_icon("error"),
        }

    # --- QAbstractTableModel ---

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._items)

    def columnCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None

        item = self._items[index.row()]
        col = index.column()

        if role == Qt.DisplayRole:
            if col == self.COLUMN_NAME:
                return item.display_name
            if col == self.COLUMN_TYPE:
                return "Directory" if item.is_directory else "File"
            if col == self.COLUMN_PATH:
                return item.path

        if role == Qt.DecorationRole and col == self.COLUMN_STATUS:
            return self._status_icons[item.status]

        if role == Qt.ToolTipRole:
            if item.status is ItemStatus.ERROR and item.error_detail:
                return f"Error: {item.error_detail}"
            return f"Status: {item.status.value}"

        if role == Qt.UserRole:
            return item.id

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            return self._headers[section]
        return None

    # --- Public API ---

    @property
    def current_index(self) -> int:
        return self._current_index

    def item_at(self, row: int) -> Optional[IngestItem]:
        if 0 <= row < len(self._items):
            return self._items[row]
        return None

    def set_session(self, session: BatchSession):
        """Mirrors the session. Row count changes reset the model; otherwise rows are refreshed in place."""
        self._current_index = session.current_index
        if [i.id for i in session.items] != [i.id for i in self._items]:
            self.beginResetModel()
            self._items = list(session.items)
            self.endResetModel()
        elif self._items:
            self.dataChanged.emit(self.index(0, 0), self.index(len(self._items) - 1, len(self._headers) - 1))

    def refresh_item(self, item: IngestItem):
        """Repaints the row of one item after a status change."""
        for row, existing in enumerate(self._items):
            if existing.id == item.id:
                self.dataChanged.emit(self.index(row, 0), self.index(row, len(self._headers) - 1))
                return

    def clear(self):
        self.beginResetModel()
        self._items = []
        self._current_index = 0
        self.endResetModel()
