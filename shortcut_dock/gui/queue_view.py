# shortcut_dock/gui/queue_view.py

from typing import Optional

from PySide6.QtWidgets import QAbstractItemView, QHeaderView, QTableView

from shortcut_dock.core.models import BatchSession, IngestItem
from .queue_model import QueueModel


class QueueView(QTableView):
    """Read-only table of queued items: status icon, name, type and path, with error tooltips."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._model = QueueModel(self)
        self.setModel(self._model)

        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setWordWrap(False)
        self.setShowGrid(False)

        header = self.horizontalHeader()
        header.setSectionResizeMode(QueueModel.COLUMN_STATUS, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(QueueModel.COLUMN_NAME, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(QueueModel.COLUMN_TYPE, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(QueueModel.COLUMN_PATH, QHeaderView.Stretch)
        self.verticalHeader().hide()

    @property
    def queue_model(self) -> QueueModel:
        return self._model

    def show_session(self, session: BatchSession):
        self._model.set_session(session)

    def refresh_item(self, item: IngestItem):
        self._model.refresh_item(item)

    def selected_item_id(self) -> Optional[str]:
        rows = self.selectionModel().selectedRows()
        if not rows:
            return None
        item = self._model.item_at(rows[0].row())
        return item.id if item else None
