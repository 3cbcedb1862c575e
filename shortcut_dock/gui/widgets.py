# shortcut_dock/gui/widgets.py

import logging
from typing import List

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QLineEdit, QPushButton, QSizePolicy, QVBoxLayout, QWidget
)

from shortcut_dock.core.capabilities import DragEventHub
from shortcut_dock.core.models import DragEvent, DragEventType
from .resources import ICON_SIZE, get_icon

logger = logging.getLogger(__name__)

NOTICE_COLORS = {
    "info": "#ECEFF4",
    "success": "#A3BE8C",
    "warning": "#EBCB8B",
    "error": "#BF616A",
}


def _local_paths(mime_data) -> List[str]:
    return [url.toLocalFile() for url in mime_data.urls() if url.isLocalFile()]


def _position(event) -> tuple:
    point = event.position().toPoint()
    return point.x(), point.y()


class DropZone(QFrame):
    """
    The dock's drop target.

    It does not interpret drops itself. Every native drag notification is
    turned into a `DragEvent` and published to the hub; the hover and
    processing looks are driven back in from the coalescer's state.
    """

    IDLE_TEXT = "Drop files or folders here"
    HOVER_TEXT = "Release to add shortcuts"
    PROCESSING_TEXT = "Adding shortcuts..."

    def __init__(self, hub: DragEventHub, parent=None):
        super().__init__(parent)
        self.hub = hub
        self.setObjectName("DropZone")
        self.setAcceptDrops(True)
        self.setFrameShape(QFrame.StyledPanel)
        self.setMinimumHeight(120)

        layout = QVBoxLayout(self)
        self.label = QLabel(self.IDLE_TEXT)
        self.label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.label)

        self._hover = False
        self._processing = False

    def _publish(self, event_type: DragEventType, paths=(), position=None):
        self.hub.publish(DragEvent(event_type, tuple(paths), position))

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self._publish(DragEventType.ENTER, position=_position(event))
        else:
            super().dragEnterEvent(event)

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self._publish(DragEventType.OVER, position=_position(event))
        else:
            super().dragMoveEvent(event)

    def dragLeaveEvent(self, event):
        self._publish(DragEventType.LEAVE)
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        if event.mimeData().hasUrls():
            paths = _local_paths(event.mimeData())
            logger.debug(f"Native drop with {len(paths)} local path(s).")
            self._publish(DragEventType.DROP, paths, _position(event))
            event.acceptProposedAction()
        else:
            super().dropEvent(event)

    @Slot(bool)
    def set_hover(self, active: bool):
        self._hover = active
        self._refresh()

    @Slot(bool)
    def set_processing(self, active: bool):
        self._processing = active
        self._refresh()

    def _refresh(self):
        if self._processing:
            text = self.PROCESSING_TEXT
        elif self._hover:
            text = self.HOVER_TEXT
        else:
            text = self.IDLE_TEXT
        self.label.setText(text)
        # Lets the stylesheet highlight the zone with [hover="true"].
        self.setProperty("hover", self._hover)
        self.style().unpolish(self)
        self.style().polish(self)


class PathEntry(QWidget):
    """A line edit with an Add button and a Browse button for the manual queue."""

    submitted = Signal(str)
    browse_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.path_edit = QLineEdit()
        self.path_edit.setPlaceholderText("Type a file or folder path")
        self.add_button = QPushButton(" Add")
        self.browse_button = QPushButton(" Browse...")
        self.add_button.setIcon(get_icon("add-file"))
        self.browse_button.setIcon(get_icon("folder"))
        for button in (self.add_button, self.browse_button):
            button.setIconSize(ICON_SIZE)

        layout.addWidget(self.path_edit)
        layout.addWidget(self.add_button)
        layout.addWidget(self.browse_button)

        self.add_button.clicked.connect(self._submit)
        self.path_edit.returnPressed.connect(self._submit)
        self.browse_button.clicked.connect(self.browse_requested)

    @Slot()
    def _submit(self):
        text = self.path_edit.text().strip()
        if text:
            self.submitted.emit(text)
            self.path_edit.clear()

    def path(self) -> str:
        return self.path_edit.text()

    def setPath(self, path: str):
        self.path_edit.setText(path)


class StatusWidget(QWidget):
    """Shows the latest notice, colored by its level."""

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 5, 10, 5)

        self.status_label = QLabel("Status:")
        self.status_label.setObjectName("StatusLabel")
        self.status_message = QLabel("Idle. Ready.")
        self.status_message.setWordWrap(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Minimum)

        layout.addWidget(self.status_label)
        layout.addWidget(self.status_message)
        layout.addStretch()

    @Slot(str, str)
    def show_notice(self, level: str, message: str):
        self.status_message.setText(message)
        self.status_message.setStyleSheet(f"color: {NOTICE_COLORS.get(level, NOTICE_COLORS['info'])};")

    def message(self) -> str:
        return self.status_message.text()
