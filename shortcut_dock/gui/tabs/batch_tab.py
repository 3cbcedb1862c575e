# shortcut_dock/gui/tabs/batch_tab.py

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QHBoxLayout, QLabel, QProgressBar, QPushButton, QVBoxLayout, QWidget

from shortcut_dock.core.models import BatchSession
from ..action_controller import ActionController
from ..queue_view import QueueView
from ..resources import ICON_SIZE, get_icon
from ..widgets import PathEntry


class BatchTab(QWidget):
    """
    The manual queue. This widget is a view only: every button is forwarded to
    the ActionController and the buttons are re-enabled from the queue's
    running flag and session.
    """

    def __init__(self, controller: ActionController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._running = False
        self._init_ui()
        self._connect_signals()
        self._update_button_states()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(15, 15, 15, 15)
        main_layout.setSpacing(10)

        self.path_entry = PathEntry()
        self.queue_view = QueueView()

        button_layout = QHBoxLayout()
        self.start_button = QPushButton(" Start")
        self.pause_button = QPushButton(" Pause")
        self.resume_button = QPushButton(" Resume")
        self.reset_button = QPushButton(" Reset")
        self.remove_button = QPushButton(" Remove")
        self.clear_button = QPushButton(" Clear")
        for button, icon in ((self.start_button, "start"), (self.pause_button, "pause"),
                             (self.resume_button, "resume"), (self.reset_button, "reset"),
                             (self.remove_button, "remove"), (self.clear_button, "clear")):
            button.setIcon(get_icon(icon))
            button.setIconSize(ICON_SIZE)
            button_layout.addWidget(button)
        button_layout.addStretch()

        progress_layout = QHBoxLayout()
        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.count_label = QLabel("0 / 0")
        progress_layout.addWidget(self.progress_bar, 1)
        progress_layout.addWidget(self.count_label)

        main_layout.addWidget(self.path_entry)
        main_layout.addLayout(button_layout)
        main_layout.addLayout(progress_layout)
        main_layout.addWidget(QLabel("Queue:"))
        main_layout.addWidget(self.queue_view)

    def _connect_signals(self):
        self.path_entry.submitted.connect(self.controller.add_path)
        self.path_entry.browse_requested.connect(self.controller.add_from_dialog)
        self.start_button.clicked.connect(self.controller.start_queue)
        self.pause_button.clicked.connect(self.controller.pause_queue)
        self.resume_button.clicked.connect(self.controller.resume_queue)
        self.reset_button.clicked.connect(self.controller.reset_queue)
        self.clear_button.clicked.connect(self.controller.clear_queue)
        self.remove_button.clicked.connect(self._on_remove_clicked)
        self.queue_view.selectionModel().selectionChanged.connect(self._update_button_states)

        self.controller.queue_session_changed.connect(self._on_session_changed)
        self.controller.item_changed.connect(self.queue_view.refresh_item)
        self.controller.running_changed.connect(self._on_running_changed)

    @Slot()
    def _on_remove_clicked(self):
        item_id = self.queue_view.selected_item_id()
        if item_id:
            self.controller.remove_item(item_id)

    @Slot(object)
    def _on_session_changed(self, session: BatchSession):
        self.queue_view.show_session(session)
        self.progress_bar.setValue(int(session.progress_percent))
        self.count_label.setText(f"{session.completed_count} / {session.total}")
        self._update_button_states()

    @Slot(bool)
    def _on_running_changed(self, running: bool):
        self._running = running
        self._update_button_states()

    @Slot()
    def _update_button_states(self):
        session = self.controller.queue.session
        has_items = bool(session.items)
        started = session.current_index > 0
        idle = not self._running

        self.start_button.setEnabled(idle and has_items and not started)
        self.pause_button.setEnabled(self._running and not session.paused)
        self.resume_button.setEnabled(idle and started and session.has_remaining)
        self.reset_button.setEnabled(idle and has_items)
        self.clear_button.setEnabled(idle and has_items)
        self.remove_button.setEnabled(idle and self.queue_view.selected_item_id() is not None)
