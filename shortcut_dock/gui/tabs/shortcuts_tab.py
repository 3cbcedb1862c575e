# shortcut_dock/gui/tabs/shortcuts_tab.py

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QComboBox, QHBoxLayout, QInputDialog, QLabel, QListWidget, QListWidgetItem, QMessageBox, QPushButton,
    QVBoxLayout, QWidget
)

from shortcut_dock.core.shortcut_store import DEFAULT_CATEGORY_ID
from ..action_controller import ActionController
from ..queue_view import QueueView
from ..resources import ICON_SIZE, decode_glyph, get_icon
from ..widgets import DropZone


class ShortcutsTab(QWidget):
    """
    The dock itself: pick a category, drop paths onto the zone, and watch the
    shortcuts appear. The last drop's items are listed with their outcome.
    """

    def __init__(self, controller: ActionController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._init_ui()
        self._connect_signals()
        self.reload_categories()
        self.reload_shortcuts()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(15, 15, 15, 15)
        main_layout.setSpacing(10)

        category_layout = QHBoxLayout()
        self.category_combo = QComboBox()
        self.new_category_button = QPushButton(" New Category...")
        self.new_category_button.setIcon(get_icon("folder"))
        self.new_category_button.setIconSize(ICON_SIZE)
        self.delete_category_button = QPushButton(" Delete Category")
        self.delete_category_button.setIcon(get_icon("clear"))
        self.delete_category_button.setIconSize(ICON_SIZE)
        category_layout.addWidget(QLabel("Category:"))
        category_layout.addWidget(self.category_combo, 1)
        category_layout.addWidget(self.new_category_button)
        category_layout.addWidget(self.delete_category_button)

        self.drop_zone = DropZone(self.controller.hub)

        self.shortcut_list = QListWidget()
        self.shortcut_list.setToolTip("Double-click a shortcut to open it.")
        self.remove_button = QPushButton(" Remove Selected")
        self.remove_button.setIcon(get_icon("remove"))
        self.remove_button.setEnabled(False)

        self.last_drop_view = QueueView()

        main_layout.addLayout(category_layout)
        main_layout.addWidget(self.drop_zone)
        main_layout.addWidget(QLabel("Shortcuts:"))
        main_layout.addWidget(self.shortcut_list, 2)
        main_layout.addWidget(self.remove_button, 0, Qt.AlignRight)
        main_layout.addWidget(QLabel("Last drop:"))
        main_layout.addWidget(self.last_drop_view, 1)

    def _connect_signals(self):
        self.category_combo.currentIndexChanged.connect(self._on_category_selected)
        self.new_category_button.clicked.connect(self._on_new_category_clicked)
        self.delete_category_button.clicked.connect(self._on_delete_category_clicked)
        self.shortcut_list.itemDoubleClicked.connect(self._on_shortcut_activated)
        self.remove_button.clicked.connect(self._on_remove_clicked)
        self.shortcut_list.itemSelectionChanged.connect(
            lambda: self.remove_button.setEnabled(bool(self.shortcut_list.selectedItems())))

        self.controller.hover_changed.connect(self.drop_zone.set_hover)
        self.controller.processing_changed.connect(self.drop_zone.set_processing)
        self.controller.drop_session_changed.connect(self.last_drop_view.show_session)
        self.controller.item_changed.connect(self.last_drop_view.refresh_item)
        self.controller.item_added.connect(self.reload_shortcuts)
        self.controller.shortcuts_changed.connect(self.reload_shortcuts)
        self.controller.categories_changed.connect(self.reload_categories)

    @Slot()
    def reload_categories(self):
        current = self.controller.category_id
        self.category_combo.blockSignals(True)
        self.category_combo.clear()
        for category in self.controller.store.list_categories():
            self.category_combo.addItem(category.name, category.id)
        index = self.category_combo.findData(current)
        self.category_combo.setCurrentIndex(max(index, 0))
        self.category_combo.blockSignals(False)
        self._on_category_selected(self.category_combo.currentIndex())

    @Slot()
    def reload_shortcuts(self):
        self.shortcut_list.clear()
        for shortcut in self.controller.store.list_shortcuts(self.controller.category_id):
            glyph = decode_glyph(shortcut.icon_data)
            entry = QListWidgetItem(f"{glyph}  {shortcut.name}" if glyph else shortcut.name)
            entry.setToolTip(f"{shortcut.path}\nOpened {shortcut.usage_count} time(s)")
            entry.setData(Qt.UserRole, shortcut.id)
            self.shortcut_list.addItem(entry)

    @Slot(int)
    def _on_category_selected(self, index: int):
        category_id = self.category_combo.itemData(index)
        if category_id:
            self.controller.set_category(category_id)
        self.delete_category_button.setEnabled(bool(category_id) and category_id != DEFAULT_CATEGORY_ID)
        self.reload_shortcuts()

    @Slot()
    def _on_new_category_clicked(self):
        name, ok = QInputDialog.getText(self, "New Category", "Category name:")
        if ok and name.strip():
            self.controller.create_category(name.strip())

    @Slot()
    def _on_remove_clicked(self):
        for entry in self.shortcut_list.selectedItems():
            self.controller.delete_shortcut(entry.data(Qt.UserRole))

    @Slot()
    def _on_delete_category_clicked(self):
        category_id = self.category_combo.currentData()
        name = self.category_combo.currentText()
        reply = QMessageBox.question(
            self, "Delete Category",
            f"Delete '{name}'? Its shortcuts move to the default category.",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
        if reply == QMessageBox.Yes:
            self.controller.delete_category(category_id)

    @Slot(QListWidgetItem)
    def _on_shortcut_activated(self, entry: QListWidgetItem):
        self.controller.launch_shortcut(entry.data(Qt.UserRole))
