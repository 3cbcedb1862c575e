# shortcut_dock/gui/main_window.py

import logging
import sys
from pathlib import Path
from typing import Optional

from PySide6 import QtAsyncio
from PySide6.QtCore import Slot
from PySide6.QtGui import QAction, QActionGroup
from PySide6.QtWidgets import QApplication, QMainWindow, QMessageBox, QTabWidget

from shortcut_dock.core.config_manager import AppSettings, load_settings, save_settings
from shortcut_dock.utils.logger import setup_logging
from .action_controller import ActionController
from .resources import get_icon, load_stylesheet, validate_assets
from .tabs.batch_tab import BatchTab
from .tabs.shortcuts_tab import ShortcutsTab
from .widgets import StatusWidget

logger = logging.getLogger(__name__)

WINDOW_TITLE = " Shortcut Dock"


class MainWindow(QMainWindow):
    """
    The application shell: assembles the controller and the two tabs, and
    shows the controller's notices in the status area.
    """

    def __init__(self, settings: Optional[AppSettings] = None, settings_path: Optional[Path] = None):
        super().__init__()
        self.settings_path = settings_path
        self.settings = settings or load_settings(settings_path)
        self.setWindowTitle(WINDOW_TITLE)
        self.setWindowIcon(get_icon("app_icon"))
        self.setGeometry(100, 100, 820, 720)

        self.action_controller = ActionController(self, self.settings)

        self._create_menus()

        self.tab_widget = QTabWidget()
        self.shortcuts_tab = ShortcutsTab(self.action_controller)
        self.batch_tab = BatchTab(self.action_controller)
        self.tab_widget.addTab(self.shortcuts_tab, "Shortcuts")
        self.tab_widget.addTab(self.batch_tab, "Batch Queue")
        self.setCentralWidget(self.tab_widget)

        self.status_widget = StatusWidget()
        self.statusBar().addPermanentWidget(self.status_widget, 1)
        self.action_controller.notice.connect(self.status_widget.show_notice)

    def _create_menus(self):
        menu_bar = self.menuBar()
        settings_menu = menu_bar.addMenu("&Settings")
        theme_menu = settings_menu.addMenu("Theme")
        theme_group = QActionGroup(self)
        for theme, label in (("dark", "Dark Theme"), ("light", "Light Theme")):
            action = QAction(label, self, checkable=True)
            action.setChecked(self.settings.theme == theme)
            action.triggered.connect(lambda checked=False, t=theme: self._handle_theme_change(t))
            theme_menu.addAction(action)
            theme_group.addAction(action)

    @Slot(str)
    def _handle_theme_change(self, theme: str):
        self.settings.theme = theme
        if save_settings(self.settings, self.settings_path):
            QApplication.instance().setStyleSheet(load_stylesheet(theme))
        else:
            QMessageBox.critical(self, "Error", "Could not save theme setting.")

    def closeEvent(self, event):
        if not self.action_controller.is_idle():
            reply = QMessageBox.question(self, 'Operation in Progress',
                                         "Shortcuts are still being added. Quit anyway?",
                                         QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
            if reply != QMessageBox.Yes:
                event.ignore()
                return
        self.action_controller.shutdown()
        event.accept()


def run_gui(settings_path: Optional[Path] = None):
    """Starts the GUI with the asyncio event loop hosted on Qt's."""
    setup_logging()
    validate_assets()
    settings = load_settings(settings_path)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyleSheet(load_stylesheet(settings.theme))

    window = MainWindow(settings, settings_path)
    window.show()

    logger.info("GUI started.")
    QtAsyncio.run(handle_sigint=True)
