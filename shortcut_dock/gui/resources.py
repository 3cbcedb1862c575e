# shortcut_dock/gui/resources.py

import base64
import binascii
import logging
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QDir, QSize
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QStyle

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> Path:
    """
    Gets the absolute path to a resource, both when running from source and
    from a PyInstaller bundle.
    """
    try:
        base_path = Path(sys._MEIPASS)
    except AttributeError:
        base_path = Path(__file__).resolve().parent.parent.parent

    return base_path / relative_path


ASSETS_PATH = get_resource_path('assets')
STYLES_PATH = ASSETS_PATH / 'styles'
ICONS_PATH = ASSETS_PATH / 'icons'

# Every icon name the UI asks for, with the stock Qt icon used when the SVG is missing.
STANDARD_ICONS = {
    "app_icon": QStyle.SP_DirLinkIcon,
    "add-file": QStyle.SP_FileDialogNewFolder,
    "start": QStyle.SP_MediaPlay,
    "pause": QStyle.SP_MediaPause,
    "resume": QStyle.SP_MediaSeekForward,
    "reset": QStyle.SP_BrowserReload,
    "clear": QStyle.SP_DialogResetButton,
    "remove": QStyle.SP_TrashIcon,
    "pending": QStyle.SP_FileIcon,
    "processing": QStyle.SP_BrowserReload,
    "success": QStyle.SP_DialogApplyButton,
    "error": QStyle.SP_MessageBoxCritical,
    "info": QStyle.SP_MessageBoxInformation,
    "warning": QStyle.SP_MessageBoxWarning,
    "folder": QStyle.SP_DirIcon,
    "file": QStyle.SP_FileIcon,
}
REQUIRED_ICONS = list(STANDARD_ICONS)
ICON_SIZE = QSize(20, 20)

_icon_cache = {}


def validate_assets():
    """Logs which themes and icons are missing. Missing assets never stop the app."""
    logger.info("Validating GUI assets...")

    themes_dir = STYLES_PATH / 'themes'
    if not themes_dir.is_dir():
        logger.warning(f"Themes directory not found at: {themes_dir}")

    missing_icons = [name for name in REQUIRED_ICONS if not (ICONS_PATH / f"{name}.svg").exists()]
    if missing_icons:
        logger.info(f"Using stock icons for: {', '.join(missing_icons)}")
    else:
        logger.info("All icons found.")


def load_stylesheet(theme: str = "dark") -> str:
    """Loads `<theme>_theme.qss` and lets its relative urls resolve against the assets directory."""
    QDir.addSearchPath("assets", str(ASSETS_PATH))

    theme_path = STYLES_PATH / 'themes' / f"{theme}_theme.qss"
    if theme_path.exists():
        logger.info(f"Loading theme: {theme_path.name}")
        return theme_path.read_text(encoding='utf-8')
    logger.error(f"Failed to load theme file: {theme_path}")
    return ""


def get_icon(name: str) -> QIcon:
    """
    Creates and caches a QIcon from `assets/icons/<name>.svg`, falling back to
    the matching stock Qt icon.
    """
    if name in _icon_cache:
        return _icon_cache[name]

    icon_path = ICONS_PATH / f"{name}.svg"
    if icon_path.exists():
        icon = QIcon(str(icon_path))
    else:
        app = QApplication.instance()
        standard = STANDARD_ICONS.get(name)
        if app is None or standard is None:
            logger.warning(f"Icon '{name}' not available.")
            return QIcon()
        icon = app.style().standardIcon(standard)

    _icon_cache[name] = icon
    return icon


def decode_glyph(icon_data: Optional[str]) -> str:
    """Turns the base64 glyph stored on a shortcut back into text for display."""
    if not icon_data:
        return ""
    try:
        return base64.b64decode(icon_data).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""
