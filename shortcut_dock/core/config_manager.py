# shortcut_dock/core/config_manager.py

import json
import logging
import shutil
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .shortcut_store import DEFAULT_CATEGORY_ID

# A dedicated logger for the module that manages the application's settings.
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / 'config' / 'settings.json'
DEFAULT_DATA_FILE = Path.home() / '.shortcut_dock' / 'shortcuts.json'


@dataclass
class IngestSettings:
    """Tuning knobs of the ingestion pipeline. None of them is a timing contract."""
    debounce_seconds: float = 0.3
    inter_item_delay_seconds: float = 0.1
    high_res_icons: bool = True
    share_guard: bool = True
    icon_cache_max_entries: int = 500
    icon_cache_max_age_seconds: float = 3600


@dataclass
class AppSettings:
    data_file: str = str(DEFAULT_DATA_FILE)
    default_category_id: str = DEFAULT_CATEGORY_ID
    theme: str = "dark"
    ingest: IngestSettings = field(default_factory=IngestSettings)

    @property
    def data_path(self) -> Path:
        return Path(self.data_file).expanduser()


def _coerce_ingest(raw: Dict[str, Any]) -> IngestSettings:
    """Builds the ingest section, keeping defaults for anything missing or nonsensical."""
    defaults = IngestSettings()
    values = {}
    for f in fields(IngestSettings):
        if f.name not in raw:
            continue
        value = raw[f.name]
        default = getattr(defaults, f.name)
        if isinstance(default, bool):
            if not isinstance(value, bool):
                logger.warning(f"Setting 'ingest.{f.name}' must be true or false. Using {default}.")
                continue
        elif isinstance(default, (int, float)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                logger.warning(f"Setting 'ingest.{f.name}' must be a non-negative number. Using {default}.")
                continue
            value = type(default)(value)
        values[f.name] = value
    return IngestSettings(**values)


def load_settings(settings_path: Optional[Path] = None) -> AppSettings:
    """
    Loads the settings file, falling back to defaults for a missing file,
    a corrupt file, or individual bad values. Unknown keys are ignored.
    """
    settings_path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH
    if not settings_path.exists():
        logger.info(f"No settings file at '{settings_path}'. Using defaults.")
        return AppSettings()

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read settings from '{settings_path}', using defaults: {e}")
        return AppSettings()

    if not isinstance(raw, dict):
        logger.warning(f"Settings file '{settings_path}' is not a JSON object. Using defaults.")
        return AppSettings()

    settings = AppSettings(ingest=_coerce_ingest(raw.get("ingest") or {}))
    for key in ("data_file", "default_category_id", "theme"):
        if isinstance(raw.get(key), str) and raw[key].strip():
            setattr(settings, key, raw[key].strip())

    logger.info(f"Settings loaded from '{settings_path}'.")
    return settings


def save_settings(settings: AppSettings, settings_path: Optional[Path] = None) -> bool:
    """
    Writes the settings file. The previous file is backed up first and put
    back if anything goes wrong, so a failed save never leaves a broken file.
    """
    settings_path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH
    backup_path = settings_path.with_suffix(".json.bak")
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        if settings_path.exists():
            shutil.copy(settings_path, backup_path)
            logger.info(f"Settings backup created at: {backup_path}")

        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(asdict(settings), f, indent=2)
        logger.info(f"Settings saved to '{settings_path}'.")
        return True

    except (OSError, TypeError) as e:
        logger.error(f"Failed to save settings: {e}", exc_info=True)
        if backup_path.exists():
            shutil.copy(backup_path, settings_path)
            logger.warning("Restored settings from backup due to a save failure.")
        return False
