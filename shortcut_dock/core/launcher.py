# shortcut_dock/core/launcher.py

import logging
from pathlib import Path
from typing import Callable

from .errors import LaunchError
from .models import ShortcutRecord
from .shortcut_store import ShortcutStore

logger = logging.getLogger(__name__)

# Hands a target path to whatever opens it. Raises LaunchError or OSError on failure.
Opener = Callable[[str], None]


def launch_shortcut(store: ShortcutStore, shortcut_id: str, opener: Opener) -> ShortcutRecord:
    """
    Opens the target of a stored shortcut and counts the launch.

    The usage count only moves once the opener accepted the target.

    Returns:
        The updated record.

    Raises:
        LaunchError: if the id is unknown, the target is gone, or the opener failed.
        StorageError: if the usage could not be saved.
    """
    record = store.get_shortcut(shortcut_id)
    if record is None:
        raise LaunchError(f"shortcut '{shortcut_id}' does not exist")
    if not Path(record.path).exists():
        raise LaunchError(f"target does not exist: {record.path}")

    try:
        opener(record.path)
    except OSError as e:
        logger.error(f"Opening '{record.path}' failed: {e}", exc_info=True)
        raise LaunchError(f"could not open '{record.path}': {e}") from e

    logger.info(f"Launched '{record.name}' -> '{record.path}'.")
    return store.record_usage(shortcut_id)
