# shortcut_dock/utils/logger.py

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = Path(__file__).resolve().parents[2] / 'shortcut_dock.log'
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class LoggerManager:
    """
    Configures application-wide logging on the root logger.

    Two handlers are attached:
    1. Console: INFO and above, short timestamped lines.
    2. Rotating file: DEBUG and above with logger name and source location,
       rolled over at 5 MB with five backups kept.
    """

    def __init__(self, log_file: Optional[Path] = None, log_level=logging.DEBUG, console_level=logging.INFO):
        """
        Args:
            log_file: where the rotating log lives. Defaults to the project root.
            log_level: level set on the root logger.
            console_level: threshold of the console handler.
        """
        self.log_file_path = Path(log_file) if log_file else DEFAULT_LOG_FILE
        self.log_level = log_level
        self.console_level = console_level
        self.root_logger = logging.getLogger()

    def setup(self):
        # Calling setup twice must not duplicate output.
        if self.root_logger.hasHandlers():
            return

        self.root_logger.setLevel(self.log_level)
        self.root_logger.addHandler(self._create_console_handler())
        try:
            self.root_logger.addHandler(self._create_file_handler())
        except OSError as e:
            logging.warning(f"File logging disabled, cannot open '{self.log_file_path}': {e}")

        logging.info("Logging configured.")

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setLevel(self.console_level)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - [%(levelname)s] - %(message)s',
            datefmt='%H:%M:%S'
        ))
        return handler

    def _create_file_handler(self) -> logging.handlers.RotatingFileHandler:
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            self.log_file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding='utf-8'
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - [%(levelname)s] - %(filename)s:%(lineno)d - %(message)s'
        ))
        return handler


def setup_logging(log_file: Optional[Path] = None, verbose: bool = False):
    """Initializes logging once for whichever front end is starting."""
    manager = LoggerManager(log_file, console_level=logging.DEBUG if verbose else logging.INFO)
    manager.setup()
