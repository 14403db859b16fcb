# doc_catalog/utils/logger.py

import logging
import logging.handlers
from pathlib import Path

HANDLER_MARKER = "_doc_catalog_handler"


class LoggerManager:
    """
    Configures the application-wide logging system.

    Two handlers are attached to the root logger:
    1. Console Handler: WARNING and above only, since the CLI prints its own
       rich-formatted output to the terminal.
    2. Rotating File Handler: DEBUG and above, rotating at 5MB and keeping
       five old files.
    """

    def __init__(self, log_file_path: Path, log_level=logging.DEBUG):
        """
        Args:
            log_file_path: Where the rotating log file is written.
            log_level: The base logging level to capture (e.g., DEBUG, INFO).
        """
        self.log_file_path = Path(log_file_path)
        self.log_level = log_level
        self.root_logger = logging.getLogger()

    def setup(self):
        """Configures and attaches the handlers. Calling it twice is harmless."""
        # Only our own handlers count; test runners attach handlers of their own.
        if any(getattr(handler, HANDLER_MARKER, False) for handler in self.root_logger.handlers):
            return

        self.root_logger.setLevel(self.log_level)
        for handler in (self._create_console_handler(), self._create_file_handler()):
            setattr(handler, HANDLER_MARKER, True)
            self.root_logger.addHandler(handler)

        logging.debug(f"Logging configured. Writing detailed logs to {self.log_file_path}.")

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setLevel(logging.WARNING)
        formatter = logging.Formatter(
            '%(asctime)s - [%(levelname)s] - %(message)s',
            datefmt='%H:%M:%S'
        )
        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(self) -> logging.handlers.RotatingFileHandler:
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            self.log_file_path, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8'
        )
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - [%(levelname)s] - %(filename)s:%(lineno)d - %(message)s'
        )
        handler.setFormatter(formatter)
        return handler


def setup_logging(log_file_path: Path):
    """Initializes and configures the application-wide logging system."""
    manager = LoggerManager(log_file_path)
    manager.setup()
