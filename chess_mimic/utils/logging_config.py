# chess_mimic/utils/logging_config.py
"""
Logging configuration for the ChessMimic application.

This module provides a centralized function to set up consistent logging
across the application, with distinct formatting for console and file
outputs, and a handler that cooperates with tqdm progress bars.
"""
import logging
import sys
from typing import Iterable, List, Optional

from tqdm import tqdm

from chess_mimic.config import settings

CONSOLE_FORMAT = "%(levelname)-8s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TqdmLoggingHandler(logging.Handler):
    """Writes log records through `tqdm.write` so they do not break progress bars."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stdout)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(
    log_level_str: Optional[str] = None,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    extra_handlers: Optional[Iterable[logging.Handler]] = None,
) -> None:
    """
    Configures application-wide logging on the root logger.

    Args:
        log_level_str: Logging level name (e.g. "INFO", "DEBUG").
                       Defaults to `settings.DEFAULT_LOG_LEVEL`.
        log_file: Path of the log file. Defaults to `settings.DEFAULT_LOG_FILENAME`.
        log_to_console: Whether to log to the console.
        log_to_file: Whether to log to the file.
        extra_handlers: Pre-configured handlers to add. When given together
                        with `log_to_console`, they replace the default
                        console handler.
    """
    effective_level_str = (log_level_str or settings.DEFAULT_LOG_LEVEL).upper()
    effective_log_file = log_file or settings.DEFAULT_LOG_FILENAME

    level_val = logging.getLevelName(effective_level_str)
    if not isinstance(level_val, int):
        logging.warning(f"Invalid log level string: '{effective_level_str}'. Defaulting to 'INFO'.")
        level_val = logging.INFO
        effective_level_str = "INFO"

    root_logger = logging.getLogger()
    root_logger.setLevel(level_val)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_formatter = logging.Formatter(CONSOLE_FORMAT)
    handlers: List[logging.Handler] = []

    if log_to_console and not extra_handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    if log_to_file:
        file_handler = logging.FileHandler(effective_log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    for handler in extra_handlers or ():
        if handler.formatter is None:
            handler.setFormatter(console_formatter)
        handlers.append(handler)

    if not handlers:
        root_logger.addHandler(logging.NullHandler())
        return

    for handler in handlers:
        root_logger.addHandler(handler)

    setup_logger = logging.getLogger(settings.APP_NAME + ".Logging")
    setup_logger.info(f"Logging initialized. Level: {effective_level_str}.")
    if log_to_file:
        setup_logger.info(f"Logging to file enabled: '{effective_log_file}'.")
