"""
Logging utilities for the MoKee setup wizard.

This module configures the package-wide logger: colored console output,
optional log file, a HIGHLIGHT level for wizard milestones and GUI handlers
that mirror log records into a host window.
"""

import sys
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Callable, List, Union, Any

PACKAGE_LOGGER_NAME = "mokee_setupwizard"

HIGHLIGHT = 25
logging.addLevelName(HIGHLIGHT, "HIGHLIGHT")


class LogLevel(Enum):
    """Log levels understood by the wizard logger."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    HIGHLIGHT = "HIGHLIGHT"

    @property
    def numeric(self) -> int:
        """Numeric level for the logging module."""
        if self is LogLevel.HIGHLIGHT:
            return HIGHLIGHT
        return getattr(logging, self.value)

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> 'LogLevel':
        """Map a log record back to a LogLevel."""
        if record.levelno == HIGHLIGHT:
            return cls.HIGHLIGHT
        if record.levelno >= logging.ERROR:
            return cls.ERROR
        if record.levelno >= logging.WARNING:
            return cls.WARNING
        if record.levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


class ColorCodes:
    """ANSI color codes used on the console."""
    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    BLUE = "\033[0;34m"
    PURPLE = "\033[0;35m"
    NC = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color."""

    LEVEL_COLORS = {
        logging.DEBUG: ColorCodes.NC,
        logging.INFO: ColorCodes.BLUE,
        HIGHLIGHT: ColorCodes.PURPLE,
        logging.WARNING: ColorCodes.YELLOW,
        logging.ERROR: ColorCodes.RED,
        logging.CRITICAL: ColorCodes.RED,
    }

    def __init__(self, fmt: str, colored: bool = True):
        super().__init__(fmt, datefmt="%H:%M:%S")
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.colored:
            return message
        color = self.LEVEL_COLORS.get(record.levelno, ColorCodes.NC)
        return f"{color}{message}{ColorCodes.NC}"


class _CallbackHandler(logging.Handler):
    """Forwards formatted records to a GUI callback."""

    def __init__(self, callback: Callable[[LogLevel, str], None]):
        super().__init__()
        self.callback = callback

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.callback(LogLevel.from_record(record), self.format(record))
        except Exception:
            self.handleError(record)


class SetupWizardLogger:
    """
    Package logger wrapper.

    All modules log through ``logging.getLogger(__name__)``; because they live
    under the ``mokee_setupwizard`` package, the handlers installed here apply
    to every one of them.
    """

    CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
    FILE_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

    def __init__(self, level: LogLevel = LogLevel.INFO, colored: bool = True,
                 log_file: Optional[Union[str, Path]] = None):
        self._logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        self._logger.propagate = False
        self._gui_handlers: List[_CallbackHandler] = []

        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColoredFormatter(self.CONSOLE_FORMAT, colored=colored))
        self._logger.addHandler(console)

        self.log_file: Optional[Path] = None
        if log_file is not None:
            self.log_file = Path(log_file)
            try:
                self.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
                file_handler.setFormatter(logging.Formatter(self.FILE_FORMAT))
                self._logger.addHandler(file_handler)
            except OSError as e:
                self._logger.warning(f"Could not open log file {self.log_file}: {e}")
                self.log_file = None

        self.set_level(level)

    def set_level(self, level: LogLevel) -> None:
        """Change the package log level."""
        self._logger.setLevel(level.numeric)

    def add_gui_handler(self, callback: Callable[[LogLevel, str], None]) -> None:
        """Mirror every log record into a GUI callback."""
        handler = _CallbackHandler(callback)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self._gui_handlers.append(handler)
        self._logger.addHandler(handler)

    def remove_gui_handlers(self) -> None:
        for handler in self._gui_handlers:
            self._logger.removeHandler(handler)
        self._gui_handlers.clear()

    def debug(self, message: str, *args: Any) -> None:
        self._logger.debug(message, *args)

    def info(self, message: str, *args: Any) -> None:
        self._logger.info(message, *args)

    def highlight(self, message: str, *args: Any) -> None:
        """Log a wizard milestone (page shown, wizard finished)."""
        self._logger.log(HIGHLIGHT, message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self._logger.warning(message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.warning(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self._logger.error(message, *args)

    def exception(self, message: str, *args: Any) -> None:
        self._logger.exception(message, *args)


_global_logger: Optional[SetupWizardLogger] = None


def setup_logging(colored: bool = True, log_file: Optional[Union[str, Path]] = None,
                  level: Any = LogLevel.INFO) -> SetupWizardLogger:
    """
    Configure the global wizard logger.

    Args:
        colored: Whether console output uses ANSI colors
        log_file: Optional path of a log file
        level: LogLevel, or any enum/str carrying a level name

    Returns:
        The configured SetupWizardLogger
    """
    global _global_logger

    level_name = getattr(level, 'value', level)
    try:
        log_level = LogLevel(str(level_name).upper())
    except ValueError:
        log_level = LogLevel.INFO

    _global_logger = SetupWizardLogger(level=log_level, colored=colored, log_file=log_file)
    return _global_logger


def get_logger() -> SetupWizardLogger:
    """
    Get the global wizard logger.

    Raises:
        RuntimeError: If setup_logging() has not been called
    """
    if _global_logger is None:
        raise RuntimeError("Logging not initialized. Call setup_logging() first.")
    return _global_logger
