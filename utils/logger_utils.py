"""Logging set-up shared by the translation gateway.

Every module obtains its logger through ``LoggerUtils.get_logger(__name__)`` so that all records
land under one namespace. Until an application configures ``LoggerUtils`` the namespace only
carries a ``NullHandler``, which keeps the library silent when embedded in another process.
"""

from __future__ import annotations

import logging
import sys
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, Self, TextIO, TypeAlias

if TYPE_CHECKING:
    from pathlib import Path

    from models.config_models import General

__all__: list[str] = ["LoggerUtils"]

LevelType: TypeAlias = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT: Final[int] = 2

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "TranslateGateway"

logging.getLogger(DEFAULT_NAMESPACE).addHandler(NullHandler())


class LogLevel(NamedTuple):
    """Logging level as both name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Singleton that configures console and file logging for the gateway namespace.

    Attributes:
        _LOGGER_NAMESPACE (str): Namespace prefixed to every logger name.
        _configured (bool): Set once handlers have been attached; later constructions are no-ops.
        _instance (LoggerUtils | None): The singleton instance.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, debug: bool = False, use_null_console: bool = False) -> None:
        """Attach handlers to the namespace root logger.

        Args:
            filename (str | Path): Absolute path of the log file. Empty disables file logging.
            debug (bool): Lower the namespace level to DEBUG.
            use_null_console (bool): Use a NullHandler instead of writing to stderr.
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self._use_null_console: bool = bool(use_null_console) or sys.stderr is None
        filename = str(filename)
        # must be lower than the handler levels, otherwise nothing is emitted
        self.root_logger.setLevel(logging.DEBUG if debug else DEFAULT_LOG_LEVEL)

        self._console_logging()
        if filename.strip():
            self._file_logging(filename)

        LoggerUtils._configured = True

    @classmethod
    def configure(cls, general: General) -> LoggerUtils:
        """Configure logging from the [GENERAL] settings.

        DEBUG forces the DEBUG level, otherwise LOG_LEVEL applies. Only the first call attaches
        handlers; later calls just adjust the level.

        Args:
            general (General): The [GENERAL] section of the configuration.

        Returns:
            LoggerUtils: The singleton instance.
        """
        utils: LoggerUtils = cls(general.LOG_FILE, debug=general.DEBUG)
        utils.set_level("DEBUG" if general.DEBUG else general.LOG_LEVEL)
        return utils

    def _console_logging(self) -> None:
        """Console output is WARNING and above with a bare message format."""
        if self._use_null_console:
            return

        if any(type(h) is StreamHandler for h in self.root_logger.handlers):
            self.root_logger.warning("Console logging is already configured.")
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(Formatter("%(levelname)s %(message)s"))
        self.root_logger.addHandler(console_handler)

    def _file_logging(self, filename: str) -> None:
        """Rotating UTF-8 file output at DEBUG level.

        Args:
            filename (str): Absolute path to the log file.
        """
        if any(isinstance(h, RotatingFileHandler) for h in self.root_logger.handlers):
            self.root_logger.warning("File logging is already configured.")
            return

        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            self.root_logger.error("Incorrect log file name: %s\nLogging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-44s\t%(funcName)s\t%(message)s")
        )
        self.root_logger.addHandler(file_handler)

    def set_level(self, level: LevelType) -> None:
        """Set the namespace level, falling back to INFO for unknown names."""
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            self.root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s' specified. Logging level set to 'INFO'.", level)

    def get_level(self) -> LogLevel:
        level_value: int = self.root_logger.getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger under the gateway namespace.

        Args:
            name (str | None): Logger name. None returns the namespace root logger.

        Returns:
            logging.Logger: The logger instance.
        """
        full_name: str | None
        if LoggerUtils._LOGGER_NAMESPACE:
            full_name = f"{LoggerUtils._LOGGER_NAMESPACE}.{name}" if name else LoggerUtils._LOGGER_NAMESPACE
        else:
            full_name = name or None
        return logging.getLogger(full_name)

    @staticmethod
    def get_nop_logger() -> logging.Logger:
        """Return a disabled logger for callers that explicitly want no output."""
        nop: logging.Logger = logging.getLogger(f"{DEFAULT_NAMESPACE}.nop")
        nop.disabled = True
        nop.propagate = False
        return nop
