"""
Cudos Logging System
====================

A unified, thread-safe logging utility for the Cudos ledger. This module
integrates with the standard Python `logging` library and the `rich` library
to provide sanitized, visually distinct logging output.

Usage:
    >>> from cudos.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Ledger deployed")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
    LOG_FILE_PATH,
)
from .exceptions import ConfigurationError


class LogManager:
    """
    Manages logging configuration via the Singleton pattern.

    This class ensures that the logging subsystem is initialized exactly once.
    It handles the setup of the 'Rich' console handler and, when enabled, a
    rotating file handler for persistent storage.

    Attributes:
        _instance (LogManager): The singleton instance.
        _lock (threading.Lock): Thread lock for atomic initialization.
    """

    _instance: Optional["LogManager"] = None
    _lock: threading.Lock = threading.Lock()


    def __new__(cls) -> "LogManager":
        """Creates or returns the existing singleton instance."""
        # Double-checked locking pattern for thread-safe singleton initialization
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance


    def __init__(self) -> None:
        if self._initialized:
            return
        self._configured = False
        self._initialized = True


    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """
        Validates the syntax of a logging format string.

        Formats a dummy record to catch runtime errors.

        Args:
            log_format (str): The logging format string (e.g., "%(asctime)s - %(message)s").

        Returns:
            str: The validated format string, or the default `LOG_FORMAT` if validation fails.
        """
        if not log_format:
            return str(LOG_FORMAT.default())

        log_format = str(log_format)
        format_specifier_pattern = r"%\([a-zA-Z_][a-zA-Z0-9_]*\)[a-zA-Z]"
        try:
            formatter = logging.Formatter(fmt=log_format)
            record = logging.LogRecord(
                name="test", level=logging.INFO, pathname="", lineno=0,
                msg="test", args=(), exc_info=None,
            )
            formatted_output = formatter.format(record)
        except (ValueError, KeyError, TypeError) as e:
            print(
                f"{time.strftime(str(LOG_DATE_FORMAT.default()))} - cudos.logger - "
                f"Validation Error: {e}. Using default.",
                file=sys.stderr,
            )
            return str(LOG_FORMAT.default())

        # If the output still contains format specifiers, python didn't process them
        if re.search(format_specifier_pattern, formatted_output):
            return str(LOG_FORMAT.default())

        return log_format


    @staticmethod
    def resolve_level(level: str) -> int:
        """
        Maps a level name (DEBUG, INFO, ...) to its numeric value.

        Raises:
            ConfigurationError: If the name is not a standard logging level.
        """
        numeric_level = getattr(logging, str(level).strip().upper(), None)
        if not isinstance(numeric_level, int):
            raise ConfigurationError(f"Unknown log level: {level!r}")
        return numeric_level


    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Configures the root logger with console and file handlers.

        Args:
            log_level (Optional[str]): Logging level (DEBUG, INFO, etc.). Defaults to env var.
            log_file (Optional[Path]): Path to log file. Defaults to `LOG_FILE_PATH`.
            console_output (bool): Enable stdout logging. Defaults to True.
            file_output (Optional[bool]): Enable rotating file logging. Defaults to `LOG_FILE_OUTPUT`.

        Raises:
            ConfigurationError: If the log level is not a standard level name.
        """
        numeric_level = self.resolve_level(log_level or LOG_LEVEL)

        with self._lock:
            if self._configured:
                return

            root_logger = logging.getLogger()
            root_logger.setLevel(numeric_level)

            log_format = self.validate_log_format(LOG_FORMAT)

            # Uses UTC for consistency across different server timezones
            formatter = TerminalSafeFormatter(fmt=log_format, datefmt=str(LOG_DATE_FORMAT) + " UTC")
            formatter.converter = time.gmtime

            if console_output:
                if LOG_CONSOLE_HIGHLIGHTING:
                    cudos_theme = Theme(
                        {
                            "cudos.address":        "cyan",
                            "cudos.zero_address":   "dim cyan",
                            "cudos.amount":         "bold white",
                            "cudos.event":          "bold magenta",
                            "cudos.role":           "bold blue",
                            "cudos.level_critical": "bold red reverse",
                            "cudos.level_debug":    "bold dim",
                            "cudos.level_error":    "bold red",
                            "cudos.level_info":     "bold green",
                            "cudos.level_warning":  "bold yellow",
                            "cudos.logger_name":    "magenta",
                            "cudos.arrow":          "bold yellow",
                            "cudos.timestamp":      "bold cyan",
                        }
                    )

                    console = Console(theme=cudos_theme, highlight=False)

                    rich_handler = RichHandler(
                        console=console,
                        highlighter=CudosLogHighlighter(),
                        keywords=[],
                        rich_tracebacks=True,
                        omit_repeated_times=False,
                        show_path=False,
                        show_time=False,
                        show_level=False,
                        markup=False,
                    )
                    rich_handler.setLevel(numeric_level)
                    rich_handler.setFormatter(formatter)
                    root_logger.addHandler(rich_handler)
                else:
                    console_handler = logging.StreamHandler(sys.stdout)
                    console_handler.setLevel(numeric_level)
                    console_handler.setFormatter(formatter)
                    root_logger.addHandler(console_handler)

            if file_output is None:
                file_output = bool(LOG_FILE_OUTPUT)

            if file_output:
                log_file_path = Path(log_file or str(LOG_FILE_PATH))
                log_file_path.parent.mkdir(parents=True, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=str(log_file_path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

            self._configured = True


    def get_logger(self, name: str) -> logging.Logger:
        """
        Retrieves a configured logger instance for a specific module.

        Args:
            name (str): The name of the logger (typically `__name__`).

        Returns:
            logging.Logger: A configured standard Python logger.
        """
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


    @property
    def is_configured(self) -> bool:
        """Returns True if the logging system has been successfully configured."""
        return self._configured


class TerminalSafeFormatter(logging.Formatter):
    """
    A formatter class that sanitizes log output.

    Addresses and role names reach log lines straight from callers, so ANSI
    escape sequences and non-printable control characters are stripped
    before anything is written to a terminal or file.
    """

    # Matches ANSI CSI sequences (colors, cursor moves) and single ESC chars
    _ansi_escape_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
    )
    # Matches control chars (0x00-0x1F) excluding Tab and Newline
    _control_chars_re = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
    _carriage_return_re = re.compile(r"\r")


    @classmethod
    def sanitize(cls, text: str) -> str:
        """
        Removes potentially dangerous characters from the provided text.

        Args:
            text (str): The raw log message.

        Returns:
            str: The sanitized message safe for terminal output.
        """
        if not text:
            return text
        text = cls._ansi_escape_re.sub("", text)
        text = cls._carriage_return_re.sub("", text)
        text = cls._control_chars_re.sub("", text)
        return text


    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class CudosLogHighlighter(RegexHighlighter):
    """
    Custom Rich Highlighter for ledger logs.

    Colors account addresses, token amounts, role names and event names so a
    stream of transfers and role changes can be scanned by eye.
    """

    base_style = "cudos."
    highlights = [
        r"(?P<arrow>(\-\->)|(→))",
        r"(?P<zero_address>\b0x0{40}\b)",
        r"(?P<address>\b0x(?!0{40}\b)[0-9a-fA-F]{40}\b)",
        r"(?P<amount>\b\d+\s+CUDOS\b)",
        r"(?P<event>\b(Transfer|Approval|WhitelistAdminAdded|WhitelistAdminRemoved"
        r"|WhitelistedAdded|WhitelistedRemoved)\b)",
        r"(?P<role>\[(WhitelistAdmin|Whitelisted)\])",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


_manager = LogManager()

def get_logger(name: str) -> logging.Logger:
    """
    Public accessor of the logging system.
    Delegates to the Singleton LogManager, ensuring configuration is applied.

    Args:
        name (str): The name of the module requesting the logger.

    Returns:
        logging.Logger: The configured logger instance.
    """
    return _manager.get_logger(name)
