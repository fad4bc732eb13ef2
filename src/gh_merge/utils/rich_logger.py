"""
Rich Logger for gh-merge
========================

Logging utility with rich console formatting, timezone-aware file
output and masking of secrets taken from the environment.

Features:
- Rich console formatting with colors and structured ``key=value`` context
- Session tracking with a per-process UUID
- File logging with rotation and optional syslog output
- Masking of sensitive environment variable values (webhook secrets, tokens)

Loggers obtained with ``get_logger("gh_merge.<component>")`` carry no
handlers of their own and propagate to the application logger that
``setup_logging`` configures.
"""

import inspect
import logging
import logging.handlers
import os
import re
import socket
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import pytz
from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "gh_merge"
DEFAULT_TIMEZONE = pytz.UTC
DEFAULT_LOG_LEVEL = logging.INFO
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

# Generate unique session ID for this process
SESSION_ID = str(uuid.uuid4())

SENSITIVE_ENV_PATTERNS = [
    'GH_TOKEN', 'GITHUB_TOKEN', 'TOKEN', 'PASSWORD', 'SECRET', 'KEY',
    'WEBHOOK_SECRET', 'ACCESS_TOKEN', 'AUTH_TOKEN'
]


class TimezoneAwareFormatter(logging.Formatter):
    """Formatter that renders timestamps in a fixed timezone."""

    def __init__(self, fmt=None, datefmt=None, style='%', tz=None):
        super().__init__(fmt, datefmt, style)
        self.tz = tz

    def formatTime(self, record, datefmt=None):  # noqa: N802
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if self.tz:
            dt = dt.astimezone(self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()


class RichLogger:
    """
    Logger with rich formatting and structured context.

    Provides:
    - Rich console output
    - File logging with rotation
    - Syslog output
    - Security-aware environment variable masking
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: int = DEFAULT_LOG_LEVEL,
        timezone: pytz.BaseTzInfo = DEFAULT_TIMEZONE,
        log_file: Optional[Union[str, Path]] = None,
        console_output: bool = True,
        file_output: bool = False,
        syslog_output: bool = False,
        syslog_address: Optional[tuple[str, int]] = None,
        syslog_facility: int = logging.handlers.SysLogHandler.LOG_USER
    ):
        """
        Initialize the RichLogger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            timezone: Timezone for log timestamps
            log_file: Path to log file (optional)
            console_output: Enable console logging
            file_output: Enable file logging
            syslog_output: Enable syslog logging
            syslog_address: (host, port) for remote syslog, None for local
            syslog_facility: Syslog facility code
        """
        self.name = name
        self.timezone = timezone
        self.session_id = SESSION_ID
        self.syslog_address = syslog_address
        self.syslog_facility = syslog_facility
        self._compiled_patterns: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Prevent duplicate handlers
        if self.logger.handlers:
            self.logger.handlers.clear()

        if console_output:
            self._setup_console_handler()

        if file_output:
            self._setup_file_handler(log_file)

        if syslog_output:
            self._setup_syslog_handler()

    def _setup_console_handler(self) -> None:
        """Set up rich console handler writing to stderr."""
        console = Console(stderr=True)
        console_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, log_file: Optional[Union[str, Path]] = None) -> None:
        """
        Set up rotating file handler for persistent logging.

        Args:
            log_file: Path to log file. If None, uses
                     ~/.cache/gh-merge/logs/gh-merge.log
        """
        if log_file is None:
            log_dir = Path.home() / ".cache" / "gh-merge" / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / "gh-merge.log"

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )

        file_format = (
            "%(asctime)s | %(levelname)8s | %(name)s | "
            f"PID:{os.getpid()} | TID:{threading.get_ident()} | "
            f"SID:{self.session_id[:8]} | %(message)s"
        )
        file_handler.setFormatter(TimezoneAwareFormatter(file_format, tz=self.timezone))
        self.logger.addHandler(file_handler)

    def _setup_syslog_handler(self) -> None:
        """
        Set up syslog handler.

        If syslog_address is None, the local syslog socket is used.
        """
        try:
            if self.syslog_address:
                handler = logging.handlers.SysLogHandler(
                    address=self.syslog_address,
                    facility=self.syslog_facility,
                    socktype=socket.SOCK_DGRAM
                )
            else:
                handler = logging.handlers.SysLogHandler(facility=self.syslog_facility)

            handler.setFormatter(logging.Formatter(
                f"%(name)s[{os.getpid()}]: %(levelname)s - %(message)s"
            ))
            self.logger.addHandler(handler)
        except OSError as e:
            self.logger.warning(f"Failed to setup syslog handler: {e}")

    def _get_caller_info(self) -> dict[str, Any]:
        """
        Get information about the calling function.

        Returns:
            dict with 'filename', 'function' and 'lineno' of the first
            frame outside this module
        """
        current_file = inspect.getfile(inspect.currentframe())
        for frame_info in inspect.stack()[1:]:
            if frame_info.filename != current_file:
                return {
                    'filename': os.path.basename(frame_info.filename),
                    'function': frame_info.function,
                    'lineno': frame_info.lineno,
                }
        return {'filename': 'unknown', 'function': 'unknown', 'lineno': 0}

    def _mask_sensitive_env_vars(self, text: str) -> str:
        """
        Mask sensitive environment variable values in log text.

        Args:
            text: Text that might contain sensitive information

        Returns:
            Text with sensitive values masked
        """
        masked_text = text
        for var, value in os.environ.items():
            if not value or len(value) <= 4:
                continue
            if not any(pattern in var.upper() for pattern in SENSITIVE_ENV_PATTERNS):
                continue

            cache_key = f"{var}_{len(value)}"
            if cache_key not in self._compiled_patterns:
                escaped_value = re.escape(value)
                self._compiled_patterns[cache_key] = {
                    'standalone': re.compile(rf'\b{escaped_value}\b'),
                    'assignment': re.compile(rf'({re.escape(var)}=){escaped_value}'),
                    'masked_value': value[:4] + '*' * (len(value) - 4)
                }

            patterns = self._compiled_patterns[cache_key]
            masked_value = patterns['masked_value']

            def replacement(match, mv=masked_value):
                return match.group(1) + mv

            masked_text = patterns['assignment'].sub(replacement, masked_text)
            masked_text = patterns['standalone'].sub(masked_value, masked_text)

        return masked_text

    def _format_message(self, message: str, **kwargs) -> str:
        """
        Format message with caller info, context and masking.

        Args:
            message: The log message to format
            **kwargs: Context key-value pairs to append

        Returns:
            str: Formatted message
        """
        caller = self._get_caller_info()
        formatted_msg = f"[{caller['filename']}:{caller['lineno']}] {caller['function']}() | {message}"

        if kwargs:
            context_parts = [f"{k}={v}" for k, v in kwargs.items()]
            formatted_msg += f" | {', '.join(context_parts)}"

        return self._mask_sensitive_env_vars(formatted_msg)

    def debug(self, message: str, **kwargs) -> None:
        """Log a debug-level message with context."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs) -> None:
        """Log an info-level message with context."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs) -> None:
        """Log a warning-level message with context."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs) -> None:
        """Log an error-level message with context."""
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs) -> None:
        """
        Log an error with the current exception's traceback.

        Must be called from within an except block.
        """
        self.logger.error(self._format_message(message, **kwargs), exc_info=True)


_loggers: dict[str, RichLogger] = {}
_logger_lock = threading.Lock()


def get_logger(name: str = ROOT_LOGGER_NAME, **kwargs) -> RichLogger:
    """
    Get or create a logger instance (thread-safe).

    Component loggers are created without handlers so their records
    reach the application logger's handlers through propagation.

    Args:
        name: Logger name
        **kwargs: Additional arguments for RichLogger

    Returns:
        RichLogger instance
    """
    if name in _loggers:
        return _loggers[name]

    with _logger_lock:
        if name not in _loggers:
            if name != ROOT_LOGGER_NAME and not kwargs:
                kwargs = {'console_output': False, 'file_output': False, 'level': logging.NOTSET}
            _loggers[name] = RichLogger(name, **kwargs)
        return _loggers[name]


def setup_logging(
    level: int = DEFAULT_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    console_output: bool = True,
    file_output: bool = False,
    syslog_output: bool = False,
    syslog_address: Optional[tuple[str, int]] = None,
    syslog_facility: int = logging.handlers.SysLogHandler.LOG_USER,
    timezone: Optional[pytz.BaseTzInfo] = None
) -> RichLogger:
    """
    Set up application-wide logging.

    Rebuilds the application logger with the given handlers; call once
    at startup before events are dispatched.

    Returns:
        RichLogger: Configured application logger
    """
    app_logger = RichLogger(
        ROOT_LOGGER_NAME,
        level=level,
        log_file=log_file,
        console_output=console_output,
        file_output=file_output,
        syslog_output=syslog_output,
        syslog_address=syslog_address,
        syslog_facility=syslog_facility,
        timezone=timezone or DEFAULT_TIMEZONE
    )
    with _logger_lock:
        _loggers[ROOT_LOGGER_NAME] = app_logger
    return app_logger
