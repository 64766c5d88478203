"""Secure structured logging for hook wrapper.

Hooks commonly export credentials, so everything written through these
formatters has secret-looking text masked.

Features:
    - Sensitive data masking (API keys, tokens, passwords)
    - JSON structured logging format
    - Hook context integration ([hook=xxx] prefix)
    - Configurable log levels and formats
"""

from __future__ import annotations

import contextvars
import json
import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

# Patterns to mask in logs
SENSITIVE_PATTERNS = [
    (re.compile(r'api[_-]?key["\']?\s*[:=]\s*["\']?[\w-]+', re.I), "api_key=***MASKED***"),
    (re.compile(r"sk-[a-zA-Z0-9]{20,}"), "***OPENAI_KEY***"),
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"), "***GITHUB_TOKEN***"),
    (re.compile(r"AKIA[0-9A-Z]{16}"), "***AWS_ACCESS_KEY***"),
    (re.compile(r'password["\']?\s*[:=]\s*["\']?[^\s"\']+', re.I), "password=***MASKED***"),
    (re.compile(r'secret["\']?\s*[:=]\s*["\']?[^\s"\']+', re.I), "secret=***MASKED***"),
    (re.compile(r'token["\']?\s*[:=]\s*["\']?[^\s"\']+', re.I), "token=***MASKED***"),
]

_current_hook: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "hook_wrapper_current_hook", default=None
)


@contextmanager
def hook_context(hook_name: str) -> Iterator[None]:
    """Tag log records emitted inside the block with a hook name."""
    token = _current_hook.set(hook_name)
    try:
        yield
    finally:
        _current_hook.reset(token)


def get_current_hook() -> str | None:
    """Name of the hook currently being run, if any."""
    return _current_hook.get()


def mask_secrets(message: str) -> str:
    """Replace secret-looking substrings in a message."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class SecureFormatter(logging.Formatter):
    """Formatter that masks sensitive data and includes hook context."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_hook_context: bool = True,
    ) -> None:
        """Initialize the secure formatter.

        Args:
            fmt: Format string for log messages.
            datefmt: Date format string.
            include_hook_context: Whether to include [hook=xxx] prefix.
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.include_hook_context = include_hook_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record and mask sensitive data.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message with sensitive data masked and hook context.
        """
        message = super().format(record)

        if self.include_hook_context:
            hook_name = get_current_hook()
            if hook_name:
                prefix = f"[hook={hook_name}] "
                # Format: "2024-01-15 10:30:00 - logger - LEVEL - message"
                # We want: "2024-01-15 10:30:00 - logger - LEVEL - [hook=xxx] message"
                parts = message.split(" - ", 3)
                if len(parts) == 4:
                    message = f"{parts[0]} - {parts[1]} - {parts[2]} - {prefix}{parts[3]}"
                else:
                    message = prefix + message

        return mask_secrets(message)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging with hook context."""

    def __init__(self, include_hook_context: bool = True) -> None:
        """Initialize the JSON formatter.

        Args:
            include_hook_context: Whether to include the hook field.
        """
        super().__init__()
        self.include_hook_context = include_hook_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with sensitive data masked."""
        log_data: dict[str, str | None] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_hook_context:
            hook_name = get_current_hook()
            if hook_name:
                log_data["hook"] = hook_name

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return mask_secrets(json.dumps(log_data))


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    mask_sensitive: bool = True,
    include_hook_context: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        json_format: Use JSON format for structured logging.
        mask_sensitive: Mask sensitive data in logs.
        include_hook_context: Include [hook=xxx] in log messages.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = JSONFormatter(include_hook_context=include_hook_context)
    elif mask_sensitive:
        formatter = SecureFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            include_hook_context=include_hook_context,
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
