"""Log sanitization filter keeping Strava credentials out of logs.

Redacts, before a record is emitted:
- Bearer tokens and Authorization header values
- access_token / refresh_token / client_secret values
- OAuth authorization codes
- Bare 40-character hex strings (the shape of Strava tokens)

Usage:
    from tri_pacer.utils.log_sanitizer import install_log_sanitizer

    install_log_sanitizer()
"""

import logging
import re
from typing import Any


REDACTED = "[REDACTED]"

# key=value / "key": "value" style fields whose value is always redacted
SENSITIVE_FIELDS = (
    "access_token",
    "refresh_token",
    "client_secret",
    "authorization",
)


def _field_pattern(name: str, value: str = r"[^\"'&\s,}]+") -> re.Pattern:
    return re.compile(rf'({name}["\']?\s*[:=]\s*["\']?){value}', re.IGNORECASE)


class LogSanitizationFilter(logging.Filter):
    """Logging filter that redacts OAuth secrets from log messages."""

    # Order matters: Bearer before the generic Authorization field
    PATTERNS: list[tuple[re.Pattern, str]] = [
        (re.compile(r"Bearer\s+[a-zA-Z0-9_\-\.]+", re.IGNORECASE), f"Bearer {REDACTED}"),
        *[(_field_pattern(name), rf"\1{REDACTED}") for name in SENSITIVE_FIELDS],
        # OAuth codes in callback URLs or request bodies
        (_field_pattern(r"\bcode", r"[a-zA-Z0-9_-]{20,}"), rf"\1{REDACTED}"),
        (re.compile(r"\b[a-fA-F0-9]{40}\b"), "[REDACTED_TOKEN]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place. Always lets the record through."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))
        if record.args:
            record.args = self._sanitize_args(record.args)
        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        """Recursively sanitize log arguments, leaving untouched values as they were."""
        if isinstance(args, str):
            return self._sanitize(args)
        if isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        if isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        if isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        text = str(args)
        sanitized = self._sanitize(text)
        return sanitized if sanitized != text else args


def install_log_sanitizer(logger_name: str | None = None) -> LogSanitizationFilter:
    """
    Install the sanitization filter.

    Args:
        logger_name: Install only on this logger. When None, install on the
            root logger and its existing handlers.

    Returns:
        The installed filter
    """
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return sanitizer

    root_logger = logging.getLogger()
    if any(isinstance(f, LogSanitizationFilter) for f in root_logger.filters):
        return sanitizer
    root_logger.addFilter(sanitizer)
    for handler in root_logger.handlers:
        handler.addFilter(sanitizer)
    return sanitizer


def sanitize_string(text: str) -> str:
    """Sanitize a string outside the logging system, e.g. for error messages."""
    return LogSanitizationFilter()._sanitize(text)
