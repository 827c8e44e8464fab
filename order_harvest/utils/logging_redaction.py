"""
Logging redaction helpers.
Redacts id/refresh tokens from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Idtoken header as printed by dict reprs or request dumps
    (re.compile(r"(?i)('?idtoken'?\s*[:=]\s*'?)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # refreshToken / idToken JSON fields
    (re.compile(r"(?i)(\"?(?:refresh|id)_?token\"?\s*[:=]\s*\"?)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
            redacted = redact_message(message)
            record.msg = redacted
            record.args = ()
        except Exception:
            # If redaction fails, allow log through unmodified
            pass
        return True


def install_redaction_filter() -> None:
    """
    Attach the filter to the root logger and its handlers.

    Logger filters only see records created on that logger, so the handlers
    need it too for records propagated from module loggers.
    """
    root = logging.getLogger()
    targets = [root, *root.handlers]
    for target in targets:
        if any(isinstance(existing, RedactingFilter) for existing in target.filters):
            continue
        target.addFilter(RedactingFilter())
