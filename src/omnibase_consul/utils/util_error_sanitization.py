# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Error message sanitization utilities.

Consul transport errors can echo request URLs and headers, which may carry
the ACL token (``?token=...`` or ``X-Consul-Token``). Messages are passed
through these helpers before they reach logs or error context.

Example:
    >>> sanitize_error_string("403 for /v1/kv/app?token=abc")
    '[REDACTED - potentially sensitive data]'
"""

from __future__ import annotations

# Checked case-insensitively; a match redacts the whole message
SENSITIVE_PATTERNS: tuple[str, ...] = (
    "token",
    "x-consul-token",
    "secret",
    "password",
    "passwd",
    "credential",
    "authorization",
    "bearer",
    "-----begin",
)


def sanitize_error_string(error_str: str, max_length: int = 500) -> str:
    """Sanitize a raw error string for logs and error context.

    Args:
        error_str: The error string to sanitize
        max_length: Maximum length of the sanitized message (default 500)

    Returns:
        The message, redacted when a sensitive pattern is present and
        truncated to ``max_length``.
    """
    if not error_str:
        return ""

    error_lower = error_str.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in error_lower:
            return "[REDACTED - potentially sensitive data]"

    if len(error_str) > max_length:
        return error_str[:max_length] + "... [truncated]"

    return error_str


def sanitize_error_message(exception: BaseException, max_length: int = 500) -> str:
    """Sanitize an exception as ``"{ExceptionType}: {message}"``."""
    return f"{type(exception).__name__}: " + (
        sanitize_error_string(str(exception), max_length) or "(no message)"
    )


__all__: list[str] = [
    "SENSITIVE_PATTERNS",
    "sanitize_error_message",
    "sanitize_error_string",
]
