"""Utility functions and helpers.

- errors: Exception hierarchy and HTTP status mapping
- logging: Structured logging with secret sanitization
- security: Secret redaction, repository name validation
"""

from sentry_autopilot.utils.errors import (
    AuthenticationError,
    AutopilotError,
    MalformedResponseError,
    NotFoundError,
    PatchApplyError,
    RateLimitError,
    UpstreamError,
)
from sentry_autopilot.utils.logging import LogFormat, LogLevel, configure_logging
from sentry_autopilot.utils.security import RedactionError, SecretRedactor, SecurityError

__all__ = [
    # Errors
    "AuthenticationError",
    "AutopilotError",
    "MalformedResponseError",
    "NotFoundError",
    "PatchApplyError",
    "RateLimitError",
    "UpstreamError",
    # Logging
    "LogFormat",
    "LogLevel",
    "configure_logging",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
]
