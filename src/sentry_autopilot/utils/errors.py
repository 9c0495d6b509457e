"""Exception hierarchy shared by the Sentry and GitHub clients.

The split that matters is :class:`NotFoundError` versus everything else:
path resolution moves on to the next candidate on a not-found and aborts on
any other upstream failure.
"""

from __future__ import annotations

import httpx
import structlog

log = structlog.get_logger()


class AutopilotError(Exception):
    """Base exception for all Sentry Autopilot errors."""


class UpstreamError(AutopilotError):
    """An upstream API answered with a failure.

    Attributes:
        service: Name of the upstream service ("sentry", "github").
        status_code: HTTP status code, if the failure came from a response.
    """

    def __init__(self, message: str, service: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class NotFoundError(UpstreamError):
    """The requested issue, event or file does not exist (HTTP 404)."""


class AuthenticationError(UpstreamError):
    """Credentials were rejected (HTTP 401/403)."""


class RateLimitError(UpstreamError):
    """Rate limit exceeded (HTTP 429).

    Attributes:
        retry_after: Number of seconds to wait before retrying, if known.
    """

    def __init__(
        self,
        message: str,
        service: str = "",
        status_code: int | None = 429,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, service=service, status_code=status_code)
        self.retry_after = retry_after


class MalformedResponseError(UpstreamError):
    """The upstream response did not have the expected shape."""


class PatchApplyError(AutopilotError):
    """A mock patch could not be applied cleanly."""


def _parse_retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def raise_for_status(response: httpx.Response, service: str) -> None:
    """Map a non-2xx response onto the exception hierarchy.

    Args:
        response: Response to check.
        service: Upstream service name used in the error message.

    Raises:
        NotFoundError: On 404.
        AuthenticationError: On 401 or 403.
        RateLimitError: On 429.
        UpstreamError: On any other non-2xx status.
    """
    if response.is_success:
        return

    status = response.status_code
    reason = response.reason_phrase
    body = response.text[:500]
    message = f"{service} API failed: {status} {reason} {body}".strip()

    if status == 404:
        raise NotFoundError(message, service=service, status_code=status)
    if status in (401, 403):
        log.error("upstream_auth_failed", service=service, status_code=status)
        raise AuthenticationError(message, service=service, status_code=status)
    if status == 429:
        retry_after = _parse_retry_after(response)
        log.warning("rate_limit_hit", service=service, retry_after=retry_after)
        raise RateLimitError(message, service=service, retry_after=retry_after)

    log.error("upstream_request_failed", service=service, status_code=status)
    raise UpstreamError(message, service=service, status_code=status)


def decode_json(response: httpx.Response, service: str) -> object:
    """Decode a JSON body, raising :class:`MalformedResponseError` if it is not JSON."""
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(
            f"{service} API returned invalid JSON: {e}", service=service
        ) from e
