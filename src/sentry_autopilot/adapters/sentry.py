"""Sentry adapter over the Sentry REST API.

This module implements the IssueSource protocol with httpx. All calls are
read-only and authenticated with a bearer token. Failures are mapped onto
the shared exception hierarchy (404 -> NotFoundError, and so on); there is
no retry, callers see the first failure.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ..config.schema import SentryConfig
from ..models.event import IssueEvent
from ..models.issue import IssueDetail, IssueSummary
from ..utils.errors import MalformedResponseError, decode_json, raise_for_status

log = structlog.get_logger()

SERVICE = "Sentry"


class SentryClient:
    """Sentry client implementing the IssueSource protocol.

    Example:
        async with SentryClient(config.sentry) as sentry:
            issues = await sentry.list_issues(hours_ago=2, limit=20)
            events = await sentry.list_issue_events(issues[0].id, limit=1)
    """

    def __init__(
        self,
        config: SentryConfig,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Sentry client.

        Args:
            config: Sentry-specific configuration.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.auth_token:
            headers["Authorization"] = f"Bearer {config.auth_token}"
        self._client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SentryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._client.get(path, params=params)
        raise_for_status(response, SERVICE)
        return decode_json(response, SERVICE)

    def _project_path(self) -> str:
        if not self._config.org_slug or not self._config.project_slug:
            raise ValueError("Sentry org_slug and project_slug must be configured")
        return f"/projects/{self._config.org_slug}/{self._config.project_slug}"

    async def list_issues(self, hours_ago: int = 24, limit: int = 20) -> list[IssueSummary]:
        """List unresolved issues last seen within ``hours_ago`` hours.

        Args:
            hours_ago: Size of the look-back window in hours.
            limit: Maximum number of issues to return.

        Returns:
            Issue summaries in Sentry's order.

        Raises:
            UpstreamError: If the request fails.
            MalformedResponseError: If Sentry does not return a list.
        """
        data = await self._get(
            f"{self._project_path()}/issues/",
            {"query": f"is:unresolved lastSeen:-{hours_ago}h", "per_page": limit},
        )
        if not isinstance(data, list):
            raise MalformedResponseError("Sentry issue list is not a list", service=SERVICE)

        issues = [IssueSummary.from_api(item) for item in data if isinstance(item, dict)]
        log.info("issues_listed", hours_ago=hours_ago, count=len(issues))
        return issues

    async def get_issue(self, issue_id: str) -> IssueDetail:
        """Fetch one issue.

        Raises:
            NotFoundError: If the issue does not exist.
            UpstreamError: If the request fails.
        """
        data = await self._get(f"/issues/{issue_id}/")
        if not isinstance(data, dict):
            raise MalformedResponseError("Sentry issue is not an object", service=SERVICE)
        return IssueDetail.from_api(data)

    async def list_issue_events(self, issue_id: str, limit: int = 1) -> list[IssueEvent]:
        """List an issue's events, most recent first, with full payloads.

        ``full=true`` makes Sentry include the entries (and so the stack
        traces) that the list endpoint leaves out by default.

        Raises:
            NotFoundError: If the issue does not exist.
            UpstreamError: If the request fails.
        """
        data = await self._get(
            f"/issues/{issue_id}/events/",
            {"per_page": limit, "full": "true"},
        )
        if not isinstance(data, list):
            raise MalformedResponseError("Sentry event list is not a list", service=SERVICE)

        return [IssueEvent.from_api(item) for item in data[:limit] if isinstance(item, dict)]
