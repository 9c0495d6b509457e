"""Abstract interface for error-tracker integrations."""

from typing import Protocol

from ..models.event import IssueEvent
from ..models.issue import IssueDetail, IssueSummary


class IssueSource(Protocol):
    """Read-only access to issues and events of one error-tracker project."""

    async def list_issues(self, hours_ago: int = 24, limit: int = 20) -> list[IssueSummary]:
        """
        List unresolved issues seen within the last ``hours_ago`` hours.

        Args:
            hours_ago: Size of the look-back window in hours
            limit: Maximum number of issues to return

        Returns:
            Issue summaries, as ordered by the tracker

        Raises:
            UpstreamError: If the tracker request fails
        """
        ...

    async def get_issue(self, issue_id: str) -> IssueDetail:
        """
        Fetch one issue.

        Raises:
            NotFoundError: If the issue does not exist
            UpstreamError: If the tracker request fails
        """
        ...

    async def list_issue_events(self, issue_id: str, limit: int = 1) -> list[IssueEvent]:
        """
        List events of an issue, most recent first.

        Raises:
            NotFoundError: If the issue does not exist
            UpstreamError: If the tracker request fails
        """
        ...
