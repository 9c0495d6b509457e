"""MCP tools reading issues from Sentry."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Annotated, Any

import structlog
from pydantic import Field

from .base import failure_message, to_json

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from ..interfaces.issues import IssueSource
    from ..models.issue import IssueSummary

log = structlog.get_logger()


def issue_row(issue: IssueSummary) -> dict[str, Any]:
    """Flatten an issue summary into a row of the issue list."""
    return {
        "id": issue.id,
        "short_id": issue.short_id,
        "first_seen": issue.first_seen,
        "last_seen": issue.last_seen,
        "event_count": issue.event_count,
        "summary": issue.summary_line,
        "permalink": issue.permalink,
        "level": issue.level,
        "status": issue.status,
    }


async def list_sentry_errors(issues: IssueSource, hours_ago: int = 2, limit: int = 20) -> str:
    try:
        summaries = await issues.list_issues(hours_ago=hours_ago, limit=limit)
        rows = [issue_row(issue) for issue in summaries]
        return to_json(
            {
                "hours_ago": hours_ago,
                "limit": limit,
                "count": len(rows),
                "issues": rows,
                "message": f"Loaded {len(rows)} issues from last {hours_ago}h.",
            }
        )
    except Exception as e:
        return failure_message("list-sentry-errors", e)


async def get_sentry_error(issues: IssueSource, issue_id: str) -> str:
    try:
        issue = await issues.get_issue(issue_id)
        return to_json(asdict(issue))
    except Exception as e:
        return failure_message("get-sentry-error", e)


def register_sentry_tools(mcp: FastMCP, issues: IssueSource) -> None:
    """Register the Sentry read tools on ``mcp``."""

    @mcp.tool(
        name="list-sentry-errors",
        description=(
            "Get unresolved Sentry issues from a project within a timeframe. "
            "IMPORTANT: Do not summarize, list, or repeat issues in chat."
        ),
    )
    async def _list_sentry_errors(
        hours_ago: Annotated[int, Field(ge=1, description="Look-back window in hours")] = 2,
        limit: Annotated[int, Field(ge=1, le=100, description="Maximum issues")] = 20,
    ) -> str:
        return await list_sentry_errors(issues, hours_ago, limit)

    @mcp.tool(name="get-sentry-error", description="Get detailed Sentry issue data by ID.")
    async def _get_sentry_error(
        issue_id: Annotated[str, Field(description="Sentry issue ID")],
    ) -> str:
        return await get_sentry_error(issues, issue_id)
