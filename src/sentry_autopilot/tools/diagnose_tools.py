"""MCP tools for diagnosing crashes and drafting fixes.

``apply-fix`` is a mock: it validates and previews, it never writes.
``open-pr`` is the only tool that changes the repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

import structlog
from pydantic import Field

from ..core.patching import mock_apply, propose_fix
from ..utils.errors import PatchApplyError
from .base import MAX_RADIUS, OptionalRef, failure_message, to_json

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from ..core.diagnosis import Diagnoser
    from ..interfaces.repository import SourceRepository

log = structlog.get_logger()


async def diagnose_sentry_error(
    diagnoser: Diagnoser,
    issue_id: str,
    radius: int = 12,
    ref: str | None = None,
) -> str:
    try:
        result = await diagnoser.diagnose(issue_id, radius, ref)
        return to_json(result.to_dict())
    except Exception as e:
        return failure_message("diagnose-sentry-error", e)


async def propose_fix_for_issue(
    diagnoser: Diagnoser,
    issue_id: str,
    radius: int = 80,
    ref: str | None = None,
) -> str:
    try:
        diagnosis = await diagnoser.diagnose(issue_id, radius, ref)
        proposal = propose_fix(issue_id, diagnosis)
        log.info("fix_proposed", issue_id=issue_id, file_path=proposal.file_path)
        return to_json(proposal.to_dict())
    except Exception as e:
        return failure_message("propose-fix", e)


async def apply_fix(
    repository: SourceRepository,
    issue_id: str,
    file_path: str,
    before: str,
    after: str,
    base_ref: str = "main",
    branch_name: str | None = None,
    commit_message: str = "Fix Sentry issue",
    strategy: Literal["exact", "regex"] = "regex",
) -> str:
    try:
        file = await repository.get_file(file_path, base_ref)
        try:
            applied = mock_apply(file.text, file_path, before, after, strategy)
        except PatchApplyError as e:
            log.info("mock_apply_rejected", file_path=file_path, strategy=strategy, reason=str(e))
            return f"MOCK apply failed: {e}"

        return to_json(
            {
                "ok": True,
                "mode": "mock",
                "match_info": {"strategy": applied.strategy, "matches": applied.matches},
                "issue_id": issue_id,
                "file_path": file_path,
                "base_ref": base_ref,
                "branch_name": branch_name or f"fix/sentry-{issue_id}-MOCK",
                "commit_message": commit_message,
                "note": "No GitHub write performed. This only validates and previews the change.",
                "preview": {
                    "before": applied.before_preview,
                    "after": applied.after_preview,
                },
            }
        )
    except Exception as e:
        return failure_message("apply-fix", e)


async def open_pr(
    repository: SourceRepository,
    title: str,
    head: str,
    body: str = "",
    base: str = "main",
    draft: bool = False,
) -> str:
    try:
        pr = await repository.create_pull_request(
            head=head, title=title, base=base, body=body, draft=draft
        )
        return to_json({"ok": True, "pr_url": pr.url, "number": pr.number})
    except Exception as e:
        return failure_message("open-pr", e)


def register_diagnose_tools(
    mcp: FastMCP,
    diagnoser: Diagnoser,
    repository: SourceRepository,
    default_radius: int = 12,
    propose_radius: int = 80,
) -> None:
    """Register the diagnosis and fix tools on ``mcp``."""

    @mcp.tool(
        name="diagnose-sentry-error",
        description=(
            "Fetch Sentry issue + latest event, extract file/line, fetch GitHub code context."
        ),
    )
    async def _diagnose_sentry_error(
        issue_id: Annotated[str, Field(description="Sentry issue ID")],
        radius: Annotated[
            int, Field(ge=1, le=MAX_RADIUS, description="Lines above/below the crash line")
        ] = default_radius,
        ref: OptionalRef = None,
    ) -> str:
        return await diagnose_sentry_error(diagnoser, issue_id, radius, ref)

    @mcp.tool(
        name="propose-fix",
        description=(
            "Generate a minimal safe patch diff for a Sentry issue (no writes). "
            "Show the diff in the patch viewer; do not repeat it in chat."
        ),
    )
    async def _propose_fix(
        issue_id: Annotated[str, Field(description="Sentry issue ID")],
        radius: Annotated[
            int, Field(ge=1, le=MAX_RADIUS, description="Lines above/below the crash line")
        ] = propose_radius,
        ref: OptionalRef = None,
    ) -> str:
        return await propose_fix_for_issue(diagnoser, issue_id, radius, ref)

    @mcp.tool(
        name="apply-fix",
        description=(
            "MOCK apply: verifies the patch can be applied and returns updated content "
            "preview. No branch, no commit, no GitHub writes."
        ),
    )
    async def _apply_fix(
        issue_id: Annotated[str, Field(description="Sentry issue ID")],
        file_path: Annotated[str, Field(description="Repo-relative path of the file to patch")],
        before: Annotated[str, Field(description="Snippet to replace (exact strategy)")],
        after: Annotated[str, Field(description="Replacement snippet (exact strategy)")],
        base_ref: str = "main",
        branch_name: str | None = None,
        commit_message: str = "Fix Sentry issue",
        strategy: Literal["exact", "regex"] = "regex",
    ) -> str:
        return await apply_fix(
            repository,
            issue_id,
            file_path,
            before,
            after,
            base_ref,
            branch_name,
            commit_message,
            strategy,
        )

    @mcp.tool(name="open-pr", description="Open a GitHub PR from a branch.")
    async def _open_pr(
        title: Annotated[str, Field(description="Pull request title")],
        head: Annotated[str, Field(description="Branch holding the changes")],
        body: str = "",
        base: str = "main",
        draft: bool = False,
    ) -> str:
        return await open_pr(repository, title, head, body, base, draft)
