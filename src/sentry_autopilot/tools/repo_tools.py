"""MCP tools reading files from the GitHub repository."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Annotated

from pydantic import Field

from .base import OptionalRef, Radius, failure_message, to_json

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from ..interfaces.repository import SourceRepository

RepoPath = Annotated[str, Field(description="Repo-relative path, e.g. src/components/X.tsx")]


async def repo_get_file(repository: SourceRepository, path: str, ref: str | None = None) -> str:
    try:
        file = await repository.get_file(path.lstrip("/"), ref)
        return to_json(asdict(file))
    except Exception as e:
        return failure_message("repo-get-file", e)


async def repo_get_context(
    repository: SourceRepository,
    path: str,
    line: int,
    radius: int = 12,
    ref: str | None = None,
) -> str:
    try:
        ctx = await repository.get_context(path.lstrip("/"), line, radius, ref)
        return to_json(asdict(ctx))
    except Exception as e:
        return failure_message("repo-get-context", e)


def register_repo_tools(mcp: FastMCP, repository: SourceRepository) -> None:
    """Register the repository read tools on ``mcp``."""

    @mcp.tool(
        name="repo-get-file",
        description="Fetch a file from GitHub repo by path (and optional ref).",
    )
    async def _repo_get_file(path: RepoPath, ref: OptionalRef = None) -> str:
        return await repo_get_file(repository, path, ref)

    @mcp.tool(
        name="repo-get-context",
        description="Fetch code context around a specific line in a GitHub file.",
    )
    async def _repo_get_context(
        path: RepoPath,
        line: Annotated[int, Field(ge=1, description="1-based line number")],
        radius: Radius = 12,
        ref: OptionalRef = None,
    ) -> str:
        return await repo_get_context(repository, path, line, radius, ref)
