"""MCP tool registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .diagnose_tools import register_diagnose_tools
from .repo_tools import register_repo_tools
from .sentry_tools import register_sentry_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from ..config.schema import DiagnosisConfig
    from ..core.diagnosis import Diagnoser
    from ..interfaces.issues import IssueSource
    from ..interfaces.repository import SourceRepository

__all__ = [
    "register_diagnose_tools",
    "register_repo_tools",
    "register_sentry_tools",
    "register_tools",
]


def register_tools(
    mcp: FastMCP,
    issues: IssueSource,
    repository: SourceRepository,
    diagnoser: Diagnoser,
    config: DiagnosisConfig,
) -> None:
    """Register every tool the server exposes."""
    register_sentry_tools(mcp, issues)
    register_repo_tools(mcp, repository)
    register_diagnose_tools(
        mcp,
        diagnoser,
        repository,
        default_radius=config.default_radius,
        propose_radius=config.propose_radius,
    )
