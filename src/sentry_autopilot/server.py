"""MCP server assembly.

Builds the Sentry and GitHub clients from configuration, wires them into a
Diagnoser and registers every tool on a FastMCP instance.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from mcp.server.fastmcp import FastMCP

from sentry_autopilot.adapters.github import GitHubClient
from sentry_autopilot.adapters.sentry import SentryClient
from sentry_autopilot.config.schema import AppConfig
from sentry_autopilot.core.diagnosis import Diagnoser
from sentry_autopilot.tools import register_tools

log = structlog.get_logger()

INSTRUCTIONS = (
    "Diagnose Sentry crashes against the GitHub repository: list issues, "
    "locate the crashing line, propose a fix and preview it. Only open-pr writes."
)


@dataclass
class AutopilotServer:
    """A configured MCP server and the HTTP clients it owns."""

    mcp: FastMCP
    sentry: SentryClient
    github: GitHubClient
    transport: str = "stdio"

    async def run(self) -> None:
        """Serve until the transport closes."""
        log.info("server_starting", name=self.mcp.name, transport=self.transport)
        if self.transport == "stdio":
            await self.mcp.run_stdio_async()
        elif self.transport == "sse":
            await self.mcp.run_sse_async()
        elif self.transport == "streamable-http":
            await self.mcp.run_streamable_http_async()
        else:
            raise ValueError(f"Unsupported transport: {self.transport}")

    async def close(self) -> None:
        await self.sentry.close()
        await self.github.close()
        log.info("server_stopped")


def create_server(config: AppConfig) -> AutopilotServer:
    """Factory function to create the server with all dependencies.

    Args:
        config: Application configuration

    Returns:
        AutopilotServer ready to run; call ``close()`` when done
    """
    timeout = config.http.timeout
    sentry = SentryClient(config.sentry, timeout=timeout)
    github = GitHubClient(config.github, timeout=timeout)
    diagnoser = Diagnoser(sentry, github, config.diagnosis)

    mcp = FastMCP(
        config.server.name,
        instructions=INSTRUCTIONS,
        host=config.server.host,
        port=config.server.port,
    )
    register_tools(mcp, sentry, github, diagnoser, config.diagnosis)

    log.info(
        "server_created",
        name=config.server.name,
        sentry_project=f"{config.sentry.org_slug}/{config.sentry.project_slug}",
        github_repo=config.github.full_name,
        ref=config.github.ref,
    )
    return AutopilotServer(mcp=mcp, sentry=sentry, github=github, transport=config.server.transport)
