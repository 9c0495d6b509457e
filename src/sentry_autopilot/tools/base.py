"""Helpers shared by the MCP tool handlers."""

from __future__ import annotations

import json
from typing import Annotated, Any

import structlog
from pydantic import Field

log = structlog.get_logger()

MAX_RADIUS = 200

Radius = Annotated[int, Field(ge=1, le=MAX_RADIUS, description="Lines above/below the crash line")]
OptionalRef = Annotated[
    str | None, Field(description="Branch/tag/sha (default from configuration)")
]


def to_json(payload: Any) -> str:
    """Render a tool payload the way every tool returns it."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


def failure_message(tool: str, error: BaseException) -> str:
    """Log a failed tool call and turn it into the single failure string returned."""
    log.error("tool_failed", tool=tool, error_type=type(error).__name__, error=str(error))
    return f"{tool} failed: {error}"
