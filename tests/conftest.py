"""Shared test fixtures for Sentry Autopilot."""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from sentry_autopilot.config.schema import DiagnosisConfig, GitHubConfig, SentryConfig
from sentry_autopilot.core.context_window import extract_context
from sentry_autopilot.models.event import IssueEvent
from sentry_autopilot.models.issue import IssueDetail
from sentry_autopilot.models.repository import PullRequest, RepoContext, RepoFile
from sentry_autopilot.utils.errors import NotFoundError

NAV_SOURCE = "\n".join(
    [
        'import React from "react";',
        "",
        "export function Nav() {",
        "    return (",
        "        <a",
        "            onClick={() => {",
        '            (window as any).userAnalytics.track("logo_clicked", { time: Date.now() });',
        "            }}",
        "        >",
        "            Home",
        "        </a>",
        "    );",
        "}",
        "",
    ]
)


def make_issue(
    issue_id: str = "4711",
    metadata: dict[str, Any] | None = None,
    **overrides: Any,
) -> IssueDetail:
    """Build an IssueDetail from a Sentry-shaped payload."""
    payload: dict[str, Any] = {
        "id": issue_id,
        "shortId": "WEB-1A",
        "title": "TypeError: Cannot read properties of undefined (reading 'track')",
        "culprit": "Nav",
        "permalink": f"https://sentry.io/organizations/acme/issues/{issue_id}/",
        "count": "17",
        "firstSeen": "2026-10-01T10:00:00Z",
        "lastSeen": "2026-10-17T09:30:00Z",
        "level": "error",
        "status": "unresolved",
        "metadata": metadata if metadata is not None else {},
    }
    payload.update(overrides)
    return IssueDetail.from_api(payload)


def make_frame(
    filename: str | None = None,
    lineno: int | None = None,
    in_app: bool = True,
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw Sentry stack frame."""
    frame: dict[str, Any] = {"filename": filename, "lineNo": lineno, "inApp": in_app}
    frame.update(extra)
    return frame


def make_event(
    *frames: dict[str, Any],
    event_id: str = "evt-1",
    extra_entries: list[dict[str, Any]] | None = None,
) -> IssueEvent:
    """Build an IssueEvent with one exception entry holding ``frames``."""
    entries: list[dict[str, Any]] = list(extra_entries or [])
    entries.append(
        {
            "type": "exception",
            "data": {
                "values": [
                    {
                        "type": "TypeError",
                        "value": "Cannot read properties of undefined",
                        "stacktrace": {"frames": list(frames)},
                    }
                ]
            },
        }
    )
    return IssueEvent.from_api(
        {"id": event_id, "dateCreated": "2026-10-17T09:30:00Z", "entries": entries}
    )


def numbered_lines(count: int) -> str:
    """File text whose line ``n`` reads ``line n``."""
    return "\n".join(f"line {n}" for n in range(1, count + 1))


class FakeRepository:
    """In-memory SourceRepository keyed by path."""

    def __init__(self, files: dict[str, str] | None = None, ref: str = "main") -> None:
        self.files = dict(files or {})
        self.ref = ref
        self.requested: list[str] = []
        self.get_file_errors: dict[str, Exception] = {}
        self.create_pull_request = AsyncMock(
            return_value=PullRequest(url="https://github.com/acme/web/pull/7", number=7, title="t")
        )

    @property
    def default_ref(self) -> str:
        return self.ref

    async def get_file(self, path: str, ref: str | None = None) -> RepoFile:
        self.requested.append(path)
        if path in self.get_file_errors:
            raise self.get_file_errors[path]
        if path not in self.files:
            raise NotFoundError(f"GitHub API failed: 404 Not Found {path}", service="GitHub")
        resolved = ref or self.ref
        return RepoFile(
            path=path,
            ref=resolved,
            text=self.files[path],
            permalink=f"https://github.com/acme/web/blob/{resolved}/{path}",
        )

    async def get_context(
        self, path: str, line: int, radius: int = 12, ref: str | None = None
    ) -> RepoContext:
        file = await self.get_file(path, ref)
        return extract_context(
            file.text, line, radius, file_path=file.path, ref=file.ref, permalink=file.permalink
        )


class FakeIssueSource:
    """In-memory IssueSource returning one issue and its events."""

    def __init__(self, issue: IssueDetail, events: list[IssueEvent] | None = None) -> None:
        self.issue = issue
        self.events = list(events or [])
        self.list_issues = AsyncMock(return_value=[issue])

    async def get_issue(self, issue_id: str) -> IssueDetail:
        if issue_id != self.issue.id:
            raise NotFoundError("Sentry API failed: 404 Not Found", service="Sentry")
        return self.issue

    async def list_issue_events(self, issue_id: str, limit: int = 1) -> list[IssueEvent]:
        return self.events[:limit]


@pytest.fixture
def sentry_config() -> SentryConfig:
    """Sentry configuration pointing at a test project."""
    return SentryConfig(auth_token="sntrys_test_token", org_slug="acme", project_slug="web")


@pytest.fixture
def github_config() -> GitHubConfig:
    """GitHub configuration pointing at a test repository."""
    return GitHubConfig(token="ghp_test", owner="acme", repo="web", ref="main")


@pytest.fixture
def diagnosis_config() -> DiagnosisConfig:
    """Default diagnosis configuration."""
    return DiagnosisConfig()


@pytest.fixture
def nav_source() -> str:
    """A React component with the known analytics crash on line 7."""
    return NAV_SOURCE


@pytest.fixture
def github_contents() -> Callable[[str, str], dict[str, Any]]:
    """Build a GitHub contents API payload for ``text`` at ``path``."""

    def build(path: str, text: str) -> dict[str, Any]:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        # GitHub wraps the base64 body at 60 characters
        wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
        return {"type": "file", "path": path, "encoding": "base64", "content": wrapped}

    return build


@pytest.fixture
def issue_factory() -> Callable[..., IssueDetail]:
    """Factory for Sentry issues; see ``make_issue``."""
    return make_issue


@pytest.fixture
def event_factory() -> Callable[..., IssueEvent]:
    """Factory for Sentry events; see ``make_event``."""
    return make_event


@pytest.fixture
def frame_factory() -> Callable[..., dict[str, Any]]:
    """Factory for raw stack frames; see ``make_frame``."""
    return make_frame


@pytest.fixture
def fake_repository() -> Callable[..., FakeRepository]:
    """Factory for in-memory repositories."""
    return FakeRepository


@pytest.fixture
def fake_issues() -> Callable[..., FakeIssueSource]:
    """Factory for in-memory issue sources."""
    return FakeIssueSource


@pytest.fixture
def numbered_text() -> Callable[[int], str]:
    """Factory for file text whose line ``n`` reads ``line n``."""
    return numbered_lines
