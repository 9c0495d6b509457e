"""Data models for crash diagnosis results."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .issue import IssueRef
    from .repository import RepoFile


@dataclass(frozen=True)
class FramePick:
    """The stack frame location chosen as the crash site."""

    path: str = ""
    line: int | None = None
    inline_context: str | None = None

    @property
    def found(self) -> bool:
        return bool(self.path)


@dataclass(frozen=True)
class PathResolution:
    """Outcome of trying path candidates against the repository.

    ``file`` is set on success. ``tried`` lists every candidate fetched, in
    order; ``last_error`` holds the message of the last not-found failure.
    """

    tried: tuple[str, ...]
    file: RepoFile | None = None
    last_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.file is not None


@dataclass(frozen=True)
class Location:
    """Where in the repository the crash happened."""

    path: str
    line: int | None = None
    permalink: str | None = None


@dataclass(frozen=True)
class DiagnosisResult:
    """Everything known about a crash site for one issue.

    Recomputed per request. ``context`` alongside ``error`` only ever holds
    the source lines Sentry captured itself, never a repository window.
    """

    issue: IssueRef
    location: Location
    context: str | None = None
    file_preview: str | None = None
    tried_paths: tuple[str, ...] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for tool output, leaving out optional fields that are unset."""
        data: dict[str, Any] = {
            "issue": asdict(self.issue),
            "location": asdict(self.location),
        }
        if self.context is not None:
            data["context"] = self.context
        if self.file_preview is not None:
            data["file_preview"] = self.file_preview
        if self.tried_paths is not None:
            data["tried_paths"] = list(self.tried_paths)
        if self.error is not None:
            data["error"] = self.error
        return data
