"""Data models for Sentry issues."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

SUMMARY_TITLE_LIMIT = 80


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _to_int(value: Any) -> int:
    """Coerce Sentry's count field (a string in most endpoints) to an int."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


@dataclass(frozen=True)
class IssueSummary:
    """Snapshot of a Sentry issue as returned by the issue list endpoint."""

    id: str
    short_id: str = ""
    title: str = ""
    culprit: str | None = None
    permalink: str | None = None
    event_count: int = 0
    first_seen: str | None = None
    last_seen: str | None = None
    level: str | None = None
    status: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def fields_from_api(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        metadata = data.get("metadata")
        return {
            "id": str(data.get("id", "")),
            "short_id": _opt_str(data.get("shortId")) or "",
            "title": _opt_str(data.get("title")) or "",
            "culprit": _opt_str(data.get("culprit")),
            "permalink": _opt_str(data.get("permalink")),
            "event_count": _to_int(data.get("count")),
            "first_seen": _opt_str(data.get("firstSeen")),
            "last_seen": _opt_str(data.get("lastSeen")),
            "level": _opt_str(data.get("level")),
            "status": _opt_str(data.get("status")),
            "metadata": dict(metadata) if isinstance(metadata, Mapping) else {},
        }

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> IssueSummary:
        """Build a summary from a Sentry issue JSON object."""
        return cls(**cls.fields_from_api(data))

    @property
    def metadata_path(self) -> str:
        """File reference Sentry stored in the issue metadata, if any."""
        for key in ("filename", "file"):
            value = self.metadata.get(key)
            if isinstance(value, str) and value:
                return value
        return ""

    @property
    def summary_line(self) -> str:
        """
        One-line description for issue listings.

        Format: 'SHORT-ID - title - file', the title cut to 80 characters and
        the file part omitted when the metadata carries none.
        """
        short_id = self.short_id or self.id
        title = self.title.strip()
        if len(title) > SUMMARY_TITLE_LIMIT:
            title = title[: SUMMARY_TITLE_LIMIT - 3] + "..."

        file = str(self.metadata.get("filename") or "").lstrip("/")
        if file:
            return f"{short_id} - {title} - {file}"
        return f"{short_id} - {title}"


@dataclass(frozen=True)
class IssueDetail(IssueSummary):
    """A Sentry issue with the extra fields of the issue detail endpoint."""

    type: str | None = None
    annotations: tuple[Any, ...] = ()
    assigned_to: Mapping[str, Any] | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> IssueDetail:
        """Build an issue detail from a Sentry issue JSON object."""
        annotations = data.get("annotations")
        assigned = data.get("assignedTo")
        return cls(
            **cls.fields_from_api(data),
            type=_opt_str(data.get("type")),
            annotations=tuple(annotations) if isinstance(annotations, list) else (),
            assigned_to=dict(assigned) if isinstance(assigned, Mapping) else None,
        )

    @property
    def ref(self) -> IssueRef:
        """Identity fields carried into diagnosis results."""
        return IssueRef(
            id=self.id,
            short_id=self.short_id,
            title=self.title,
            culprit=self.culprit,
            permalink=self.permalink,
        )


@dataclass(frozen=True)
class IssueRef:
    """Identity of the issue a diagnosis is about."""

    id: str
    short_id: str = ""
    title: str = ""
    culprit: str | None = None
    permalink: str | None = None
