"""Data models for Sentry events and their stack traces.

Sentry ships event entries as ``{"type": ..., "data": {...}}`` objects with
loosely structured payloads. They are parsed into a small sum type:
:class:`ExceptionEntry` and :class:`MessageEntry` for the kinds this service
reads, and :class:`OpaqueEntry` for everything else.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class StackFrame:
    """A single frame in a Sentry exception stack trace."""

    filename: str | None = None
    abs_path: str | None = None
    lineno: int | None = None
    in_app: bool = False
    function: str | None = None
    pre_context: tuple[str, ...] = ()
    context_line: str | None = None
    post_context: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> StackFrame:
        """
        Build a frame from either of Sentry's frame shapes.

        Raw event payloads use ``lineno``/``in_app``/``pre_context``; the REST
        serializer uses ``lineNo``/``inApp`` and a ``context`` list of
        ``[lineno, text]`` pairs, which is split around the crashing line.
        """
        lineno = _first(data, "lineno", "lineNo")
        if not isinstance(lineno, int) or isinstance(lineno, bool):
            lineno = None

        pre_context = _str_tuple(_first(data, "pre_context", "preContext"))
        context_line = _opt_str(_first(data, "context_line", "contextLine"))
        post_context = _str_tuple(_first(data, "post_context", "postContext"))

        pairs = data.get("context")
        if lineno is not None and context_line is None and isinstance(pairs, list):
            pre: list[str] = []
            post: list[str] = []
            for pair in pairs:
                if not (isinstance(pair, list) and len(pair) == 2 and isinstance(pair[1], str)):
                    continue
                number, text = pair
                if number == lineno:
                    context_line = text
                elif isinstance(number, int) and number < lineno:
                    pre.append(text)
                elif isinstance(number, int):
                    post.append(text)
            pre_context, post_context = tuple(pre), tuple(post)

        return cls(
            filename=_opt_str(data.get("filename")),
            abs_path=_opt_str(_first(data, "abs_path", "absPath")),
            lineno=lineno,
            in_app=_first(data, "in_app", "inApp") is True,
            function=_opt_str(data.get("function")),
            pre_context=pre_context,
            context_line=context_line,
            post_context=post_context,
        )

    @property
    def raw_path(self) -> str:
        """The file reference as Sentry reported it (filename wins over abs_path)."""
        return self.filename or self.abs_path or ""

    @property
    def has_path(self) -> bool:
        return bool(self.filename or self.abs_path)

    @property
    def inline_context(self) -> str | None:
        """
        Source lines Sentry captured around the crash.

        Pre-context, the crashing line and post-context joined by newlines;
        None when Sentry captured nothing.
        """
        parts = [
            "\n".join(self.pre_context),
            self.context_line or "",
            "\n".join(self.post_context),
        ]
        combined = "\n".join(part for part in parts if part)
        return combined or None


@dataclass(frozen=True)
class ExceptionValue:
    """One exception in an exception entry (chained exceptions give several)."""

    type: str | None = None
    value: str | None = None
    frames: tuple[StackFrame, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> ExceptionValue:
        stacktrace = data.get("stacktrace")
        raw_frames = stacktrace.get("frames") if isinstance(stacktrace, Mapping) else None
        frames = tuple(
            StackFrame.from_api(frame)
            for frame in (raw_frames if isinstance(raw_frames, list) else [])
            if isinstance(frame, Mapping)
        )
        return cls(
            type=_opt_str(data.get("type")),
            value=_opt_str(data.get("value")),
            frames=frames,
        )


@dataclass(frozen=True)
class ExceptionEntry:
    """An event entry of type ``exception``."""

    values: tuple[ExceptionValue, ...] = ()

    type = "exception"

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> ExceptionEntry:
        values = data.get("values")
        return cls(
            values=tuple(
                ExceptionValue.from_api(value)
                for value in (values if isinstance(values, list) else [])
                if isinstance(value, Mapping)
            )
        )


@dataclass(frozen=True)
class MessageEntry:
    """An event entry of type ``message``."""

    formatted: str | None = None

    type = "message"

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> MessageEntry:
        return cls(formatted=_opt_str(data.get("formatted")) or _opt_str(data.get("message")))


@dataclass(frozen=True)
class OpaqueEntry:
    """Any other entry kind (breadcrumbs, request, ...), kept as received."""

    type: str
    data: Mapping[str, Any] = field(default_factory=dict)


EventEntry = ExceptionEntry | MessageEntry | OpaqueEntry


def parse_entry(raw: Mapping[str, Any]) -> EventEntry:
    """Parse one raw ``{"type", "data"}`` entry into the entry sum type."""
    entry_type = raw.get("type")
    data = raw.get("data")
    if not isinstance(data, Mapping):
        data = {}

    if entry_type == ExceptionEntry.type:
        return ExceptionEntry.from_data(data)
    if entry_type == MessageEntry.type:
        return MessageEntry.from_data(data)
    return OpaqueEntry(type=str(entry_type or ""), data=dict(data))


@dataclass(frozen=True)
class IssueEvent:
    """One occurrence of a Sentry issue."""

    id: str
    title: str | None = None
    message: str | None = None
    timestamp: str | None = None
    entries: tuple[EventEntry, ...] = ()
    exception: Any = None
    contexts: Mapping[str, Any] | None = None
    tags: tuple[Any, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> IssueEvent:
        """Build an event from a Sentry event JSON object."""
        raw_entries = data.get("entries")
        contexts = data.get("contexts")
        tags = data.get("tags")
        return cls(
            id=str(data.get("id", data.get("eventID", ""))),
            title=_opt_str(data.get("title")),
            message=_opt_str(data.get("message")),
            timestamp=_opt_str(data.get("dateCreated")),
            entries=tuple(
                parse_entry(entry)
                for entry in (raw_entries if isinstance(raw_entries, list) else [])
                if isinstance(entry, Mapping)
            ),
            exception=data.get("exception"),
            contexts=dict(contexts) if isinstance(contexts, Mapping) else None,
            tags=tuple(tags) if isinstance(tags, list) else (),
        )

    @property
    def exception_entries(self) -> tuple[ExceptionEntry, ...]:
        """Exception entries in the order Sentry listed them."""
        return tuple(entry for entry in self.entries if isinstance(entry, ExceptionEntry))
