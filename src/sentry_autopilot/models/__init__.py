"""Data models and transfer objects."""

from .diagnosis import DiagnosisResult, FramePick, Location, PathResolution
from .event import (
    EventEntry,
    ExceptionEntry,
    ExceptionValue,
    IssueEvent,
    MessageEntry,
    OpaqueEntry,
    StackFrame,
    parse_entry,
)
from .issue import IssueDetail, IssueRef, IssueSummary
from .repository import PullRequest, RepoContext, RepoFile

__all__ = [
    # Issue models
    "IssueDetail",
    "IssueRef",
    "IssueSummary",
    # Event models
    "EventEntry",
    "ExceptionEntry",
    "ExceptionValue",
    "IssueEvent",
    "MessageEntry",
    "OpaqueEntry",
    "StackFrame",
    "parse_entry",
    # Repository models
    "PullRequest",
    "RepoContext",
    "RepoFile",
    # Diagnosis models
    "DiagnosisResult",
    "FramePick",
    "Location",
    "PathResolution",
]
