"""Fix proposals and mock patch application.

Nothing here writes to the repository. The proposed diff is a fixed,
illustrative patch for one known crash (``userAnalytics.track`` called while
``window.userAnalytics`` is undefined), and :func:`mock_apply` only checks
that a replacement would apply cleanly and previews the result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal

from sentry_autopilot.models.diagnosis import DiagnosisResult
from sentry_autopilot.utils.errors import PatchApplyError

Strategy = Literal["exact", "regex"]

PREVIEW_RADIUS = 400
PREVIEW_FALLBACK_CHARS = 800

FIX_SUMMARY = "Guard against missing window.userAnalytics before calling track()."

# The one crash pattern the regex strategy knows how to patch
KNOWN_CRASH_PATTERN = re.compile(
    r"(\(window as any\)\.userAnalytics)\.track\(\s*[\"']logo_clicked[\"']\s*,"
    r"\s*\{\s*time:\s*Date\.now\(\)\s*\}\s*\)\s*;?"
)
KNOWN_CRASH_ANCHOR = "userAnalytics.track"
KNOWN_FIX_REPLACEMENT = (
    "const ua = (window as any).userAnalytics;\n"
    '            if (ua?.track) ua.track("logo_clicked", { time: Date.now() });'
)
KNOWN_FIX_ANCHOR = "const ua = (window as any).userAnalytics;"


@dataclass(frozen=True)
class FixProposal:
    """A drafted fix, shaped for the patch viewer."""

    issue_id: str
    file_path: str
    summary: str
    diff: str
    error: str | None = None
    diagnosis: DiagnosisResult | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "issue_id": self.issue_id,
            "file_path": self.file_path,
            "summary": self.summary,
            "diff": self.diff,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.diagnosis is not None:
            diagnosis = self.diagnosis.to_dict()
            data["location"] = diagnosis["location"]
            data["context"] = diagnosis.get("context")
            data["file_preview"] = diagnosis.get("file_preview")
            data["tried_paths"] = diagnosis.get("tried_paths", [])
        return data


@dataclass(frozen=True)
class MockApplyResult:
    """Outcome of a successful mock application."""

    strategy: Strategy
    matches: int
    before_preview: str
    after_preview: str
    updated_text: str


def build_fix_diff(file_path: str) -> str:
    """Unified diff of the known fix against ``file_path``."""
    return "\n".join(
        [
            f"diff --git a/{file_path} b/{file_path}",
            f"--- a/{file_path}",
            f"+++ b/{file_path}",
            "@@",
            "-            "
            '(window as any).userAnalytics.track("logo_clicked", { time: Date.now() });',
            "+            const ua = (window as any).userAnalytics;",
            '+            if (ua?.track) ua.track("logo_clicked", { time: Date.now() });',
        ]
    )


def propose_fix(issue_id: str, diagnosis: DiagnosisResult) -> FixProposal:
    """Draft the fix for a diagnosed issue.

    Without a located file there is nothing to patch; the proposal then
    carries the diagnosis error and an empty diff.
    """
    file_path = diagnosis.location.path
    if not file_path:
        return FixProposal(
            issue_id=issue_id,
            file_path="",
            summary="Unable to propose fix",
            diff="",
            error=diagnosis.error or "No file path found.",
            diagnosis=diagnosis,
        )

    return FixProposal(
        issue_id=issue_id,
        file_path=file_path,
        summary=FIX_SUMMARY,
        diff=build_fix_diff(file_path),
        diagnosis=diagnosis,
    )


def _preview(text: str, anchor: str) -> str:
    index = text.find(anchor) if anchor else -1
    if index < 0:
        return text[:PREVIEW_FALLBACK_CHARS]
    return text[max(0, index - PREVIEW_RADIUS) : index + PREVIEW_RADIUS]


def mock_apply(
    text: str,
    file_path: str,
    before: str = "",
    after: str = "",
    strategy: Strategy = "regex",
) -> MockApplyResult:
    """Apply a replacement in memory and preview it.

    ``exact`` replaces the single occurrence of ``before`` with ``after``.
    ``regex`` ignores ``before``/``after`` and replaces the single match of
    the known crash pattern with the known fix.

    Args:
        text: Current file text
        file_path: Path used in failure messages
        before: Snippet to replace (exact strategy)
        after: Replacement snippet (exact strategy)
        strategy: "exact" or "regex"

    Returns:
        MockApplyResult with before/after previews around the change

    Raises:
        PatchApplyError: If the snippet or pattern matches zero or several
            times; the text is left untouched
    """
    if strategy == "exact":
        if not before:
            raise PatchApplyError(f"'before' snippet is empty for {file_path}")
        occurrences = text.count(before)
        if occurrences == 0:
            raise PatchApplyError(f"'before' snippet not found in {file_path}")
        if occurrences > 1:
            raise PatchApplyError(
                f"'before' matched {occurrences} times in {file_path} (make it more specific)."
            )
        updated = text.replace(before, after, 1)
        before_anchor, after_anchor = before, after

    elif strategy == "regex":
        matches = len(KNOWN_CRASH_PATTERN.findall(text))
        if matches == 0:
            raise PatchApplyError(f"regex did not match in {file_path}")
        if matches > 1:
            raise PatchApplyError(f"regex matched {matches} times in {file_path}")
        updated = KNOWN_CRASH_PATTERN.sub(lambda _: KNOWN_FIX_REPLACEMENT, text, count=1)
        occurrences = matches
        before_anchor, after_anchor = KNOWN_CRASH_ANCHOR, KNOWN_FIX_ANCHOR

    else:
        raise PatchApplyError(f"Unknown strategy: {strategy}")

    return MockApplyResult(
        strategy=strategy,
        matches=occurrences,
        before_preview=_preview(text, before_anchor),
        after_preview=_preview(updated, after_anchor),
        updated_text=updated,
    )
