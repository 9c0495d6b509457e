"""Rendering of line-numbered context windows around a crash line."""

from __future__ import annotations

import re

from sentry_autopilot.models.repository import RepoContext

LINE_BREAK = re.compile(r"\r\n|\r|\n")

TARGET_MARKER = ">"
LINE_NUMBER_WIDTH = 4


def split_lines(text: str) -> list[str]:
    """Split on any newline style. A trailing newline yields a final empty line."""
    return LINE_BREAK.split(text)


def render_line(number: int, text: str, is_target: bool) -> str:
    """Render one line as ``"> 42 | text"`` (target) or ``"  42 | text"``."""
    marker = TARGET_MARKER if is_target else " "
    return f"{marker} {number:>{LINE_NUMBER_WIDTH}} | {text}"


def extract_context(
    text: str,
    line: int,
    radius: int,
    file_path: str,
    ref: str,
    permalink: str | None = None,
) -> RepoContext:
    """Cut a window of ``radius`` lines above and below ``line`` out of ``text``.

    The target line is clamped into the file, so a line past the end of the
    file centers the window on the last line and marks that line instead.

    Args:
        text: Full file text
        line: 1-based target line
        radius: Lines to include above and below the target
        file_path: Path reported in the result
        ref: Ref reported in the result
        permalink: File permalink; the result anchors it at the target line

    Returns:
        RepoContext with 1-based inclusive bounds and the rendered window
    """
    if radius < 0:
        raise ValueError(f"radius must not be negative, got {radius}")

    lines = split_lines(text)
    index = max(0, min(len(lines) - 1, line - 1))
    start = max(0, index - radius)
    end = min(len(lines) - 1, index + radius)

    rendered = "\n".join(
        render_line(number + 1, lines[number], number == index) for number in range(start, end + 1)
    )

    return RepoContext(
        file_path=file_path,
        ref=ref,
        line=index + 1,
        start_line=start + 1,
        end_line=end + 1,
        context=rendered,
        permalink=f"{permalink}#L{index + 1}" if permalink else None,
    )
