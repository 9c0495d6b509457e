"""Tests for context window extraction."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sentry_autopilot.core.context_window import extract_context, render_line, split_lines


class TestRenderLine:
    """Test single line rendering."""

    def test_target_marker(self) -> None:
        """Test the target line carries the marker and a padded number."""
        assert render_line(42, "x()", True) == ">   42 | x()"

    def test_plain_line(self) -> None:
        """Test other lines are indented by one space instead."""
        assert render_line(7, "y", False) == "     7 | y"


class TestSplitLines:
    """Test newline handling."""

    def test_mixed_newlines(self) -> None:
        """Test LF, CRLF and CR all split lines."""
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_trailing_newline(self) -> None:
        """Test a trailing newline gives a final empty line."""
        assert split_lines("a\n") == ["a", ""]


class TestExtractContext:
    """Test windows around a target line."""

    def test_window_bounds(self, numbered_text: Callable[[int], str]) -> None:
        """Test a 100-line file, line 42, radius 12 gives lines 30 to 54."""
        ctx = extract_context(numbered_text(100), 42, 12, file_path="a.ts", ref="main")

        assert ctx.start_line == 30
        assert ctx.end_line == 54
        assert ctx.line == 42
        assert ctx.line_count == 25

        rendered = ctx.context.split("\n")
        assert len(rendered) == 25
        assert rendered[0] == "    30 | line 30"
        assert rendered[12] == ">   42 | line 42"
        assert sum(1 for line in rendered if line.startswith(">")) == 1

    def test_window_clamped_at_start(self, numbered_text: Callable[[int], str]) -> None:
        """Test the window does not run above line 1."""
        ctx = extract_context(numbered_text(10), 2, 5, file_path="a.ts", ref="main")

        assert ctx.start_line == 1
        assert ctx.end_line == 7

    def test_window_clamped_at_end(self, numbered_text: Callable[[int], str]) -> None:
        """Test the window does not run past the last line."""
        ctx = extract_context(numbered_text(10), 9, 5, file_path="a.ts", ref="main")

        assert ctx.start_line == 4
        assert ctx.end_line == 10

    def test_line_past_end_marks_last_line(self, numbered_text: Callable[[int], str]) -> None:
        """Test a target beyond the file is clamped onto the last line."""
        ctx = extract_context(numbered_text(10), 500, 2, file_path="a.ts", ref="main")

        assert ctx.line == 10
        assert ctx.start_line == 8
        assert ctx.end_line == 10
        assert ctx.context.split("\n")[-1] == ">   10 | line 10"

    def test_line_below_one_marks_first_line(self, numbered_text: Callable[[int], str]) -> None:
        """Test a target of 0 is clamped onto line 1."""
        ctx = extract_context(numbered_text(10), 0, 1, file_path="a.ts", ref="main")

        assert ctx.line == 1
        assert ctx.context.split("\n")[0] == ">    1 | line 1"

    @pytest.mark.parametrize("line,radius", [(1, 0), (5, 3), (50, 200), (3, 1)])
    def test_invariants(self, numbered_text: Callable[[int], str], line: int, radius: int) -> None:
        """Test bounds stay inside the file and surround the target."""
        total = 60
        ctx = extract_context(numbered_text(total), line, radius, file_path="a.ts", ref="main")

        assert 1 <= ctx.start_line <= ctx.line <= ctx.end_line <= total
        assert ctx.end_line - ctx.start_line <= 2 * radius
        assert len(ctx.context.split("\n")) == ctx.end_line - ctx.start_line + 1

    def test_permalink_anchor(self, numbered_text: Callable[[int], str]) -> None:
        """Test the permalink is anchored at the reported line."""
        ctx = extract_context(
            numbered_text(5),
            3,
            1,
            file_path="a.ts",
            ref="main",
            permalink="https://github.com/acme/web/blob/main/a.ts",
        )

        assert ctx.permalink == "https://github.com/acme/web/blob/main/a.ts#L3"

    def test_no_permalink(self, numbered_text: Callable[[int], str]) -> None:
        """Test no permalink is invented when none is given."""
        ctx = extract_context(numbered_text(5), 3, 1, file_path="a.ts", ref="main")
        assert ctx.permalink is None

    def test_negative_radius_rejected(self) -> None:
        """Test a negative radius is an error."""
        with pytest.raises(ValueError, match="radius"):
            extract_context("a", 1, -1, file_path="a.ts", ref="main")
