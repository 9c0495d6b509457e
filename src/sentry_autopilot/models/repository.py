"""Data models for files and pull requests in the source repository."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RepoFile:
    """A file fetched from the repository at a given ref."""

    path: str
    ref: str
    text: str
    permalink: str | None = None


@dataclass(frozen=True)
class RepoContext:
    """A line-numbered excerpt of a file centered on one line.

    Invariant: ``1 <= start_line <= line <= end_line <= total lines``.
    """

    file_path: str
    ref: str
    line: int
    start_line: int
    end_line: int
    context: str
    permalink: str | None = None

    @property
    def line_count(self) -> int:
        """Number of lines in this excerpt."""
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class PullRequest:
    """A pull request created in the repository."""

    url: str
    number: int
    title: str
