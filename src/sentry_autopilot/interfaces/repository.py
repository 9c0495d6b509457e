"""Abstract interface for source repository integrations."""

from typing import Protocol

from ..models.repository import PullRequest, RepoContext, RepoFile


class SourceRepository(Protocol):
    """File access and pull requests for one configured repository."""

    @property
    def default_ref(self) -> str:
        """Ref used when callers pass none."""
        ...

    async def get_file(self, path: str, ref: str | None = None) -> RepoFile:
        """
        Fetch a file's full text.

        Args:
            path: Repository-relative file path
            ref: Branch, tag or commit (default: the configured ref)

        Returns:
            The file with its permalink

        Raises:
            NotFoundError: If no file exists at ``path`` for ``ref``
            UpstreamError: On any other failure
        """
        ...

    async def get_context(
        self,
        path: str,
        line: int,
        radius: int = 12,
        ref: str | None = None,
    ) -> RepoContext:
        """
        Fetch a file and render the lines around ``line``.

        Raises:
            NotFoundError: If no file exists at ``path`` for ``ref``
            UpstreamError: On any other failure
        """
        ...

    async def create_pull_request(
        self,
        head: str,
        title: str,
        base: str | None = None,
        body: str = "",
        draft: bool = False,
    ) -> PullRequest:
        """
        Open a pull request from ``head`` into ``base``.

        Raises:
            UpstreamError: If the request fails
        """
        ...
