"""GitHub adapter over the GitHub REST API.

This module implements the SourceRepository protocol for the one repository
named in the configuration. File reads use the contents endpoint; the only
write is pull request creation.

A missing file surfaces as NotFoundError (HTTP 404) so path resolution can
try the next candidate; every other failure keeps its own error type.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ..config.schema import GitHubConfig
from ..core.context_window import extract_context
from ..models.repository import PullRequest, RepoContext, RepoFile
from ..utils.errors import MalformedResponseError, decode_json, raise_for_status

log = structlog.get_logger()

SERVICE = "GitHub"
API_VERSION = "2022-11-28"


class GitHubClient:
    """GitHub client implementing the SourceRepository protocol.

    Example:
        async with GitHubClient(config.github) as github:
            file = await github.get_file("src/app.ts")
            ctx = await github.get_context("src/app.ts", line=42, radius=12)
    """

    def __init__(
        self,
        config: GitHubConfig,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            config: GitHub-specific configuration.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self._config = config
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def default_ref(self) -> str:
        return self._config.ref

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def _repo_path(self) -> str:
        if not self._config.owner or not self._config.repo:
            raise ValueError("GitHub owner and repo must be configured")
        return f"/repos/{self._config.owner}/{self._config.repo}"

    def make_permalink(self, ref: str, path: str, line: int | None = None) -> str:
        """Browser link to ``path`` at ``ref``, anchored at ``line`` if given."""
        clean = path.lstrip("/")
        base = (
            f"{self._config.web_url}/{self._config.owner}/{self._config.repo}"
            f"/blob/{quote(ref, safe='')}/{clean}"
        )
        return f"{base}#L{line}" if line else base

    async def get_file(self, path: str, ref: str | None = None) -> RepoFile:
        """Fetch a file's full text.

        Args:
            path: Repository-relative path; leading slashes are ignored.
            ref: Branch, tag or commit (default: configured ref).

        Returns:
            RepoFile with the decoded text and a permalink.

        Raises:
            NotFoundError: If no file exists at ``path`` for ``ref``.
            MalformedResponseError: If the path is not a base64-encoded file.
            UpstreamError: On any other failure.
        """
        ref = ref or self.default_ref
        clean = path.lstrip("/")

        response = await self._client.get(
            f"{self._repo_path()}/contents/{quote(clean, safe='/')}",
            params={"ref": ref},
        )
        raise_for_status(response, SERVICE)
        data = decode_json(response, SERVICE)

        if (
            not isinstance(data, dict)
            or data.get("encoding") != "base64"
            or not data.get("content")
        ):
            raise MalformedResponseError(
                f"Unexpected GitHub content response for {clean}", service=SERVICE
            )

        try:
            text = base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise MalformedResponseError(
                f"Could not decode GitHub content for {clean}: {e}", service=SERVICE
            ) from e

        file_path = str(data.get("path") or clean)
        log.debug("file_fetched", path=file_path, ref=ref, size=len(text))

        return RepoFile(
            path=file_path,
            ref=ref,
            text=text,
            permalink=self.make_permalink(ref, file_path),
        )

    async def get_context(
        self,
        path: str,
        line: int,
        radius: int = 12,
        ref: str | None = None,
    ) -> RepoContext:
        """Fetch a file and render ``radius`` lines around ``line``.

        Raises:
            NotFoundError: If no file exists at ``path`` for ``ref``.
            UpstreamError: On any other failure.
        """
        file = await self.get_file(path, ref)
        return extract_context(
            file.text,
            line,
            radius,
            file_path=file.path,
            ref=file.ref,
            permalink=file.permalink,
        )

    async def create_pull_request(
        self,
        head: str,
        title: str,
        base: str | None = None,
        body: str = "",
        draft: bool = False,
    ) -> PullRequest:
        """Open a pull request. This is a real write to the repository.

        Args:
            head: Branch holding the changes.
            title: Pull request title.
            base: Branch to merge into (default: configured ref).
            body: Pull request description.
            draft: Open as a draft.

        Returns:
            The created pull request.

        Raises:
            UpstreamError: If GitHub rejects the request.
        """
        payload: dict[str, Any] = {
            "title": title,
            "head": head,
            "base": base or self.default_ref,
            "body": body,
            "draft": draft,
        }
        response = await self._client.post(f"{self._repo_path()}/pulls", json=payload)
        raise_for_status(response, SERVICE)
        data = decode_json(response, SERVICE)

        if not isinstance(data, dict) or "html_url" not in data or "number" not in data:
            raise MalformedResponseError("Unexpected GitHub pull request response", service=SERVICE)

        pr = PullRequest(
            url=str(data["html_url"]),
            number=int(data["number"]),
            title=str(data.get("title", title)),
        )
        log.info("pull_request_created", number=pr.number, url=pr.url, head=head)
        return pr
