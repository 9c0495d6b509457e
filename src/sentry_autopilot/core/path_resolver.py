"""Resolution of stack-trace file references to repository paths.

Bundlers rewrite source paths (``webpack:///./src/a.ts``, ``app:///main.js``)
and monorepos nest the web app under one of a few well-known directories, so
a frame's file reference rarely is a repository path as-is. This module
normalizes the reference, derives an ordered list of plausible repository
paths and asks the repository for each in turn.

Resolution is best effort: the first candidate that exists wins, even if a
later candidate would have been the file that actually crashed.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from sentry_autopilot.config.schema import DEFAULT_CANDIDATE_PREFIXES
from sentry_autopilot.models.diagnosis import PathResolution
from sentry_autopilot.utils.errors import NotFoundError

if TYPE_CHECKING:
    from sentry_autopilot.interfaces.repository import SourceRepository

log = structlog.get_logger()

# One leading prefix per match; stripping repeats until none is left
_PATH_PREFIX = re.compile(r"^(?:webpack:///?|app:///?|/+|~/|\./)")

SOURCE_ROOT = "src/"


def normalize_path(raw: str) -> str:
    """Strip bundler schemes and relative markers from a frame path.

    Removes leading ``/``, ``webpack://``, ``webpack:///``, ``app://``,
    ``app:///``, ``~/`` and ``./``, repeatedly, so that normalizing an
    already normalized path changes nothing.

    Example:
        >>> normalize_path("webpack:///./src/a.ts")
        'src/a.ts'
    """
    path = raw or ""
    while True:
        stripped = _PATH_PREFIX.sub("", path, count=1)
        if stripped == path:
            return path
        path = stripped


def build_path_candidates(
    raw: str,
    prefixes: Sequence[str] = DEFAULT_CANDIDATE_PREFIXES,
) -> list[str]:
    """List plausible repository paths for a frame path, most likely first.

    With ``p`` the normalized path and ``p'`` = ``p`` under ``src/``, the
    candidates are ``p``, ``p'`` and ``prefix + p'`` for every prefix, with
    duplicates removed in first-occurrence order.

    Args:
        raw: File reference from a stack frame or issue metadata
        prefixes: Monorepo directories to try, in order

    Returns:
        Candidate paths; empty if the path normalizes to nothing
    """
    path = normalize_path(raw)
    if not path:
        return []

    under_src = path if path.startswith(SOURCE_ROOT) else f"{SOURCE_ROOT}{path}"
    candidates = [path, under_src, *(f"{prefix}{under_src}" for prefix in prefixes)]

    return list(dict.fromkeys(candidates))


class PathResolver:
    """Finds the first candidate path that exists in the repository.

    Only :class:`NotFoundError` moves on to the next candidate. Any other
    failure (authentication, rate limit, malformed response, network) is
    raised immediately so it is never reported as a missing file.

    Example:
        resolver = PathResolver(github_client)
        resolution = await resolver.resolve("webpack:///./src/a.ts", ref="main")
        if resolution.ok:
            print(resolution.file.path)
    """

    def __init__(
        self,
        repository: SourceRepository,
        prefixes: Sequence[str] = DEFAULT_CANDIDATE_PREFIXES,
    ) -> None:
        self._repository = repository
        self._prefixes = tuple(prefixes)

    def candidates(self, raw: str) -> list[str]:
        return build_path_candidates(raw, self._prefixes)

    async def resolve(self, raw: str, ref: str | None = None) -> PathResolution:
        """Fetch candidates in order until one exists.

        Args:
            raw: File reference from a stack frame or issue metadata
            ref: Ref to read from (default: the repository's configured ref)

        Returns:
            PathResolution with the file on success, or with every tried
            path and the last not-found message when all candidates miss

        Raises:
            UpstreamError: On any failure other than not-found
        """
        tried: list[str] = []
        last_error: str | None = None

        for candidate in self.candidates(raw):
            tried.append(candidate)
            try:
                file = await self._repository.get_file(candidate, ref)
            except NotFoundError as e:
                last_error = str(e)
                log.debug("path_candidate_not_found", candidate=candidate, ref=ref)
                continue

            log.info("path_resolved", raw_path=raw, path=file.path, attempts=len(tried))
            return PathResolution(tried=tuple(tried), file=file)

        log.info("path_unresolved", raw_path=raw, tried=tried)
        return PathResolution(tried=tuple(tried), last_error=last_error)
