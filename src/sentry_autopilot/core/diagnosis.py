"""Crash diagnosis: from a Sentry issue to the source lines that crashed.

This module implements the Diagnoser, which chains the collaborators for one
"explain this crash" request:

1. Fetch the issue and its most recent event from Sentry
2. Take a file reference from the issue metadata, overridden by the
   crash-site frame of the event when there is one
3. Resolve the reference to a repository path
4. Return a context window around the crash line, or a file preview when
   the line is unknown

Not-found outcomes (no file reference, no matching repository path) come back
as results carrying an ``error``. Every other upstream failure propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sentry_autopilot.config.schema import DiagnosisConfig
from sentry_autopilot.core.context_window import extract_context
from sentry_autopilot.core.frame_selector import select_frame
from sentry_autopilot.core.path_resolver import PathResolver, normalize_path
from sentry_autopilot.models.diagnosis import DiagnosisResult, Location
from sentry_autopilot.utils.security import SecretRedactor

if TYPE_CHECKING:
    from sentry_autopilot.interfaces.issues import IssueSource
    from sentry_autopilot.interfaces.repository import SourceRepository

log = structlog.get_logger()

NO_PATH_ERROR = "No file path found in issue/event."
FILE_NOT_FOUND_ERROR = "File not found in repository for extracted path."


class Diagnoser:
    """Composes Sentry, the path resolver and the context window.

    Holds no per-request state; concurrent diagnoses are independent.

    Example:
        diagnoser = Diagnoser(sentry_client, github_client, config.diagnosis)
        result = await diagnoser.diagnose("4711", radius=12)
        print(result.location.path, result.location.line)
    """

    def __init__(
        self,
        issues: IssueSource,
        repository: SourceRepository,
        config: DiagnosisConfig | None = None,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the Diagnoser.

        Args:
            issues: Error tracker client
            repository: Source repository client
            config: Diagnosis configuration (defaults apply when None)
            redactor: Secret redactor for returned source text, used only when
                ``redact_secrets`` is set. Defaults to literal credential formats.
        """
        self._issues = issues
        self._repository = repository
        self._config = config or DiagnosisConfig()
        self._resolver = PathResolver(repository, self._config.candidate_prefixes)
        self._redactor = redactor or SecretRedactor(assignments=False)

    def _redact(self, text: str | None) -> str | None:
        if text is None or not self._config.redact_secrets:
            return text
        return self._redactor.redact(text)

    async def diagnose(
        self,
        issue_id: str,
        radius: int | None = None,
        ref: str | None = None,
    ) -> DiagnosisResult:
        """Locate the crash site of an issue in the repository.

        Args:
            issue_id: Sentry issue ID
            radius: Lines of context above and below the crash line
                (default from config)
            ref: Repository ref to read (default: the configured ref)

        Returns:
            DiagnosisResult; ``error`` is set when no file reference was found
            or no candidate path exists in the repository

        Raises:
            UpstreamError: If Sentry or GitHub fail for a reason other than
                a missing file (including a missing issue)
        """
        if radius is None:
            radius = self._config.default_radius

        issue = await self._issues.get_issue(issue_id)
        events = await self._issues.list_issue_events(issue_id, limit=1)
        event = events[0] if events else None

        log.info("issue_fetched", issue_id=issue_id, has_event=event is not None)

        path = normalize_path(issue.metadata_path)
        line: int | None = None
        inline_context: str | None = None

        if event is not None:
            picked = select_frame(event)
            if picked.path:
                path = picked.path
            if picked.line is not None:
                line = picked.line
            if picked.inline_context:
                inline_context = picked.inline_context

        if not path:
            log.info("no_file_path", issue_id=issue_id)
            return DiagnosisResult(
                issue=issue.ref,
                location=Location(path=""),
                error=NO_PATH_ERROR,
            )

        resolution = await self._resolver.resolve(path, ref)
        if resolution.file is None:
            error = f"{FILE_NOT_FOUND_ERROR} {resolution.last_error or ''}".strip()
            return DiagnosisResult(
                issue=issue.ref,
                location=Location(path=path, line=line),
                context=self._redact(inline_context),
                tried_paths=resolution.tried,
                error=error,
            )

        file = resolution.file

        if line is None:
            preview = self._redact(file.text)
            return DiagnosisResult(
                issue=issue.ref,
                location=Location(path=file.path),
                file_preview=(preview or "")[: self._config.preview_chars],
            )

        window = extract_context(
            file.text,
            line,
            radius,
            file_path=file.path,
            ref=file.ref,
            permalink=file.permalink,
        )

        log.info(
            "diagnosis_complete",
            issue_id=issue_id,
            path=window.file_path,
            line=window.line,
            start_line=window.start_line,
            end_line=window.end_line,
        )

        return DiagnosisResult(
            issue=issue.ref,
            location=Location(path=window.file_path, line=window.line, permalink=window.permalink),
            context=self._redact(window.context),
        )
