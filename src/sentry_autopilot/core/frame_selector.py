"""Selection of the crash-site frame from a Sentry event."""

from __future__ import annotations

import structlog

from sentry_autopilot.core.path_resolver import normalize_path
from sentry_autopilot.models.diagnosis import FramePick
from sentry_autopilot.models.event import IssueEvent, StackFrame

log = structlog.get_logger()


def candidate_frames(frames: tuple[StackFrame, ...]) -> tuple[StackFrame, ...]:
    """In-app frames that name a file, or every frame when there are none."""
    in_app = tuple(frame for frame in frames if frame.in_app and frame.has_path)
    return in_app or frames


def select_frame(event: IssueEvent) -> FramePick:
    """Pick the frame closest to the crash that names a usable file.

    Exception entries are scanned in order, and each exception value's frames
    from last (innermost) to first. In-app frames are preferred when a value
    has any. The first frame whose path survives normalization wins.

    Args:
        event: Sentry event to inspect

    Returns:
        FramePick with the normalized path, line and Sentry's inline source
        context; an empty FramePick when no frame names a file
    """
    for entry in event.exception_entries:
        for value in entry.values:
            if not value.frames:
                continue

            for frame in reversed(candidate_frames(value.frames)):
                path = normalize_path(frame.raw_path)
                if path:
                    log.debug(
                        "frame_selected",
                        event_id=event.id,
                        path=path,
                        line=frame.lineno,
                        in_app=frame.in_app,
                    )
                    return FramePick(
                        path=path,
                        line=frame.lineno,
                        inline_context=frame.inline_context,
                    )

    log.debug("no_usable_frame", event_id=event.id)
    return FramePick()
