"""Core business logic components.

This module exports the main business logic:
- Diagnoser: Composes Sentry, path resolution and context extraction
- PathResolver: Maps stack-trace file references to repository files
- select_frame: Picks the crash-site frame of a Sentry event
- extract_context: Renders a line-numbered window around a line
- propose_fix / mock_apply: Fix drafting and in-memory patch checks
"""

from sentry_autopilot.core.context_window import extract_context
from sentry_autopilot.core.diagnosis import Diagnoser
from sentry_autopilot.core.frame_selector import select_frame
from sentry_autopilot.core.path_resolver import PathResolver, build_path_candidates, normalize_path
from sentry_autopilot.core.patching import mock_apply, propose_fix

__all__ = [
    "Diagnoser",
    "PathResolver",
    "build_path_candidates",
    "extract_context",
    "mock_apply",
    "normalize_path",
    "propose_fix",
    "select_frame",
]
