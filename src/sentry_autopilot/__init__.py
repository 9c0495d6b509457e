"""Sentry Autopilot: diagnose Sentry errors against GitHub source over MCP."""

from sentry_autopilot._version import __version__

__all__ = ["__version__"]
