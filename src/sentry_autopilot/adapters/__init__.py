"""Concrete implementations of provider interfaces."""

from .github import GitHubClient
from .sentry import SentryClient

__all__ = [
    "GitHubClient",
    "SentryClient",
]
