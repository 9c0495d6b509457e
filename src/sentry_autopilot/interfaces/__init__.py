"""Protocol definitions for pluggable adapters."""

from .issues import IssueSource
from .repository import SourceRepository

__all__ = ["IssueSource", "SourceRepository"]
