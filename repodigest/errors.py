"""
Exception hierarchy for repodigest.

Only a handful of conditions abort a run; everything else the walker meets
degrades to a warning. Each fatal condition has its own class so callers can
tell them apart.
"""

from __future__ import annotations

from typing import Optional


class DigestError(Exception):
    """Base class for all repodigest errors."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class RootNotFoundError(DigestError):
    """The traversal root does not exist or is not a directory."""


class NoFilesFoundError(DigestError):
    """Nothing survived filtering below the traversal root."""

    def __init__(self, path: Optional[str] = None) -> None:
        super().__init__("No files found or all files were filtered out", path)


class WalkCancelledError(DigestError):
    """The walk was cancelled or ran past its time budget."""


class SourceError(DigestError):
    """A source could not be materialized (bad URL, clone failure)."""


class ConfigError(DigestError):
    """Invalid configuration value."""
