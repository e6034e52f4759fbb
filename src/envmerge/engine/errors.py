"""Engine error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from envmerge.engine.types import ArtifactReport


class EngineError(Exception):
    """Base exception for engine errors."""


class SourceDirectoryMissingError(EngineError):
    """Raised when a service has no source directory."""

    def __init__(self, service: str, path: Path) -> None:
        super().__init__(f"Source directory not found for {service}: {path}")
        self.service = service
        self.path = path


class NoUsableSourceError(EngineError):
    """Raised when neither the base file nor the tier file exists."""

    def __init__(self, service: str, tier: str) -> None:
        super().__init__(f"No base or {tier} environment file found for {service}")
        self.service = service
        self.tier = tier


class ArtifactWriteError(EngineError):
    """Raised when an artifact cannot be written to one of its destinations.

    Destinations written before the failure are not rolled back; they are
    carried in ``written`` so callers can report them.
    """

    def __init__(self, *, path: Path, written: list[ArtifactReport], message: str) -> None:
        super().__init__(f"Failed to write {path}: {message}")
        self.path = path
        self.written = written


class UnresolvedReferenceError(EngineError):
    """Raised in strict mode when references remain unresolved."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Unresolved references: {', '.join(names)}")
        self.names = names


class RemoteSyncError(EngineError):
    """Raised when transferring files to a remote target fails."""
