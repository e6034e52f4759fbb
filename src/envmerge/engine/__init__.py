"""Merge and resolve engine for per-service environment files."""

from envmerge.engine.engine import EnvBuilder, ProgressCallback, artifact_name
from envmerge.engine.errors import (
    ArtifactWriteError,
    EngineError,
    NoUsableSourceError,
    RemoteSyncError,
    SourceDirectoryMissingError,
    UnresolvedReferenceError,
)
from envmerge.engine.types import (
    ArtifactReport,
    BuildResult,
    OverrideFile,
    OverrideLevel,
    ResolutionStrategy,
    ResolvedDocument,
    ResolveOptions,
    Tier,
    UnitResult,
    UnitStatus,
)

__all__ = [
    "ArtifactReport",
    "ArtifactWriteError",
    "BuildResult",
    "EngineError",
    "EnvBuilder",
    "NoUsableSourceError",
    "OverrideFile",
    "OverrideLevel",
    "ProgressCallback",
    "RemoteSyncError",
    "ResolutionStrategy",
    "ResolveOptions",
    "ResolvedDocument",
    "SourceDirectoryMissingError",
    "Tier",
    "UnitResult",
    "UnitStatus",
    "UnresolvedReferenceError",
    "artifact_name",
]
