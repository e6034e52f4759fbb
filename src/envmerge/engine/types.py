"""Engine types (override files, resolved documents, build results)."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

TEMPLATE_MARKER = "example"


class Tier(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class OverrideLevel(str, Enum):
    BASE = "base"
    TIER = "tier"
    TIER_LOCAL = "tier-local"


class ResolutionStrategy(str, Enum):
    SINGLE_PASS = "single-pass"
    FIXED_POINT = "fixed-point"


class UnitStatus(str, Enum):
    BUILT = "built"
    SKIPPED = "skipped"
    FAILED = "failed"


class OverrideFile(BaseModel):
    level: OverrideLevel
    path: Path
    exists: bool
    source_root: Path | None = None

    @property
    def is_template(self) -> bool:
        """Template/example files are never merged, whatever their level.

        Only the part of the path below ``source_root`` is checked, so the
        directories the tree is checked out in cannot mark real files.
        """
        path = self.path.relative_to(self.source_root) if self.source_root else self.path
        return TEMPLATE_MARKER in str(path)

    @property
    def usable(self) -> bool:
        return self.exists and not self.is_template


class ResolvedDocument(BaseModel):
    lines: list[str] = Field(default_factory=list)
    unresolved: list[str] = Field(default_factory=list)


class ResolveOptions(BaseModel):
    strategy: ResolutionStrategy = ResolutionStrategy.SINGLE_PASS
    max_depth: int = Field(default=10, ge=1)
    strict: bool = False


class ArtifactReport(BaseModel):
    path: Path
    lines: int
    bytes: int


class UnitResult(BaseModel):
    service: str
    tier: Tier
    status: UnitStatus
    artifacts: list[ArtifactReport] = Field(default_factory=list)
    message: str = ""
    unresolved: list[str] = Field(default_factory=list)


class BuildResult(BaseModel):
    results: list[UnitResult] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        counts = {s.value: 0 for s in UnitStatus}
        for r in self.results:
            counts[r.status.value] += 1
        return counts

    @property
    def artifacts(self) -> list[ArtifactReport]:
        return [a for r in self.results for a in r.artifacts]

    @property
    def ok(self) -> bool:
        return not any(r.status == UnitStatus.FAILED for r in self.results)
