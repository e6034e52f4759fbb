"""Build engine: locate, merge, sanitize, resolve and write per (service, tier)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

from envmerge.engine.errors import (
    ArtifactWriteError,
    EngineError,
    NoUsableSourceError,
    SourceDirectoryMissingError,
    UnresolvedReferenceError,
)
from envmerge.engine.locator import locate_sources, require_sources
from envmerge.engine.merger import merge_overrides
from envmerge.engine.resolver import resolve
from envmerge.engine.sanitizer import sanitize
from envmerge.engine.types import (
    BuildResult,
    ResolvedDocument,
    ResolveOptions,
    Tier,
    UnitResult,
    UnitStatus,
)
from envmerge.engine.writer import render_artifact, write_artifact

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Tier, Literal["start", "done"], UnitResult | None], None]

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def artifact_name(service: str, tier: Tier) -> str:
    return f"{service}.{tier.value}.env"


class EnvBuilder:
    """Produce resolved environment artifacts for a set of services."""

    def __init__(
        self,
        *,
        source_root: Path,
        output_roots: Sequence[Path],
        options: ResolveOptions | None = None,
    ) -> None:
        self._source_root = source_root
        self._output_roots = list(output_roots)
        self._options = options or ResolveOptions()

    @property
    def source_root(self) -> Path:
        return self._source_root

    @property
    def output_roots(self) -> list[Path]:
        return list(self._output_roots)

    @property
    def options(self) -> ResolveOptions:
        return self._options

    def artifact_paths(self, service: str, tier: Tier) -> list[Path]:
        """Destination of the (service, tier) artifact under every output root."""
        name = artifact_name(service, tier)
        return [root / service / tier.value / name for root in self._output_roots]

    def render(self, service: str, tier: Tier) -> ResolvedDocument:
        """Run the pipeline for one pair without writing anything.

        Raises:
            SourceDirectoryMissingError: If the service directory is missing.
            NoUsableSourceError: If neither ``.env`` nor ``.env.<tier>`` exists.
        """
        files = locate_sources(self._source_root, service, tier)
        require_sources(service, tier, files)
        merged = merge_overrides(files)
        cleaned = sanitize(merged)
        logger.debug(
            "%s/%s: merged %d lines, %d after sanitizing",
            service,
            tier.value,
            len(merged),
            len(cleaned),
        )
        return resolve(cleaned, strategy=self._options.strategy, max_depth=self._options.max_depth)

    def build_unit(self, service: str, tier: Tier) -> UnitResult:
        """Build and write one artifact. Per-unit problems are reported, not raised."""
        try:
            document = self.render(service, tier)
        except (SourceDirectoryMissingError, NoUsableSourceError) as exc:
            logger.warning("Skipping %s/%s: %s", service, tier.value, exc)
            return UnitResult(
                service=service, tier=tier, status=UnitStatus.SKIPPED, message=str(exc)
            )
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read sources for %s/%s: %s", service, tier.value, exc)
            return UnitResult(
                service=service, tier=tier, status=UnitStatus.FAILED, message=str(exc)
            )

        if document.unresolved and self._options.strict:
            exc = UnresolvedReferenceError(document.unresolved)
            logger.error("%s/%s: %s", service, tier.value, exc)
            return UnitResult(
                service=service,
                tier=tier,
                status=UnitStatus.FAILED,
                message=str(exc),
                unresolved=document.unresolved,
            )

        try:
            reports = write_artifact(
                render_artifact(document.lines), self.artifact_paths(service, tier)
            )
        except ArtifactWriteError as exc:
            logger.error("%s/%s: %s", service, tier.value, exc)
            return UnitResult(
                service=service,
                tier=tier,
                status=UnitStatus.FAILED,
                artifacts=exc.written,
                message=str(exc),
                unresolved=document.unresolved,
            )

        logger.info("Built %s/%s (%d artifact(s))", service, tier.value, len(reports))
        return UnitResult(
            service=service,
            tier=tier,
            status=UnitStatus.BUILT,
            artifacts=reports,
            unresolved=document.unresolved,
        )

    def build(
        self,
        services: Sequence[str],
        tiers: Sequence[Tier],
        *,
        progress: ProgressCallback | None = None,
    ) -> BuildResult:
        """Build every (service, tier) pair, one after the other."""
        result = BuildResult()
        logger.info("Building %d service(s) x %d tier(s)", len(services), len(tiers))
        for service in services:
            for tier in tiers:
                if progress:
                    progress(service, tier, "start", None)
                try:
                    unit = self.build_unit(service, tier)
                except EngineError as exc:
                    logger.error("%s/%s: %s", service, tier.value, exc)
                    unit = UnitResult(
                        service=service, tier=tier, status=UnitStatus.FAILED, message=str(exc)
                    )
                result.results.append(unit)
                if progress:
                    progress(service, tier, "done", unit)
        return result
