"""Gather raw ``.env*`` files from service repositories into the staging tree."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from envmerge.engine.writer import write_private

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from envmerge.engine.types import Tier

logger = logging.getLogger(__name__)

SOURCE_GLOB = ".env*"


@dataclass
class CollectResult:
    """Outcome of collecting one service's source files."""

    service: str
    status: str
    files: list[str] = field(default_factory=list)
    destinations: list[Path] = field(default_factory=list)
    message: str = ""


def find_source_files(repo_dir: Path) -> list[Path]:
    """Regular ``.env*`` files directly inside *repo_dir*, sorted by name."""
    return sorted(p for p in repo_dir.glob(SOURCE_GLOB) if p.is_file())


def _reset_tier_dirs(service_dir: Path, tiers: Sequence[Tier]) -> None:
    for tier in tiers:
        tier_dir = service_dir / tier.value
        if tier_dir.exists():
            shutil.rmtree(tier_dir)
        tier_dir.mkdir(parents=True)


def collect_service(
    repos_dir: Path,
    service: str,
    roots: Sequence[Path],
    tiers: Sequence[Tier],
) -> CollectResult:
    """Copy the service's ``.env*`` files into ``<root>/<service>/`` for every root.

    Copies are written atomically and are mode 600 from creation. Each root
    also gets fresh, empty tier directories ready for the next build.
    """
    repo_dir = repos_dir / service
    if not repo_dir.is_dir():
        logger.warning("Repository not found for %s: %s", service, repo_dir)
        return CollectResult(
            service=service, status="skipped", message=f"Repository not found: {repo_dir}"
        )

    sources = find_source_files(repo_dir)
    destinations = [root / service for root in roots]
    for dest in destinations:
        dest.mkdir(parents=True, exist_ok=True)

    if not sources:
        logger.info("No %s files found in %s", SOURCE_GLOB, repo_dir)
        return CollectResult(
            service=service,
            status="empty",
            destinations=destinations,
            message=f"No {SOURCE_GLOB} files found in {repo_dir}",
        )

    for src in sources:
        for dest in destinations:
            target = dest / src.name
            write_private(src.read_bytes(), target)
            logger.debug("Copied %s -> %s", src, target)

    for dest in destinations:
        _reset_tier_dirs(dest, tiers)

    logger.info("Collected %d file(s) for %s", len(sources), service)
    return CollectResult(
        service=service,
        status="copied",
        files=[src.name for src in sources],
        destinations=destinations,
    )


def collect(
    repos_dir: Path,
    services: Sequence[str],
    roots: Sequence[Path],
    tiers: Sequence[Tier],
) -> list[CollectResult]:
    """Collect every service; a failing service does not stop the others."""
    results: list[CollectResult] = []
    for service in services:
        try:
            results.append(collect_service(repos_dir, service, roots, tiers))
        except OSError as exc:
            logger.error("Failed to collect %s: %s", service, exc)
            results.append(CollectResult(service=service, status="failed", message=str(exc)))
    return results
