"""Locate the override files that feed one (service, tier) artifact."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from envmerge.engine.errors import NoUsableSourceError, SourceDirectoryMissingError
from envmerge.engine.types import OverrideFile, OverrideLevel, Tier

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

BASE_FILENAME = ".env"


def override_filenames(tier: Tier) -> dict[OverrideLevel, str]:
    """Return the file name for each override level, in precedence order."""
    return {
        OverrideLevel.BASE: BASE_FILENAME,
        OverrideLevel.TIER: f"{BASE_FILENAME}.{tier.value}",
        OverrideLevel.TIER_LOCAL: f"{BASE_FILENAME}.{tier.value}.local",
    }


def locate_sources(source_root: Path, service: str, tier: Tier) -> list[OverrideFile]:
    """Describe the base, tier and tier-local files of *service*.

    Missing files are reported with ``exists=False`` rather than raising.

    Raises:
        SourceDirectoryMissingError: If the service has no source directory.
    """
    service_dir = source_root / service
    if not service_dir.is_dir():
        raise SourceDirectoryMissingError(service, service_dir)

    files = [
        OverrideFile(
            level=level,
            path=service_dir / name,
            exists=(service_dir / name).is_file(),
            source_root=source_root,
        )
        for level, name in override_filenames(tier).items()
    ]
    logger.debug(
        "Located sources for %s/%s: %s",
        service,
        tier.value,
        ", ".join(f"{f.path.name}={'present' if f.exists else 'absent'}" for f in files),
    )
    return files


def require_sources(service: str, tier: Tier, files: list[OverrideFile]) -> None:
    """Ensure the base or the tier file exists; a lone ``.local`` file is not enough."""
    present = {f.level for f in files if f.exists}
    if OverrideLevel.BASE not in present and OverrideLevel.TIER not in present:
        raise NoUsableSourceError(service, tier.value)
