"""Concatenate override files in precedence order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from envmerge.engine.types import OverrideFile

logger = logging.getLogger(__name__)


def read_lines(file: OverrideFile) -> list[str]:
    """Return the raw lines of *file* without line terminators."""
    return file.path.read_text(encoding="utf-8-sig").splitlines()


def merge_overrides(files: Iterable[OverrideFile]) -> list[str]:
    """Merge the usable files into one document, base first, most specific last.

    Absent files contribute nothing. Template files are skipped even when
    present.
    """
    merged: list[str] = []
    for f in files:
        if not f.exists:
            continue
        if f.is_template:
            logger.debug("Skipping template file %s", f.path)
            continue
        lines = read_lines(f)
        logger.debug("Merged %s (%d lines)", f.path, len(lines))
        merged.extend(lines)
    return merged
