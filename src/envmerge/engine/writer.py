"""Persist resolved documents as owner-only artifacts."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from envmerge.engine.errors import ArtifactWriteError
from envmerge.engine.types import ArtifactReport

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ARTIFACT_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


def render_artifact(lines: Iterable[str]) -> str:
    """Join document lines into artifact text with a trailing newline."""
    lines = list(lines)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def write_private(content: bytes, path: Path) -> ArtifactReport:
    """Write *content* to *path* atomically with mode 600.

    The temporary file is created next to the destination so the final
    rename never crosses filesystems.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp_file = Path(tmp_path)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        tmp_file.replace(path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            tmp_file.unlink()
    os.chmod(path, ARTIFACT_MODE)

    report = ArtifactReport(path=path, lines=content.count(b"\n"), bytes=len(content))
    logger.debug("Wrote %s (%d lines, %d bytes)", path, report.lines, report.bytes)
    return report


def write_artifact(content: str, destinations: Iterable[Path]) -> list[ArtifactReport]:
    """Write the same artifact to every destination.

    Raises:
        ArtifactWriteError: On the first destination that cannot be written.
            Destinations already written are kept and listed in the error.
    """
    payload = content.encode("utf-8")
    written: list[ArtifactReport] = []
    for path in destinations:
        try:
            written.append(write_private(payload, Path(path)))
        except OSError as exc:
            raise ArtifactWriteError(path=Path(path), written=written, message=str(exc)) from exc
    return written
