"""Strip comments and stray whitespace from a merged document.

Assignment lines (anything containing ``=``) lose their trailing comment,
which starts at the first ``#`` on the line. A ``#`` inside a quoted value
is cut like any other, so ``PASSWORD="a#b"`` becomes ``PASSWORD="a``.
Lines without ``=`` are kept with trailing whitespace removed. Blank lines
are dropped.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_INLINE_COMMENT_RE = re.compile(r"\s*#.*$")


def sanitize_line(line: str) -> str | None:
    """Clean a single line, returning ``None`` when it should be dropped."""
    if "=" in line:
        cleaned = _INLINE_COMMENT_RE.sub("", line, count=1).rstrip()
        return cleaned if "=" in cleaned else None
    cleaned = line.rstrip()
    return cleaned or None


def sanitize(lines: Iterable[str]) -> list[str]:
    """Sanitize every line of a merged document. Idempotent."""
    cleaned = (sanitize_line(line) for line in lines)
    return [line for line in cleaned if line is not None]
