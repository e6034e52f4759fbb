"""Resolve ``${VAR}`` and ``$VAR`` references within a sanitized document.

The substitution table is built only from *simple* assignments
(``KEY=VALUE`` with no whitespace in the value) and lives entirely inside
this module; the process environment is never consulted.

Two strategies build the table:

``single-pass``
    Values are expanded as they are scanned, against the bindings seen so
    far. A value referring to a key that is only defined later keeps the
    literal reference, so chained lookups depend on file order.

``fixed-point``
    All raw values are collected first (last write wins) and then expanded
    against the complete table until nothing changes, bounded by
    ``max_depth`` rounds so cyclic references terminate.

Every line of the document is then substituted once against the final
table. References to unknown keys are left untouched.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from envmerge.engine.types import ResolutionStrategy, ResolvedDocument

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

_REFERENCE_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")
_SIMPLE_ASSIGNMENT_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=(\S*)$")


def _unquote(value: str) -> tuple[str, bool]:
    """Strip matching outer quotes. Returns the value and whether it may be expanded."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1], value[0] == '"'
    return value, True


def simple_assignments(lines: Iterable[str]) -> list[tuple[str, str]]:
    """Return ``(key, value)`` pairs of the lines eligible for the table."""
    pairs: list[tuple[str, str]] = []
    for line in lines:
        m = _SIMPLE_ASSIGNMENT_RE.match(line)
        if m:
            pairs.append((m.group(1), m.group(2)))
    return pairs


def references(text: str) -> list[str]:
    """Names referenced in *text*, in order of appearance."""
    return [m.group(1) or m.group(2) for m in _REFERENCE_RE.finditer(text)]


def substitute(text: str, table: Mapping[str, str]) -> str:
    """Replace every known reference in *text* once; unknown ones stay literal."""

    def _replace(m: re.Match[str]) -> str:
        name = m.group(1) or m.group(2)
        return table.get(name, m.group(0))

    return _REFERENCE_RE.sub(_replace, text)


def _build_single_pass(pairs: list[tuple[str, str]]) -> dict[str, str]:
    table: dict[str, str] = {}
    for key, raw in pairs:
        value, expandable = _unquote(raw)
        table[key] = substitute(value, table) if expandable else value
    return table


def _build_fixed_point(pairs: list[tuple[str, str]], max_depth: int) -> dict[str, str]:
    table: dict[str, str] = {}
    literal: set[str] = set()
    for key, raw in pairs:
        value, expandable = _unquote(raw)
        table[key] = value
        if expandable:
            literal.discard(key)
        else:
            literal.add(key)

    for depth in range(1, max_depth + 1):
        expanded = {
            key: value if key in literal else substitute(value, table)
            for key, value in table.items()
        }
        if expanded == table:
            logger.debug("Variable table converged after %d round(s)", depth)
            return table
        table = expanded

    logger.warning("Variable table did not converge within %d rounds", max_depth)
    return table


def build_table(
    lines: Iterable[str],
    *,
    strategy: ResolutionStrategy = ResolutionStrategy.SINGLE_PASS,
    max_depth: int = 10,
) -> dict[str, str]:
    """Build the substitution table from the simple assignments in *lines*."""
    pairs = simple_assignments(lines)
    if strategy == ResolutionStrategy.FIXED_POINT:
        return _build_fixed_point(pairs, max_depth)
    return _build_single_pass(pairs)


def resolve(
    lines: Iterable[str],
    *,
    strategy: ResolutionStrategy = ResolutionStrategy.SINGLE_PASS,
    max_depth: int = 10,
) -> ResolvedDocument:
    """Substitute references in every line of a sanitized document."""
    lines = list(lines)
    table = build_table(lines, strategy=strategy, max_depth=max_depth)
    resolved = [substitute(line, table) for line in lines]

    unresolved = sorted({name for line in resolved for name in references(line)})
    if unresolved:
        logger.info("Unresolved references left as-is: %s", ", ".join(unresolved))
    return ResolvedDocument(lines=resolved, unresolved=unresolved)
