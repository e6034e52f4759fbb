"""Build, pull and render output rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import typer

from envmerge.engine.types import UnitStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from envmerge.engine.types import ArtifactReport, BuildResult, UnitResult
    from envmerge.sync.collector import CollectResult


class _StatusStyle(NamedTuple):
    color: str
    symbol: str
    label: str


_STATUS_STYLES: dict[str, _StatusStyle] = {
    "built": _StatusStyle("green", "✓", "built"),
    "skipped": _StatusStyle("yellow", "!", "skipped"),
    "failed": _StatusStyle("red", "✗", "failed"),
    "copied": _StatusStyle("green", "✓", "copied"),
    "empty": _StatusStyle("bright_black", "-", "no source files"),
}


def styler(color: bool) -> Callable[..., str]:
    """Return ``typer.style`` when *color* is True, otherwise a passthrough."""
    if color:
        return typer.style
    return lambda text, **_kw: text


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------


def unit_label(service: str, tier: str) -> str:
    return f"{service}/{tier}"


def format_unit(unit: UnitResult, *, color: bool = True) -> str:
    """Render the one-line status of a (service, tier) unit."""
    s = _STATUS_STYLES[unit.status.value]
    text = f"  {s.symbol} {unit_label(unit.service, unit.tier.value)}: {s.label}"
    if unit.status == UnitStatus.BUILT:
        text += f" ({_plural(len(unit.artifacts), 'artifact')})"
    elif unit.message:
        text += f": {unit.message}"
    return styler(color)(text, fg=s.color)


def format_artifacts(reports: list[ArtifactReport]) -> list[str]:
    """Render artifact paths with their line and byte counts, aligned."""
    if not reports:
        return []
    width = max(len(str(r.path)) for r in reports)
    return [
        f"  {str(r.path).ljust(width)}  ({_plural(r.lines, 'line')}, {_plural(r.bytes, 'byte')})"
        for r in reports
    ]


def format_build_report(result: BuildResult, *, color: bool = True) -> str:
    """Render every artifact written plus skipped, failed and unresolved items."""
    style = styler(color)
    sections: list[str] = []

    artifacts = result.artifacts
    if artifacts:
        sections.append("\n".join(["Artifacts written:", *format_artifacts(artifacts)]))
    else:
        sections.append("No artifacts written.")

    skipped = [r for r in result.results if r.status == UnitStatus.SKIPPED]
    if skipped:
        lines = [style("Skipped:", fg="yellow", bold=True)]
        lines += [f"  {unit_label(r.service, r.tier.value)}: {r.message}" for r in skipped]
        sections.append("\n".join(lines))

    failed = [r for r in result.results if r.status == UnitStatus.FAILED]
    if failed:
        lines = [style("Failed:", fg="red", bold=True)]
        lines += [f"  {unit_label(r.service, r.tier.value)}: {r.message}" for r in failed]
        sections.append("\n".join(lines))

    unresolved = [r for r in result.results if r.unresolved and r.status == UnitStatus.BUILT]
    if unresolved:
        lines = ["Unresolved references (left as-is):"]
        lines += [
            f"  {unit_label(r.service, r.tier.value)}: {', '.join(r.unresolved)}"
            for r in unresolved
        ]
        sections.append("\n".join(lines))

    return "\n\n".join(sections)


def format_build_summary(summary: dict[str, int], *, color: bool = True) -> str:
    """Render ``Build complete! Units: 2 built, 1 skipped, 0 failed.``"""
    style = styler(color)
    if summary.get("failed", 0):
        header = style("Build finished with errors.", fg="red", bold=True)
    else:
        header = style("Build complete!", fg="green", bold=True)
    counts = ", ".join(f"{summary.get(s.value, 0)} {s.value}" for s in UnitStatus)
    return f"{header} Units: {counts}."


# ---------------------------------------------------------------------------
# Pull
# ---------------------------------------------------------------------------


def format_collect_result(result: CollectResult, *, color: bool = True) -> str:
    """Render the outcome of collecting one service."""
    s = _STATUS_STYLES[result.status]
    text = f"  {s.symbol} {result.service}: {s.label}"
    if result.files:
        text += f" ({', '.join(result.files)})"
    elif result.status in ("skipped", "failed") and result.message:
        text += f": {result.message}"
    return styler(color)(text, fg=s.color)


def format_collect_summary(results: list[CollectResult], *, color: bool = True) -> str:
    style = styler(color)
    copied = sum(len(r.files) for r in results)
    missing = [r.service for r in results if r.status in ("skipped", "failed")]
    text = f"{style('Pull complete!', fg='green', bold=True)} Files copied: {copied}."
    if missing:
        text += f" Not collected: {', '.join(missing)}."
    return text
