"""CLI command implementations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from envmerge.cli import app
from envmerge.cli.errors import handle_error
from envmerge.engine.types import Tier

if TYPE_CHECKING:
    from envmerge.config.schema import Config
    from envmerge.engine.types import BuildResult, UnitResult

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

Services = Annotated[
    list[str] | None,
    typer.Argument(help="Services to process (default: all configured services)."),
]

Tiers = Annotated[
    list[Tier] | None,
    typer.Option("--tier", "-t", help="Tier to build; repeatable (default: configured tiers)."),
]

_DEFAULT_CONFIG = Path("envmerge.yaml")


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _build_with_progress(
    cfg: Config,
    *,
    services: list[str] | None,
    tiers: list[Tier] | None,
    strict: bool | None,
    color: bool,
) -> BuildResult:
    """Build with a Rich progress bar and per-unit status lines."""
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from envmerge.cli.formatting import format_unit, unit_label
    from envmerge.config import build, select_services, select_tiers

    console = Console(no_color=not color, highlight=False)
    total = len(select_services(cfg, services)) * len(select_tiers(cfg, tiers))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Building", total=total)

        def on_progress(
            service: str, tier: Tier, event: Literal["start", "done"], unit: UnitResult | None
        ) -> None:
            if event == "start":
                progress.update(task, description=f"{unit_label(service, tier.value)}: merging...")
            elif event == "done" and unit is not None:
                progress.console.print(format_unit(unit, color=False), markup=False)
                progress.advance(task)

        return build(cfg, services=services, tiers=tiers, strict=strict, progress=on_progress)


@app.command()
def pull(
    services: Services = None,
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Copy raw .env* files from the service repositories into the staging tree."""
    from envmerge.cli.formatting import format_collect_result, format_collect_summary
    from envmerge.config import load
    from envmerge.config import pull as pull_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        results = pull_fn(cfg, services=services)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    for result in results:
        typer.echo(format_collect_result(result, color=color))
    typer.echo()
    typer.echo(format_collect_summary(results, color=color))


@app.command()
def build(
    services: Services = None,
    tier: Tiers = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail units that still contain unresolved references."),
    ] = False,
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Merge, resolve and write the environment artifacts."""
    from envmerge.cli.formatting import format_build_report, format_build_summary
    from envmerge.config import load

    color = _use_color(no_color)
    try:
        cfg = load(config)
        result = _build_with_progress(
            cfg, services=services, tiers=tier, strict=strict or None, color=color
        )
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo()
    typer.echo(format_build_report(result, color=color))
    typer.echo()
    typer.echo(format_build_summary(result.summary(), color=color))

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def render(
    service: Annotated[str, typer.Argument(help="Service to render.")],
    tier: Annotated[Tier, typer.Option("--tier", "-t", help="Tier to render.")],
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Print the resolved artifact for one service and tier without writing it."""
    from envmerge.cli.formatting import styler
    from envmerge.config import load
    from envmerge.config import render as render_fn
    from envmerge.engine.writer import render_artifact

    color = _use_color(no_color)
    try:
        cfg = load(config)
        document = render_fn(cfg, service, tier)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(render_artifact(document.lines), nl=False)
    if document.unresolved:
        msg = f"Unresolved references: {', '.join(document.unresolved)}"
        typer.echo(styler(color)(msg, fg="yellow"), err=True)


@app.command()
def push(
    target: Annotated[str, typer.Argument(help="Name of the remote target.")],
    service: Annotated[
        str | None,
        typer.Argument(help="Only push this service (default: everything)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation when pushing everything."),
    ] = False,
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Push built artifacts to a remote target (raw .env* files are excluded)."""
    from envmerge.cli.formatting import styler
    from envmerge.config import load, select_services, select_target
    from envmerge.config import push as push_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        remote = select_target(cfg, target)
        if service is not None:
            select_services(cfg, [service])
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if service is None:
        typer.echo(f"No service specified. This will push {cfg.sync_root} to {target}.")
        if not yes:
            try:
                typer.confirm("Do you want to continue?", abort=True)
            except typer.Abort as e:
                typer.echo("Push canceled.", err=True)
                raise typer.Exit(0) from e

    try:
        push_fn(cfg, target, service=service)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    scope = service or "all services"
    typer.echo(styler(color)(f"Push complete! {scope} -> {remote.destination()}", fg="green"))


@app.command()
def validate(
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Validate the configuration file."""
    from envmerge.cli.formatting import styler
    from envmerge.config import load

    color = _use_color(no_color)
    try:
        cfg = load(config)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(styler(color)("Configuration is valid.", fg="green"))
    typer.echo(f"  Services: {', '.join(cfg.services)}")
    typer.echo(f"  Tiers: {', '.join(t.value for t in cfg.tiers)}")
    typer.echo(f"  Source root: {cfg.source_root}")
    for root in cfg.output_roots:
        typer.echo(f"  Output root: {root}")
    if cfg.targets:
        typer.echo(f"  Targets: {', '.join(sorted(cfg.targets))}")
