"""CLI application for envmerge."""

from __future__ import annotations

import logging
import os
import sys

import typer

from envmerge import __version__

app = typer.Typer(
    name="envmerge",
    help="Merge, resolve and distribute per-service environment files.",
    no_args_is_help=True,
    add_completion=False,
)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_LOG_ENV_VAR = "ENVMERGE_LOG"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_VERBOSITY = {0: None, 1: logging.INFO}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"envmerge {__version__}")
        raise typer.Exit


def _log_level(verbose: int, quiet: bool) -> int | None:
    """Pick the ``envmerge`` log level; ``None`` leaves logging untouched.

    ``ENVMERGE_LOG`` wins over ``-q`` which wins over ``-v``.
    """
    env_level = os.environ.get(_LOG_ENV_VAR, "").upper()
    if env_level:
        if env_level in _VALID_LEVELS:
            return getattr(logging, env_level)
        typer.echo(
            f"WARNING: invalid {_LOG_ENV_VAR} level '{env_level}', "
            f"expected one of {', '.join(sorted(_VALID_LEVELS))}; defaulting to INFO",
            err=True,
        )
        return logging.INFO
    if quiet:
        return logging.ERROR
    return _VERBOSITY.get(verbose, logging.DEBUG)


def _configure_logging(verbose: int, quiet: bool = False) -> None:
    """Send ``envmerge`` records to stderr; other libraries stay at WARNING."""
    level = _log_level(verbose, quiet)
    if level is None:
        return
    logging.basicConfig(
        level=logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("envmerge").setLevel(level)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v info, -vv debug).",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors (hides per-unit skip warnings).",
    ),
) -> None:
    _ = version
    _configure_logging(verbose, quiet)


# Commands register themselves on ``app`` when imported.
from envmerge.cli import commands as _commands  # noqa: E402, F401
