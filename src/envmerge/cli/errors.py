"""Map exceptions to clean stderr messages and exit codes."""

from __future__ import annotations

import typer


def _err(msg: str, *, fg: str | None) -> None:
    """Print a styled message to stderr."""
    typer.echo(typer.style(msg, fg=fg), err=True)


def handle_error(exc: Exception, *, color: bool = True) -> int:
    """Print a clean error message to stderr and return an exit code.

    All errors map to exit code 1.  No tracebacks are printed.
    """
    from envmerge.config.loader import ConfigError
    from envmerge.engine.errors import (
        NoUsableSourceError,
        RemoteSyncError,
        SourceDirectoryMissingError,
    )

    fg = typer.colors.RED if color else None

    if isinstance(exc, ConfigError):
        _err(f"Configuration error: {exc}", fg=fg)
    elif isinstance(exc, (SourceDirectoryMissingError, NoUsableSourceError)):
        _err(f"Missing source: {exc}", fg=fg)
    elif isinstance(exc, RemoteSyncError):
        _err(f"Sync failed: {exc}", fg=fg)
    else:
        _err(f"Error: {exc}", fg=fg)

    return 1
