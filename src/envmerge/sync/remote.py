"""Transfer built artifacts to remote hosts with ``ssh`` and ``rsync``."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from envmerge.engine.errors import RemoteSyncError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Raw sources are never transmitted, only resolved artifacts.
EXCLUDE_PATTERN = ".env*"


class RemoteTarget(BaseModel):
    """A named host that receives built artifacts."""

    host: str
    user: str | None = None
    path: str
    port: int | None = None
    identity_file: Path | None = None

    @property
    def login(self) -> str:
        if not self.user:
            raise RemoteSyncError(f"No SSH user configured for host {self.host}")
        return f"{self.user}@{self.host}"

    def destination(self, remote_path: str | None = None) -> str:
        """Return ``user@host:path`` for *remote_path* (default: the target path)."""
        return f"{self.login}:{remote_path or self.path}"

    def remote_path(self, *parts: str) -> str:
        return str(PurePosixPath(self.path, *parts))


class RemoteSync:
    """Thin wrapper around the ``ssh`` and ``rsync`` executables."""

    def __init__(self, runner: Callable[..., Any] = subprocess.run) -> None:
        self._runner = runner

    def _ssh_options(self, target: RemoteTarget) -> list[str]:
        opts: list[str] = []
        if target.port is not None:
            opts += ["-p", str(target.port)]
        if target.identity_file is not None:
            opts += ["-i", str(target.identity_file)]
        return opts

    def _run(self, cmd: list[str]) -> str:
        logger.debug("Running %s", " ".join(cmd))
        try:
            completed = self._runner(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise RemoteSyncError(f"Executable not found: {cmd[0]}") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            msg = f"Failed to run {' '.join(cmd)}"
            if stderr:
                msg += f": {stderr}"
            raise RemoteSyncError(msg) from exc
        return (completed.stdout or "").strip()

    def ensure_remote_dir(self, target: RemoteTarget, remote_path: str) -> None:
        """Create *remote_path* on the target if it does not exist."""
        cmd = [
            "ssh",
            *self._ssh_options(target),
            target.login,
            f"mkdir -p {shlex.quote(remote_path)}",
        ]
        self._run(cmd)

    def sync_tree(self, local_dir: Path, target: RemoteTarget, remote_path: str) -> str:
        """Mirror *local_dir* into *remote_path*, skipping raw ``.env*`` sources.

        Returns the rsync transfer log.
        """
        if not local_dir.is_dir():
            raise RemoteSyncError(f"Local directory not found: {local_dir}")

        self.ensure_remote_dir(target, remote_path)
        cmd = ["rsync", "-avz", f"--exclude={EXCLUDE_PATTERN}"]
        ssh_opts = self._ssh_options(target)
        if ssh_opts:
            cmd += ["-e", shlex.join(["ssh", *ssh_opts])]
        cmd += [f"{local_dir}/", f"{target.destination(remote_path)}/"]
        logger.info("Syncing %s -> %s", local_dir, target.destination(remote_path))
        return self._run(cmd)
