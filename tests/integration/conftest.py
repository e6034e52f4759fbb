"""Pytest fixtures for integration tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

_CONFIG = """\
services: [svc-a, svc-b]
repos_dir: repos
source_root: secrets/base
output_roots: [secrets/pfcm, secrets/base]
targets:
  prod:
    host: 10.0.0.5
    user: deploy
    path: /opt/secrets
"""

_REPO_FILES = {
    ".env": "APP=demo\nHOST=localhost  # local host\nURL=http://${HOST}:8080\n\n",
    ".env.production": "# production overrides\nHOST=prod.internal\nexport EXTRA=${MISSING}/bin\n",
    ".env.production.local": "DEBUG=false\n",
    ".env.sample": "HOST=never-used\n",
}


@pytest.fixture(autouse=True)
def _clean_envmerge_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("ENVMERGE_SSH_USER", "ENVMERGE_SSH_PORT", "ENVMERGE_SSH_IDENTITY_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A project directory with one service repository and a config file.

    ``svc-b`` is configured but has no repository.
    """
    repo = tmp_path / "repos" / "svc-a"
    repo.mkdir(parents=True)
    for name, content in _REPO_FILES.items():
        (repo / name).write_text(content)
    (tmp_path / "envmerge.yaml").write_text(_CONFIG)
    return tmp_path
