"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from envmerge.config import load

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from envmerge.config.schema import Config

_ENVMERGE_ENV_VARS = (
    "ENVMERGE_SSH_USER",
    "ENVMERGE_SSH_PORT",
    "ENVMERGE_SSH_IDENTITY_FILE",
    "ENVMERGE_LOG",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def _clean_envmerge_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove ENVMERGE_* env vars so unit tests don't leak host config."""
    for var in _ENVMERGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def write_sources(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write override files for a service under ``tmp_path/src``."""

    def _write(service: str, files: dict[str, str], *, root: Path | None = None) -> Path:
        service_dir = (root or tmp_path / "src") / service
        service_dir.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            (service_dir / name).write_text(content)
        return service_dir

    return _write


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "envmerge.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "envmerge.yaml")

    return _make
