"""YAML configuration file loader."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML

from envmerge.config.schema import Config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


# Field name → environment variable.
_SSH_ENV_MAP: dict[str, str] = {
    "user": "ENVMERGE_SSH_USER",
    "port": "ENVMERGE_SSH_PORT",
    "identity_file": "ENVMERGE_SSH_IDENTITY_FILE",
}

_INHERITED_TARGET_FIELDS = ("user", "port", "identity_file")


def _resolve_ssh(raw_ssh: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Resolve SSH defaults from YAML, env vars, and ``.env`` file.

    Priority (highest wins): YAML value > env var > ``.env`` file.
    """
    env_file = config_dir / ".env"
    dotenv_vals = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    resolved: dict[str, Any] = {}
    for field, env_key in _SSH_ENV_MAP.items():
        val = raw_ssh.get(field)
        if val is None:
            val = os.environ.get(env_key)
        if val is None:
            val = dotenv_vals.get(env_key)
        if val is not None:
            resolved[field] = val
    return resolved


def _resolve_path(path: Path, config_dir: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else (config_dir / path).resolve()


def _absolutize(config: Config) -> None:
    """Anchor relative paths at the directory holding the config file."""
    base = config.config_dir
    config.repos_dir = _resolve_path(config.repos_dir, base)
    config.source_root = _resolve_path(config.source_root, base)
    config.output_roots = [_resolve_path(p, base) for p in config.output_roots]
    if config.sync.root is not None:
        config.sync.root = _resolve_path(config.sync.root, base)
    if config.sync.publish_root is not None:
        config.sync.publish_root = _resolve_path(config.sync.publish_root, base)
    if config.ssh.identity_file is not None:
        config.ssh.identity_file = _resolve_path(config.ssh.identity_file, base)
    for target in config.targets.values():
        if target.identity_file is not None:
            target.identity_file = _resolve_path(target.identity_file, base)


def _apply_ssh_defaults(config: Config) -> list[str]:
    """Fill unset target fields from the SSH defaults; return validation errors."""
    errors: list[str] = []
    for name, target in config.targets.items():
        for field in _INHERITED_TARGET_FIELDS:
            if getattr(target, field) is None:
                setattr(target, field, getattr(config.ssh, field))
        if not target.user:
            errors.append(
                f"Target '{name}' has no user (set targets.{name}.user, ssh.user "
                "or ENVMERGE_SSH_USER)"
            )
    return errors


def _validate_layout(config: Config) -> list[str]:
    errors: list[str] = []
    if not config.publish_root.is_relative_to(config.sync_root):
        errors.append(
            f"sync.publish_root {config.publish_root} is not inside sync.root {config.sync_root}"
        )
    return errors


def load_config(path: Path | str) -> Config:
    """Load a YAML configuration file and return a ``Config`` object.

    Raises:
        ConfigError: On YAML parse errors, missing sections, or validation failures.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} does not contain a mapping")

    config_dir = path.parent.resolve()
    try:
        raw["ssh"] = _resolve_ssh(raw.get("ssh") or {}, config_dir)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = config_dir
    _absolutize(config)

    errors = _apply_ssh_defaults(config) + _validate_layout(config)
    if errors:
        raise ConfigError("\n".join(errors))

    logger.info(
        "Loaded config from %s (%d services, %d targets)",
        path,
        len(config.services),
        len(config.targets),
    )
    return config
