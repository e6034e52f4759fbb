"""YAML configuration loading and convenience build/pull/push API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from envmerge.config.loader import ConfigError, load_config
from envmerge.config.schema import Config, SshSettings, SyncConfig
from envmerge.engine.engine import EnvBuilder, ProgressCallback
from envmerge.engine.types import Tier
from envmerge.sync.collector import collect
from envmerge.sync.remote import RemoteSync

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from envmerge.engine.types import BuildResult, ResolvedDocument
    from envmerge.sync.collector import CollectResult
    from envmerge.sync.remote import RemoteTarget

__all__ = [
    "Config",
    "ConfigError",
    "SshSettings",
    "SyncConfig",
    "build",
    "builder",
    "load",
    "load_config",
    "pull",
    "push",
    "render",
    "select_services",
    "select_target",
    "select_tiers",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def select_services(config: Config, names: Sequence[str] | None = None) -> list[str]:
    """Validate *names* against the configured services (default: all of them)."""
    if not names:
        return list(config.services)
    unknown = [n for n in names if n not in config.services]
    if unknown:
        raise ConfigError(
            f"Invalid service name(s): {', '.join(unknown)} "
            f"(valid: {', '.join(config.services)})"
        )
    return list(dict.fromkeys(names))


def select_tiers(config: Config, tiers: Sequence[Tier | str] | None = None) -> list[Tier]:
    """Validate *tiers* (default: the configured tiers)."""
    if not tiers:
        return list(config.tiers)
    selected: list[Tier] = []
    for t in tiers:
        try:
            selected.append(Tier(t))
        except ValueError as exc:
            valid = ", ".join(x.value for x in Tier)
            raise ConfigError(f"Invalid tier '{t}' (valid: {valid})") from exc
    return list(dict.fromkeys(selected))


def select_target(config: Config, name: str) -> RemoteTarget:
    """Return the named remote target."""
    target = config.targets.get(name)
    if target is None:
        valid = ", ".join(sorted(config.targets)) or "none configured"
        raise ConfigError(f"Invalid target name '{name}' (valid: {valid})")
    return target


def builder(config: Config, *, strict: bool | None = None) -> EnvBuilder:
    """Build an ``EnvBuilder`` from a ``Config`` instance."""
    options = config.resolution
    if strict is not None:
        options = options.model_copy(update={"strict": strict})
    return EnvBuilder(
        source_root=config.source_root,
        output_roots=config.output_roots,
        options=options,
    )


def build(
    config: Config,
    *,
    services: Sequence[str] | None = None,
    tiers: Sequence[Tier | str] | None = None,
    strict: bool | None = None,
    progress: ProgressCallback | None = None,
) -> BuildResult:
    """Merge, resolve and write artifacts for the selected services and tiers."""
    selected = select_services(config, services)
    selected_tiers = select_tiers(config, tiers)
    return builder(config, strict=strict).build(selected, selected_tiers, progress=progress)


def render(config: Config, service: str, tier: Tier | str) -> ResolvedDocument:
    """Resolve one (service, tier) document without writing it."""
    (name,) = select_services(config, [service])
    (selected_tier,) = select_tiers(config, [tier])
    return builder(config).render(name, selected_tier)


def pull(config: Config, *, services: Sequence[str] | None = None) -> list[CollectResult]:
    """Copy raw source files from the service repositories into every root."""
    selected = select_services(config, services)
    return collect(config.repos_dir, selected, config.all_roots, config.tiers)


def push(
    config: Config,
    target_name: str,
    *,
    service: str | None = None,
    remote: RemoteSync | None = None,
) -> str:
    """Push built artifacts to a remote target.

    Without *service* the whole sync root is mirrored; with it only that
    service's directory under the publish root. Returns the transfer log.
    """
    target = select_target(config, target_name)
    remote = remote or RemoteSync()

    if service is None:
        return remote.sync_tree(config.sync_root, target, target.path)

    (name,) = select_services(config, [service])
    rel = config.publish_root.relative_to(config.sync_root)
    parts = [*rel.parts, name]
    return remote.sync_tree(config.publish_root / name, target, target.remote_path(*parts))
