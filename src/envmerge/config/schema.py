"""Configuration models for the YAML config file."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from envmerge.engine.types import ResolveOptions, Tier
from envmerge.sync.remote import RemoteTarget  # noqa: TC001 (pydantic needs this at runtime)

_SERVICE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class SshSettings(BaseSettings):
    """SSH defaults shared by all targets.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``ENVMERGE_SSH_`` prefix.  Constructor kwargs take precedence.
    """

    model_config = SettingsConfigDict(env_prefix="ENVMERGE_SSH_")

    user: str | None = None
    port: int | None = None
    identity_file: Path | None = None


class SyncConfig(BaseModel):
    root: Path | None = None
    publish_root: Path | None = None


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


def _none_to_dict(v: Any) -> Any:
    return v if v is not None else {}


class Config(BaseModel):
    """envmerge configuration, validated directly from the YAML structure."""

    services: Annotated[list[str], BeforeValidator(_none_to_list)]
    repos_dir: Path = Path("..")
    source_root: Path
    output_roots: Annotated[list[Path], BeforeValidator(_none_to_list)] = []
    tiers: list[Tier] = [Tier.DEVELOPMENT, Tier.PRODUCTION]
    resolution: ResolveOptions = Field(default_factory=ResolveOptions)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    ssh: SshSettings = Field(default_factory=SshSettings)
    targets: Annotated[dict[str, RemoteTarget], BeforeValidator(_none_to_dict)] = {}
    config_dir: Path = Path()

    @field_validator("services")
    @classmethod
    def _check_services(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one service is required")
        bad = [s for s in v if not _SERVICE_NAME_RE.match(s)]
        if bad:
            raise ValueError(f"invalid service name(s): {', '.join(bad)}")
        dupes = sorted({s for s in v if v.count(s) > 1})
        if dupes:
            raise ValueError(f"duplicate service name(s): {', '.join(dupes)}")
        return v

    @field_validator("tiers")
    @classmethod
    def _check_tiers(cls, v: list[Tier]) -> list[Tier]:
        if not v:
            raise ValueError("at least one tier is required")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def _apply_defaults(self) -> Config:
        if not self.output_roots:
            self.output_roots = [self.source_root]
        return self

    @property
    def sync_root(self) -> Path:
        """Directory mirrored by a full push."""
        return self.sync.root or self.source_root.parent

    @property
    def publish_root(self) -> Path:
        """Output root whose service directories are pushed individually."""
        return self.sync.publish_root or self.output_roots[0]

    @property
    def all_roots(self) -> list[Path]:
        """Source root followed by every distinct output root."""
        return list(dict.fromkeys([self.source_root, *self.output_roots]))
