"""Tests for locating override files."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from envmerge.engine.errors import NoUsableSourceError, SourceDirectoryMissingError
from envmerge.engine.locator import locate_sources, override_filenames, require_sources
from envmerge.engine.types import OverrideFile, OverrideLevel, Tier

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestOverrideFilenames:
    def test_precedence_order(self) -> None:
        names = override_filenames(Tier.PRODUCTION)
        assert list(names) == [OverrideLevel.BASE, OverrideLevel.TIER, OverrideLevel.TIER_LOCAL]
        assert list(names.values()) == [".env", ".env.production", ".env.production.local"]

    def test_development(self) -> None:
        assert override_filenames(Tier.DEVELOPMENT)[OverrideLevel.TIER] == ".env.development"


class TestLocateSources:
    def test_all_present(self, tmp_path: Path, write_sources: Callable[..., Path]) -> None:
        write_sources("svc", {".env": "", ".env.production": "", ".env.production.local": ""})
        files = locate_sources(tmp_path / "src", "svc", Tier.PRODUCTION)
        assert [f.exists for f in files] == [True, True, True]
        assert [f.path.name for f in files] == [".env", ".env.production", ".env.production.local"]

    def test_missing_files_are_tagged_absent(
        self, tmp_path: Path, write_sources: Callable[..., Path]
    ) -> None:
        write_sources("svc", {".env": "A=1\n"})
        files = locate_sources(tmp_path / "src", "svc", Tier.DEVELOPMENT)
        assert [f.exists for f in files] == [True, False, False]

    def test_other_tier_files_ignored(
        self, tmp_path: Path, write_sources: Callable[..., Path]
    ) -> None:
        write_sources("svc", {".env.development": "A=1\n"})
        files = locate_sources(tmp_path / "src", "svc", Tier.PRODUCTION)
        assert not any(f.exists for f in files)

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        with pytest.raises(SourceDirectoryMissingError, match="svc"):
            locate_sources(tmp_path / "src", "svc", Tier.PRODUCTION)

    def test_directory_named_like_file(self, tmp_path: Path) -> None:
        (tmp_path / "src" / "svc" / ".env").mkdir(parents=True)
        files = locate_sources(tmp_path / "src", "svc", Tier.PRODUCTION)
        assert files[0].exists is False


def _files(*present: OverrideLevel, tmp_path: Path) -> list[OverrideFile]:
    return [
        OverrideFile(level=level, path=tmp_path / level.value, exists=level in present)
        for level in OverrideLevel
    ]


class TestRequireSources:
    def test_base_only_is_enough(self, tmp_path: Path) -> None:
        require_sources("svc", Tier.PRODUCTION, _files(OverrideLevel.BASE, tmp_path=tmp_path))

    def test_tier_only_is_enough(self, tmp_path: Path) -> None:
        require_sources("svc", Tier.PRODUCTION, _files(OverrideLevel.TIER, tmp_path=tmp_path))

    def test_local_alone_is_not_enough(self, tmp_path: Path) -> None:
        files = _files(OverrideLevel.TIER_LOCAL, tmp_path=tmp_path)
        with pytest.raises(NoUsableSourceError, match="production"):
            require_sources("svc", Tier.PRODUCTION, files)

    def test_nothing_present(self, tmp_path: Path) -> None:
        with pytest.raises(NoUsableSourceError):
            require_sources("svc", Tier.DEVELOPMENT, _files(tmp_path=tmp_path))


class TestOverrideFile:
    @pytest.mark.parametrize(
        "path",
        ["/srv/svc/.env.example", "/srv/examples/svc/.env", "/srv/svc/.env.production.example"],
    )
    def test_example_paths_are_templates(self, path: str) -> None:
        f = OverrideFile(level=OverrideLevel.BASE, path=path, exists=True)
        assert f.is_template
        assert not f.usable

    def test_marker_above_source_root_not_template(self) -> None:
        f = OverrideFile(
            level=OverrideLevel.BASE,
            path="/home/ops/examples/secrets/svc/.env",
            exists=True,
            source_root="/home/ops/examples/secrets",
        )
        assert not f.is_template
        assert f.usable

    def test_marker_in_service_name_below_root(self) -> None:
        f = OverrideFile(
            level=OverrideLevel.BASE,
            path="/srv/secrets/svc-example/.env",
            exists=True,
            source_root="/srv/secrets",
        )
        assert f.is_template

    def test_regular_path_is_usable(self) -> None:
        f = OverrideFile(level=OverrideLevel.BASE, path="/srv/svc/.env", exists=True)
        assert not f.is_template
        assert f.usable

    def test_absent_is_not_usable(self) -> None:
        f = OverrideFile(level=OverrideLevel.BASE, path="/srv/svc/.env", exists=False)
        assert not f.usable


class TestLocateUnderMarkedDirectory:
    def test_checkout_location_does_not_mark_templates(self, tmp_path: Path) -> None:
        root = tmp_path / "examples" / "secrets"
        (root / "svc").mkdir(parents=True)
        (root / "svc" / ".env").write_text("A=1\n")
        files = locate_sources(root, "svc", Tier.PRODUCTION)
        assert files[0].usable
        assert files[0].source_root == root
