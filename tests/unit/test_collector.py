"""Tests for collecting source files from service repositories."""

from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING
from unittest.mock import patch

from envmerge.engine.types import Tier
from envmerge.engine.writer import write_private
from envmerge.sync.collector import collect, collect_service, find_source_files

if TYPE_CHECKING:
    from pathlib import Path

TIERS = [Tier.DEVELOPMENT, Tier.PRODUCTION]


def _repo(tmp_path: Path, service: str, files: dict[str, str]) -> Path:
    repo = tmp_path / "repos" / service
    repo.mkdir(parents=True)
    for name, content in files.items():
        (repo / name).write_text(content)
    return repo


class TestFindSourceFiles:
    def test_only_top_level_env_files(self, tmp_path: Path) -> None:
        repo = _repo(tmp_path, "svc", {".env": "", ".env.production": "", "README.md": ""})
        (repo / "nested").mkdir()
        (repo / "nested" / ".env").write_text("")
        (repo / ".env.d").mkdir()
        assert [p.name for p in find_source_files(repo)] == [".env", ".env.production"]


class TestCollectService:
    def test_copies_into_every_root(self, tmp_path: Path) -> None:
        _repo(tmp_path, "svc", {".env": "A=1\n", ".env.production": "B=2\n"})
        roots = [tmp_path / "base", tmp_path / "pfcm"]
        result = collect_service(tmp_path / "repos", "svc", roots, TIERS)

        assert result.status == "copied"
        assert result.files == [".env", ".env.production"]
        for root in roots:
            assert (root / "svc" / ".env").read_text() == "A=1\n"
            assert stat.S_IMODE((root / "svc" / ".env.production").stat().st_mode) == 0o600

    def test_copies_private_from_creation(self, tmp_path: Path) -> None:
        _repo(tmp_path, "svc", {".env": "SECRET=1\n"})
        old_umask = os.umask(0)
        try:
            with patch("envmerge.engine.writer.os.chmod"):
                collect_service(tmp_path / "repos", "svc", [tmp_path / "base"], TIERS)
        finally:
            os.umask(old_umask)

        copy = tmp_path / "base" / "svc" / ".env"
        assert copy.read_text() == "SECRET=1\n"
        assert stat.S_IMODE(copy.stat().st_mode) == 0o600
        assert [p.name for p in copy.parent.iterdir() if p.is_file()] == [".env"]

    def test_resets_tier_directories(self, tmp_path: Path) -> None:
        _repo(tmp_path, "svc", {".env": "A=1\n"})
        stale = tmp_path / "base" / "svc" / "production" / "svc.production.env"
        stale.parent.mkdir(parents=True)
        stale.write_text("OLD=1\n")

        collect_service(tmp_path / "repos", "svc", [tmp_path / "base"], TIERS)

        assert not stale.exists()
        assert (tmp_path / "base" / "svc" / "production").is_dir()
        assert (tmp_path / "base" / "svc" / "development").is_dir()

    def test_missing_repository_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "repos").mkdir()
        result = collect_service(tmp_path / "repos", "ghost", [tmp_path / "base"], TIERS)
        assert result.status == "skipped"
        assert not (tmp_path / "base").exists()

    def test_repository_without_env_files(self, tmp_path: Path) -> None:
        _repo(tmp_path, "svc", {"README.md": ""})
        result = collect_service(tmp_path / "repos", "svc", [tmp_path / "base"], TIERS)
        assert result.status == "empty"
        assert result.files == []


class TestCollect:
    def test_failure_does_not_stop_batch(self, tmp_path: Path) -> None:
        _repo(tmp_path, "a", {".env": "A=1\n"})
        _repo(tmp_path, "b", {".env": "B=1\n"})

        def _write(content: bytes, path: Path) -> object:
            if path.parent.name == "a":
                raise OSError("disk full")
            return write_private(content, path)

        with patch("envmerge.sync.collector.write_private", side_effect=_write):
            results = collect(tmp_path / "repos", ["a", "b"], [tmp_path / "base"], TIERS)

        assert [(r.service, r.status) for r in results] == [("a", "failed"), ("b", "copied")]
        assert "disk full" in results[0].message
