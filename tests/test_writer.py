"""Tests for nxquery.writer."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from nxquery.writer import EMPTY_MANIFEST, EMPTY_QUERY_KEYS, ArtifactWriter


def test_write_if_changed_skips_identical_content(tmp_path: Path) -> None:
    writer = ArtifactWriter(tmp_path)
    target = tmp_path / "ns" / "queryKeys.ts"

    assert writer.write_if_changed(target, "a\n") is True
    mtime = target.stat().st_mtime_ns
    assert writer.write_if_changed(target, "a\n") is False
    assert target.stat().st_mtime_ns == mtime
    assert writer.write_if_changed(target, "b\n") is True
    assert target.read_text(encoding="utf-8") == "b\n"


def test_write_if_changed_propagates_storage_errors(tmp_path: Path, monkeypatch) -> None:
    writer = ArtifactWriter(tmp_path)

    def _full(self, *args, **kwargs):
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr(Path, "write_text", _full)

    with pytest.raises(OSError) as info:
        writer.write_if_changed(tmp_path / "index.ts", "content\n")
    assert info.value.errno == errno.ENOSPC


def test_ensure_base_structure_creates_missing_artifacts_only(tmp_path: Path) -> None:
    root = tmp_path / "query"
    root.mkdir()
    (root / "keys.ts").write_text("// mine\n", encoding="utf-8")
    (root / "users").mkdir()
    (root / ".hidden").mkdir()
    (root / "users" / "queryKeys.ts").write_text("// kept\n", encoding="utf-8")

    ArtifactWriter(root).ensure_base_structure()

    assert (root / "index.ts").read_text(encoding="utf-8") == EMPTY_MANIFEST
    assert (root / "keys.ts").read_text(encoding="utf-8") == "// mine\n"
    assert (root / "users" / "queryKeys.ts").read_text(encoding="utf-8") == "// kept\n"
    assert (root / "users" / "queries").is_dir()
    assert (root / "users" / "mutations").is_dir()
    assert not (root / ".hidden" / "queries").exists()


def test_namespace_skeleton_only_for_direct_children(tmp_path: Path) -> None:
    writer = ArtifactWriter(tmp_path, exclude_dirs=["fixtures"])
    (tmp_path / "billing" / "queries" / "deep").mkdir(parents=True)
    (tmp_path / "fixtures").mkdir()

    assert writer.ensure_namespace_skeleton(tmp_path / "billing") is True
    assert (tmp_path / "billing" / "queryKeys.ts").read_text(encoding="utf-8") == EMPTY_QUERY_KEYS
    assert writer.ensure_namespace_skeleton(tmp_path / "billing" / "queries" / "deep") is False
    assert not (tmp_path / "billing" / "queries" / "deep" / "queries").exists()
    assert writer.ensure_namespace_skeleton(tmp_path / "fixtures") is False
    assert writer.ensure_namespace_skeleton(tmp_path.parent) is False


def test_empty_exports_are_valid_modules() -> None:
    assert EMPTY_MANIFEST == "export const NXQuery = {}\n\nexport default NXQuery\n"
    assert EMPTY_QUERY_KEYS == "export const queryKeys = {}\n\nexport default queryKeys\n"
