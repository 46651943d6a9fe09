"""Tests for nxquery.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from nxquery.config import NXQueryConfig, WatchConfig, load_config
from nxquery.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, NXQueryConfig)
    assert config.project_dir == tmp_path.resolve()
    assert config.directory == "src/query"
    assert config.root == (tmp_path / "src" / "query").resolve()
    assert config.exclude_dirs == []
    assert config.seed_templates is True
    assert config.watch == WatchConfig(recursive=True)
    assert config.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".nxquery.yml"
    config_file.write_text(
        """
directory: app/api/query
exclude_dirs:
  - fixtures
  - __mocks__
seed_templates: no
watch:
  recursive: false
log_file: logs/nxquery.log
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.directory == "app/api/query"
    assert config.root == (tmp_path / "app" / "api" / "query").resolve()
    assert config.exclude_dirs == ["fixtures", "__mocks__"]
    assert config.seed_templates is False
    assert config.watch.recursive is False
    assert config.log_file == tmp_path.resolve() / "logs" / "nxquery.log"


def test_load_config_accepts_single_exclude_and_empty_file(tmp_path: Path) -> None:
    config_file = tmp_path / ".nxquery.yml"
    config_file.write_text("exclude_dirs: fixtures\n", encoding="utf-8")
    assert load_config(tmp_path).exclude_dirs == ["fixtures"]

    config_file.write_text("   \n", encoding="utf-8")
    assert load_config(tmp_path).directory == "src/query"


def test_load_config_finds_file_next_to_other_paths(tmp_path: Path) -> None:
    (tmp_path / ".nxquery.yml").write_text("directory: lib/query\n", encoding="utf-8")

    config = load_config(tmp_path / "package.json")

    assert config.directory == "lib/query"


@pytest.mark.parametrize(
    "content, message",
    [
        ("- just\n- a list\n", "mapping at the root"),
        ("directory: ''\n", "'directory'"),
        ("directory: [a]\n", "'directory'"),
        ("seed_templates: maybe\n", "'seed_templates'"),
        ("watch: true\n", "'watch'"),
        ("watch:\n  recursive: sometimes\n", "'watch.recursive'"),
        ("exclude_dirs: {a: b}\n", "'exclude_dirs'"),
        ("directory: [unclosed\n", "Failed to parse"),
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / ".nxquery.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as info:
        load_config(tmp_path)

    assert message in str(info.value)
