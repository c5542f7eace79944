# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for layered configuration loading."""

from pathlib import Path

import pytest

from snippext.config import (
    DEFAULT_CONFIG,
    ConfigError,
    load_clear_settings,
    load_config,
    load_settings,
    parse_sources,
    parse_yaml,
)
from snippext.model import GitSource, LinkFormat, LocalSource, UrlSource
from snippext.settings import DEFAULT_TEMPLATE, SnippextSettings


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_cfg_001_embedded_defaults_match_settings_defaults(tmp_path: Path) -> None:
    settings = load_settings(root=tmp_path, environ={})

    assert settings == SnippextSettings()
    assert settings.templates["default"].content == DEFAULT_TEMPLATE
    assert settings.templates["default"].is_default is True


def test_cfg_002_config_file_in_root_is_loaded(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "snippext.yaml",
        "output_dir: generated\nlink_format: GitHub\nomit_source_links: true\n",
    )

    settings = load_settings(root=tmp_path, environ={})

    assert settings.output_dir == "generated"
    assert settings.link_format is LinkFormat.GITHUB
    assert settings.omit_source_links is True
    assert settings.start == "snippet::start"


def test_cfg_003_layers_override_in_precedence_order(tmp_path: Path) -> None:
    _write_file(tmp_path / "custom.yaml", "output_dir: from-file\nstart: file-start\n")
    environ = {
        "SNIPPEXT_OUTPUT_DIR": "from-env",
        "SNIPPEXT_TARGETS": "README.md,docs/**/*.md",
        "SNIPPEXT_MAX_WORKERS": "2",
    }

    settings = load_settings(
        config_path=tmp_path / "custom.yaml",
        environ=environ,
        overrides={"output_dir": "from-cli", "end": None},
    )

    assert settings.output_dir == "from-cli"
    assert settings.start == "file-start"
    assert settings.end == "snippet::end"
    assert settings.targets == ["README.md", "docs/**/*.md"]
    assert settings.max_workers == 2


def test_cfg_004_templates_section_replaces_defaults(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "snippext.yaml",
        "templates:\n"
        "  raw: '{{snippet}}'\n"
        "  fenced:\n"
        "    content: '```\\n{{snippet}}```'\n"
        "    default: true\n",
    )

    settings = load_settings(root=tmp_path, environ={})

    assert sorted(settings.templates) == ["fenced", "raw"]
    assert settings.templates["fenced"].is_default is True
    assert settings.templates["raw"].content == "{{snippet}}"


def test_cfg_005_sources_section_builds_each_kind() -> None:
    sources = parse_sources(
        [
            {"local": {"files": ["src/**/*.rs"]}},
            {
                "git": {
                    "repository": "https://github.com/acme/tool",
                    "branch": "main",
                    "directory": "vendor/tool",
                }
            },
            {"url": "file:///tmp/example.py"},
        ]
    )

    assert sources == [
        LocalSource(files=("src/**/*.rs",)),
        GitSource(
            repository="https://github.com/acme/tool",
            branch="main",
            directory="vendor/tool",
        ),
        UrlSource(url="file:///tmp/example.py"),
    ]


def test_cfg_006_invalid_values_raise_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Unsupported source kind"):
        parse_sources([{"svn": {"files": ["**"]}}])
    with pytest.raises(ConfigError, match="max_workers"):
        load_settings(root=tmp_path, environ={"SNIPPEXT_MAX_WORKERS": "many"})
    with pytest.raises(ConfigError, match="boolean"):
        load_settings(root=tmp_path, environ={"SNIPPEXT_OMIT_SOURCE_LINKS": "maybe"})
    with pytest.raises(ConfigError, match="link format"):
        load_settings(root=tmp_path, overrides={"link_format": "sourcehut"})


def test_cfg_007_invalid_yaml_is_reported(tmp_path: Path) -> None:
    _write_file(tmp_path / "snippext.yaml", "start: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(root=tmp_path, environ={})
    with pytest.raises(ConfigError, match="mapping"):
        parse_yaml("- a\n- b\n", origin="inline")


def test_cfg_008_missing_explicit_config_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to read config file"):
        load_config(config_path=tmp_path / "absent.yaml")


def test_cfg_009_clear_settings_read_delete_flag(tmp_path: Path) -> None:
    settings = load_clear_settings(
        root=tmp_path,
        environ={"SNIPPEXT_DELETE": "yes", "SNIPPEXT_COMMENT_PREFIXES": "// ,# "},
        overrides={"targets": ["*.md"]},
    )

    assert settings.delete is True
    assert settings.targets == ["*.md"]
    assert settings.comment_prefixes == frozenset({"// ", "# "})


def test_cfg_010_default_config_is_a_yaml_mapping() -> None:
    loaded = parse_yaml(DEFAULT_CONFIG, origin="defaults")

    assert loaded["sources"] == [{"local": {"files": ["**"]}}]
    assert loaded["templates"]["default"]["content"] == DEFAULT_TEMPLATE
