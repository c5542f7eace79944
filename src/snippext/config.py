# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Load and merge configuration into resolved settings.

Precedence, lowest first: embedded defaults, config file, ``SNIPPEXT_*``
environment variables, command-line overrides. Top-level keys replace each
other; nested mappings such as ``templates`` are not merged.
"""

import logging
import textwrap
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from snippext.model import (
    GitSource,
    LinkFormat,
    LocalSource,
    SnippetSource,
    Template,
    UrlSource,
)
from snippext.settings import (
    DEFAULT_END,
    DEFAULT_OUTPUT_EXTENSION,
    DEFAULT_START,
    DEFAULT_TEMPLATE,
    DEFAULT_TEMPLATE_IDENTIFIER,
    ClearSettings,
    SnippextSettings,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "snippext.yaml"
ENV_PREFIX = "SNIPPEXT_"
_TEMPLATE_INDENT = "      "

DEFAULT_CONFIG = f"""\
# Marker patterns following the comment prefix, e.g. `// {DEFAULT_START} name`.
start: "{DEFAULT_START}"
end: "{DEFAULT_END}"
# Comment prefixes to accept; null derives them from each file extension.
comment_prefixes: null
# Directory for standalone rendered snippets.
output_dir: null
output_extension: {DEFAULT_OUTPUT_EXTENSION}
# Globs of documents to splice snippets into.
targets: null
# One of azurerepos, bitbucket, gitea, gitee, github, gitlab.
link_format: null
source_link_prefix: null
omit_source_links: false
retain_nested_snippet_comments: false
enable_autodetect_language: true
selected_lines_include_ellipses: false
max_workers: 4
templates:
  {DEFAULT_TEMPLATE_IDENTIFIER}:
    default: true
    content: |
{textwrap.indent(DEFAULT_TEMPLATE, _TEMPLATE_INDENT)}\
sources:
  - local:
      files:
        - "**"
"""

_STRING_KEYS = ("start", "end", "output_dir", "output_extension", "source_link_prefix")
_LIST_KEYS = ("comment_prefixes", "targets")
_BOOL_KEYS = (
    "omit_source_links",
    "retain_nested_snippet_comments",
    "enable_autodetect_language",
    "selected_lines_include_ellipses",
    "delete",
)
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(RuntimeError):
    """Represent unreadable or malformed configuration."""


def load_config(
    config_path: Path | None = None,
    root: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge every configuration layer into one mapping.

    Args:
        config_path: Explicit config file; must exist when given.
        root: Directory searched for ``snippext.yaml`` when no path is given.
        environ: Environment variables; nothing is read from the process when
            ``None``.
        overrides: Command-line values; ``None`` values are ignored.

    Returns:
        Merged configuration mapping.

    Raises:
        ConfigError: If a config file cannot be read or parsed.
    """
    merged = parse_yaml(DEFAULT_CONFIG, origin="defaults")
    if config_path is not None:
        merged.update(_read_config_file(config_path))
    else:
        candidate = (root or Path.cwd()) / CONFIG_FILE_NAME
        if candidate.is_file():
            merged.update(_read_config_file(candidate))
    merged.update(_from_environment(environ or {}))
    merged.update(
        {key: value for key, value in (overrides or {}).items() if value is not None}
    )
    return merged


def load_settings(
    config_path: Path | None = None,
    root: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> SnippextSettings:
    """Build extraction settings from all configuration layers.

    Args:
        config_path: Explicit config file.
        root: Directory searched for ``snippext.yaml``.
        environ: Environment variables.
        overrides: Command-line values.

    Returns:
        Resolved settings; not yet validated.

    Raises:
        ConfigError: If configuration is unreadable or has wrong value types.
    """
    return settings_from_mapping(
        load_config(
            config_path=config_path, root=root, environ=environ, overrides=overrides
        )
    )


def load_clear_settings(
    config_path: Path | None = None,
    root: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ClearSettings:
    """Build clear settings from all configuration layers.

    Raises:
        ConfigError: If configuration is unreadable or has wrong value types.
    """
    mapping = load_config(
        config_path=config_path, root=root, environ=environ, overrides=overrides
    )
    return ClearSettings(
        start=_string(mapping, "start", DEFAULT_START),
        end=_string(mapping, "end", DEFAULT_END),
        targets=_string_list(mapping, "targets"),
        comment_prefixes=_prefixes(mapping),
        delete=_flag(mapping, "delete", False),
    )


def settings_from_mapping(mapping: Mapping[str, Any]) -> SnippextSettings:
    """Convert a merged configuration mapping into settings.

    Args:
        mapping: Merged configuration.

    Returns:
        Settings built from the mapping.

    Raises:
        ConfigError: If any value has the wrong type.
    """
    link_format_value = mapping.get("link_format")
    try:
        link_format = (
            LinkFormat.parse(str(link_format_value)) if link_format_value else None
        )
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    max_workers = mapping.get("max_workers", 4)
    if isinstance(max_workers, bool) or not isinstance(max_workers, (int, str)):
        raise ConfigError(f"max_workers must be an integer, got {max_workers!r}")
    try:
        max_workers = int(max_workers)
    except ValueError as exc:
        raise ConfigError(
            f"max_workers must be an integer, got {max_workers!r}"
        ) from exc

    return SnippextSettings(
        start=_string(mapping, "start", DEFAULT_START),
        end=_string(mapping, "end", DEFAULT_END),
        templates=parse_templates(mapping.get("templates") or {}),
        sources=parse_sources(mapping.get("sources") or []),
        comment_prefixes=_prefixes(mapping),
        output_dir=_optional_string(mapping, "output_dir"),
        output_extension=_string(mapping, "output_extension", DEFAULT_OUTPUT_EXTENSION),
        targets=_string_list(mapping, "targets"),
        link_format=link_format,
        source_link_prefix=_optional_string(mapping, "source_link_prefix"),
        omit_source_links=_flag(mapping, "omit_source_links", False),
        retain_nested_snippet_comments=_flag(
            mapping, "retain_nested_snippet_comments", False
        ),
        enable_autodetect_language=_flag(mapping, "enable_autodetect_language", True),
        selected_lines_include_ellipses=_flag(
            mapping, "selected_lines_include_ellipses", False
        ),
        max_workers=max_workers,
    )


def parse_templates(value: Any) -> dict[str, Template]:
    """Parse the ``templates`` section.

    Each entry is either a template string or a mapping with ``content`` and
    an optional ``default`` flag.

    Raises:
        ConfigError: If the section is not a mapping of valid entries.
    """
    if not isinstance(value, Mapping):
        raise ConfigError("templates must be a mapping of identifier to template")
    templates: dict[str, Template] = {}
    for identifier, entry in value.items():
        if isinstance(entry, str):
            templates[str(identifier)] = Template(
                identifier=str(identifier), content=entry
            )
            continue
        if not isinstance(entry, Mapping) or not isinstance(entry.get("content"), str):
            raise ConfigError(f"Template '{identifier}' must define string content")
        templates[str(identifier)] = Template(
            identifier=str(identifier),
            content=entry["content"],
            is_default=_to_bool(
                entry.get("default", False), f"templates.{identifier}.default"
            ),
        )
    return templates


def parse_sources(value: Any) -> list[SnippetSource]:
    """Parse the ``sources`` section.

    Entries are ``{local: {files}}``, ``{git: {repository, branch, commit,
    cone_patterns, directory, files}}`` or ``{url: <url>}``.

    Raises:
        ConfigError: If an entry has an unknown kind or wrong value types.
    """
    if not isinstance(value, list):
        raise ConfigError("sources must be a list")
    sources: list[SnippetSource] = []
    for entry in value:
        if not isinstance(entry, Mapping) or len(entry) != 1:
            raise ConfigError(f"Invalid source entry: {entry!r}")
        kind, body = next(iter(entry.items()))
        if kind == "url":
            if not isinstance(body, str) or not body:
                raise ConfigError("url source must be a non-empty string")
            sources.append(UrlSource(url=body))
            continue
        body = body or {}
        if not isinstance(body, Mapping):
            raise ConfigError(f"{kind} source must be a mapping")
        files = tuple(_string_list(body, "files") or ["**"])
        if kind == "local":
            sources.append(LocalSource(files=files))
        elif kind == "git":
            repository = body.get("repository")
            if not isinstance(repository, str) or not repository:
                raise ConfigError("git source requires a repository")
            sources.append(
                GitSource(
                    repository=repository,
                    branch=_optional_string(body, "branch"),
                    commit=_optional_string(body, "commit"),
                    cone_patterns=tuple(_string_list(body, "cone_patterns") or ()),
                    directory=_optional_string(body, "directory"),
                    files=files,
                )
            )
        else:
            raise ConfigError(f"Unsupported source kind: {kind}")
    return sources


def parse_yaml(payload: str, origin: str) -> dict[str, Any]:
    """Parse a YAML document that must be a mapping.

    Raises:
        ConfigError: If the payload is invalid YAML or not a mapping.
    """
    try:
        loaded = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {origin}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ConfigError(f"Configuration in {origin} must be a YAML mapping")
    return dict(loaded)


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        payload = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read config file (path={path} error={exc})")
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    logger.debug(f"Loaded config file (path={path})")
    return parse_yaml(payload, origin=str(path))


def _from_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key in (*_STRING_KEYS, *_LIST_KEYS, *_BOOL_KEYS, "link_format", "max_workers"):
        raw = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if raw is None:
            continue
        if key in _LIST_KEYS:
            values[key] = [item for item in raw.split(",") if item]
        else:
            values[key] = raw
    return values


def _string(mapping: Mapping[str, Any], key: str, default: str) -> str:
    value = mapping.get(key, default)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


def _optional_string(mapping: Mapping[str, Any], key: str) -> str | None:
    value = mapping.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


def _string_list(mapping: Mapping[str, Any], key: str) -> list[str] | None:
    value = mapping.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings, got {value!r}")
    return list(value)


def _prefixes(mapping: Mapping[str, Any]) -> frozenset[str] | None:
    prefixes = _string_list(mapping, "comment_prefixes")
    return frozenset(prefixes) if prefixes is not None else None


def _flag(mapping: Mapping[str, Any], key: str, default: bool) -> bool:
    return _to_bool(mapping.get(key, default), key)


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")
