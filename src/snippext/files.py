# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Resolve snippet sources and target globs to concrete files."""

import logging
import os
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import pathspec

from snippext.model import GitSource, LocalSource, SnippetSource, SourceFile, UrlSource

logger = logging.getLogger(__name__)

_SKIPPED_DIRECTORIES = {".git"}
_ESCAPED_CHARACTER = re.compile(r"\\.")
_STAR_RUN = re.compile(r"\*{3,}")


class GlobPatternError(RuntimeError):
    """Represent a malformed source or target glob."""

    def __init__(self, pattern: str, message: str) -> None:
        """Initialize error details.

        Args:
            pattern: Offending glob pattern.
            message: Underlying parser message.
        """
        super().__init__(f"Invalid glob pattern '{pattern}': {message}")
        self.pattern = pattern


class SourceResolutionError(RuntimeError):
    """Represent a source that cannot be resolved to local files."""


def compile_globs(patterns: list[str] | tuple[str, ...]) -> pathspec.GitIgnoreSpec:
    """Compile globs anchored at the directory they are matched against.

    Patterns use gitignore syntax, but a pattern without a leading ``/`` still
    matches only relative to the root, so ``README.md`` never selects
    ``docs/README.md``.

    Args:
        patterns: Glob patterns.

    Returns:
        Compiled matcher.

    Raises:
        GlobPatternError: If any pattern is malformed.
    """
    anchored: list[str] = []
    for pattern in patterns:
        problem = _glob_problem(pattern)
        if problem is not None:
            logger.warning(f"Invalid glob pattern (pattern={pattern} error={problem})")
            raise GlobPatternError(pattern=pattern, message=problem)
        line = anchor_pattern(pattern)
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except (ValueError, TypeError) as exc:
            logger.warning(f"Invalid glob pattern (pattern={pattern} error={exc})")
            raise GlobPatternError(pattern=pattern, message=str(exc)) from exc
        anchored.append(line)
    return pathspec.GitIgnoreSpec.from_lines(anchored)


def anchor_pattern(pattern: str) -> str:
    """Root a glob so it only matches relative to the walked directory."""
    negated = pattern.startswith("!")
    body = pattern[1:] if negated else pattern
    if not body.startswith("/"):
        body = f"/{body}"
    return f"!{body}" if negated else body


def _glob_problem(pattern: str) -> str | None:
    """Describe why ``pattern`` is malformed, or return ``None``."""
    body = _ESCAPED_CHARACTER.sub("", pattern.removeprefix("!"))
    if not body.strip():
        return "pattern is empty"
    if body.endswith("\\"):
        return "trailing unescaped backslash"
    if _STAR_RUN.search(body):
        return "more than two consecutive '*'"
    for segment in body.split("/"):
        if "**" in segment and segment != "**":
            return "'**' must be a whole path segment"
    bracket_open = False
    for char in body:
        if char == "[" and not bracket_open:
            bracket_open = True
        elif char == "]" and bracket_open:
            bracket_open = False
    if bracket_open:
        return "unterminated '[' character class"
    return None


def match_files(root: Path, patterns: list[str] | tuple[str, ...]) -> list[Path]:
    """List files below ``root`` matching any of ``patterns``.

    Args:
        root: Directory to walk.
        patterns: Glob patterns relative to ``root``.

    Returns:
        Matching file paths sorted by relative path.

    Raises:
        GlobPatternError: If any pattern is malformed.
    """
    spec = compile_globs(patterns)
    matched: list[Path] = []
    for directory, dir_names, file_names in os.walk(root):
        dir_names[:] = sorted(
            name for name in dir_names if name not in _SKIPPED_DIRECTORIES
        )
        for file_name in sorted(file_names):
            path = Path(directory) / file_name
            relative = path.relative_to(root).as_posix()
            if spec.match_file(relative):
                matched.append(path)
    return sorted(matched, key=lambda path: path.relative_to(root).as_posix())


class LocalSourceResolver:
    """Resolve sources that are already available on the local file system."""

    def __init__(self, root: Path) -> None:
        """Initialize resolver.

        Args:
            root: Working root that local source globs are relative to.
        """
        self._root = root

    def resolve(self, source: SnippetSource) -> list[SourceFile]:
        """Read every file of one source.

        Args:
            source: Source to resolve.

        Returns:
            Decoded files; files that are not valid UTF-8 are skipped.

        Raises:
            GlobPatternError: If a source glob is malformed.
            SourceResolutionError: If a git checkout is missing or a URL is not
                a local ``file://`` URL.
            OSError: If a matched file cannot be read.
        """
        match source:
            case LocalSource(files=files):
                paths = match_files(self._root, files)
                return self._read_all(self._root, paths, source)
            case GitSource(directory=directory, files=files):
                if directory is None:
                    raise SourceResolutionError(
                        f"Git source {source.repository} has no checkout directory"
                    )
                checkout = (self._root / directory).resolve()
                if not checkout.is_dir():
                    raise SourceResolutionError(
                        f"Git source {source.repository} is not checked out "
                        f"at {checkout}"
                    )
                return self._read_all(checkout, match_files(checkout, files), source)
            case UrlSource(url=url):
                parsed = urlparse(url)
                if parsed.scheme != "file":
                    raise SourceResolutionError(
                        f"URL source {url} must be fetched before extraction"
                    )
                path = Path(unquote(parsed.path))
                return self._read_all(path.parent, [path], source)

    def _read_all(
        self, root: Path, paths: list[Path], source: SnippetSource
    ) -> list[SourceFile]:
        files: list[SourceFile] = []
        for path in paths:
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as exc:
                logger.warning(
                    f"Skipping file that is not valid UTF-8 (path={path} error={exc})"
                )
                continue
            files.append(
                SourceFile(
                    full_path=path.resolve(),
                    relative_path=path.relative_to(root).as_posix(),
                    content=content,
                    source=source,
                )
            )
        logger.info(f"Resolved source files (source={source} files={len(files)})")
        return files
