# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Stack-based extraction of nested snippet regions from source files."""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from snippext.attributes import split_header
from snippext.comments import (
    Marker,
    MarkerSet,
    build_markers,
    detect_language,
    extension_of,
)
from snippext.model import Snippet, SourceFile

logger = logging.getLogger(__name__)


class UnclosedSnippetError(RuntimeError):
    """Represent a region that was opened but never closed."""

    def __init__(self, identifier: str, path: str, start_line: int) -> None:
        """Initialize error details.

        Args:
            identifier: Identifier of the unclosed region.
            path: Source file path.
            start_line: Line of the start marker (1-based).
        """
        super().__init__(
            f"Snippet '{identifier}' opened at {path}:{start_line} is never closed"
        )
        self.identifier = identifier
        self.path = path
        self.start_line = start_line


@dataclass
class _OpenRegion:
    key: str
    start_line: int
    attributes: dict[str, str]
    text: list[str] = field(default_factory=list)
    raw_text: list[str] = field(default_factory=list)


class SnippetExtractor:
    """Extract snippets delimited by start and end markers."""

    def __init__(
        self,
        start: str,
        end: str,
        comment_prefixes: frozenset[str] | None = None,
    ) -> None:
        """Initialize extractor configuration.

        Args:
            start: Start pattern following the comment prefix.
            end: End pattern following the comment prefix.
            comment_prefixes: Prefixes overriding the per-extension lexicon.
        """
        self._start = start
        self._end = end
        self._comment_prefixes = comment_prefixes

    def extract(self, source_file: SourceFile) -> list[Snippet]:
        """Extract snippets from one resolved source file.

        Args:
            source_file: File to scan.

        Returns:
            Snippets in the order their end markers appear.

        Raises:
            UnclosedSnippetError: If a region is still open at end of file.
        """
        return self.extract_text(
            content=source_file.content, path=source_file.relative_path
        )

    def extract_text(self, content: str, path: str) -> list[Snippet]:
        """Extract snippets from file content.

        Args:
            content: Full file content.
            path: Project-relative source path used for markers and metadata.

        Returns:
            Snippets in the order their end markers appear.

        Raises:
            UnclosedSnippetError: If a region is still open at end of file.
        """
        markers = build_markers(
            extension=extension_of(path),
            start=self._start,
            end=self._end,
            comment_prefixes=self._comment_prefixes,
        )
        language = detect_language(path, content)
        snippets = extract_snippets(
            lines=content.splitlines(), path=path, markers=markers, language=language
        )
        logger.debug(f"Extracted snippets (path={path} count={len(snippets)})")
        return snippets


def extract_snippets(
    lines: list[str],
    path: str,
    markers: MarkerSet,
    language: str | None = None,
) -> list[Snippet]:
    """Scan lines once and emit each region when its end marker is reached.

    Body lines are appended to every open region, so an outer region's text
    contains the bodies of its inner regions. Nested marker lines only reach
    the ``raw_text`` of the enclosing regions.

    Args:
        lines: File lines without line terminators.
        path: Project-relative source path.
        markers: Start and end markers accepted in this file.
        language: Detected language recorded on every snippet.

    Returns:
        Completed snippets ordered by end marker position.

    Raises:
        UnclosedSnippetError: If regions remain open after the last line; the
            most recently opened one is reported.
    """
    snippets: list[Snippet] = []
    stack: list[_OpenRegion] = []
    seed = {"path": path, "filename": PurePosixPath(path).name}

    for line_number, line in enumerate(lines, start=1):
        header = _match_marker(line, markers.starts)
        if header is not None:
            identifier, attributes = split_header(header)
            for region in stack:
                region.raw_text.append(f"{line}\n")
            stack.append(
                _OpenRegion(
                    key=identifier,
                    start_line=line_number,
                    attributes={**seed, **attributes},
                )
            )
            continue

        if not stack:
            continue

        if _match_marker(line, markers.ends) is not None:
            region = stack.pop()
            for outer in stack:
                outer.raw_text.append(f"{line}\n")
            snippets.append(
                Snippet(
                    identifier=region.key,
                    path=path,
                    text="".join(region.text),
                    raw_text="".join(region.raw_text),
                    attributes=region.attributes,
                    start_line=region.start_line,
                    end_line=line_number,
                    language=language,
                )
            )
            continue

        for region in stack:
            region.text.append(f"{line}\n")
            region.raw_text.append(f"{line}\n")

    if stack:
        region = stack[-1]
        logger.warning(
            f"Unclosed snippet (path={path} identifier={region.key} "
            f"start_line={region.start_line})"
        )
        raise UnclosedSnippetError(
            identifier=region.key, path=path, start_line=region.start_line
        )
    return snippets


def _match_marker(line: str, markers: tuple[Marker, ...]) -> str | None:
    """Return the marker header when ``line`` starts with one of ``markers``."""
    stripped = line.lstrip()
    for marker in markers:
        if not stripped.startswith(marker.token):
            continue
        header = stripped[len(marker.token) :].rstrip()
        if marker.close_token and header.endswith(marker.close_token):
            header = header[: -len(marker.close_token)]
        return header.strip()
    return None
