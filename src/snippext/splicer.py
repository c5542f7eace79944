# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Splice rendered snippets into marked regions of target documents."""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from snippext.attributes import parse_attributes
from snippext.comments import closer_for, comment_prefixes_for, extension_of
from snippext.model import Snippet

logger = logging.getLogger(__name__)

RenderFunction = Callable[[Snippet, dict[str, str]], str]


@dataclass(frozen=True)
class _Region:
    """Character offsets of a marked region inside a target document."""

    start_line_end: int
    attributes: dict[str, str]
    end_marker_start: int | None


class TargetSplicer:
    """Replace the body of marked regions with rendered snippet content."""

    def __init__(
        self,
        start: str,
        end: str,
        comment_prefixes: frozenset[str] | None = None,
    ) -> None:
        """Initialize splicer configuration.

        Args:
            start: Start pattern following the comment prefix.
            end: End pattern following the comment prefix.
            comment_prefixes: Prefixes overriding the per-extension lexicon.
        """
        self._start = start
        self._end = end
        self._comment_prefixes = comment_prefixes

    def splice(
        self, content: str, target_path: str, snippet: Snippet, render: RenderFunction
    ) -> str:
        """Splice one snippet into the first region marked with its identifier.

        Marker lines are kept. Everything between the start marker line and the
        matching end marker (or the end of the document) is replaced with a
        newline followed by the rendered snippet.

        Args:
            content: Full target document.
            target_path: Target path; its extension selects comment prefixes.
            snippet: Snippet to splice.
            render: Callback rendering the snippet with the marker attributes.

        Returns:
            Updated document, or ``content`` when no region is marked for the
            snippet.
        """
        prefixes = comment_prefixes_for(
            extension_of(target_path), self._comment_prefixes
        )
        region = self._find_region(content, snippet.identifier, prefixes)
        if region is None:
            return content

        rendered = render(snippet, region.attributes)
        if region.end_marker_start is None:
            return f"{content[: region.start_line_end]}\n{rendered}"
        if rendered and not rendered.endswith("\n"):
            rendered = f"{rendered}\n"
        return (
            f"{content[: region.start_line_end]}\n{rendered}"
            f"{content[region.end_marker_start :]}"
        )

    def _find_region(
        self, content: str, identifier: str, prefixes: tuple[str, ...]
    ) -> _Region | None:
        start_match: re.Match[str] | None = None
        start_prefix = ""
        for prefix in prefixes:
            pattern = re.compile(
                re.escape(f"{prefix}{self._start}")
                + r"[ \t]*"
                + re.escape(identifier)
                + _boundary(prefix)
            )
            match = pattern.search(content)
            if match is None:
                continue
            if start_match is None or match.start() < start_match.start():
                start_match = match
                start_prefix = prefix
        if start_match is None:
            return None

        line_end = content.find("\n", start_match.end())
        if line_end < 0:
            line_end = len(content)
        attributes = parse_attributes(content[start_match.end() : line_end])
        logger.debug(
            f"Found target region (identifier={identifier} prefix={start_prefix!r} "
            f"attributes={attributes})"
        )
        return _Region(
            start_line_end=line_end,
            attributes=attributes,
            end_marker_start=self._find_end_marker(
                content, identifier, prefixes, line_end
            ),
        )

    def _find_end_marker(
        self, content: str, identifier: str, prefixes: tuple[str, ...], offset: int
    ) -> int | None:
        """Return the offset of the line holding the region's end marker."""
        best: int | None = None
        for prefix in prefixes:
            token = f"{prefix}{self._end}"
            closer = closer_for(prefix)
            position = content.find(token, offset)
            while position >= 0:
                line_end = content.find("\n", position)
                stop = line_end if line_end >= 0 else None
                trailer = content[position + len(token) : stop]
                if _closes(trailer, identifier, closer):
                    line_start = content.rfind("\n", 0, position) + 1
                    if best is None or line_start < best:
                        best = line_start
                    break
                position = content.find(token, position + len(token))
        return best


def clear_markers(
    content: str,
    target_path: str,
    start: str,
    end: str,
    comment_prefixes: frozenset[str] | None = None,
    delete: bool = False,
) -> str:
    """Remove spliced content from every marked region of a document.

    Regions are not nested: a start marker switches omission on and the next
    end marker switches it off.

    Args:
        content: Full target document.
        target_path: Target path; its extension selects comment prefixes.
        start: Start pattern following the comment prefix.
        end: End pattern following the comment prefix.
        comment_prefixes: Prefixes overriding the per-extension lexicon.
        delete: Also remove the marker lines.

    Returns:
        Document without region bodies.
    """
    prefixes = comment_prefixes_for(extension_of(target_path), comment_prefixes)
    start_tokens = [f"{prefix}{start}" for prefix in prefixes]
    end_tokens = [f"{prefix}{end}" for prefix in prefixes]

    kept: list[str] = []
    omitting = False
    for line in content.splitlines(keepends=True):
        if any(token in line for token in start_tokens):
            omitting = True
            if not delete:
                kept.append(line)
            continue
        if omitting and any(token in line for token in end_tokens):
            omitting = False
            if not delete:
                kept.append(line)
            continue
        if not omitting:
            kept.append(line)
    return "".join(kept)


def _boundary(prefix: str) -> str:
    closer = closer_for(prefix)
    alternatives = [r"[ \t\[\r\n]", r"$"]
    if closer:
        alternatives.insert(0, re.escape(closer))
    return "(?=" + "|".join(alternatives) + ")"


def _closes(trailer: str, identifier: str, closer: str | None) -> bool:
    """Check whether the text after an end token names no or this identifier."""
    text = trailer.strip()
    if closer and text.endswith(closer):
        text = text[: -len(closer)].strip()
    return text == "" or text == identifier
