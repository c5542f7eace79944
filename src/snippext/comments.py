# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Comment syntax lookup and marker construction per file extension."""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentStyle:
    """Represent a comment opener and its optional closer."""

    prefix: str
    suffix: str | None = None


@dataclass(frozen=True)
class Marker:
    """Represent one marker token and the closer stripped from its header."""

    token: str
    close_token: str | None = None


@dataclass(frozen=True)
class MarkerSet:
    """Start and end markers ordered by matching priority."""

    starts: tuple[Marker, ...]
    ends: tuple[Marker, ...]


_SLASH = (CommentStyle("//"),)
_HASH = (CommentStyle("#"),)
_DASH = (CommentStyle("--"),)
_XML = (CommentStyle("<!--", "-->"),)

COMMENT_STYLES: dict[str, tuple[CommentStyle, ...]] = {
    "adoc": _SLASH,
    "c": _SLASH,
    "cpp": _SLASH,
    "cs": _SLASH,
    "css": (CommentStyle("/*", "*/"),),
    "ex": _HASH,
    "exs": _HASH,
    "fs": _SLASH,
    "go": _SLASH,
    "h": _SLASH,
    "hpp": _SLASH,
    "hs": _DASH,
    "html": _XML,
    "java": _SLASH,
    "js": _SLASH,
    "json5": _SLASH,
    "kt": _SLASH,
    "lsp": (CommentStyle(";;"),),
    "lua": _DASH,
    "m": _SLASH,
    "md": _XML,
    "php": _SLASH,
    "pl": _HASH,
    "py": _HASH,
    "rb": _HASH,
    "rs": _SLASH,
    "rst": (CommentStyle(".."),),
    "scala": _SLASH,
    "sh": _HASH,
    "sql": _DASH,
    "swift": _SLASH,
    "tf": _HASH,
    "toml": _HASH,
    "ts": _SLASH,
    "vb": (CommentStyle("'"),),
    "xml": _XML,
    "yaml": _HASH,
    "yml": _HASH,
}

DEFAULT_COMMENT_STYLES: tuple[CommentStyle, ...] = (
    CommentStyle("<!--", "-->"),
    CommentStyle("#"),
    CommentStyle("//"),
)

# Region directives that delimit snippets without a comment prefix.
REGION_MARKERS: dict[str, tuple[str, str]] = {
    "cs": ("#region", "#endregion"),
    "vb": ("#Region", "#End Region"),
}

LANGUAGES: dict[str, str] = {
    "adoc": "asciidoc",
    "c": "c",
    "cpp": "cpp",
    "cs": "csharp",
    "css": "css",
    "ex": "elixir",
    "exs": "elixir",
    "fs": "fsharp",
    "go": "go",
    "h": "c",
    "hpp": "cpp",
    "hs": "haskell",
    "html": "html",
    "java": "java",
    "js": "javascript",
    "json": "json",
    "json5": "json5",
    "kt": "kotlin",
    "lsp": "lisp",
    "lua": "lua",
    "m": "objectivec",
    "md": "markdown",
    "php": "php",
    "pl": "perl",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "rst": "rst",
    "scala": "scala",
    "sh": "bash",
    "sql": "sql",
    "swift": "swift",
    "tf": "hcl",
    "toml": "toml",
    "ts": "typescript",
    "vb": "vbnet",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
}

_SHEBANG_LANGUAGES: dict[str, str] = {
    "bash": "bash",
    "node": "javascript",
    "perl": "perl",
    "python": "python",
    "python3": "python",
    "ruby": "ruby",
    "sh": "bash",
    "zsh": "bash",
}

_LANGUAGE_EXTENSIONS: dict[str, str] = {}
for _extension, _language in LANGUAGES.items():
    _LANGUAGE_EXTENSIONS.setdefault(_language, _extension)


def extension_of(path: str) -> str:
    """Return the extension of ``path`` without the leading dot."""
    return PurePosixPath(path).suffix.lstrip(".")


def comment_styles(extension: str) -> tuple[CommentStyle, ...]:
    """Look up the comment styles accepted for a file extension.

    Args:
        extension: File extension without the leading dot.

    Returns:
        Accepted comment styles; a permissive default set for unknown
        extensions.
    """
    return COMMENT_STYLES.get(extension.lower(), DEFAULT_COMMENT_STYLES)


def build_markers(
    extension: str,
    start: str,
    end: str,
    comment_prefixes: frozenset[str] | None = None,
) -> MarkerSet:
    """Build the start and end markers recognized in one file.

    Without explicit prefixes every lexicon style is accepted both with and
    without a space after the comment opener.

    Args:
        extension: File extension without the leading dot.
        start: Start pattern, e.g. ``snippet::start``.
        end: End pattern, e.g. ``snippet::end``.
        comment_prefixes: Configured prefixes used verbatim instead of the
            lexicon.

    Returns:
        Marker set ordered longest token first.
    """
    starts: set[Marker] = set()
    ends: set[Marker] = set()
    if comment_prefixes is not None:
        for prefix in comment_prefixes:
            close_token = closer_for(prefix)
            starts.add(Marker(f"{prefix}{start}", close_token))
            ends.add(Marker(f"{prefix}{end}", close_token))
    else:
        for style in comment_styles(extension):
            for separator in ("", " "):
                starts.add(Marker(f"{style.prefix}{separator}{start}", style.suffix))
                ends.add(Marker(f"{style.prefix}{separator}{end}", style.suffix))

    region = REGION_MARKERS.get(extension.lower())
    if region is not None:
        starts.add(Marker(region[0]))
        ends.add(Marker(region[1]))

    return MarkerSet(starts=_by_priority(starts), ends=_by_priority(ends))


def comment_prefixes_for(
    extension: str, comment_prefixes: frozenset[str] | None = None
) -> tuple[str, ...]:
    """Return comment prefixes to try in a target file, longest first.

    Args:
        extension: Target file extension.
        comment_prefixes: Configured prefixes overriding the lexicon.

    Returns:
        Prefix strings ordered by matching priority.
    """
    if comment_prefixes is not None:
        prefixes = set(comment_prefixes)
    else:
        prefixes = set()
        for style in comment_styles(extension):
            prefixes.add(style.prefix)
            prefixes.add(f"{style.prefix} ")
    return tuple(sorted(prefixes, key=lambda item: (-len(item), item)))


def detect_language(path: str, content: str | None = None) -> str | None:
    """Detect a language name from the file extension or a shebang line.

    Args:
        path: Source file path.
        content: Optional file content used when the extension is unknown.

    Returns:
        Language name suitable for fenced code blocks, or ``None``.
    """
    language = LANGUAGES.get(extension_of(path).lower())
    if language is not None:
        return language
    if not content or not content.startswith("#!"):
        return None
    interpreter_line = content.splitlines()[0][2:].strip().split()
    if not interpreter_line:
        return None
    interpreter = interpreter_line[0].rsplit("/", 1)[-1]
    if interpreter == "env" and len(interpreter_line) > 1:
        interpreter = interpreter_line[1]
    return _SHEBANG_LANGUAGES.get(interpreter)


def ellipsis_comment(language: str | None, path: str) -> str:
    """Build the ``...`` placeholder line body for skipped snippet lines.

    Args:
        language: Detected or declared language name.
        path: Source file path used when the language is unknown.

    Returns:
        Placeholder such as ``// ...`` or ``<!-- ... -->``.
    """
    extension = extension_of(path)
    if language is not None and language in _LANGUAGE_EXTENSIONS:
        extension = _LANGUAGE_EXTENSIONS[language]
    styles = COMMENT_STYLES.get(extension.lower())
    style = styles[0] if styles else CommentStyle("//")
    if style.suffix:
        return f"{style.prefix} ... {style.suffix}"
    return f"{style.prefix} ..."


def closer_for(prefix: str) -> str | None:
    """Return the comment closer paired with ``prefix``, if any."""
    opener = prefix.strip()
    for styles in (*COMMENT_STYLES.values(), DEFAULT_COMMENT_STYLES):
        for style in styles:
            if style.prefix == opener:
                return style.suffix
    return None


def _by_priority(markers: set[Marker]) -> tuple[Marker, ...]:
    return tuple(sorted(markers, key=lambda marker: (-len(marker.token), marker.token)))
