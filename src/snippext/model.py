# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for extracted snippets and their sources."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Snippet:
    """Represent one extracted snippet region.

    Attributes:
        identifier: Region key as written after the start marker.
        path: Project-relative POSIX path of the source file.
        text: Region body without any nested marker lines.
        raw_text: Region body with nested start/end marker lines kept verbatim.
        attributes: Attributes parsed from the start marker, seeded with
            ``path`` and ``filename``.
        start_line: Line of the start marker (1-based).
        end_line: Line of the end marker (1-based).
        language: Detected language name, ``None`` when unknown.
    """

    identifier: str
    path: str
    text: str
    raw_text: str
    attributes: dict[str, str] = field(default_factory=dict)
    start_line: int = 1
    end_line: int = 1
    language: str | None = None


@dataclass(frozen=True)
class Template:
    """Represent one named output template."""

    identifier: str
    content: str
    is_default: bool = False


class LinkFormat(str, Enum):
    """Supported source-link flavours."""

    AZURE_REPOS = "azurerepos"
    BITBUCKET = "bitbucket"
    GITEA = "gitea"
    GITEE = "gitee"
    GITHUB = "github"
    GITLAB = "gitlab"

    @classmethod
    def parse(cls, value: str) -> "LinkFormat":
        """Parse a case-insensitive link format name.

        Args:
            value: Format name such as ``GitHub`` or ``gitlab``.

        Returns:
            Matching link format.

        Raises:
            ValueError: If the name does not match any format.
        """
        normalized = value.strip().lower().replace("_", "").replace("-", "")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unsupported link format: {value}")


@dataclass(frozen=True)
class LocalSource:
    """Files matched by globs below the working root."""

    files: tuple[str, ...] = ("**",)


@dataclass(frozen=True)
class GitSource:
    """Files of a git repository already checked out into ``directory``.

    Attributes:
        repository: Repository URL used for source links.
        branch: Branch name used for source links.
        commit: Commit used for source links when no branch is given.
        cone_patterns: Sparse checkout cone patterns.
        directory: Local checkout directory.
        files: Globs matched inside ``directory``.
    """

    repository: str
    branch: str | None = None
    commit: str | None = None
    cone_patterns: tuple[str, ...] = ()
    directory: str | None = None
    files: tuple[str, ...] = ("**",)


@dataclass(frozen=True)
class UrlSource:
    """A single file addressed by URL."""

    url: str


SnippetSource = LocalSource | GitSource | UrlSource


@dataclass(frozen=True)
class SourceFile:
    """Represent one resolved input file handed to the extractor.

    Attributes:
        full_path: Absolute path on disk.
        relative_path: POSIX path relative to the source root.
        content: Decoded file content.
        source: Source the file was resolved from.
    """

    full_path: Path
    relative_path: str
    content: str
    source: SnippetSource
