# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build links from rendered snippets back to their source lines."""

import logging
import re
from typing import Callable
from urllib.parse import urlparse

from snippext.model import (
    GitSource,
    LinkFormat,
    LocalSource,
    Snippet,
    SnippetSource,
    UrlSource,
)

logger = logging.getLogger(__name__)

DEFAULT_GIT_BRANCH = "main"

BranchLookup = Callable[[GitSource], str | None]

_BLOB_SEGMENTS: dict[LinkFormat, str] = {
    LinkFormat.BITBUCKET: "/src/",
    LinkFormat.GITEA: "/src/branch/",
    LinkFormat.GITEE: "/blob/",
    LinkFormat.GITHUB: "/blob/",
    LinkFormat.GITLAB: "/-/blob/",
}

_HOST_FORMATS: dict[str, LinkFormat] = {
    "azure": LinkFormat.AZURE_REPOS,
    "bitbucket": LinkFormat.BITBUCKET,
    "gitea": LinkFormat.GITEA,
    "gitee": LinkFormat.GITEE,
    "github": LinkFormat.GITHUB,
    "gitlab": LinkFormat.GITLAB,
}

_SCP_LIKE_URL = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>(?!//).+)$")


def line_suffix(link_format: LinkFormat, start_line: int, end_line: int) -> str:
    """Return the line-range suffix for a link format.

    Args:
        link_format: Target hosting flavour.
        start_line: First line of the range.
        end_line: Last line of the range.

    Returns:
        Suffix appended to the file URL.
    """
    match link_format:
        case LinkFormat.AZURE_REPOS:
            return f"&line={start_line}&lineEnd={end_line}"
        case LinkFormat.BITBUCKET:
            return f"#lines={start_line}:{end_line}"
        case LinkFormat.GITHUB | LinkFormat.GITEA:
            return f"#L{start_line}-L{end_line}"
        case LinkFormat.GITLAB | LinkFormat.GITEE:
            return f"#L{start_line}-{end_line}"


def infer_link_format(repository: str) -> LinkFormat | None:
    """Infer a link format from the repository host name.

    The first DNS label is checked first, then the registrable-domain label
    (``dev.azure.com`` resolves through ``azure``).

    Args:
        repository: Repository URL.

    Returns:
        Inferred link format, or ``None`` for unknown hosts.
    """
    host = _repository_host(repository)
    if not host:
        return None
    labels = host.lower().split(".")
    candidates = [labels[0]]
    if len(labels) >= 2:
        candidates.append(labels[-2])
    for label in candidates:
        if label in _HOST_FORMATS:
            return _HOST_FORMATS[label]
    return None


def build_source_link(
    snippet: Snippet,
    source: SnippetSource,
    link_format: LinkFormat | None = None,
    url_prefix: str | None = None,
    branch_lookup: BranchLookup | None = None,
) -> str | None:
    """Build a link to the snippet's lines in its source.

    Args:
        snippet: Extracted snippet.
        source: Source the snippet was read from.
        link_format: Explicit link format. Required for local sources.
        url_prefix: Base URL prepended to local paths.
        branch_lookup: Resolver for the current branch of a git source.

    Returns:
        Source link, or ``None`` when no link can be built.
    """
    match source:
        case LocalSource():
            if link_format is None:
                return None
            return f"{url_prefix or ''}{snippet.path}" + line_suffix(
                link_format, snippet.start_line, snippet.end_line
            )
        case GitSource():
            resolved_format = link_format or infer_link_format(source.repository)
            if resolved_format is None:
                logger.debug(
                    f"No link format for repository (repository={source.repository})"
                )
                return None
            reference = _git_reference(source, branch_lookup)
            repository = normalize_repository_url(source.repository)
            if resolved_format is LinkFormat.AZURE_REPOS:
                base = f"{repository}?path=/{snippet.path}&version=GB{reference}"
            else:
                base = (
                    f"{repository}{_BLOB_SEGMENTS[resolved_format]}"
                    f"{reference}/{snippet.path}"
                )
            return base + line_suffix(
                resolved_format, snippet.start_line, snippet.end_line
            )
        case UrlSource():
            return source.url


def normalize_repository_url(repository: str) -> str:
    """Convert a repository URL to its browsable https form.

    Args:
        repository: Repository URL, possibly scp-like (``git@host:org/repo``).

    Returns:
        URL without a trailing ``.git`` or ``/``.
    """
    url = repository.strip()
    if "://" not in url:
        scp_match = _SCP_LIKE_URL.match(url)
        if scp_match:
            url = f"https://{scp_match.group('host')}/{scp_match.group('path')}"
    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def _git_reference(source: GitSource, branch_lookup: BranchLookup | None) -> str:
    if source.branch:
        return source.branch
    if source.commit:
        return source.commit
    if branch_lookup is not None:
        branch = branch_lookup(source)
        if branch:
            return branch
    return DEFAULT_GIT_BRANCH


def _repository_host(repository: str) -> str | None:
    url = repository.strip()
    if "://" in url:
        return urlparse(url).hostname
    scp_match = _SCP_LIKE_URL.match(url)
    if scp_match:
        return scp_match.group("host")
    return None
