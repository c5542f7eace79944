# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Orchestrate extraction, standalone output and target splicing."""

import concurrent.futures
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from snippext.extractor import SnippetExtractor
from snippext.files import LocalSourceResolver, match_files
from snippext.git import current_branch
from snippext.links import BranchLookup
from snippext.model import GitSource, Snippet, SnippetSource, SourceFile
from snippext.sanitize import sanitize
from snippext.settings import ClearSettings, SnippextSettings
from snippext.splicer import TargetSplicer, clear_markers
from snippext.templates import TemplateRenderer

logger = logging.getLogger(__name__)


class SourceResolver(Protocol):
    """Turn one configured source into readable files."""

    def resolve(self, source: SnippetSource) -> list[SourceFile]:
        """Resolve a source to decoded files."""


@dataclass(frozen=True)
class ExtractedFile:
    """Pair a scanned file with the snippets found in it."""

    source_file: SourceFile
    snippets: list[Snippet]


@dataclass(frozen=True)
class ExtractionSummary:
    """Represent extraction run counters."""

    files_scanned: int
    snippets_extracted: int
    output_files_written: int
    targets_scanned: int
    targets_updated: int
    elapsed_ms: int


@dataclass(frozen=True)
class ClearSummary:
    """Represent clear run counters."""

    targets_scanned: int
    targets_updated: int
    elapsed_ms: int


class ExtractionDriver:
    """Run one extraction over all configured sources."""

    def __init__(
        self,
        root: Path,
        resolver: SourceResolver | None = None,
        branch_lookup: BranchLookup | None = None,
    ) -> None:
        """Initialize driver.

        Args:
            root: Working root for relative sources, targets and output.
            resolver: Source resolver; local file system resolution by default.
            branch_lookup: Current-branch resolver for git source links.
        """
        self._root = root
        self._resolver = resolver or LocalSourceResolver(root)
        self._branch_lookup = branch_lookup or self._lookup_branch

    def run(self, settings: SnippextSettings) -> ExtractionSummary:
        """Extract snippets, write standalone files and splice targets.

        Args:
            settings: Resolved settings.

        Returns:
            Run counters.

        Raises:
            ValidationError: If settings are invalid.
            UnclosedSnippetError: If any source file has an unclosed region.
            TemplateNotFoundError: If a requested template is missing.
            GlobPatternError: If a source or target glob is malformed.
        """
        started = time.monotonic()
        settings.ensure_valid()

        source_files: list[SourceFile] = []
        for source in settings.sources:
            source_files.extend(self._resolver.resolve(source))
        extracted = self.extract(settings=settings, source_files=source_files)
        snippet_count = sum(len(item.snippets) for item in extracted)
        logger.info(
            f"Extraction completed (files={len(source_files)} snippets={snippet_count})"
        )

        renderer = TemplateRenderer(
            settings=settings, branch_lookup=self._branch_lookup
        )
        written = 0
        if settings.output_dir:
            written = self._write_outputs(
                settings=settings, extracted=extracted, renderer=renderer
            )
        targets_scanned = 0
        targets_updated = 0
        if settings.targets:
            targets_scanned, targets_updated = self._splice_targets(
                settings=settings, extracted=extracted, renderer=renderer
            )

        elapsed_ms = int(round((time.monotonic() - started) * 1000))
        return ExtractionSummary(
            files_scanned=len(source_files),
            snippets_extracted=snippet_count,
            output_files_written=written,
            targets_scanned=targets_scanned,
            targets_updated=targets_updated,
            elapsed_ms=elapsed_ms,
        )

    def extract(
        self, settings: SnippextSettings, source_files: list[SourceFile]
    ) -> list[ExtractedFile]:
        """Extract snippets from files concurrently, keeping input order.

        Args:
            settings: Resolved settings.
            source_files: Files to scan.

        Returns:
            One entry per input file, in input order.

        Raises:
            UnclosedSnippetError: If any file has an unclosed region.
        """
        extractor = SnippetExtractor(
            start=settings.start,
            end=settings.end,
            comment_prefixes=settings.comment_prefixes,
        )
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=settings.max_workers
        ) as executor:
            results = list(executor.map(extractor.extract, source_files))
        return [
            ExtractedFile(source_file=source_file, snippets=snippets)
            for source_file, snippets in zip(source_files, results)
        ]

    def _write_outputs(
        self,
        settings: SnippextSettings,
        extracted: list[ExtractedFile],
        renderer: TemplateRenderer,
    ) -> int:
        output_root = self._root / str(settings.output_dir)
        written = 0
        for item in extracted:
            for snippet in item.snippets:
                for template_identifier in settings.templates:
                    output_path = output_path_for(
                        output_root=output_root,
                        relative_source_path=item.source_file.relative_path,
                        identifier=snippet.identifier,
                        template_identifier=template_identifier,
                        extension=settings.output_extension,
                    )
                    rendered = renderer.render(
                        snippet=snippet,
                        source=item.source_file.source,
                        template_identifier=template_identifier,
                    )
                    output_path.parent.mkdir(parents=True, exist_ok=True)
                    output_path.write_text(rendered, encoding="utf-8")
                    written += 1
                    logger.debug(f"Wrote snippet output (path={output_path})")
        return written

    def _splice_targets(
        self,
        settings: SnippextSettings,
        extracted: list[ExtractedFile],
        renderer: TemplateRenderer,
    ) -> tuple[int, int]:
        splicer = TargetSplicer(
            start=settings.start,
            end=settings.end,
            comment_prefixes=settings.comment_prefixes,
        )
        targets = match_files(self._root, settings.targets or [])
        updated = 0
        for target in targets:
            original = read_document(target)
            content = original
            target_path = target.relative_to(self._root).as_posix()
            for item in extracted:
                source = item.source_file.source
                for snippet in item.snippets:
                    content = splicer.splice(
                        content=content,
                        target_path=target_path,
                        snippet=snippet,
                        render=lambda s, attributes, source=source: renderer.render(
                            snippet=s, source=source, overrides=attributes
                        ),
                    )
            if content != original:
                write_document(target, content)
                updated += 1
                logger.info(f"Updated target (path={target_path})")
        return len(targets), updated

    def _lookup_branch(self, source: GitSource) -> str | None:
        directory = self._root / source.directory if source.directory else self._root
        return current_branch(directory)


def clear_targets(settings: ClearSettings, root: Path) -> ClearSummary:
    """Remove spliced content from every target.

    Args:
        settings: Resolved clear settings.
        root: Working root for target globs.

    Returns:
        Run counters.

    Raises:
        ValidationError: If settings are invalid.
        GlobPatternError: If a target glob is malformed.
    """
    started = time.monotonic()
    settings.ensure_valid()
    targets = match_files(root, settings.targets or [])
    updated = 0
    for target in targets:
        original = read_document(target)
        content = clear_markers(
            content=original,
            target_path=target.relative_to(root).as_posix(),
            start=settings.start,
            end=settings.end,
            comment_prefixes=settings.comment_prefixes,
            delete=settings.delete,
        )
        if content != original:
            write_document(target, content)
            updated += 1
            logger.info(f"Cleared target (path={target})")
    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return ClearSummary(
        targets_scanned=len(targets), targets_updated=updated, elapsed_ms=elapsed_ms
    )


def output_path_for(
    output_root: Path,
    relative_source_path: str,
    identifier: str,
    template_identifier: str,
    extension: str,
) -> Path:
    """Build the standalone output path of one rendered snippet.

    Args:
        output_root: Output directory.
        relative_source_path: Source path relative to its root.
        identifier: Snippet identifier, sanitized before use.
        template_identifier: Template the file was rendered with.
        extension: Output file extension without the leading dot.

    Returns:
        ``output_root/relative_source_path/<identifier>_<template>.<extension>``.
    """
    file_name = f"{sanitize(identifier)}_{template_identifier}.{extension.lstrip('.')}"
    return output_root / relative_source_path / file_name


def read_document(path: Path) -> str:
    """Read a target document keeping its line endings."""
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def write_document(path: Path, content: str) -> None:
    """Write a target document in one call, keeping its line endings."""
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(content)
