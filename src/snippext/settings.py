# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Resolved settings consumed by extraction and clearing."""

import logging
from dataclasses import dataclass, field

from snippext.model import LinkFormat, LocalSource, SnippetSource, Template

logger = logging.getLogger(__name__)

DEFAULT_START = "snippet::start"
DEFAULT_END = "snippet::end"
DEFAULT_OUTPUT_EXTENSION = "txt"
DEFAULT_TEMPLATE_IDENTIFIER = "default"
DEFAULT_TEMPLATE = """```{{lang}}
{{snippet}}```
{% if source_link and not omit_source_link %}
<a href='{{source_link}}' title='Snippet source file'>snippet source</a>
{% endif %}
"""


class ValidationError(RuntimeError):
    """Represent one or more violated settings constraints."""

    def __init__(self, failures: list[str]) -> None:
        """Initialize error with every failure message.

        Args:
            failures: Human-readable constraint violations.
        """
        super().__init__("; ".join(failures))
        self.failures = list(failures)


@dataclass(frozen=True)
class SnippextSettings:
    """Describe a fully resolved extraction run.

    Attributes:
        start: Start pattern following the comment prefix.
        end: End pattern following the comment prefix.
        templates: Templates keyed by identifier.
        sources: Sources to extract snippets from.
        comment_prefixes: Prefixes overriding the per-extension lexicon;
            ``None`` uses the lexicon.
        output_dir: Directory for standalone rendered files.
        output_extension: Extension of standalone rendered files.
        targets: Globs of documents to splice snippets into.
        link_format: Explicit source-link format.
        source_link_prefix: Base URL for links to local sources.
        omit_source_links: Suppress source links in the default template.
        retain_nested_snippet_comments: Keep nested marker lines in outer
            snippets.
        enable_autodetect_language: Provide the ``lang`` template variable.
        selected_lines_include_ellipses: Mark skipped selected lines with a
            placeholder comment.
        max_workers: Upper bound of concurrent per-file extractions.
    """

    start: str = DEFAULT_START
    end: str = DEFAULT_END
    templates: dict[str, Template] = field(
        default_factory=lambda: {
            DEFAULT_TEMPLATE_IDENTIFIER: Template(
                identifier=DEFAULT_TEMPLATE_IDENTIFIER,
                content=DEFAULT_TEMPLATE,
                is_default=True,
            )
        }
    )
    sources: list[SnippetSource] = field(default_factory=lambda: [LocalSource()])
    comment_prefixes: frozenset[str] | None = None
    output_dir: str | None = None
    output_extension: str = DEFAULT_OUTPUT_EXTENSION
    targets: list[str] | None = None
    link_format: LinkFormat | None = None
    source_link_prefix: str | None = None
    omit_source_links: bool = False
    retain_nested_snippet_comments: bool = False
    enable_autodetect_language: bool = True
    selected_lines_include_ellipses: bool = False
    max_workers: int = 4

    def validate(self) -> list[str]:
        """Collect every violated constraint.

        Returns:
            Failure messages; empty when the settings are valid.
        """
        failures = _validate_markers(self.start, self.end, self.comment_prefixes)
        if not self.templates:
            failures.append("Must provide at least one template")
        elif len(self.templates) > 1:
            defaults = [t for t in self.templates.values() if t.is_default]
            if len(defaults) != 1:
                failures.append(
                    "Exactly one template must be marked as default when "
                    f"multiple templates are provided (found {len(defaults)})"
                )
        if not self.output_extension:
            failures.append("output_extension must not be empty")
        if not self.sources:
            failures.append("Must provide at least one source")
        if not self.output_dir and not self.targets:
            failures.append("Must provide either output_dir or targets")
        if self.max_workers <= 0:
            failures.append("max_workers must be > 0")
        return failures

    def ensure_valid(self) -> None:
        """Raise when any constraint is violated.

        Raises:
            ValidationError: With every failure message.
        """
        failures = self.validate()
        if failures:
            logger.warning(f"Settings validation failed (failures={failures})")
            raise ValidationError(failures)

    def default_template(self) -> Template | None:
        """Return the template used when none is requested.

        Returns:
            The template marked default, the only template, or ``None``.
        """
        if len(self.templates) == 1:
            return next(iter(self.templates.values()))
        for template in self.templates.values():
            if template.is_default:
                return template
        return None


@dataclass(frozen=True)
class ClearSettings:
    """Describe a run that removes spliced content from targets.

    Attributes:
        start: Start pattern following the comment prefix.
        end: End pattern following the comment prefix.
        targets: Globs of documents to clear.
        comment_prefixes: Prefixes overriding the per-extension lexicon.
        delete: Remove the marker lines as well.
    """

    start: str = DEFAULT_START
    end: str = DEFAULT_END
    targets: list[str] | None = None
    comment_prefixes: frozenset[str] | None = None
    delete: bool = False

    def validate(self) -> list[str]:
        """Collect every violated constraint."""
        failures = _validate_markers(self.start, self.end, self.comment_prefixes)
        if not self.targets:
            failures.append("Must specify targets")
        return failures

    def ensure_valid(self) -> None:
        """Raise when any constraint is violated.

        Raises:
            ValidationError: With every failure message.
        """
        failures = self.validate()
        if failures:
            logger.warning(f"Clear settings validation failed (failures={failures})")
            raise ValidationError(failures)


def _validate_markers(
    start: str, end: str, comment_prefixes: frozenset[str] | None
) -> list[str]:
    failures: list[str] = []
    if not start:
        failures.append("start must not be empty")
    if not end:
        failures.append("end must not be empty")
    if comment_prefixes is not None and not comment_prefixes:
        failures.append("Must provide at least one comment prefix")
    return failures
