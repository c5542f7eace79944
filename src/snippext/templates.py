# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Render snippets through configured templates."""

import logging
import re
from typing import Any

import jinja2

from snippext.comments import ellipsis_comment
from snippext.links import BranchLookup, build_source_link
from snippext.model import Snippet, SnippetSource, Template
from snippext.settings import SnippextSettings
from snippext.unindent import unindent

logger = logging.getLogger(__name__)

TEMPLATE_ATTRIBUTE = "template"
SELECTED_LINES_ATTRIBUTE = "selected_lines"
OMIT_SOURCE_LINK_ATTRIBUTE = "omit_source_link"

_FALSE_VALUES = {"", "0", "false", "no", "off"}
_SELECTION_SEPARATORS = re.compile(r"[;|,\s]+")


class TemplateNotFoundError(RuntimeError):
    """Represent a requested or default template that does not exist."""


class TemplateRenderError(RuntimeError):
    """Represent a template that cannot be compiled or rendered."""


class TemplateRenderer:
    """Render snippets with variables built from settings and attributes."""

    def __init__(
        self,
        settings: SnippextSettings,
        branch_lookup: BranchLookup | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            settings: Resolved settings holding templates and link options.
            branch_lookup: Resolver for the current branch of git sources.
        """
        self._settings = settings
        self._branch_lookup = branch_lookup
        self._environment = jinja2.Environment(
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.Undefined,
        )
        self._compiled: dict[str, jinja2.Template] = {}

    def render(
        self,
        snippet: Snippet,
        source: SnippetSource,
        overrides: dict[str, str] | None = None,
        template_identifier: str | None = None,
    ) -> str:
        """Render one snippet.

        Args:
            snippet: Snippet to render.
            source: Source the snippet was extracted from.
            overrides: Attributes from a target marker; lowest precedence.
            template_identifier: Template to use regardless of attributes.

        Returns:
            Rendered text.

        Raises:
            TemplateNotFoundError: If the selected template does not exist.
            TemplateRenderError: If the template cannot be rendered.
        """
        variables = self.build_variables(
            snippet=snippet, source=source, overrides=overrides
        )
        template = self.select_template(
            template_identifier or variables.get(TEMPLATE_ATTRIBUTE)
        )
        try:
            compiled = self._compiled.get(template.identifier)
            if compiled is None:
                compiled = self._environment.from_string(template.content)
                self._compiled[template.identifier] = compiled
            return compiled.render(variables)
        except jinja2.TemplateError as exc:
            logger.warning(
                f"Template rendering failed (template={template.identifier} "
                f"snippet={snippet.identifier} error={exc})"
            )
            raise TemplateRenderError(
                f"Template '{template.identifier}' failed: {exc}"
            ) from exc

    def build_variables(
        self,
        snippet: Snippet,
        source: SnippetSource,
        overrides: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Build template variables in precedence order.

        Target overrides come first, then computed values, then the snippet's
        own attributes.

        Args:
            snippet: Snippet to render.
            source: Source the snippet was extracted from.
            overrides: Attributes from a target marker.

        Returns:
            Variables passed to the template.
        """
        settings = self._settings
        variables: dict[str, Any] = dict(overrides or {})
        body = (
            snippet.raw_text
            if settings.retain_nested_snippet_comments
            else snippet.text
        )
        variables["snippet"] = unindent(body)
        variables["source_path"] = snippet.path
        if settings.enable_autodetect_language and snippet.language:
            variables["lang"] = snippet.language
        variables.setdefault(OMIT_SOURCE_LINK_ATTRIBUTE, settings.omit_source_links)

        source_link = build_source_link(
            snippet=snippet,
            source=source,
            link_format=settings.link_format,
            url_prefix=settings.source_link_prefix,
            branch_lookup=self._branch_lookup,
        )
        if source_link:
            variables["source_links_enabled"] = "true"
            variables["source_link_prefix"] = settings.source_link_prefix or ""
            variables["source_link"] = source_link

        variables.update(snippet.attributes)
        variables[OMIT_SOURCE_LINK_ATTRIBUTE] = _as_flag(
            variables[OMIT_SOURCE_LINK_ATTRIBUTE]
        )

        selection = variables.get(SELECTED_LINES_ATTRIBUTE)
        if selection:
            variables["snippet"] = select_lines(
                text=variables["snippet"],
                selection=parse_line_selection(str(selection)),
                placeholder=(
                    ellipsis_comment(
                        variables.get("lang") or snippet.language, snippet.path
                    )
                    if settings.selected_lines_include_ellipses
                    else None
                ),
            )
        return variables

    def select_template(self, identifier: str | None) -> Template:
        """Find the template to render with.

        Args:
            identifier: Requested template identifier, if any.

        Returns:
            Requested template, or the default one when none is requested.

        Raises:
            TemplateNotFoundError: If the requested or default template is
                missing.
        """
        if identifier:
            template = self._settings.templates.get(identifier)
            if template is None:
                raise TemplateNotFoundError(f"Template '{identifier}' does not exist")
            return template
        template = self._settings.default_template()
        if template is None:
            raise TemplateNotFoundError("No default template found")
        return template


def parse_line_selection(selection: str) -> list[tuple[int, int]]:
    """Parse selected line numbers and ranges.

    Args:
        selection: Entries like ``1;3-4`` separated by ``;``, ``|``, commas or
            whitespace.

    Returns:
        Inclusive 1-based ranges in input order. Invalid entries are skipped.
    """
    ranges: list[tuple[int, int]] = []
    for entry in _SELECTION_SEPARATORS.split(selection.strip().strip("[]")):
        entry = entry.strip().strip("\"'")
        if not entry:
            continue
        first, _, last = entry.partition("-")
        try:
            start = int(first)
            end = int(last) if last else start
        except ValueError:
            logger.warning(f"Ignoring invalid selected line entry (entry={entry})")
            continue
        if start < 1 or end < start:
            logger.warning(f"Ignoring invalid selected line range (entry={entry})")
            continue
        ranges.append((start, end))
    return ranges


def select_lines(
    text: str, selection: list[tuple[int, int]], placeholder: str | None = None
) -> str:
    """Keep only the selected lines of a snippet body.

    Args:
        text: Snippet body.
        selection: Inclusive 1-based line ranges.
        placeholder: Comment inserted once per run of skipped lines, indented
            like the first skipped line; ``None`` drops skipped lines silently.

    Returns:
        Filtered body, newline-terminated when the input was.
    """
    if not selection:
        return text
    lines = text.splitlines()
    keep = {
        number
        for start, end in selection
        for number in range(start, min(end, len(lines)) + 1)
    }
    output: list[str] = []
    in_gap = False
    for number, line in enumerate(lines, start=1):
        if number in keep:
            output.append(line)
            in_gap = False
            continue
        if placeholder is not None and not in_gap:
            indent = line[: len(line) - len(line.lstrip(" \t"))]
            output.append(f"{indent}{placeholder}")
        in_gap = True
    if not output:
        return ""
    trailing = "\n" if text.endswith("\n") else ""
    return "\n".join(output) + trailing


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in _FALSE_VALUES
