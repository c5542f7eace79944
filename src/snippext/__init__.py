# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for snippet extraction and splicing."""

from snippext.config import ConfigError, load_clear_settings, load_settings
from snippext.driver import (
    ClearSummary,
    ExtractionDriver,
    ExtractionSummary,
    clear_targets,
)
from snippext.extractor import SnippetExtractor, UnclosedSnippetError
from snippext.files import GlobPatternError, SourceResolutionError
from snippext.model import (
    GitSource,
    LinkFormat,
    LocalSource,
    Snippet,
    SnippetSource,
    SourceFile,
    Template,
    UrlSource,
)
from snippext.settings import ClearSettings, SnippextSettings, ValidationError
from snippext.splicer import TargetSplicer, clear_markers
from snippext.templates import (
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateRenderer,
)

__all__ = [
    "ClearSettings",
    "ClearSummary",
    "ConfigError",
    "ExtractionDriver",
    "ExtractionSummary",
    "GitSource",
    "GlobPatternError",
    "LinkFormat",
    "LocalSource",
    "Snippet",
    "SnippetExtractor",
    "SnippetSource",
    "SnippextSettings",
    "SourceFile",
    "SourceResolutionError",
    "TargetSplicer",
    "Template",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateRenderer",
    "UnclosedSnippetError",
    "UrlSource",
    "ValidationError",
    "clear_markers",
    "clear_targets",
    "load_clear_settings",
    "load_settings",
]
