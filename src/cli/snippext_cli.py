# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line interface for snippet extraction, clearing and config setup."""

import argparse
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

from snippext.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    ConfigError,
    load_clear_settings,
    load_settings,
)
from snippext.driver import ExtractionDriver, clear_targets
from snippext.extractor import UnclosedSnippetError
from snippext.files import GlobPatternError, SourceResolutionError
from snippext.model import LinkFormat
from snippext.settings import DEFAULT_TEMPLATE_IDENTIFIER, ValidationError
from snippext.templates import TemplateNotFoundError, TemplateRenderError

logger = logging.getLogger(__name__)

_RUN_ERRORS = (
    ConfigError,
    GlobPatternError,
    SourceResolutionError,
    TemplateNotFoundError,
    TemplateRenderError,
    UnclosedSnippetError,
)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="snippext")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract", help="Extract snippets into output files and targets."
    )
    _add_common_arguments(extract_parser)
    extract_parser.add_argument(
        "-x", "--extension", help="Extension of generated snippet files."
    )
    extract_parser.add_argument(
        "-t", "--template", help="Template replacing the configured templates."
    )
    extract_parser.add_argument(
        "-r", "--repository-url", help="Repository the sources were checked out from."
    )
    extract_parser.add_argument("-B", "--repository-branch", help="Repository branch.")
    extract_parser.add_argument("-C", "--repository-commit", help="Repository commit.")
    extract_parser.add_argument(
        "-D",
        "--repository-directory",
        help="Directory the repository is checked out into.",
    )
    extract_parser.add_argument(
        "-s",
        "--source",
        action="append",
        dest="sources",
        help="Source file glob. Repeatable.",
    )
    extract_parser.add_argument(
        "-o", "--output-dir", help="Directory in which snippet files are generated."
    )
    extract_parser.add_argument(
        "--link-format",
        choices=[link_format.value for link_format in LinkFormat],
        help="Source link format.",
    )
    extract_parser.add_argument(
        "--source-link-prefix", help="Base URL for links to local sources."
    )
    extract_parser.add_argument(
        "--omit-source-links",
        action="store_true",
        default=None,
        help="Omit source links from rendered snippets.",
    )
    extract_parser.add_argument(
        "--retain-nested-snippet-comments",
        action="store_true",
        default=None,
        help="Keep nested snippet marker lines in outer snippets.",
    )
    extract_parser.add_argument(
        "--no-autodetect-language",
        action="store_false",
        dest="enable_autodetect_language",
        default=None,
        help="Do not provide the lang template variable.",
    )
    extract_parser.add_argument(
        "--selected-lines-include-ellipses",
        action="store_true",
        default=None,
        help="Mark lines skipped by selected_lines with a comment.",
    )
    extract_parser.add_argument(
        "--max-workers", type=int, help="Maximum number of concurrent file scans."
    )

    clear_parser = subparsers.add_parser(
        "clear", help="Remove spliced snippet content from targets."
    )
    _add_common_arguments(clear_parser)
    clear_parser.add_argument(
        "--delete",
        action="store_true",
        default=None,
        help="Remove the marker lines as well.",
    )

    init_parser = subparsers.add_parser("init", help="Write the default config file.")
    init_parser.add_argument(
        "--path", default=CONFIG_FILE_NAME, help="Config file to write."
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing config file."
    )
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", help="Config file to use.")
    parser.add_argument("-b", "--start", help="Pattern marking the start of a snippet.")
    parser.add_argument("-e", "--end", help="Pattern marking the end of a snippet.")
    parser.add_argument(
        "-p",
        "--comment-prefix",
        action="append",
        dest="comment_prefixes",
        help="Comment prefix to accept. Repeatable.",
    )
    parser.add_argument(
        "-T",
        "--target",
        action="append",
        dest="targets",
        help="Glob of files to splice snippets into. Repeatable.",
    )


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    root: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        root: Working root; current directory when unset.
        environ: Environment variables for ``SNIPPEXT_*`` overrides.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    working_root = root or Path.cwd()
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    if args.command == "init":
        return _run_init(args=args, root=working_root, console=console, stderr=stderr)
    if args.command == "extract":
        return _run_extract(
            args=args,
            root=working_root,
            environ=environ,
            console=console,
            stderr=stderr,
        )
    if args.command == "clear":
        return _run_clear(
            args=args,
            root=working_root,
            environ=environ,
            console=console,
            stderr=stderr,
        )

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_extract(
    args: argparse.Namespace,
    root: Path,
    environ: Mapping[str, str] | None,
    console: Console,
    stderr: TextIO,
) -> int:
    """Run extract command.

    Args:
        args: Parsed CLI arguments.
        root: Working root.
        environ: Environment variables.
        console: Console for run summaries.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    try:
        settings = load_settings(
            config_path=_config_path(args.config, root),
            root=root,
            environ=environ,
            overrides=extract_overrides(args),
        )
        summary = ExtractionDriver(root=root).run(settings)
    except ValidationError as exc:
        _write_validation_failures(exc, stderr)
        return 2
    except _RUN_ERRORS as exc:
        logger.warning(f"Extraction failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Extraction failed on file access (error={exc})")
        stderr.write(f"File access failed: {exc}\n")
        return 2

    _emit_summary(
        console=console,
        summary={
            "files_scanned": summary.files_scanned,
            "snippets_extracted": summary.snippets_extracted,
            "output_files_written": summary.output_files_written,
            "targets_scanned": summary.targets_scanned,
            "targets_updated": summary.targets_updated,
            "elapsed_ms": summary.elapsed_ms,
        },
    )
    console.print("status=success")
    return 0


def _run_clear(
    args: argparse.Namespace,
    root: Path,
    environ: Mapping[str, str] | None,
    console: Console,
    stderr: TextIO,
) -> int:
    """Run clear command.

    Args:
        args: Parsed CLI arguments.
        root: Working root.
        environ: Environment variables.
        console: Console for run summaries.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    overrides: dict[str, Any] = {
        "start": args.start,
        "end": args.end,
        "comment_prefixes": args.comment_prefixes,
        "targets": args.targets,
        "delete": args.delete,
    }
    try:
        settings = load_clear_settings(
            config_path=_config_path(args.config, root),
            root=root,
            environ=environ,
            overrides=overrides,
        )
        summary = clear_targets(settings=settings, root=root)
    except ValidationError as exc:
        _write_validation_failures(exc, stderr)
        return 2
    except (ConfigError, GlobPatternError) as exc:
        logger.warning(f"Clear failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Clear failed on file access (error={exc})")
        stderr.write(f"File access failed: {exc}\n")
        return 2

    _emit_summary(
        console=console,
        summary={
            "targets_scanned": summary.targets_scanned,
            "targets_updated": summary.targets_updated,
            "elapsed_ms": summary.elapsed_ms,
        },
    )
    console.print("status=success")
    return 0


def _run_init(
    args: argparse.Namespace, root: Path, console: Console, stderr: TextIO
) -> int:
    config_path = _config_path(args.path, root) or root / CONFIG_FILE_NAME
    if config_path.exists() and not args.force:
        logger.warning(f"Config file already exists (path={config_path})")
        stderr.write(f"Config file already exists: {config_path}\n")
        return 2
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    except OSError as exc:
        logger.warning(f"Failed to write config file (path={config_path} error={exc})")
        stderr.write(f"Failed to write config file: {config_path}\n")
        return 2
    console.print(f"config={config_path}")
    return 0


def extract_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate extract arguments into configuration overrides.

    Args:
        args: Parsed extract arguments.

    Returns:
        Overrides keyed like the config file; unset options map to ``None``.
    """
    overrides: dict[str, Any] = {
        "start": args.start,
        "end": args.end,
        "output_extension": args.extension,
        "comment_prefixes": args.comment_prefixes,
        "output_dir": args.output_dir,
        "targets": args.targets,
        "link_format": args.link_format,
        "source_link_prefix": args.source_link_prefix,
        "omit_source_links": args.omit_source_links,
        "retain_nested_snippet_comments": args.retain_nested_snippet_comments,
        "enable_autodetect_language": args.enable_autodetect_language,
        "selected_lines_include_ellipses": args.selected_lines_include_ellipses,
        "max_workers": args.max_workers,
    }
    if args.template is not None:
        overrides["templates"] = {
            DEFAULT_TEMPLATE_IDENTIFIER: {"content": args.template, "default": True}
        }
    if args.repository_url:
        overrides["sources"] = [
            {
                "git": {
                    "repository": args.repository_url,
                    "branch": args.repository_branch,
                    "commit": args.repository_commit,
                    "directory": args.repository_directory,
                    "files": args.sources or ["**"],
                }
            }
        ]
    elif args.sources:
        overrides["sources"] = [{"local": {"files": args.sources}}]
    return overrides


def _config_path(value: str | None, root: Path) -> Path | None:
    if value is None:
        return None
    path = Path(value)
    return path if path.is_absolute() else root / path


def _write_validation_failures(exc: ValidationError, stderr: TextIO) -> None:
    logger.warning(f"Settings validation failed (failures={exc.failures})")
    for failure in exc.failures:
        stderr.write(f"validation_error: {failure}\n")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(
        sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr, environ=os.environ
    )
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
