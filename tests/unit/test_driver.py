# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the extraction driver."""

import re
import sys
from pathlib import Path

import pytest

from snippext.driver import ExtractionDriver, clear_targets, output_path_for
from snippext.extractor import UnclosedSnippetError
from snippext.files import (
    GlobPatternError,
    LocalSourceResolver,
    SourceResolutionError,
    match_files,
)
from snippext.model import GitSource, LocalSource, Template, UrlSource
from snippext.sanitize import sanitize
from snippext.settings import ClearSettings, SnippextSettings, ValidationError

_RUST_SOURCE = """fn main() {
    // snippet::start greet
    println!("hi");
    // snippet::end
}
"""


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _raw_templates() -> dict[str, Template]:
    return {"default": Template(identifier="default", content="{{snippet}}")}


def test_drv_001_writes_one_file_per_snippet_and_template(tmp_path: Path) -> None:
    _write_file(tmp_path / "src" / "main.rs", _RUST_SOURCE)
    templates = {
        "default": Template(
            identifier="default", content="{{snippet}}", is_default=True
        ),
        "md": Template(identifier="md", content="```{{lang}}\n{{snippet}}```\n"),
    }
    settings = SnippextSettings(
        templates=templates,
        sources=[LocalSource(files=("src/**/*.rs",))],
        output_dir="generated",
        output_extension="md",
    )

    summary = ExtractionDriver(root=tmp_path).run(settings)

    base = tmp_path / "generated" / "src" / "main.rs"
    assert (base / "greet_default.md").read_text(encoding="utf-8") == (
        'println!("hi");\n'
    )
    assert (base / "greet_md.md").read_text(encoding="utf-8") == (
        '```rust\nprintln!("hi");\n```\n'
    )
    assert summary.files_scanned == 1
    assert summary.snippets_extracted == 1
    assert summary.output_files_written == 2
    assert summary.targets_scanned == 0


def test_drv_002_splices_targets_in_place(tmp_path: Path) -> None:
    _write_file(tmp_path / "src" / "main.rs", _RUST_SOURCE)
    _write_file(
        tmp_path / "README.md",
        "# Demo\n<!-- snippet::start greet -->\nstale\n<!-- snippet::end -->\n",
    )
    nested = "<!-- snippet::start greet -->\nkeep\n<!-- snippet::end -->\n"
    _write_file(tmp_path / "docs" / "README.md", nested)
    settings = SnippextSettings(
        templates=_raw_templates(),
        sources=[LocalSource(files=("src/**",))],
        targets=["README.md"],
    )
    driver = ExtractionDriver(root=tmp_path)

    first = driver.run(settings)
    second = driver.run(settings)

    assert (tmp_path / "README.md").read_text(encoding="utf-8") == (
        '# Demo\n<!-- snippet::start greet -->\nprintln!("hi");\n'
        "<!-- snippet::end -->\n"
    )
    assert (first.targets_scanned, first.targets_updated) == (1, 1)
    assert (second.targets_scanned, second.targets_updated) == (1, 0)
    assert (tmp_path / "docs" / "README.md").read_text(encoding="utf-8") == nested


def test_drv_003_unclosed_region_aborts_run(tmp_path: Path) -> None:
    _write_file(tmp_path / "a.py", "# snippet::start open\nx = 1\n")
    settings = SnippextSettings(
        templates=_raw_templates(), sources=[LocalSource()], output_dir="out"
    )

    with pytest.raises(UnclosedSnippetError):
        ExtractionDriver(root=tmp_path).run(settings)

    assert not (tmp_path / "out").exists()


def test_drv_004_invalid_settings_are_rejected_before_work(tmp_path: Path) -> None:
    with pytest.raises(ValidationError) as exc_info:
        ExtractionDriver(root=tmp_path).run(SnippextSettings())

    assert exc_info.value.failures == ["Must provide either output_dir or targets"]


def test_drv_005_git_source_links_use_checkout_branch(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "checkout" / "lib" / "util.py",
        "# snippet::start helper\ndef helper():\n    return 1\n# snippet::end\n",
    )
    _write_file(
        tmp_path / "docs" / "guide.md",
        "<!-- snippet::start helper -->\n<!-- snippet::end -->\n",
    )
    settings = SnippextSettings(
        templates={
            "default": Template(identifier="default", content="{{source_link}}\n")
        },
        sources=[
            GitSource(repository="git@github.com:acme/tool.git", directory="checkout")
        ],
        targets=["docs/**/*.md"],
    )
    driver = ExtractionDriver(root=tmp_path, branch_lookup=lambda source: "release")

    driver.run(settings)

    assert (tmp_path / "docs" / "guide.md").read_text(encoding="utf-8") == (
        "<!-- snippet::start helper -->\n"
        "https://github.com/acme/tool/blob/release/lib/util.py#L1-L4\n"
        "<!-- snippet::end -->\n"
    )


def test_drv_006_clear_targets_empties_regions(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "docs" / "a.md",
        "<!-- snippet::start x -->\nbody\n<!-- snippet::end -->\n",
    )
    _write_file(tmp_path / "docs" / "b.md", "no markers\n")

    summary = clear_targets(ClearSettings(targets=["docs/*.md"]), root=tmp_path)

    assert (tmp_path / "docs" / "a.md").read_text(encoding="utf-8") == (
        "<!-- snippet::start x -->\n<!-- snippet::end -->\n"
    )
    assert (summary.targets_scanned, summary.targets_updated) == (2, 1)


def test_drv_007_output_path_sanitizes_identifier(tmp_path: Path) -> None:
    path = output_path_for(
        output_root=tmp_path,
        relative_source_path="src/a.rs",
        identifier="../evil:name",
        template_identifier="default",
        extension="md",
    )

    assert path == tmp_path / "src" / "a.rs" / "..evilname_default.md"


def test_fil_001_match_files_skips_git_directory(tmp_path: Path) -> None:
    _write_file(tmp_path / ".git" / "config", "x")
    _write_file(tmp_path / "src" / "a.py", "x")
    _write_file(tmp_path / "src" / "b.txt", "x")

    matched = match_files(tmp_path, ["**"])

    assert [p.relative_to(tmp_path).as_posix() for p in matched] == [
        "src/a.py",
        "src/b.txt",
    ]
    assert match_files(tmp_path, ["**/*.py"]) == [tmp_path / "src" / "a.py"]
    assert match_files(tmp_path, ["*.py"]) == []


@pytest.mark.parametrize(
    ("pattern", "message"),
    [
        ("src/*.rs\\", "trailing unescaped backslash"),
        ("src/[ab.rs", "unterminated '['"),
        ("a/**b", "'**' must be a whole path segment"),
        ("src/***/x.rs", "more than two consecutive '*'"),
    ],
)
def test_fil_002_malformed_glob_raises_pattern_error(
    tmp_path: Path, pattern: str, message: str
) -> None:
    with pytest.raises(GlobPatternError, match=re.escape(message)) as exc_info:
        match_files(tmp_path, [pattern])

    assert exc_info.value.pattern == pattern


def test_fil_006_slashless_pattern_only_matches_at_root(tmp_path: Path) -> None:
    _write_file(tmp_path / "README.md", "x")
    _write_file(tmp_path / "docs" / "README.md", "x")

    assert match_files(tmp_path, ["README.md"]) == [tmp_path / "README.md"]
    assert match_files(tmp_path, ["**/README.md"]) == [
        tmp_path / "README.md",
        tmp_path / "docs" / "README.md",
    ]
    assert match_files(tmp_path, ["**/*.md", "!docs/*.md"]) == [tmp_path / "README.md"]


def test_fil_007_escaped_glob_characters_are_accepted(tmp_path: Path) -> None:
    _write_file(tmp_path / "[draft].md", "x")

    assert match_files(tmp_path, ["\\[draft].md"]) == [tmp_path / "[draft].md"]


def test_fil_003_non_utf8_files_are_skipped(tmp_path: Path) -> None:
    _write_file(tmp_path / "ok.py", "x = 1\n")
    (tmp_path / "bad.py").write_bytes(b"\xff\xfe\x00bad")

    files = LocalSourceResolver(tmp_path).resolve(LocalSource(files=("*.py",)))

    assert [f.relative_path for f in files] == ["ok.py"]


def test_fil_004_unresolvable_sources_raise(tmp_path: Path) -> None:
    resolver = LocalSourceResolver(tmp_path)

    with pytest.raises(SourceResolutionError, match="no checkout directory"):
        resolver.resolve(GitSource(repository="https://github.com/acme/tool"))
    with pytest.raises(SourceResolutionError, match="not checked out"):
        resolver.resolve(
            GitSource(repository="https://github.com/acme/tool", directory="absent")
        )
    with pytest.raises(SourceResolutionError, match="must be fetched"):
        resolver.resolve(UrlSource(url="https://example.org/a.py"))


def test_fil_005_file_url_source_is_read(tmp_path: Path) -> None:
    _write_file(tmp_path / "remote" / "a.py", "x = 1\n")

    files = LocalSourceResolver(tmp_path).resolve(
        UrlSource(url=(tmp_path / "remote" / "a.py").as_uri())
    )

    assert [(f.relative_path, f.content) for f in files] == [("a.py", "x = 1\n")]


@pytest.mark.skipif(sys.platform.startswith("win"), reason="posix rules only")
def test_san_001_sanitize_strips_illegal_characters() -> None:
    assert sanitize('a/b\\c:d*e?f"g<h>i|j') == "abcdefghij"
    assert sanitize("..") == ""
    assert len(sanitize("é" * 200).encode("utf-8")) <= 255
