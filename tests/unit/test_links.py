import pytest

from snippext.links import (
    build_source_link,
    infer_link_format,
    line_suffix,
    normalize_repository_url,
)
from snippext.model import GitSource, LinkFormat, LocalSource, Snippet, UrlSource


def _snippet() -> Snippet:
    return Snippet(
        identifier="a",
        path="src/lib.rs",
        text="x\n",
        raw_text="x\n",
        start_line=10,
        end_line=12,
    )


@pytest.mark.parametrize(
    ("link_format", "expected"),
    [
        (LinkFormat.AZURE_REPOS, "&line=10&lineEnd=12"),
        (LinkFormat.BITBUCKET, "#lines=10:12"),
        (LinkFormat.GITEA, "#L10-L12"),
        (LinkFormat.GITEE, "#L10-12"),
        (LinkFormat.GITHUB, "#L10-L12"),
        (LinkFormat.GITLAB, "#L10-12"),
    ],
)
def test_link_001_line_suffix_per_format(
    link_format: LinkFormat, expected: str
) -> None:
    assert line_suffix(link_format, 10, 12) == expected


def test_link_002_infers_format_from_host() -> None:
    assert infer_link_format("https://github.com/a/b") is LinkFormat.GITHUB
    assert infer_link_format("git@gitlab.com:a/b.git") is LinkFormat.GITLAB
    assert infer_link_format("https://dev.azure.com/org/p/_git/r") is (
        LinkFormat.AZURE_REPOS
    )
    assert infer_link_format("https://example.org/a/b") is None


def test_link_003_normalizes_scp_like_urls() -> None:
    assert normalize_repository_url("git@github.com:acme/tool.git") == (
        "https://github.com/acme/tool"
    )
    assert normalize_repository_url("https://gitea.io/acme/tool/") == (
        "https://gitea.io/acme/tool"
    )


def test_link_004_git_link_uses_branch_before_commit() -> None:
    source = GitSource(
        repository="https://gitlab.com/acme/tool.git", branch="dev", commit="abc123"
    )

    link = build_source_link(_snippet(), source)

    assert link == "https://gitlab.com/acme/tool/-/blob/dev/src/lib.rs#L10-12"


def test_link_005_git_link_falls_back_to_commit_then_lookup_then_main() -> None:
    repository = "https://bitbucket.org/acme/tool"

    by_commit = build_source_link(
        _snippet(), GitSource(repository=repository, commit="abc123")
    )
    by_lookup = build_source_link(
        _snippet(),
        GitSource(repository=repository),
        branch_lookup=lambda source: "feature",
    )
    by_default = build_source_link(
        _snippet(), GitSource(repository=repository), branch_lookup=lambda s: None
    )

    assert by_commit == f"{repository}/src/abc123/src/lib.rs#lines=10:12"
    assert by_lookup == f"{repository}/src/feature/src/lib.rs#lines=10:12"
    assert by_default == f"{repository}/src/main/src/lib.rs#lines=10:12"


def test_link_006_azure_link_uses_query_form() -> None:
    source = GitSource(repository="https://dev.azure.com/org/p/_git/r", branch="main")

    link = build_source_link(_snippet(), source)

    assert link == (
        "https://dev.azure.com/org/p/_git/r?path=/src/lib.rs&version=GBmain"
        "&line=10&lineEnd=12"
    )


def test_link_007_local_link_requires_explicit_format() -> None:
    assert build_source_link(_snippet(), LocalSource()) is None
    assert (
        build_source_link(
            _snippet(),
            LocalSource(),
            link_format=LinkFormat.GITEA,
            url_prefix="https://gitea.io/acme/tool/src/branch/main/",
        )
        == "https://gitea.io/acme/tool/src/branch/main/src/lib.rs#L10-L12"
    )


def test_link_008_url_source_links_to_url() -> None:
    source = UrlSource(url="https://example.org/raw/lib.rs")

    assert build_source_link(_snippet(), source) == "https://example.org/raw/lib.rs"


def test_link_009_unknown_git_host_has_no_link() -> None:
    source = GitSource(repository="https://example.org/acme/tool", branch="main")

    assert build_source_link(_snippet(), source) is None


def test_link_010_link_format_parse_is_case_insensitive() -> None:
    assert LinkFormat.parse("GitHub") is LinkFormat.GITHUB
    assert LinkFormat.parse("azure-repos") is LinkFormat.AZURE_REPOS
    with pytest.raises(ValueError):
        LinkFormat.parse("sourcehut")


def test_link_011_local_prefix_is_joined_verbatim() -> None:
    link = build_source_link(
        _snippet(),
        LocalSource(),
        link_format=LinkFormat.GITHUB,
        url_prefix="https://cdn.example.org/files?path=",
    )

    assert link == "https://cdn.example.org/files?path=src/lib.rs#L10-L12"
