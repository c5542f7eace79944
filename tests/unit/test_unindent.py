from snippext.unindent import unindent


def test_unind_001_removes_shared_indentation() -> None:
    assert unindent("    a\n      b\n    c\n") == "a\n  b\nc\n"


def test_unind_002_leaves_text_without_shared_indentation() -> None:
    text = "a\n  b\n"

    assert unindent(text) == text


def test_unind_003_ignores_blank_lines_when_measuring() -> None:
    assert unindent("\t\tx\n\n\t\ty\n") == "x\n\ny\n"


def test_unind_004_is_idempotent() -> None:
    text = "  if x:\n      y()\n"

    assert unindent(unindent(text)) == unindent(text)
