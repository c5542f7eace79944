# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Shared-indentation removal for snippet bodies."""


def unindent(text: str) -> str:
    """Remove the indentation shared by every non-blank line.

    Spaces and tabs each count as one indentation character. Whitespace-only
    lines may be shorter than the shared indentation and are cut to empty.

    Args:
        text: Snippet body.

    Returns:
        Body with the shared indentation removed; unchanged when none is
        shared.
    """
    lines = text.split("\n")
    width = min(
        (count for count in map(_leading_whitespace, lines) if count is not None),
        default=0,
    )
    if width == 0:
        return text
    return "\n".join(line[width:] for line in lines)


def _leading_whitespace(line: str) -> int | None:
    """Count leading spaces and tabs; ``None`` for whitespace-only lines."""
    for index, char in enumerate(line):
        if char not in " \t":
            return index
    return None
