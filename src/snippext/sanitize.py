# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Make snippet identifiers safe to use as file names."""

import re
import sys

_ILLEGAL = re.compile(r'[/\?<>\\:\*\|"]')
_CONTROL = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(
    r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE
)
_WINDOWS_TRAILING = re.compile(r"[\. ]+$")
_MAX_LENGTH = 255


def sanitize(name: str) -> str:
    """Strip characters that could escape or break an output path.

    Args:
        name: Snippet identifier.

    Returns:
        File-name-safe text, at most 255 bytes of UTF-8.
    """
    name = _ILLEGAL.sub("", name)
    name = _CONTROL.sub("", name)
    name = _RESERVED.sub("", name)
    if sys.platform.startswith("win"):
        name = _WINDOWS_RESERVED.sub("", name)
        name = _WINDOWS_TRAILING.sub("", name)
    encoded = name.encode("utf-8")
    if len(encoded) <= _MAX_LENGTH:
        return name
    return encoded[:_MAX_LENGTH].decode("utf-8", errors="ignore")
