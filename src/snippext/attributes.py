# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parse ``[key=value,...]`` attribute groups on marker lines."""

import logging

logger = logging.getLogger(__name__)


def parse_attributes(text: str) -> dict[str, str]:
    """Parse the first bracket group of ``text`` into a mapping.

    Pieces that do not split into exactly one key and one value are dropped.

    Args:
        text: Text that may contain a ``[...]`` group.

    Returns:
        Parsed attributes; empty when no complete group exists.
    """
    open_index = text.find("[")
    if open_index < 0:
        return {}
    close_index = text.find("]", open_index + 1)
    if close_index < 0:
        return {}

    attributes: dict[str, str] = {}
    for piece in text[open_index + 1 : close_index].split(","):
        parts = piece.split("=", 1)
        if len(parts) != 2:
            if piece.strip():
                logger.debug(f"Dropping malformed attribute (piece={piece!r})")
            continue
        attributes[parts[0].strip()] = parts[1].strip()
    return attributes


def split_header(header: str) -> tuple[str, dict[str, str]]:
    """Split a marker header into identifier and attributes.

    Args:
        header: Marker text following the start pattern.

    Returns:
        The identifier and the attributes of a trailing ``[...]`` group.
    """
    stripped = header.strip()
    if stripped.endswith("]") and "[" in stripped:
        bracket_index = stripped.rfind("[")
        return stripped[:bracket_index].strip(), parse_attributes(
            stripped[bracket_index:]
        )
    return stripped, {}
