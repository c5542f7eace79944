# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Local git queries used for source links."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def current_branch(directory: Path | str | None = None) -> str | None:
    """Return the checked-out branch of the repository at ``directory``.

    Args:
        directory: Repository working directory; current directory when unset.

    Returns:
        Branch name, or ``None`` when git is unavailable, the directory is not a
        repository, or HEAD is detached.
    """
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=str(directory) if directory is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.debug(f"Git branch lookup failed (directory={directory} error={exc})")
        return None
    branch = completed.stdout.strip()
    if completed.returncode != 0 or not branch or branch == "HEAD":
        logger.debug(
            f"Git branch lookup returned no branch (directory={directory} "
            f"returncode={completed.returncode})"
        )
        return None
    return branch
