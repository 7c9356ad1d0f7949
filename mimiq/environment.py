"""Working directory setup and temporary file cleanup."""

from __future__ import annotations

import shutil
from pathlib import Path

from .logs import get_logger
from .models import WorkingPaths


def ensure_working_paths(paths: WorkingPaths) -> WorkingPaths:
    """Create the working directories, leaving existing ones untouched.

    Raises:
        OSError: If a directory cannot be created.
    """
    for directory in (paths.root, paths.temp_dir, paths.log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return paths


def _remove(entry: Path) -> None:
    if entry.is_dir() and not entry.is_symlink():
        shutil.rmtree(entry)
    else:
        entry.unlink(missing_ok=True)


def clear_cache(paths: WorkingPaths) -> int:
    """Delete everything inside the temp directory.

    Safe to call repeatedly and when the directory does not exist. Entries
    that cannot be removed are logged, not raised.

    Returns:
        Number of entries removed.
    """
    logger = get_logger()
    if not paths.temp_dir.is_dir():
        logger.debug("no cache at %s", paths.temp_dir)
        return 0

    removed = 0
    for entry in list(paths.temp_dir.iterdir()):
        try:
            _remove(entry)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", entry, e)
            continue
        removed += 1

    logger.debug("removed %d cached file(s) from %s", removed, paths.temp_dir)
    return removed
