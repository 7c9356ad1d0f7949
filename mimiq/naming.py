"""Output file name sequencing (mimiq, mimiq1, mimiq2, ...)."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from .logs import get_logger
from .models import OUTPUT_PREFIX


def _numeric_suffix(suffix: str) -> int | None:
    if suffix and suffix.isascii() and suffix.isdigit():
        return int(suffix)
    return None


def next_name(entries: Iterable[str], prefix: str = OUTPUT_PREFIX) -> str:
    """Compute the next output name that does not collide with ``entries``.

    File extensions are ignored, so ``mimiq3.gif`` and ``mimiq3.mp4`` both
    count as suffix 3.

    Args:
        entries: File names found in the destination directory.
        prefix: Output name prefix.

    Returns:
        ``prefix + str(max + 1)`` if any numeric suffix exists,
        ``prefix + "1"`` if names match but none is numeric,
        otherwise bare ``prefix``.
    """
    matched = False
    highest: int | None = None

    for entry in entries:
        stem = Path(entry).stem
        if not stem.startswith(prefix):
            continue
        matched = True
        number = _numeric_suffix(stem[len(prefix) :])
        if number is not None and (highest is None or number > highest):
            highest = number

    if highest is not None:
        return f"{prefix}{highest + 1}"
    if matched:
        return f"{prefix}1"
    return prefix


def sequenced_name(
    list_directory: Callable[[Path], list[str]],
    directory: Path,
    prefix: str = OUTPUT_PREFIX,
) -> str:
    """List ``directory`` and return the next free output name.

    A directory that cannot be listed yields bare ``prefix``.
    """
    try:
        entries = list_directory(directory)
    except OSError as e:
        get_logger().debug("cannot list %s (%s), using default name", directory, e)
        return prefix
    return next_name(entries, prefix)
