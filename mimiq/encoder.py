"""ffmpeg command builders and the output encode step."""

from __future__ import annotations

import os
import shlex
import tempfile
from collections.abc import Mapping
from pathlib import Path

from .logs import get_logger
from .models import (
    GIF_PALETTEGEN,
    GIF_PALETTEUSE,
    GIF_SCALE_FILTER,
    MP4_AUDIO_CODEC,
    MP4_VIDEO_CODEC,
    PALETTE_FILE_NAME,
    TRANSCODER,
    CommandOutcome,
    OutputKind,
    QualityLevel,
)
from .shell import Runner, run


def default_palette_path() -> Path:
    """Palette location used when the caller does not provide one."""
    return Path(tempfile.gettempdir()) / f"mimiq-{PALETTE_FILE_NAME}"


def _gif_filters(quality: QualityLevel) -> str:
    return f"fps={quality.fps},{GIF_SCALE_FILTER}"


def gif_commands(
    source: Path, dest: Path, quality: QualityLevel, palette: Path
) -> tuple[list[str], list[str]]:
    """Build the two palette pipeline stages.

    Stage 1 derives a palette from the source; stage 2 applies it.

    Returns:
        Tuple of (palette generation, paletted encode) argument lists.
    """
    filters = _gif_filters(quality)
    palettegen = [
        TRANSCODER,
        "-nostdin",
        "-v",
        "warning",
        "-i",
        str(source),
        "-vf",
        f"{filters},{GIF_PALETTEGEN}",
        "-y",
        str(palette),
    ]
    paletteuse = [
        TRANSCODER,
        "-nostdin",
        "-i",
        str(source),
        "-i",
        str(palette),
        "-lavfi",
        f"{filters},{GIF_PALETTEUSE}",
        "-y",
        str(dest),
    ]
    return palettegen, paletteuse


def mov_command(source: Path, dest: Path) -> list[str]:
    """Plain copy; the recording already is a MOV."""
    return ["cp", str(source), str(dest)]


def mp4_command(source: Path, dest: Path) -> list[str]:
    """Re-encode to MP4 with a fixed codec pair."""
    return [
        TRANSCODER,
        "-nostdin",
        "-i",
        str(source),
        "-vcodec",
        MP4_VIDEO_CODEC,
        "-acodec",
        MP4_AUDIO_CODEC,
        "-y",
        str(dest),
    ]


def build_command_line(
    kind: OutputKind,
    quality: QualityLevel,
    source: Path,
    dest: Path,
    palette: Path,
) -> str:
    """Shell command line producing ``dest`` from ``source``.

    ``quality`` only affects GIF output.
    """
    if kind is OutputKind.GIF:
        stages = gif_commands(source, dest, quality, palette)
    elif kind is OutputKind.MOV:
        stages = (mov_command(source, dest),)
    else:
        stages = (mp4_command(source, dest),)
    return " && ".join(shlex.join(stage) for stage in stages)


def encoder_env(
    custom_tool_dir: str | Path | None, base: Mapping[str, str] | None = None
) -> dict[str, str] | None:
    """Environment with ``custom_tool_dir`` first on PATH.

    Returns None (inherit) when no custom directory is given. The current
    process environment is never modified.
    """
    if custom_tool_dir is None:
        return None
    env = dict(os.environ if base is None else base)
    tool_dir = str(Path(custom_tool_dir).expanduser())
    current = env.get("PATH")
    env["PATH"] = f"{tool_dir}{os.pathsep}{current}" if current else tool_dir
    return env


def encode(
    kind: OutputKind,
    quality: QualityLevel,
    source: Path,
    dest: Path,
    custom_tool_dir: str | Path | None = None,
    *,
    runner: Runner = run,
    palette: Path | None = None,
) -> CommandOutcome:
    """Transcode a recording into the requested output.

    The source file is left in place. A non-zero exit code in the returned
    outcome means the encode failed.

    Args:
        kind: Output type.
        quality: GIF quality (ignored for other kinds).
        source: Recorded MOV file.
        dest: Output file, overwritten if present.
        custom_tool_dir: Directory holding a custom ffmpeg binary.
        runner: Command runner (default: shell.run).
        palette: Palette file for the GIF pipeline.

    Returns:
        Outcome of the encode command.
    """
    logger = get_logger()
    if kind is OutputKind.GIF:
        logger.debug("Output will be created on %s, with %s quality", dest, quality.value)
    else:
        logger.debug("Output will be created on %s", dest)

    command_line = build_command_line(
        kind, quality, source, dest, palette or default_palette_path()
    )
    logger.debug('executing "%s"', command_line)
    return runner(command_line, env=encoder_env(custom_tool_dir))
