"""Command-line interface for mimiq."""

from __future__ import annotations

import json
import sys
from typing import Annotated

import typer

from . import __version__
from .environment import clear_cache
from .logs import configure_logging
from .models import (
    APP_NAME,
    DEFAULT_DESTINATION,
    NO_TARGET_MESSAGE,
    OutputKind,
    QualityLevel,
    SessionConfig,
    WorkingPaths,
)
from .provider import DefaultShellProvider, ShellProvider
from .session import SessionContext, run_session
from .shell import run

EPILOG = """
Output types:
  gif         Animated GIF with palette optimization (default)
  mov         Raw simulator recording
  mp4         H.264 video

GIF quality:
  low         5 fps
  medium      15 fps (default)
  high        30 fps
"""

app = typer.Typer(
    name=APP_NAME,
    help="Record your Xcode simulator and convert it to GIF, MP4 or MOV.",
    epilog=EPILOG,
)

DEFAULT_COMMAND = "record"
COMMANDS = ("record", "list", "version", "clear-cache", "quality", "output-type")
GLOBAL_FLAGS = ("--help", "-h", "--install-completion", "--show-completion")


# =============================================================================
# Common type aliases for Typer options
# =============================================================================

PathOpt = Annotated[
    str,
    typer.Option("--path", help="Destination directory for the output (default: ~/Desktop/)"),
]
UdidOpt = Annotated[
    str | None,
    typer.Option(
        "--udid",
        help=f"Record a specific simulator by UDID, run `{APP_NAME} list` to see them",
    ),
]
OutputOpt = Annotated[
    str, typer.Option("--output", "-o", help="Output type: gif, mov, mp4 (default: gif)")
]
QualityOpt = Annotated[
    str,
    typer.Option(
        "--quality",
        "-q",
        help="GIF quality: low, medium, high (default: medium). Only used for gif output",
    ),
]
CustomFfmpegOpt = Annotated[
    str | None,
    typer.Option(
        "--custom-ffmpeg",
        help="Directory containing a custom ffmpeg binary (the directory, not the binary)",
    ),
]
VerboseOpt = Annotated[bool, typer.Option("-v", "--verbose", help="Show verbose log")]
JsonOpt = Annotated[bool, typer.Option("--json", "-j", help="Output result as JSON")]


# =============================================================================
# Parsing helpers
# =============================================================================


def parse_output_kind(value: str) -> OutputKind:
    """Parse an output type name (case-insensitive).

    Raises:
        typer.BadParameter: If the name is unknown.
    """
    try:
        return OutputKind(value.strip().lower())
    except ValueError as e:
        choices = ", ".join(kind.value for kind in OutputKind)
        raise typer.BadParameter(f"Unknown output type '{value}'. Choose from: {choices}") from e


def parse_quality(value: str) -> QualityLevel:
    """Parse a GIF quality name (case-insensitive).

    Raises:
        typer.BadParameter: If the name is unknown.
    """
    try:
        return QualityLevel(value.strip().lower())
    except ValueError as e:
        choices = ", ".join(level.value for level in QualityLevel)
        raise typer.BadParameter(f"Unknown quality '{value}'. Choose from: {choices}") from e


def build_config(
    path: str = DEFAULT_DESTINATION,
    udid: str | None = None,
    output: str = OutputKind.GIF.value,
    quality: str = QualityLevel.MEDIUM.value,
    custom_ffmpeg: str | None = None,
    verbose: bool = False,
) -> SessionConfig:
    """Build SessionConfig from CLI args."""
    return SessionConfig(
        destination=path,
        udid=udid,
        custom_ffmpeg_dir=custom_ffmpeg,
        output_kind=parse_output_kind(output),
        quality=parse_quality(quality),
        verbose=verbose,
    )


def get_provider() -> ShellProvider:
    """Provider used by the CLI commands."""
    return DefaultShellProvider()


# =============================================================================
# Action handlers
# =============================================================================


def _handle_list(provider: ShellProvider, *, json_output: bool = False) -> int:
    """Handle list action."""
    targets = provider.list_targets()

    if json_output:
        print(json.dumps([target.to_dict() for target in targets], indent=2))
        return 0

    if not targets:
        print(NO_TARGET_MESSAGE)
        return 0

    print(f"Available Simulator to {APP_NAME}: ")
    for target in targets:
        print(f"✅ {target.udid_string} {target.name}")
    return 0


def _print_choices(title: str, values: list[str]) -> None:
    print(title)
    for value in values:
        print(f"- {value}")


# =============================================================================
# CLI commands
# =============================================================================


@app.command("record")
def record_cmd(  # noqa: PLR0913 - Typer CLI requires many options
    path: PathOpt = DEFAULT_DESTINATION,
    udid: UdidOpt = None,
    output: OutputOpt = OutputKind.GIF.value,
    quality: QualityOpt = QualityLevel.MEDIUM.value,
    custom_ffmpeg: CustomFfmpegOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Record your Xcode simulator and convert it to GIF, MP4 or MOV (default command)."""
    config = build_config(path, udid, output, quality, custom_ffmpeg, verbose)
    logger = configure_logging(verbose=config.verbose)

    context = SessionContext(
        provider=get_provider(),
        config=config,
        paths=WorkingPaths.default(),
        runner=run,
        logger=logger,
    )
    result = run_session(context)
    if result.exit_code != 0:
        raise typer.Exit(result.exit_code)


@app.command("list")
def list_cmd(json_output: JsonOpt = False) -> None:
    """List booted simulators available to record."""
    configure_logging()
    result = _handle_list(get_provider(), json_output=json_output)
    if result != 0:
        raise typer.Exit(result)


@app.command("version")
def version_cmd() -> None:
    """Show mimiq version."""
    print(f"current version {__version__}")


@app.command("clear-cache")
def clear_cache_cmd() -> None:
    """Clear all mimiq temporary files."""
    configure_logging()
    clear_cache(WorkingPaths.default())


@app.command("quality")
def quality_cmd() -> None:
    """List available GIF qualities."""
    _print_choices("Available Quality", [level.value for level in QualityLevel])


@app.command("output-type")
def output_type_cmd() -> None:
    """List available output types."""
    _print_choices("Available Output Type", [kind.value for kind in OutputKind])


def with_default_command(argv: list[str]) -> list[str]:
    """Insert ``record`` unless a command (or a top-level flag) is given."""
    if argv and (argv[0] in COMMANDS or argv[0] in GLOBAL_FLAGS):
        return argv
    return [DEFAULT_COMMAND, *argv]


def main(argv: list[str] | None = None) -> int:
    """Main entry point for mimiq CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = with_default_command(list(sys.argv[1:] if argv is None else argv))
    try:
        app(args=args, prog_name=APP_NAME)
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
