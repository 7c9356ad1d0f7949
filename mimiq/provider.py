"""Shell operations used by a recording session.

The session controller only talks to a ``ShellProvider``; tests substitute a
plain object with canned return values.
"""

from __future__ import annotations

import shlex
import shutil
from pathlib import Path
from typing import Protocol

from .encoder import encode
from .logs import get_logger
from .models import CaptureTarget, CommandOutcome, OutputKind, QualityLevel
from .recorder import Prompt, press_enter_to_stop, record_until_stopped
from .shell import Runner, run
from .targets import enumerate_targets


class ShellProvider(Protocol):
    """Everything the session needs from the outside world."""

    def is_dependency_installed(self, name: str) -> bool: ...

    def list_targets(self) -> list[CaptureTarget]: ...

    def record(self, target: CaptureTarget, output_path: Path) -> CommandOutcome: ...

    def encode(
        self,
        kind: OutputKind,
        quality: QualityLevel,
        source: Path,
        dest: Path,
        custom_tool_dir: str | None = None,
        palette: Path | None = None,
    ) -> CommandOutcome: ...

    def list_directory(self, path: Path) -> list[str]: ...


def record_command(target: CaptureTarget, output_path: Path) -> str:
    """``simctl`` command line recording ``target`` into ``output_path``."""
    return shlex.join(
        ["xcrun", "simctl", "io", target.udid_string, "recordVideo", "-f", str(output_path)]
    )


def record_message(target: CaptureTarget) -> str:
    """Prompt shown while a recording is running."""
    return (
        f"🔨 Recording Simulator {target.name} with UDID {target.udid_string}... "
        "Press Enter to Stop."
    )


class DefaultShellProvider:
    """ShellProvider backed by real commands."""

    def __init__(self, runner: Runner = run, prompt: Prompt = press_enter_to_stop) -> None:
        self.runner = runner
        self.prompt = prompt

    def is_dependency_installed(self, name: str) -> bool:
        return shutil.which(name) is not None

    def list_targets(self) -> list[CaptureTarget]:
        return enumerate_targets(self.runner)

    def record(self, target: CaptureTarget, output_path: Path) -> CommandOutcome:
        command_line = record_command(target, output_path)
        get_logger().debug('start recording with command "%s"', command_line)
        return record_until_stopped(command_line, record_message(target), prompt=self.prompt)

    def encode(
        self,
        kind: OutputKind,
        quality: QualityLevel,
        source: Path,
        dest: Path,
        custom_tool_dir: str | None = None,
        palette: Path | None = None,
    ) -> CommandOutcome:
        return encode(
            kind,
            quality,
            source,
            dest,
            custom_tool_dir,
            runner=self.runner,
            palette=palette,
        )

    def list_directory(self, path: Path) -> list[str]:
        """Names of the regular files directly inside ``path``.

        Raises:
            OSError: If the directory cannot be read.
        """
        return sorted(entry.name for entry in path.iterdir() if entry.is_file())
