"""Test doubles for mimiq collaborators."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path

from mimiq.models import (
    CaptureTarget,
    CommandOutcome,
    OutputKind,
    QualityLevel,
)

DUMMY_TARGETS = (
    CaptureTarget(
        udid=uuid.UUID("00000000-0000-0000-0000-000000000000"), name="Mimiq Simulator"
    ),
    CaptureTarget(
        udid=uuid.UUID("11111111-1111-1111-1111-111111111111"), name="Mimiq Simulator #2"
    ),
)


@dataclass
class FakeProvider:
    """ShellProvider double with canned answers."""

    installed: set[str] = field(default_factory=lambda: {"brew", "ffmpeg"})
    targets: list[CaptureTarget] = field(default_factory=lambda: list(DUMMY_TARGETS))
    record_outcome: CommandOutcome = CommandOutcome(exit_code=0)
    encode_outcome: CommandOutcome = CommandOutcome(exit_code=0)
    directory_entries: list[str] = field(default_factory=list)
    listing_error: OSError | None = None
    record_error: BaseException | None = None
    encode_error: BaseException | None = None

    recorded: list[tuple[CaptureTarget, Path]] = field(default_factory=list)
    encoded: list[dict] = field(default_factory=list)

    def is_dependency_installed(self, name: str) -> bool:
        return name in self.installed

    def list_targets(self) -> list[CaptureTarget]:
        return list(self.targets)

    def record(self, target: CaptureTarget, output_path: Path) -> CommandOutcome:
        self.recorded.append((target, output_path))
        output_path.write_bytes(b"fake mov")
        if self.record_error is not None:
            raise self.record_error
        return self.record_outcome

    def encode(
        self,
        kind: OutputKind,
        quality: QualityLevel,
        source: Path,
        dest: Path,
        custom_tool_dir: str | None = None,
        palette: Path | None = None,
    ) -> CommandOutcome:
        self.encoded.append(
            {
                "kind": kind,
                "quality": quality,
                "source": source,
                "dest": dest,
                "custom_tool_dir": custom_tool_dir,
                "palette": palette,
                "source_exists": source.exists(),
            }
        )
        if self.encode_error is not None:
            raise self.encode_error
        return self.encode_outcome

    def list_directory(self, path: Path) -> list[str]:
        if self.listing_error is not None:
            raise self.listing_error
        return list(self.directory_entries)


@dataclass
class FakeRunner:
    """Command runner double; answers by command line, records every call."""

    outcomes: dict[str, CommandOutcome] = field(default_factory=dict)
    default: CommandOutcome = CommandOutcome(exit_code=0, stdout="ok")
    calls: list[str] = field(default_factory=list)
    envs: list[dict | None] = field(default_factory=list)

    def __call__(self, command_line: str, *, env=None) -> CommandOutcome:
        self.calls.append(command_line)
        self.envs.append(env)
        return self.outcomes.get(command_line, self.default)
