"""Data models, constants and exceptions for mimiq."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

APP_NAME = "mimiq"

# Output file naming
OUTPUT_PREFIX = "mimiq"
DEFAULT_DESTINATION = "~/Desktop/"

# Working directory layout under the user's home
WORKING_DIR_NAME = ".mimiq"
TEMP_DIR_NAME = "temp"
LOG_DIR_NAME = "log"

# External tools
PACKAGE_MANAGER = "brew"
TRANSCODER = "ffmpeg"

# Exit status reported when a command could not be launched at all
LAUNCH_FAILURE_EXIT_CODE = 127

# GIF palette pipeline (only the frame rate depends on quality)
GIF_SCALE_FILTER = "scale=320:-1:flags=lanczos"
GIF_PALETTEGEN = "palettegen=stats_mode=diff"
GIF_PALETTEUSE = "paletteuse=dither=bayer:bayer_scale=5:diff_mode=rectangle"
PALETTE_FILE_NAME = "palette.png"

# MP4 re-encode codec pair
MP4_VIDEO_CODEC = "h264"
MP4_AUDIO_CODEC = "mp2"


class OutputKind(Enum):
    """Supported output types."""

    GIF = "gif"  # Animated image, palette pipeline
    MOV = "mov"  # Raw recording, copied as-is
    MP4 = "mp4"  # Re-encoded H.264 video

    @property
    def extension(self) -> str:
        """File extension without the dot."""
        return self.value


class QualityLevel(Enum):
    """GIF quality presets."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def fps(self) -> int:
        """Sampled frame rate for the palette pipeline."""
        return QUALITY_FPS[self]


QUALITY_FPS: dict[QualityLevel, int] = {
    QualityLevel.LOW: 5,
    QualityLevel.MEDIUM: 15,
    QualityLevel.HIGH: 30,
}


class SessionState(Enum):
    """States of a recording session."""

    INIT = "init"
    ENVIRONMENT_READY = "environment_ready"
    DEPENDENCIES_CHECKED = "dependencies_checked"
    TARGET_RESOLVED = "target_resolved"
    RECORDED = "recorded"
    ENCODED = "encoded"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for DONE and FAILED."""
        return self in (SessionState.DONE, SessionState.FAILED)


class FailureReason(Enum):
    """Why a session ended in the FAILED state."""

    ENVIRONMENT = "environment"
    MISSING_DEPENDENCY = "missing_dependency"
    NO_TARGET = "no_target"
    RECORDING_FAILED = "recording_failed"
    ENCODING_FAILED = "encoding_failed"


# User-facing failure messages
ENVIRONMENT_FAILED_MESSAGE = "💥 Failed to Setup Environment"
MISSING_HOMEBREW_MESSAGE = (
    "💥 Missing Homebrew, please install Homebrew, for more visit https://brew.sh"
)
MISSING_FFMPEG_MESSAGE = (
    "💥 Missing FFMpeg, please install ffmpeg, by executing `brew install ffmpeg`"
)
NO_TARGET_MESSAGE = "💥 No Available Simulator to mimiq"
RECORDING_FAILED_MESSAGE = "💥 Record Failed, Please Try Again"
ENCODING_FAILED_MESSAGE = "💥 Failed on Creating output, Please Try Again"

MISSING_DEPENDENCY_MESSAGES: dict[str, str] = {
    PACKAGE_MANAGER: MISSING_HOMEBREW_MESSAGE,
    TRANSCODER: MISSING_FFMPEG_MESSAGE,
}


@dataclass(frozen=True)
class CommandOutcome:
    """Result of running an external command.

    ``stdout``/``stderr`` are None only when the stream produced no bytes.
    """

    exit_code: int
    stdout: str | None = None
    stderr: str | None = None

    @property
    def succeeded(self) -> bool:
        """True if the command exited with status 0."""
        return self.exit_code == 0

    @classmethod
    def from_streams(
        cls, exit_code: int, stdout: bytes | None, stderr: bytes | None
    ) -> CommandOutcome:
        """Build an outcome from raw captured pipe contents."""
        return cls(
            exit_code=exit_code,
            stdout=_decode_stream(stdout),
            stderr=_decode_stream(stderr),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


def _decode_stream(data: bytes | None) -> str | None:
    if not data:
        return None
    return data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class CaptureTarget:
    """A booted simulator that can be recorded."""

    udid: uuid.UUID
    name: str

    @property
    def udid_string(self) -> str:
        """UDID in the uppercase form simctl prints."""
        return str(self.udid).upper()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"udid": self.udid_string, "name": self.name}


@dataclass(frozen=True)
class WorkingPaths:
    """Directories mimiq keeps its logs and temporary recordings in."""

    root: Path
    temp_dir: Path
    log_dir: Path

    @classmethod
    def for_root(cls, root: Path) -> WorkingPaths:
        """Build the layout under an arbitrary root directory."""
        return cls(root=root, temp_dir=root / TEMP_DIR_NAME, log_dir=root / LOG_DIR_NAME)

    @classmethod
    def default(cls) -> WorkingPaths:
        """Layout under ``~/.mimiq``."""
        return cls.for_root(Path.home() / WORKING_DIR_NAME)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "root": str(self.root),
            "temp_dir": str(self.temp_dir),
            "log_dir": str(self.log_dir),
        }


@dataclass(frozen=True)
class SessionConfig:
    """Options for one record-and-encode session."""

    destination: str = DEFAULT_DESTINATION
    udid: str | None = None
    custom_ffmpeg_dir: str | None = None
    output_kind: OutputKind = OutputKind.GIF
    quality: QualityLevel = QualityLevel.MEDIUM
    verbose: bool = False

    @property
    def destination_prefix(self) -> str:
        """Destination with a trailing separator, ready to prepend to a file name."""
        if self.destination.endswith("/"):
            return self.destination
        return self.destination + "/"

    @property
    def destination_dir(self) -> Path:
        """Destination as an expanded filesystem path."""
        return Path(self.destination).expanduser()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "destination": self.destination,
            "udid": self.udid,
            "custom_ffmpeg_dir": self.custom_ffmpeg_dir,
            "output_kind": self.output_kind.value,
            "quality": self.quality.value,
            "verbose": self.verbose,
        }


class MimiqError(Exception):
    """Base exception for a failed session step."""

    reason: FailureReason

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EnvironmentSetupError(MimiqError):
    """Working directories could not be created."""

    reason = FailureReason.ENVIRONMENT

    def __init__(self, message: str = ENVIRONMENT_FAILED_MESSAGE) -> None:
        super().__init__(message)


class MissingDependencyError(MimiqError):
    """A required external tool is not installed."""

    reason = FailureReason.MISSING_DEPENDENCY

    def __init__(self, which: str) -> None:
        message = MISSING_DEPENDENCY_MESSAGES.get(which, f"💥 Missing {which}")
        super().__init__(message)
        self.which = which


class NoTargetError(MimiqError):
    """No simulator available (or the requested one was not found)."""

    reason = FailureReason.NO_TARGET

    def __init__(self, message: str = NO_TARGET_MESSAGE) -> None:
        super().__init__(message)


class RecordingFailedError(MimiqError):
    """The recording command finished with a non-zero status."""

    reason = FailureReason.RECORDING_FAILED

    def __init__(self, outcome: CommandOutcome) -> None:
        super().__init__(RECORDING_FAILED_MESSAGE)
        self.outcome = outcome


class EncodingFailedError(MimiqError):
    """The transcode pipeline finished with a non-zero status."""

    reason = FailureReason.ENCODING_FAILED

    def __init__(self, outcome: CommandOutcome) -> None:
        super().__init__(ENCODING_FAILED_MESSAGE)
        self.outcome = outcome
