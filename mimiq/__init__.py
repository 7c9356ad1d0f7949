"""mimiq - Record your Xcode simulator and convert it to GIF, MP4 or MOV."""

__version__ = "0.4.1"

from .encoder import build_command_line, encode, encoder_env  # noqa: E402
from .environment import clear_cache, ensure_working_paths  # noqa: E402
from .models import (  # noqa: E402
    CaptureTarget,
    CommandOutcome,
    EncodingFailedError,
    EnvironmentSetupError,
    FailureReason,
    MimiqError,
    MissingDependencyError,
    NoTargetError,
    OutputKind,
    QualityLevel,
    RecordingFailedError,
    SessionConfig,
    SessionState,
    WorkingPaths,
)
from .naming import next_name, sequenced_name  # noqa: E402
from .provider import DefaultShellProvider, ShellProvider  # noqa: E402
from .recorder import RecordingHandle, record_until_stopped  # noqa: E402
from .session import SessionContext, SessionController, SessionResult, run_session  # noqa: E402
from .shell import run  # noqa: E402
from .targets import enumerate_targets, resolve_target  # noqa: E402

__all__ = [
    "CaptureTarget",
    "CommandOutcome",
    "DefaultShellProvider",
    "EncodingFailedError",
    "EnvironmentSetupError",
    "FailureReason",
    "MimiqError",
    "MissingDependencyError",
    "NoTargetError",
    "OutputKind",
    "QualityLevel",
    "RecordingFailedError",
    "RecordingHandle",
    "SessionConfig",
    "SessionContext",
    "SessionController",
    "SessionResult",
    "SessionState",
    "ShellProvider",
    "WorkingPaths",
    "__version__",
    "build_command_line",
    "clear_cache",
    "encode",
    "encoder_env",
    "ensure_working_paths",
    "enumerate_targets",
    "next_name",
    "record_until_stopped",
    "resolve_target",
    "run",
    "run_session",
    "sequenced_name",
]
