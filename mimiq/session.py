"""Record-then-encode session state machine.

A session walks INIT -> ENVIRONMENT_READY -> DEPENDENCIES_CHECKED ->
TARGET_RESOLVED -> RECORDED -> ENCODED -> DONE. Any step may end it in
FAILED instead. The controller is the only place that turns a failed step
into an exit code, and it clears the temp directory exactly once on every
terminal transition.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path

from .environment import clear_cache, ensure_working_paths
from .logs import get_logger, log_command_output, log_file
from .models import (
    PACKAGE_MANAGER,
    PALETTE_FILE_NAME,
    TRANSCODER,
    CaptureTarget,
    EncodingFailedError,
    EnvironmentSetupError,
    FailureReason,
    MimiqError,
    MissingDependencyError,
    NoTargetError,
    OutputKind,
    RecordingFailedError,
    SessionConfig,
    SessionState,
    WorkingPaths,
)
from .naming import sequenced_name
from .provider import ShellProvider
from .shell import Runner, run
from .targets import resolve_target

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

RECORDING_EXTENSION = OutputKind.MOV.extension


@dataclass
class SessionContext:
    """Collaborators and settings for one session."""

    provider: ShellProvider
    config: SessionConfig
    paths: WorkingPaths
    runner: Runner = run
    logger: logging.Logger = field(default_factory=get_logger)
    write_log_file: bool = True


@dataclass(frozen=True)
class SessionResult:
    """Terminal state of a session."""

    state: SessionState
    exit_code: int
    reason: FailureReason | None = None
    message: str | None = None
    output_path: str | None = None
    transitions: tuple[SessionState, ...] = ()

    @property
    def succeeded(self) -> bool:
        """True if the session reached DONE."""
        return self.state is SessionState.DONE

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "state": self.state.value,
            "exit_code": self.exit_code,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "output_path": self.output_path,
            "transitions": [s.value for s in self.transitions],
        }


class SessionController:
    """Drives one record-and-encode session."""

    def __init__(self, context: SessionContext) -> None:
        self.context = context
        self.state = SessionState.INIT
        self.transitions: list[SessionState] = [SessionState.INIT]
        self.reason: FailureReason | None = None
        self.message: str | None = None
        self.target: CaptureTarget | None = None
        self.recording_path: Path | None = None
        self.output_path: str | None = None
        self.cleanup_count = 0

    @property
    def logger(self) -> logging.Logger:
        return self.context.logger

    def run(self) -> SessionResult:
        """Run the session to a terminal state.

        Returns:
            SessionResult; ``exit_code`` is 0 on DONE and 1 on FAILED.

        Exceptions other than MimiqError (including KeyboardInterrupt)
        propagate after the temp directory has been cleared.
        """
        self.logger.debug("mimiq start to run")

        with ExitStack() as stack:
            try:
                self._prepare_environment(stack)
                self._check_dependencies()
                target = self._resolve_target()
                recording_path = self._record(target)
                self._encode(recording_path)
            except MimiqError as e:
                self._fail(e)
            else:
                self._finish()
            finally:
                self._cleanup()

        return SessionResult(
            state=self.state,
            exit_code=EXIT_SUCCESS if self.state is SessionState.DONE else EXIT_FAILURE,
            reason=self.reason,
            message=self.message,
            output_path=self.output_path,
            transitions=tuple(self.transitions),
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _prepare_environment(self, stack: ExitStack) -> None:
        paths = self.context.paths
        try:
            ensure_working_paths(paths)
        except OSError as e:
            self.logger.debug("failed setup environment: %s", e)
            raise EnvironmentSetupError() from e

        if self.context.write_log_file:
            try:
                log_path = stack.enter_context(log_file(self.logger, paths.log_dir))
            except OSError as e:
                self.logger.debug("failed to open log file: %s", e)
                raise EnvironmentSetupError() from e
            self.logger.debug("logging to %s", log_path)

        self.logger.debug("environment setup success")
        self.logger.debug("session config %s", self.context.config.to_dict())
        self._log_diagnostics("sw_vers")
        self._transition(SessionState.ENVIRONMENT_READY)

    def _check_dependencies(self) -> None:
        config = self.context.config
        provider = self.context.provider

        if config.custom_ffmpeg_dir is None:
            if not provider.is_dependency_installed(PACKAGE_MANAGER):
                self.logger.debug("missing homebrew")
                raise MissingDependencyError(PACKAGE_MANAGER)
            self.logger.debug("Homebrew is installed")
            self._log_diagnostics(f"{PACKAGE_MANAGER} --version")

            if not provider.is_dependency_installed(TRANSCODER):
                self.logger.debug("missing ffmpeg")
                raise MissingDependencyError(TRANSCODER)
            self.logger.debug("ffmpeg is installed")
        else:
            self.logger.debug("using custom ffmpeg at %s", config.custom_ffmpeg_dir)

        self._transition(SessionState.DEPENDENCIES_CHECKED)

    def _resolve_target(self) -> CaptureTarget:
        targets = self.context.provider.list_targets()
        self.logger.debug("found %d simulator(s)", len(targets))

        target = resolve_target(targets, self.context.config.udid)
        if target is None:
            self.logger.debug("no available simulator")
            raise NoTargetError()

        self.target = target
        self.logger.debug("simulator target %s %s", target.udid_string, target.name)
        self._transition(SessionState.TARGET_RESOLVED)
        return target

    def _record(self, target: CaptureTarget) -> Path:
        recording_path = self.context.paths.temp_dir / f"{uuid.uuid4()}.{RECORDING_EXTENSION}"
        self.recording_path = recording_path
        self.logger.debug("simulator to record on %s", recording_path)
        self._log_diagnostics("xcodebuild -version")

        outcome = self.context.provider.record(target, recording_path)
        self.logger.debug("record simulator finish with status %d", outcome.exit_code)
        if not outcome.succeeded:
            self.logger.debug("error record simulator")
            raise RecordingFailedError(outcome)

        self.logger.debug("stop recording")
        self._transition(SessionState.RECORDED)
        return recording_path

    def _encode(self, recording_path: Path) -> None:
        config = self.context.config

        self.logger.debug("start creating output")
        self.logger.info("⚙️ Creating output...")

        name = sequenced_name(self.context.provider.list_directory, config.destination_dir)
        output_path = f"{config.destination_prefix}{name}.{config.output_kind.extension}"

        outcome = self.context.provider.encode(
            config.output_kind,
            config.quality,
            recording_path,
            Path(output_path).expanduser(),
            config.custom_ffmpeg_dir,
            palette=self.context.paths.temp_dir / PALETTE_FILE_NAME,
        )
        if not outcome.succeeded:
            self.logger.debug("error generating output")
            raise EncodingFailedError(outcome)

        self.logger.debug("success generating output")
        log_command_output(self.logger, outcome)
        self.output_path = output_path
        self._transition(SessionState.ENCODED)

    # -------------------------------------------------------------------------
    # Terminal transitions
    # -------------------------------------------------------------------------

    def _finish(self) -> None:
        self._cleanup()
        self._transition(SessionState.DONE)
        self.logger.debug("output generated at %s", self.output_path)
        self.logger.info("✅ Grab your output at %s", self.output_path)

    def _fail(self, error: MimiqError) -> None:
        self._cleanup()
        self.reason = error.reason
        self.message = error.message
        self._transition(SessionState.FAILED)

        outcome = getattr(error, "outcome", None)
        if outcome is not None:
            log_command_output(self.logger, outcome)
        self.logger.error(error.message)

    def _cleanup(self) -> None:
        if self.cleanup_count:
            return
        self.cleanup_count += 1
        clear_cache(self.context.paths)

    def _transition(self, state: SessionState) -> None:
        self.logger.debug("session %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    def _log_diagnostics(self, command_line: str) -> None:
        self.logger.debug("$ %s", command_line)
        log_command_output(self.logger, self.context.runner(command_line))


def run_session(context: SessionContext) -> SessionResult:
    """Run a session and return its result."""
    return SessionController(context).run()
