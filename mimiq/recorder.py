"""Long-running recording process stopped by the operator.

The command is launched on a background thread while the caller blocks on a
prompt. Pressing Enter sends SIGINT to the child so it can finalize the
video file; the caller then waits on a one-shot gate for the single
completion outcome.
"""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from collections.abc import Callable

import typer

from .logs import get_logger
from .models import LAUNCH_FAILURE_EXIT_CODE, CommandOutcome
from .shell import shell_args

CompletionCallback = Callable[[CommandOutcome], None]
Prompt = Callable[[str], object]


class RecordingHandle:
    """Handle to a recording command running in the background.

    ``on_complete`` is called exactly once with the final outcome, on the
    launch thread, before ``wait()`` returns.
    """

    def __init__(
        self,
        command_line: str,
        *,
        on_complete: CompletionCallback | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        logger: logging.Logger | None = None,
    ) -> None:
        self.command_line = command_line
        self._on_complete = on_complete
        self._popen = popen
        self._logger = logger or get_logger()

        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None
        self._stop_requested = False
        self._outcome: CommandOutcome | None = None
        self._completed = threading.Event()
        self._thread = threading.Thread(target=self._run, name="mimiq-recorder", daemon=True)

    @property
    def done(self) -> bool:
        """True once the completion outcome has been delivered."""
        return self._completed.is_set()

    @property
    def stop_requested(self) -> bool:
        """True once stop() has been called."""
        with self._lock:
            return self._stop_requested

    @property
    def outcome(self) -> CommandOutcome | None:
        """Final outcome, or None while still running."""
        return self._outcome

    def start(self) -> RecordingHandle:
        """Launch the command without blocking the caller."""
        self._thread.start()
        return self

    def stop(self) -> bool:
        """Ask the recording to finish gracefully.

        Returns:
            True if an interrupt was sent or scheduled, False if the
            command had already exited.
        """
        with self._lock:
            self._stop_requested = True
            process = self._process

        if self.done:
            self._logger.info("❌ No Task run")
            self._logger.debug("task not running")
            return False

        if process is None:
            # Not launched yet; the launch thread interrupts right after Popen.
            self._logger.debug("stop requested before launch")
            return True

        if process.poll() is not None:
            self._logger.info("❌ No Task run")
            self._logger.debug("task not running")
            return False

        self._interrupt(process)
        return True

    def wait(self, timeout: float | None = None) -> CommandOutcome:
        """Block until the completion outcome is delivered.

        Raises:
            TimeoutError: If ``timeout`` elapses first.
        """
        if not self._completed.wait(timeout):
            raise TimeoutError(f"Recording did not finish within {timeout}s")
        outcome = self._outcome
        if outcome is None:
            raise RuntimeError("Recording completed without an outcome")
        return outcome

    def _run(self) -> None:
        # SIGINT goes to the process bash runs. That is the recorder itself
        # only while the line is a single simple command (bash execs it);
        # a compound line would leave the recorder waiting on bash.
        try:
            process = self._popen(
                shell_args(self.command_line),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            self._logger.error("❌ Task failed to run")
            self._logger.debug("task failed to run: %s", e)
            self._deliver(
                CommandOutcome(exit_code=LAUNCH_FAILURE_EXIT_CODE, stderr=str(e) or None)
            )
            return

        with self._lock:
            self._process = process
            stop_now = self._stop_requested

        if stop_now:
            self._interrupt(process)

        stdout, stderr = process.communicate()
        self._deliver(CommandOutcome.from_streams(process.returncode, stdout, stderr))

    def _interrupt(self, process: subprocess.Popen) -> None:
        self._logger.debug("interrupting task...")
        try:
            process.send_signal(signal.SIGINT)
        except ProcessLookupError:
            self._logger.debug("task exited before interrupt")

    def _deliver(self, outcome: CommandOutcome) -> None:
        with self._lock:
            if self._outcome is not None:
                return
            self._outcome = outcome

        self._logger.debug("handle completion status %d", outcome.exit_code)
        try:
            if self._on_complete is not None:
                self._on_complete(outcome)
        finally:
            self._completed.set()


def press_enter_to_stop(message: str) -> None:
    """Block until the operator presses Enter.

    End of input or Ctrl-C at the prompt also counts as a stop request.
    """
    try:
        typer.prompt(message, default="", show_default=False, prompt_suffix="\n")
    except typer.Abort:
        pass


def record_until_stopped(
    command_line: str,
    message: str,
    *,
    prompt: Prompt = press_enter_to_stop,
    on_complete: CompletionCallback | None = None,
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    logger: logging.Logger | None = None,
) -> CommandOutcome:
    """Run a recording command until the operator stops it.

    Args:
        command_line: Recording command line.
        message: Prompt shown while recording.
        prompt: Blocking prompt; returns when the operator wants to stop.
        on_complete: Called once with the final outcome.
        popen: Process factory (default: subprocess.Popen).
        logger: Logger (default: application logger).

    Returns:
        The recording command's final outcome.
    """
    log = logger or get_logger()
    handle = RecordingHandle(
        command_line, on_complete=on_complete, popen=popen, logger=log
    ).start()

    try:
        prompt(message)

        log.info("⚙️ Stopping...")
        log.debug("stopping simulator recording process")
        handle.stop()
        return handle.wait()
    finally:
        # The child runs in its own session and never sees the terminal's Ctrl-C
        if not handle.done and not handle.stop_requested:
            handle.stop()
