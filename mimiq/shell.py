"""Synchronous execution of shell command lines."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Mapping

from .models import LAUNCH_FAILURE_EXIT_CODE, CommandOutcome

# Signature shared by run() and its test doubles
Runner = Callable[..., CommandOutcome]


def shell_args(command_line: str) -> list[str]:
    """Argument vector that runs ``command_line`` through bash."""
    return ["bash", "-c", command_line]


def run(command_line: str, *, env: Mapping[str, str] | None = None) -> CommandOutcome:
    """Run a command line in a subshell and wait for it to finish.

    Both pipes are drained before returning. A non-zero exit status is a
    normal outcome and is never raised.

    Args:
        command_line: Shell command line passed to ``bash -c``.
        env: Environment for the child process (default: inherit).

    Returns:
        CommandOutcome with exit status and captured output.
    """
    try:
        result = subprocess.run(
            shell_args(command_line),
            capture_output=True,
            check=False,
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        return CommandOutcome(exit_code=LAUNCH_FAILURE_EXIT_CODE, stderr=str(e) or None)

    return CommandOutcome.from_streams(result.returncode, result.stdout, result.stderr)
