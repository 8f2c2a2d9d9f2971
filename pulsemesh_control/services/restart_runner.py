"""
Restart Runner

Runs the fixed, pre-authorized restart script for the PulseMesh service
and reports the outcome as a RestartResult.

The command line is built only from deployment configuration:
    sudo -n <restart_script> --force

No part of it comes from the caller. Output is captured as one combined
stream (stderr folded into stdout) so lines keep their emission order.
The stream goes to a temporary file, not a pipe: a script that starts the
service in the background and exits is done when it exits, even though the
service still holds the stream open.
restart() never raises - every failure becomes succeeded=False.
"""

import os
import signal
import subprocess
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from ..common.exceptions import CommandError, CommandTimeoutError, ConfigError, SpawnError
from ..common.logging_setup import get_service_logger, log_restart

logger = get_service_logger("restart")

FORCE_FLAG = "--force"
# -n: fail instead of prompting for a password
SUDO = ("sudo", "-n")

# Shell conventions for failures without a process exit status
EXIT_SPAWN_FAILED = 1
EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127

# Time a timed-out command gets to exit after SIGTERM before SIGKILL
TERMINATE_GRACE_SECONDS = 2.0


@dataclass(frozen=True)
class RestartCommand:
    """
    Immutable description of the restart command.

    Attributes:
        executable: Absolute path of the restart script
        elevation: Privilege-elevation prefix (empty to run unprivileged)
        timeout_seconds: Upper bound on how long the command may run
    """
    executable: str
    elevation: tuple[str, ...] = SUDO
    timeout_seconds: float = 60.0

    def __post_init__(self):
        if not Path(self.executable).is_absolute():
            raise ConfigError(f"Restart script must be an absolute path: {self.executable!r}")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"Restart timeout must be positive: {self.timeout_seconds}")

    @property
    def args(self) -> tuple[str, ...]:
        return (FORCE_FLAG,)

    def argv(self) -> list[str]:
        """Full argument vector passed to the OS, no shell involved."""
        return [*self.elevation, self.executable, *self.args]

    @classmethod
    def from_settings(cls, settings) -> "RestartCommand":
        """Build the command from application Settings."""
        return cls(
            executable=settings.restart_script,
            elevation=SUDO if settings.use_sudo else (),
            timeout_seconds=settings.restart_timeout_seconds,
        )


@dataclass(frozen=True)
class RestartResult:
    """Outcome of one restart invocation. Never persisted."""
    exit_code: int
    output_lines: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def split_output(raw: bytes | str | None) -> list[str]:
    """
    Split captured output into lines, dropping trailing whitespace.

    Lines end at "\\n" only; form feeds and other Unicode line separators
    stay inside their line.
    """
    if not raw:
        return []
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    lines = raw.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip() for line in lines]


class RestartRunner:
    """
    Executes a RestartCommand.

    Each call spawns its own process and owns its own output buffer;
    concurrent calls are not coalesced.
    """

    def __init__(self, command: RestartCommand):
        self.command = command

    def restart(self) -> RestartResult:
        """
        Run the restart command and wait for it to finish.

        Returns:
            RestartResult with the exit code and combined output lines
        """
        argv = self.command.argv()
        logger.info(
            f"Running restart command: {' '.join(argv)}",
            extra={"argv": argv},
        )
        start_time = time.monotonic()

        try:
            exit_code, output_lines = self._execute(argv)
        except CommandError as e:
            exit_code, output_lines = e.exit_code, e.output_lines
        except Exception as e:
            logger.exception(f"Unexpected error running restart command: {e}")
            exit_code, output_lines = EXIT_SPAWN_FAILED, [f"Unexpected error: {e}"]

        result = RestartResult(exit_code=exit_code, output_lines=output_lines)
        log_restart(
            logger,
            result.exit_code,
            result.output_lines,
            (time.monotonic() - start_time) * 1000,
        )
        return result

    def _execute(self, argv: list[str]) -> tuple[int, list[str]]:
        """
        Spawn the process and collect its status.

        Raises:
            SpawnError: The process could not be started
            CommandTimeoutError: The process was killed after the timeout
        """
        executable = argv[0]
        with tempfile.TemporaryFile() as output:
            try:
                # Own process group, so a timeout can reach the whole tree
                process = subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=output,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
            except FileNotFoundError:
                raise SpawnError(f"Command not found: {executable}", EXIT_NOT_FOUND)
            except PermissionError:
                raise SpawnError(f"Permission denied: {executable}", EXIT_NOT_EXECUTABLE)
            except (OSError, ValueError) as e:
                raise SpawnError(f"Could not start {executable}: {e}", EXIT_SPAWN_FAILED)

            try:
                exit_code = process.wait(timeout=self.command.timeout_seconds)
            except subprocess.TimeoutExpired:
                self._stop(process)
                raise CommandTimeoutError(self.command.timeout_seconds, self._read(output))

            output_lines = self._read(output)

        if exit_code < 0:
            # Killed by signal N
            exit_code = 128 - exit_code
        return exit_code, output_lines

    @staticmethod
    def _read(output) -> list[str]:
        output.seek(0)
        return split_output(output.read())

    def _stop(self, process: subprocess.Popen) -> None:
        """
        Stop a timed-out command and everything in its process group.

        SIGTERM goes first because sudo relays it to the script it runs as
        root; this process may not signal that script directly, and SIGKILL
        cannot be relayed. Whatever is left after the grace period gets
        SIGKILL. Processes owned by root only ever see the relayed SIGTERM.
        """
        logger.warning(
            f"Restart command exceeded {self.command.timeout_seconds:g}s, stopping it",
            extra={"pid": process.pid},
        )
        self._signal_group(process, signal.SIGTERM)
        try:
            process.wait(timeout=TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            logger.warning("Restart command ignored SIGTERM, sending SIGKILL")
        # Descendants can outlive the leader; SIGKILL the group either way
        self._signal_group(process, signal.SIGKILL)
        process.wait()

    @staticmethod
    def _signal_group(process: subprocess.Popen, sig: signal.Signals) -> None:
        try:
            os.killpg(process.pid, sig)
        except ProcessLookupError:
            # Group already empty
            pass
        except PermissionError:
            # Every remaining member belongs to another user (sudo'd script)
            logger.debug(f"Not allowed to send {sig.name} to process group {process.pid}")
