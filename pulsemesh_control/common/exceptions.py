"""
Custom Exception Classes for PulseMesh Control

Hierarchical exception structure for the control API.
Command errors never leave the restart runner; they are turned into results.
"""


class PulseMeshError(Exception):
    """Base exception for all PulseMesh control errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(PulseMeshError):
    """Configuration-related errors"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class CommandError(PulseMeshError):
    """Restart command execution errors"""

    def __init__(
        self,
        message: str,
        exit_code: int,
        output_lines: list[str] | None = None,
    ):
        self.exit_code = exit_code
        self.output_lines = list(output_lines or [])
        super().__init__(f"Command Error: {message}", recoverable=True)


class SpawnError(CommandError):
    """Command could not be started (missing binary, permissions, elevation)"""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message, exit_code, [message])


class CommandTimeoutError(CommandError):
    """Command did not finish within its time budget"""

    def __init__(
        self,
        timeout_seconds: float,
        output_lines: list[str] | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        message = f"Command timed out after {timeout_seconds:g}s"
        super().__init__(message, 124, [*(output_lines or []), message])
