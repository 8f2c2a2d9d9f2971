"""
Common Modules

Shared utilities used across the control API:
- logging_setup: Structured logging
- exceptions: Custom exception classes
"""

from .logging_setup import get_service_logger
from .exceptions import (
    PulseMeshError,
    ConfigError,
    CommandError,
    SpawnError,
    CommandTimeoutError,
)

__all__ = [
    "get_service_logger",
    "PulseMeshError",
    "ConfigError",
    "CommandError",
    "SpawnError",
    "CommandTimeoutError",
]
