"""
Structured Logging Setup

Consistent logging configuration for the control API.
Uses JSON format for structured logs in production.
"""

import logging
import sys
import os
from datetime import datetime, timezone
import json

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for a component.

    Args:
        service_name: Name of the component (e.g., "api", "restart")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"pulsemesh.{service_name}")
    logger.setLevel(numeric_level)

    # Clear existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Args:
        service_name: Name of the component

    Returns:
        Logger adapter with service name in all logs
    """
    # Check for environment variable override
    log_level = os.environ.get("PULSEMESH_LOG_LEVEL", "INFO")
    json_format = os.environ.get("PULSEMESH_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def configure_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Re-apply level and format to every pulsemesh.* logger already created.

    Module loggers are built at import time from the environment; this lets
    the CLI apply values from a config file or --verbose afterwards.
    """
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if name.startswith("pulsemesh.") and isinstance(logger, logging.Logger):
            setup_logging(name[len("pulsemesh."):], log_level, json_format)


def log_restart(
    logger: logging.Logger,
    exit_code: int,
    output_lines: list[str],
    duration_ms: float,
) -> None:
    """Log the outcome of a restart command"""
    if exit_code == 0:
        logger.info(
            f"Restart command succeeded ({duration_ms:.0f}ms)",
            extra={"exit_code": exit_code, "duration_ms": round(duration_ms)},
        )
    else:
        logger.error(
            f"Restart command failed with exit code {exit_code} ({duration_ms:.0f}ms)",
            extra={
                "exit_code": exit_code,
                "duration_ms": round(duration_ms),
                "output_lines": output_lines,
            },
        )
