"""
Services

- restart_runner: Runs the privileged restart command
- status_message: Plain-text outcome summary
- service_url: PulseMesh UI address from request context
- service_probe: Reachability check of the PulseMesh UI
"""

from .restart_runner import RestartCommand, RestartResult, RestartRunner
from .status_message import format_status_message
from .service_url import RequestContext, build_service_url
from .service_probe import ServiceProbe, ServiceStatus

__all__ = [
    "RestartCommand",
    "RestartResult",
    "RestartRunner",
    "format_status_message",
    "RequestContext",
    "build_service_url",
    "ServiceProbe",
    "ServiceStatus",
]
