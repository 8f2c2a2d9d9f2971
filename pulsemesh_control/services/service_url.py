"""
Service URL

Builds the address of the PulseMesh UI service that the settings page embeds.

The service listens on the same host as the page, on its own port, over the
same protocol. The host comes from an explicit RequestContext; headers that
do not look like a hostname fall back to localhost.
"""

import re
from dataclasses import dataclass

from starlette.requests import Request

DEFAULT_HOST = "localhost"
DEFAULT_SERVICE_PORT = 8089

_ALLOWED_SCHEMES = ("http", "https")

# hostname, IPv4, or bracketed IPv6 - nothing that could carry a path or userinfo
_HOST_PATTERN = re.compile(
    r"^(?:\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*)$"
)


def _strip_port(host: str) -> str:
    """Remove a trailing :port from a Host-style value."""
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def sanitize_host(host: str | None) -> str:
    """Return a safe hostname for URL building, or localhost."""
    if not host:
        return DEFAULT_HOST
    # Proxies may append a comma-separated chain; the first entry is the client's
    candidate = _strip_port(host.split(",")[0].strip())
    if candidate and _HOST_PATTERN.match(candidate):
        return candidate.lower()
    return DEFAULT_HOST


def _sanitize_scheme(scheme: str | None) -> str:
    if not scheme:
        return "http"
    candidate = scheme.split(",")[0].strip().lower()
    return candidate if candidate in _ALLOWED_SCHEMES else "http"


@dataclass(frozen=True)
class RequestContext:
    """Protocol and host the client used to reach the settings page."""
    scheme: str = "http"
    host: str = DEFAULT_HOST

    @classmethod
    def from_request(cls, request: Request, trust_forwarded: bool = True) -> "RequestContext":
        """
        Derive the context from an incoming request.

        With trust_forwarded, X-Forwarded-Proto / X-Forwarded-Host win over
        the values seen by this server, so a reverse proxy does not leak its
        internal address into the URL.
        """
        headers = request.headers
        scheme = request.url.scheme
        host = headers.get("host") or request.url.hostname

        if trust_forwarded:
            scheme = headers.get("x-forwarded-proto") or scheme
            host = headers.get("x-forwarded-host") or host

        return cls(scheme=_sanitize_scheme(scheme), host=sanitize_host(host))

    @classmethod
    def from_https_flag(cls, https: str | None, server_name: str | None = None) -> "RequestContext":
        """
        Legacy server-side rule: HTTPS when the flag is set to anything but "off".

        Args:
            https: Value of the web server's HTTPS variable, if any
            server_name: Configured server name, if any
        """
        scheme = "https" if https and https != "off" else "http"
        return cls(scheme=scheme, host=sanitize_host(server_name))


def build_service_url(context: RequestContext, port: int = DEFAULT_SERVICE_PORT) -> str:
    """Return scheme://host:port for the PulseMesh UI service."""
    return f"{context.scheme}://{context.host}:{port}"
