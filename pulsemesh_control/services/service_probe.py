"""
Service Probe

Checks whether the PulseMesh UI service answers HTTP on its local port.

Used after a restart to see if the service came back. The probe is
informational only: it never changes the outcome of a restart.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from ..common.logging_setup import get_service_logger

logger = get_service_logger("probe")


@dataclass
class ServiceStatus:
    """Result of one reachability check"""
    url: str
    reachable: bool
    checked_at: str
    status_code: int | None = None
    error: str | None = None


class ServiceProbe:
    """Probes a single URL with a short timeout"""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def check(self) -> ServiceStatus:
        """
        GET the service URL.

        Any HTTP response counts as reachable, whatever its status code.
        Transport failures are reported in the result, never raised.
        """
        checked_at = datetime.now(timezone.utc).isoformat()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning(
                f"PulseMesh service unreachable at {self.url}: {e}",
                extra={"url": self.url},
            )
            return ServiceStatus(
                url=self.url,
                reachable=False,
                checked_at=checked_at,
                error=str(e) or type(e).__name__,
            )

        logger.debug(
            f"PulseMesh service answered {response.status_code}",
            extra={"url": self.url, "status_code": response.status_code},
        )
        return ServiceStatus(
            url=self.url,
            reachable=True,
            checked_at=checked_at,
            status_code=response.status_code,
        )
