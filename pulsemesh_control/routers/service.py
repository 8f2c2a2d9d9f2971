"""
Service Router

Read-only information about the PulseMesh UI service:
- Address of the embedded UI (same host and protocol as the page)
- Reachability probe
- Settings-group identifiers handed to the host's settings renderer
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..services.service_probe import ServiceProbe
from ..services.service_url import RequestContext, build_service_url

router = APIRouter()


# ============================================
# SCHEMAS
# ============================================

class ServiceUrlResponse(BaseModel):
    """Embedded UI address."""
    url: str
    scheme: str
    host: str
    port: int


class ServiceStatusResponse(BaseModel):
    """Reachability of the embedded UI."""
    url: str
    reachable: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    checked_at: str


class SettingsGroupResponse(BaseModel):
    """Opaque identifiers for the external settings-group renderer."""
    group_key: str = Field(..., description="Settings group key")
    plugin_id: str = Field(..., description="Plugin identifier")


# ============================================
# HELPER FUNCTIONS
# ============================================

def get_service_probe(settings: Settings = Depends(get_settings)) -> ServiceProbe:
    """Probe the service on the loopback interface, where it actually runs."""
    url = build_service_url(RequestContext(), settings.service_port)
    return ServiceProbe(url, settings.probe_timeout_seconds)


# ============================================
# ENDPOINTS
# ============================================

@router.get("/url", response_model=ServiceUrlResponse)
async def get_service_url(
    request: Request,
    settings: Settings = Depends(get_settings),
):
    """
    Address of the PulseMesh UI for embedding.

    Uses the host and protocol the client used to reach this API.
    """
    context = RequestContext.from_request(request, settings.trust_forwarded_headers)
    return ServiceUrlResponse(
        url=build_service_url(context, settings.service_port),
        scheme=context.scheme,
        host=context.host,
        port=settings.service_port,
    )


@router.get("/status", response_model=ServiceStatusResponse)
async def get_service_status(probe: ServiceProbe = Depends(get_service_probe)):
    """
    Check whether the PulseMesh UI answers HTTP.

    Independent of restart results; useful after a restart.
    """
    status = await probe.check()
    return ServiceStatusResponse(
        url=status.url,
        reachable=status.reachable,
        status_code=status.status_code,
        error=status.error,
        checked_at=status.checked_at,
    )


@router.get("/settings-group", response_model=SettingsGroupResponse)
async def get_settings_group(settings: Settings = Depends(get_settings)):
    """Group key and plugin id, passed through unchanged."""
    return SettingsGroupResponse(
        group_key=settings.settings_group_key,
        plugin_id=settings.plugin_id,
    )
