"""
PulseMesh Control API

FastAPI application that provides:
- Restart of the PulseMesh service through a fixed privileged script
- Address and reachability of the embedded PulseMesh UI
- Settings-group identifiers for the host's settings page
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .common.logging_setup import get_service_logger
from .config import Settings, get_settings
from .middleware.audit import AuditLoggingMiddleware
from .routers import restart, service

logger = get_service_logger("api")


# ============================================
# APPLICATION LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown events.

    Startup:
    - Log the effective deployment settings
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting PulseMesh Control API",
        extra={
            "environment": settings.environment,
            "restart_script": settings.restart_script,
            "use_sudo": settings.use_sudo,
            "service_port": settings.service_port,
            "auth_enabled": bool(settings.api_token),
        },
    )

    yield

    logger.info("Shutting down PulseMesh Control API")


# ============================================
# CREATE APPLICATION
# ============================================

def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to the cached environment settings
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="PulseMesh Control API",
        description="""
        Control API for the PulseMesh lighting-controller plugin.

        ## Features
        - **Restart**: Run the fixed restart script and report its outcome
        - **Service**: Embedded UI address, reachability, settings group
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Routes resolve settings through the dependency, keep them in sync
    app.dependency_overrides[get_settings] = lambda: settings

    # ============================================
    # MIDDLEWARE
    # ============================================

    app.add_middleware(AuditLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================
    # INCLUDE ROUTERS
    # ============================================

    app.include_router(
        restart.router,
        prefix="/api",
        tags=["Restart"]
    )

    app.include_router(
        service.router,
        prefix="/api/service",
        tags=["Service"]
    )

    # ============================================
    # ROOT ENDPOINTS
    # ============================================

    @app.get("/", tags=["Health"])
    async def root():
        """
        Basic API information.
        """
        return {
            "name": "PulseMesh Control API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness check. Does not probe the PulseMesh service."""
        return {
            "status": "healthy",
            "version": __version__,
        }

    return app


app = create_app()
