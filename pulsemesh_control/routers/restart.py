"""
Restart Router

Single privileged action: restart the PulseMesh service.

A failing restart command is an application-level outcome, not a transport
error - the endpoint answers 200 with succeeded=false and the captured output.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from ..dependencies.auth import require_api_token
from ..dependencies.services import get_restart_runner
from ..services.restart_runner import RestartResult, RestartRunner
from ..services.status_message import format_status_message

router = APIRouter()


# ============================================
# SCHEMAS
# ============================================

class RestartResponse(BaseModel):
    """Restart outcome."""
    model_config = ConfigDict(populate_by_name=True)

    succeeded: bool = Field(..., description="True iff the restart command exited with 0")
    exit_code: int = Field(..., alias="exitCode", description="Exit status of the restart command")
    output_lines: list[str] = Field(
        default_factory=list,
        alias="outputLines",
        description="Combined stdout/stderr lines in emission order, unescaped",
    )
    message: str = Field(..., description="Plain-text status line for display")


def result_to_response(result: RestartResult) -> RestartResponse:
    """Convert a RestartResult to the HTTP response model."""
    return RestartResponse(
        succeeded=result.succeeded,
        exit_code=result.exit_code,
        output_lines=list(result.output_lines),
        message=format_status_message(result),
    )


# ============================================
# ENDPOINTS
# ============================================

@router.post("/restart", response_model=RestartResponse)
async def restart_service(
    _: None = Depends(require_api_token),
    runner: RestartRunner = Depends(get_restart_runner),
):
    """
    Restart the PulseMesh service.

    No request body. Blocks until the restart script exits or times out;
    the wait runs in the thread pool so other requests keep being served.
    succeeded only reflects the script's own exit status, not whether the
    service comes up healthy afterwards.
    """
    result = await run_in_threadpool(runner.restart)
    return result_to_response(result)
