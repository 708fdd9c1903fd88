"""
ghl-sync function route.
Single POST endpoint taking {action, data}; forwards to the action router
and returns the upstream JSON, or {"error": message} with a non-2xx status.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from crm_dashboard.auth.verify import auth_dependency
from crm_dashboard.infrastructure.observability.logging import get_logger
from crm_dashboard.models.api.sync_request import SyncRequest
from crm_dashboard.services.ghl.client import GHLSyncError
from crm_dashboard.services.ghl_sync_service import invoke

logger = get_logger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["ghl-sync"])


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/ghl-sync")
async def ghl_sync(request: Request, claims: dict = Depends(auth_dependency)):
    """Run one ghl-sync action."""
    try:
        body = SyncRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Invalid ghl-sync request body", error=str(e))
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    try:
        result = await invoke(body.action, body.data)
    except GHLSyncError as e:
        logger.error("GHL API error", action=body.action, error=str(e))
        return _error_response(e.status_code, str(e))

    return JSONResponse(content=result)
