# crm_dashboard/models/api/sync_request.py
"""
ghl-sync request models.
Used by the function route for input validation.
"""

from typing import Any

from pydantic import BaseModel, Field


class SyncRequest(BaseModel):
    """Request body for the ghl-sync function."""

    action: str | None = Field(default=None, description="Adapter action name")
    data: dict[str, Any] | None = Field(default=None, description="Action parameters")
