"""Scheduled job endpoints, triggered by an external scheduler."""

import logging
from typing import Any

from fastapi import APIRouter

from storefront.api.deps import CronAuth
from storefront.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[CronAuth])


@router.post(
    "/delete-old-sessions",
    summary="Delete old sessions",
    description="Deletes sessions older than the retention window. Requires the x-cron-auth header.",
    responses={401: {"description": "Missing or invalid cron secret"}},
)
async def delete_old_sessions() -> dict[str, Any]:
    """Delete stale sessions.

    Returns:
        dict: Number of deleted sessions and the cutoff timestamp.
    """
    service = SessionService()
    result = await service.delete_old_sessions()
    return {"success": True, **result}
