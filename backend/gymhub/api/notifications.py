from fastapi import APIRouter, Depends, HTTPException

from ..events.schema import NotificationRequest, NotificationResult
from ..ws.hub import PresenceHub
from .deps import get_hub

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("", response_model=NotificationResult)
async def send_notification(body: NotificationRequest, hub: PresenceHub = Depends(get_hub)):
    """
    Push a notification to the listed users.

    Users without a live connection are reported under `skipped`.
    """
    if not body.user_ids:
        raise HTTPException(status_code=400, detail="userIds must not be empty")
    return await hub.broadcast(body.user_ids, body.message)
