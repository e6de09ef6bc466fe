from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List, Optional

from ..events.schema import TrainingLevel
from ..ws.hub import PresenceHub
from .deps import get_hub

router = APIRouter(prefix="/api/presence", tags=["presence"])


@router.get("/users")
async def list_presence(hub: PresenceHub = Depends(get_hub)) -> Dict[str, List[Dict[str, Any]]]:
    """Return the current presence snapshot, as pushed in ONLINE_USERS_UPDATE."""
    return {"users": hub.snapshot()}


@router.get("/active")
async def list_active_users(hub: PresenceHub = Depends(get_hub)) -> Dict[str, List[str]]:
    """Return ids of users currently online."""
    return {"users": hub.get_active_users()}


@router.get("/users/{user_id}")
async def get_user_presence(user_id: str, hub: PresenceHub = Depends(get_hub)):
    entry = hub.get_entry(user_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No presence entry for user {user_id}")
    return entry.to_wire()


@router.post("/{user_id}/training-level")
async def refresh_training_level(
    user_id: str, hub: PresenceHub = Depends(get_hub)
) -> Optional[TrainingLevel]:
    """
    Recompute a user's training level and push it to their connection.

    Call after recording a module completion. Returns null when the training
    records could not be read.
    """
    return await hub.broadcast_training_level(user_id)
