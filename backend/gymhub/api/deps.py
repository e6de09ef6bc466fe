"""
FastAPI dependencies shared by HTTP and WebSocket routes.
"""
from typing import TYPE_CHECKING

from fastapi import HTTPException
from fastapi.requests import HTTPConnection

if TYPE_CHECKING:
    from ..ws.hub import PresenceHub


def get_hub(conn: HTTPConnection) -> "PresenceHub":
    """Return the hub created by the application lifespan."""
    hub = getattr(conn.app.state, "hub", None)
    if hub is None or hub.closed:
        raise HTTPException(status_code=503, detail="Presence hub is not running")
    return hub
