"""WebSocket module for presence and notifications."""
from .hub import Connection, PresenceHub
from .router import router as ws_router

__all__ = ["Connection", "PresenceHub", "ws_router"]
