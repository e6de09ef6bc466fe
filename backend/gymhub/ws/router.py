"""
WebSocket router for presence and notifications.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
import logging

from ..api.deps import get_hub
from ..events.schema import (
    ClientMessageType,
    EventType,
    PingMessage,
    PresenceJoinMessage,
    PresenceStatusMessage,
    make_envelope,
)
from .hub import PresenceHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


async def handle_client_message(
    hub: PresenceHub, websocket: WebSocket, user_id: str, data: Dict[str, Any]
) -> None:
    """
    Handle an incoming message from a connected client.

    Supported message types:
    - presence:join: announce presence, optionally with a display name
    - presence:status: switch between online / away / offline
    - ping: keepalive, answered with pong to the sender only
    """
    msg_type = data.get("type", "unknown")

    if msg_type == ClientMessageType.PRESENCE_JOIN.value:
        msg = PresenceJoinMessage.model_validate(data)
        await hub.on_join(msg.user_id or user_id, msg.name)

    elif msg_type == ClientMessageType.PRESENCE_STATUS.value:
        msg = PresenceStatusMessage.model_validate(data)
        await hub.on_status_change(user_id, msg.status)

    elif msg_type == ClientMessageType.PING.value:
        msg = PingMessage.model_validate(data)
        await websocket.send_json(make_envelope(EventType.PONG, {
            "ts": msg.ts,
            "server_time": datetime.now(timezone.utc).isoformat(),
        }))

    else:
        raise ValueError(f"Unknown message type: {msg_type}")


async def _send_error(websocket: WebSocket, message: str, original: Any) -> None:
    await websocket.send_json(make_envelope(EventType.ERROR, {
        "message": message,
        "original_message": original,
    }))


@router.websocket("/ws/presence")
async def presence_endpoint(
    websocket: WebSocket,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    hub: PresenceHub = Depends(get_hub),
):
    """
    WebSocket endpoint for presence and notifications.

    Connect with ?userId=<id>; connections without one are closed immediately.
    Server pushes:
    - ONLINE_USERS_UPDATE: full presence snapshot
    - training:level: the caller's training level
    - notification: targeted application messages
    """
    if not user_id:
        logger.warning("Rejecting WebSocket connection without userId")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    handle = await hub.connect(websocket, user_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError("Message must be a JSON object")
                await handle_client_message(hub, websocket, user_id, data)
            except (ValueError, ValidationError) as e:
                # json.JSONDecodeError is a ValueError
                logger.warning(f"Bad message from {user_id}: {e}")
                await _send_error(websocket, f"Failed to process message: {e}", raw)

    except WebSocketDisconnect:
        await hub.on_disconnect(user_id)
        logger.info(f"Client {user_id} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error for user {user_id}: {e}", exc_info=True)
        await hub.on_transport_error(user_id, handle)
