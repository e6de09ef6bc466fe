from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime, timezone
from enum import Enum

# ============================================================================
# PRESENCE DEFINITIONS
# ============================================================================

class PresenceStatus(str, Enum):
    """Presence state of a user as tracked by the hub"""
    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


class TrainingLevelName(str, Enum):
    """Training level labels, lowest to highest"""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


def default_display_name(user_id: str) -> str:
    """Synthesized display name used when a client does not send one."""
    return f"User {user_id[:4]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# EVENT TYPE DEFINITIONS
# ============================================================================

class EventType(str, Enum):
    """Outbound events pushed by the hub"""

    ONLINE_USERS_UPDATE = "ONLINE_USERS_UPDATE"
    TRAINING_LEVEL = "training:level"
    NOTIFICATION = "notification"

    # Connection lifecycle
    PONG = "pong"
    ERROR = "error"


class ClientMessageType(str, Enum):
    """Inbound messages sent by clients"""

    PRESENCE_JOIN = "presence:join"
    PRESENCE_STATUS = "presence:status"
    PING = "ping"


# ============================================================================
# PRESENCE MODELS
# ============================================================================

class TrainingLevel(BaseModel):
    """Derived training summary pushed as training:level"""
    level: TrainingLevelName = TrainingLevelName.BEGINNER
    progress: int = Field(default=0, ge=0, le=100)


class PresenceEntry(BaseModel):
    """Per-user presence record. The connection handle never leaves the server."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    avatar: Optional[str] = None
    status: PresenceStatus = PresenceStatus.ONLINE
    last_seen: datetime = Field(default_factory=utcnow, alias="lastSeen")
    training_level: Optional[TrainingLevel] = Field(default=None, alias="trainingLevel")
    connection_id: Optional[str] = Field(default=None, exclude=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# INBOUND MESSAGES
# ============================================================================

class PresenceJoinMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["presence:join"] = "presence:join"
    user_id: Optional[str] = Field(default=None, alias="userId")
    name: Optional[str] = None


class PresenceStatusMessage(BaseModel):
    type: Literal["presence:status"] = "presence:status"
    status: PresenceStatus


class PingMessage(BaseModel):
    type: Literal["ping"] = "ping"
    ts: Optional[int] = None


# ============================================================================
# OUTBOUND ENVELOPE
# ============================================================================

class ServerMessage(BaseModel):
    """WebSocket message envelope - wraps all outbound events"""
    type: EventType
    payload: Any = None


class OnlineUsersPayload(BaseModel):
    users: List[Dict[str, Any]]


def make_envelope(event: EventType, payload: Any) -> Dict[str, Any]:
    """Build an outbound frame ready for send_json."""
    return ServerMessage(type=event, payload=payload).model_dump(mode="json")


# ============================================================================
# HTTP BODIES
# ============================================================================

class NotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: List[str] = Field(alias="userIds")
    message: Any


class NotificationResult(BaseModel):
    delivered: List[str]
    skipped: List[str]
