"""
WebSocket presence hub: tracks connected users, broadcasts presence snapshots,
pushes training levels and routes targeted notifications.
"""
import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set
from fastapi import WebSocket
from starlette.websockets import WebSocketState
import logging

from ..events.schema import (
    EventType,
    NotificationResult,
    OnlineUsersPayload,
    PresenceEntry,
    PresenceStatus,
    TrainingLevel,
    default_display_name,
    make_envelope,
    utcnow,
)
from ..training.levels import compute_training_level
from ..training.records import TrainingRecordSource

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """The live socket currently addressing a user."""
    handle: str
    websocket: WebSocket


class PresenceHub:
    """
    Owns the user -> connection and user -> presence maps for the process.

    Map mutations happen under a single lock; sends go out after the lock is
    released, against a snapshot of the targets.
    """

    def __init__(self, records: TrainingRecordSource):
        self._records = records
        self._connections: Dict[str, Connection] = {}
        self._users: Dict[str, PresenceEntry] = {}
        self._lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self, websocket: WebSocket, user_id: str) -> str:
        """
        Accept a socket and make it the user's current connection.
        Returns the connection handle; a previous handle for the user is superseded.
        """
        await websocket.accept()
        handle = uuid.uuid4().hex

        async with self._lock:
            previous = self._connections.get(user_id)
            self._connections[user_id] = Connection(handle=handle, websocket=websocket)
            entry = self._users.get(user_id)
            if entry is not None:
                entry.connection_id = handle

        if previous is not None:
            logger.info(f"User {user_id} reconnected; handle {previous.handle} superseded by {handle}")
        logger.info(f"WebSocket connected for user {user_id}. Total connections: {len(self._connections)}")
        return handle

    def current_handle(self, user_id: str) -> Optional[str]:
        conn = self._connections.get(user_id)
        return conn.handle if conn else None

    # ------------------------------------------------------------------
    # Presence operations
    # ------------------------------------------------------------------

    def _register_locked(self, user_id: str) -> PresenceEntry:
        conn = self._connections.get(user_id)
        entry = PresenceEntry(
            id=user_id,
            name=default_display_name(user_id),
            status=PresenceStatus.ONLINE,
            last_seen=utcnow(),
            connection_id=conn.handle if conn else None,
        )
        self._users[user_id] = entry
        return entry

    async def register_user(self, user_id: str) -> None:
        """Create or overwrite the user's entry as online, then broadcast."""
        if self._closed:
            return
        async with self._lock:
            self._register_locked(user_id)
        logger.info(f"Registered user {user_id}")
        await self.broadcast_presence()

    async def unregister_user(self, user_id: str) -> None:
        """Mark the user offline, drop their connection, then broadcast."""
        if self._closed:
            return
        async with self._lock:
            entry = self._users.get(user_id)
            if entry is not None:
                entry.status = PresenceStatus.OFFLINE
                entry.last_seen = utcnow()
                entry.connection_id = None
            self._connections.pop(user_id, None)
        logger.info(f"Unregistered user {user_id}")
        await self.broadcast_presence()

    async def on_join(self, user_id: str, name: Optional[str] = None) -> None:
        """
        Handle presence:join. The training level push runs as its own task so
        the presence broadcast never waits on the records lookup.
        """
        if self._closed:
            return
        display_name = name or default_display_name(user_id)
        async with self._lock:
            entry = self._users.get(user_id)
            if entry is None:
                entry = self._register_locked(user_id)
            entry.status = PresenceStatus.ONLINE
            entry.name = display_name
            entry.last_seen = utcnow()

        logger.info(f"User {user_id} joined as '{display_name}'")
        self._spawn(self.broadcast_training_level(user_id))
        await self.broadcast_presence()

    async def on_status_change(self, user_id: str, status: PresenceStatus) -> None:
        if self._closed:
            return
        async with self._lock:
            entry = self._users.get(user_id)
            if entry is None:
                logger.debug(f"Status change for unknown user {user_id} ignored")
                return
            entry.status = PresenceStatus(status)
            entry.last_seen = utcnow()
        logger.info(f"User {user_id} is now {entry.status.value}")
        await self.broadcast_presence()

    async def on_disconnect(self, user_id: str) -> None:
        await self.unregister_user(user_id)

    async def on_transport_error(self, user_id: str, handle: str) -> None:
        """Unregister only when the failing handle is still the user's current one."""
        current = self.current_handle(user_id)
        if current is None or current != handle:
            logger.info(f"Ignoring transport error on stale handle {handle} for user {user_id}")
            return
        logger.warning(f"Transport error on current handle for user {user_id}; unregistering")
        await self.unregister_user(user_id)

    def get_active_users(self) -> List[str]:
        return [uid for uid, entry in self._users.items() if entry.status == PresenceStatus.ONLINE]

    def get_entry(self, user_id: str) -> Optional[PresenceEntry]:
        return self._users.get(user_id)

    def snapshot(self) -> List[Dict[str, Any]]:
        """Presence entries as sent to clients (no connection handles)."""
        return [entry.to_wire() for entry in self._users.values()]

    # ------------------------------------------------------------------
    # Broadcasts
    # ------------------------------------------------------------------

    async def broadcast_presence(self) -> None:
        """Send the full presence snapshot to every connected client."""
        if self._closed:
            return
        async with self._lock:
            payload = OnlineUsersPayload(users=self.snapshot()).model_dump()
            targets = list(self._connections.values())

        message = make_envelope(EventType.ONLINE_USERS_UPDATE, payload)
        await asyncio.gather(*[self._send(conn, message) for conn in targets])

    async def broadcast_training_level(self, user_id: str) -> Optional[TrainingLevel]:
        """
        Recompute the user's training level and push it to their current
        connection. Lookup failures are logged and leave the stored level as is.
        """
        try:
            records = await self._records.fetch_records(user_id)
            level = compute_training_level(records)
        except Exception as e:
            logger.error(f"Error computing training level for {user_id}: {e}", exc_info=True)
            return None

        async with self._lock:
            entry = self._users.get(user_id)
            if entry is not None:
                entry.training_level = level
            conn = self._connections.get(user_id)

        if conn is not None and not self._closed:
            await self._send(conn, make_envelope(EventType.TRAINING_LEVEL, level.model_dump(mode="json")))
        logger.info(f"Training level for {user_id}: {level.level.value} ({level.progress}%)")
        return level

    async def broadcast(self, user_ids: Iterable[str], message: Any) -> NotificationResult:
        """Send a notification to each listed user that has a live connection."""
        delivered: List[str] = []
        skipped: List[str] = []
        if self._closed:
            return NotificationResult(delivered=delivered, skipped=list(user_ids))

        async with self._lock:
            targets = []
            for uid in user_ids:
                conn = self._connections.get(uid)
                if conn is None:
                    skipped.append(uid)
                else:
                    targets.append(conn)
                    delivered.append(uid)

        envelope = make_envelope(EventType.NOTIFICATION, message)
        await asyncio.gather(*[self._send(conn, envelope) for conn in targets])
        if skipped:
            logger.debug(f"Notification skipped for offline users: {skipped}")
        return NotificationResult(delivered=delivered, skipped=skipped)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def wait_pending(self) -> None:
        """Wait for in-flight training level pushes to finish."""
        while True:
            pending = [t for t in self._pending if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """Stop delivering events, cancel pending work and close every socket."""
        if self._closed:
            return
        self._closed = True

        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)
        self._pending.clear()

        async with self._lock:
            targets = list(self._connections.values())
            self._connections.clear()

        for conn in targets:
            try:
                await conn.websocket.close(code=1001)
            except Exception as e:
                logger.debug(f"Error closing socket {conn.handle}: {e}")
        logger.info(f"Presence hub closed ({len(targets)} connections dropped)")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, conn: Connection, message: dict) -> None:
        """Send to one socket; failures are logged and dropped."""
        if conn.websocket.application_state != WebSocketState.CONNECTED:
            return
        try:
            await conn.websocket.send_json(message)
        except Exception as e:
            logger.warning(f"Error sending to connection {conn.handle}: {e}")
