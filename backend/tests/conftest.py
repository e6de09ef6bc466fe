import asyncio
from typing import Any, Dict, List

import pytest
from starlette.websockets import WebSocketState

from gymhub.training.records import InMemoryTrainingRecordSource


class FakeWebSocket:
    """Stands in for a Starlette WebSocket when driving the hub directly."""

    def __init__(self, fail_sends: bool = False):
        self.sent: List[Dict[str, Any]] = []
        self.application_state = WebSocketState.CONNECTING
        self.close_code = None
        self.fail_sends = fail_sends

    async def accept(self):
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, data):
        if self.fail_sends:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.application_state = WebSocketState.DISCONNECTED
        self.close_code = code

    def payloads(self, event_type: str) -> List[Any]:
        return [m["payload"] for m in self.sent if m["type"] == event_type]

    def last_users(self) -> List[Dict[str, Any]]:
        updates = self.payloads("ONLINE_USERS_UPDATE")
        assert updates, "no presence update received"
        return updates[-1]["users"]


class FailingRecordSource:
    def __init__(self):
        self.calls = 0

    async def fetch_records(self, user_id):
        self.calls += 1
        raise ConnectionError("training store unavailable")


class BlockingRecordSource:
    """Never answers until released."""

    def __init__(self, records=None):
        self.released = asyncio.Event()
        self.records = records or []

    async def fetch_records(self, user_id):
        await self.released.wait()
        return self.records


@pytest.fixture
def records():
    return InMemoryTrainingRecordSource()
