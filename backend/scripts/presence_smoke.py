#!/usr/bin/env python3
"""
Manual smoke test against a running hub (python -m gymhub).
"""
import asyncio
import json
import sys

import websockets

BASE = "ws://localhost:8000/ws/presence"


async def smoke(user_id: str = "demo-user"):
    """Join, change status and ping through the presence socket."""
    async with websockets.connect(f"{BASE}?userId={user_id}") as websocket:
        print("✓ Connected to WebSocket")

        # Test 1: join
        print("\n🧪 Test 1: Sending presence:join...")
        await websocket.send(json.dumps({"type": "presence:join", "name": "Smoke Test"}))
        for _ in range(2):
            msg = json.loads(await asyncio.wait_for(websocket.recv(), timeout=2.0))
            print(f"📨 Received {msg['type']}: {msg['payload']}")

        # Test 2: status change
        print("\n🧪 Test 2: Sending presence:status away...")
        await websocket.send(json.dumps({"type": "presence:status", "status": "away"}))
        update = json.loads(await asyncio.wait_for(websocket.recv(), timeout=2.0))
        print(f"✓ Received {update['type']} with {len(update['payload']['users'])} users")

        # Test 3: ping
        print("\n🧪 Test 3: Sending ping...")
        await websocket.send(json.dumps({"type": "ping", "ts": 123456789}))
        pong = json.loads(await asyncio.wait_for(websocket.recv(), timeout=2.0))
        print(f"✓ Received pong: {pong['payload']}")

        print("\n✅ All checks passed!")


if __name__ == "__main__":
    try:
        asyncio.run(smoke(*sys.argv[1:2]))
    except KeyboardInterrupt:
        print("\n\n⚠️  Smoke test interrupted")
    except Exception as e:
        print(f"\n\n❌ Smoke test failed: {e}")
        sys.exit(1)
