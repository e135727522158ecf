import json

import pytest
from starlette.websockets import WebSocketState

from app.notifications.generation_progress import GenerationProgressManager
from tests.utils import DummyWebSocket


@pytest.mark.asyncio
async def test_events_reach_every_listener_of_the_topic():
    manager = GenerationProgressManager()
    ws_a, ws_b, other = DummyWebSocket(), DummyWebSocket(), DummyWebSocket()
    await manager.connect(7, ws_a)
    await manager.connect(7, ws_b)
    await manager.connect(8, other)

    await manager.sink_for(7)("code", "starting", "[AI] Starting: Code Examples")

    expected = {
        "type": "generation_progress",
        "topic_id": 7,
        "format": "code",
        "status": "starting",
        "message": "[AI] Starting: Code Examples",
    }
    assert ws_a.accepted and ws_b.accepted
    assert json.loads(ws_a.sent[0]) == expected
    assert json.loads(ws_b.sent[0]) == expected
    assert other.sent == []


@pytest.mark.asyncio
async def test_dead_sockets_are_dropped():
    manager = GenerationProgressManager()
    alive, broken, closed = DummyWebSocket(), DummyWebSocket(fail=True), DummyWebSocket()
    for ws in (alive, broken, closed):
        await manager.connect(1, ws)
    closed.application_state = WebSocketState.DISCONNECTED

    await manager.publish(1, "text", "completed", "[AI] Completed: Text & Audio")

    assert manager.connections[1] == {alive}
    assert len(alive.sent) == 1


@pytest.mark.asyncio
async def test_publish_without_listeners_is_a_no_op():
    manager = GenerationProgressManager()
    await manager.publish(3, "audio", "failed", "[AI] Failed: Audio - boom")
    assert manager.connections == {}


@pytest.mark.asyncio
async def test_disconnect_removes_empty_topics():
    manager = GenerationProgressManager()
    ws = DummyWebSocket()
    await manager.connect(2, ws)

    manager.disconnect(2, ws)
    manager.disconnect(2, ws)

    assert 2 not in manager.connections
