# app/notifications/generation_progress.py
import asyncio
import json
import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, DefaultDict, Set
from uuid import UUID

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

log = logging.getLogger("ws")

EVENT_TYPE = "generation_progress"

_ENCODERS = {
    Enum: lambda member: member.value,
    datetime: datetime.isoformat,
    date: date.isoformat,
    UUID: str,
    Decimal: float,
}

ProgressSink = Callable[[str, str, str], Awaitable[None]]


def encode_event(event: dict) -> str:
    return json.dumps(jsonable_encoder(event, custom_encoder=_ENCODERS), ensure_ascii=False, separators=(",", ":"))


class GenerationProgressManager:
    """Fan progress events of a topic's generation run out to its listeners."""

    def __init__(self) -> None:
        self.connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)

    async def connect(self, topic_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections[topic_id].add(websocket)
        log.info("Progress listener joined topic %s (%s open)", topic_id, len(self.connections[topic_id]))

    def disconnect(self, topic_id: int, websocket: WebSocket) -> None:
        listeners = self.connections.get(topic_id)
        if listeners is None:
            return
        listeners.discard(websocket)
        if not listeners:
            del self.connections[topic_id]
        log.info("Progress listener left topic %s", topic_id)

    async def _deliver(self, websocket: WebSocket, frame: str) -> bool:
        if websocket.application_state != WebSocketState.CONNECTED:
            return False
        try:
            await websocket.send_text(frame)
        except Exception as exc:
            log.warning("Dropping progress listener after send failure: %s", exc)
            return False
        return True

    async def publish(self, topic_id: int, format_name: str, status: str, message: str) -> None:
        listeners = list(self.connections.get(topic_id, ()))
        if not listeners:
            return

        frame = encode_event(
            {
                "type": EVENT_TYPE,
                "topic_id": topic_id,
                "format": format_name,
                "status": status,
                "message": message,
            }
        )
        delivered = await asyncio.gather(*(self._deliver(ws, frame) for ws in listeners))
        for websocket, ok in zip(listeners, delivered):
            if not ok:
                self.disconnect(topic_id, websocket)

    def sink_for(self, topic_id: int) -> ProgressSink:
        """Progress callback bound to ``topic_id``, as expected by ``generate_all``."""

        async def _sink(format_name: str, status: str, message: str) -> None:
            await self.publish(topic_id, format_name, status, message)

        return _sink


generation_progress_manager = GenerationProgressManager()
