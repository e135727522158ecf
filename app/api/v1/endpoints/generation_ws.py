# Fichier: app/api/v1/endpoints/generation_ws.py
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.api.v1.dependencies import get_progress_manager
from app.notifications.generation_progress import GenerationProgressManager

router = APIRouter()
log = logging.getLogger(__name__)


@router.websocket("/ws/topics/{topic_id}/generation")
async def generation_progress_ws(
    websocket: WebSocket,
    topic_id: int,
    progress: GenerationProgressManager = Depends(get_progress_manager),
):
    await progress.connect(topic_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        progress.disconnect(topic_id, websocket)
        log.info("Generation listener left topic %s", topic_id)
