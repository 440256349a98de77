"""WebSocket endpoint for live job events."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from convconv.api.dependencies import get_services
from convconv.events.broadcaster import WebSocketConnection
from convconv.models.events import ClientMessage, ClientMessageType, EventType, JobEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


@router.websocket("/ws")
async def job_events(websocket: WebSocket):
    """Accept subscribe/unsubscribe requests and stream events back."""
    broadcaster = get_services(websocket).broadcaster
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    logger.info("WebSocket connected")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                logger.warning("Ignoring non-text socket message")
                continue
            try:
                message = ClientMessage.model_validate_json(raw)
            except PydanticValidationError as e:
                logger.warning("Ignoring malformed socket message: %s", e.errors()[:1])
                continue

            if message.type == ClientMessageType.SUBSCRIBE:
                broadcaster.subscribe(connection, message.job_id)
                ack = JobEvent(type=EventType.SUBSCRIBED, job_id=message.job_id)
                await websocket.send_text(ack.serialize())
            else:
                broadcaster.unsubscribe(connection, message.job_id)
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.remove_connection(connection)
        logger.info("WebSocket disconnected")
