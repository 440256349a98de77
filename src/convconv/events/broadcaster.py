"""Per-job publish/subscribe for progress events."""

import asyncio
import logging
from typing import Protocol

from starlette.websockets import WebSocket, WebSocketState

from convconv.models.events import EventType, JobEvent
from convconv.models.ffmpeg import ProgressSample

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can receive serialized events."""

    @property
    def is_open(self) -> bool: ...

    async def send(self, message: str) -> None: ...


class WebSocketConnection:
    """Adapts a Starlette WebSocket to the ``Connection`` protocol."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: str) -> None:
        await self.websocket.send_text(message)


class EventBroadcaster:
    """Routes job-scoped events to the connections subscribed to that job.

    There is no backlog: a connection only receives events broadcast while
    it is subscribed and open.
    """

    def __init__(self):
        self._subscribers: dict[str, set[Connection]] = {}

    def subscribe(self, connection: Connection, job_id: str) -> None:
        self._subscribers.setdefault(job_id, set()).add(connection)

    def unsubscribe(self, connection: Connection, job_id: str) -> None:
        subscribers = self._subscribers.get(job_id)
        if subscribers is None:
            return
        subscribers.discard(connection)
        if not subscribers:
            del self._subscribers[job_id]

    def remove_connection(self, connection: Connection) -> None:
        """Drop ``connection`` from every job it was subscribed to."""
        for job_id in list(self._subscribers):
            self.unsubscribe(connection, job_id)

    def subscriber_count(self, job_id: str) -> int:
        return len(self._subscribers.get(job_id, ()))

    def is_subscribed(self, connection: Connection, job_id: str) -> bool:
        return connection in self._subscribers.get(job_id, ())

    async def broadcast_progress(self, job_id: str, sample: ProgressSample) -> int:
        return await self.broadcast(
            JobEvent(type=EventType.PROGRESS, job_id=job_id, data=sample.to_wire())
        )

    async def broadcast_complete(self, job_id: str, download_url: str) -> int:
        return await self.broadcast(
            JobEvent(type=EventType.COMPLETE, job_id=job_id, data={"downloadUrl": download_url})
        )

    async def broadcast_error(self, job_id: str, error: str) -> int:
        return await self.broadcast(
            JobEvent(type=EventType.ERROR, job_id=job_id, data={"error": error})
        )

    async def broadcast(self, event: JobEvent) -> int:
        """Send ``event`` to every open subscriber; returns how many got it."""
        targets = [c for c in self._subscribers.get(event.job_id, ()) if c.is_open]
        if not targets:
            return 0
        message = event.serialize()
        results = await asyncio.gather(*(self._deliver(c, message) for c in targets))
        return sum(results)

    async def _deliver(self, connection: Connection, message: str) -> bool:
        try:
            await connection.send(message)
        except Exception as e:
            logger.warning("Dropping event for a connection that failed to receive it: %s", e)
            return False
        return True
