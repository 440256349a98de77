"""Event envelopes exchanged over the event socket."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from convconv.models.wire import WireModel


class EventType(StrEnum):
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"
    SUBSCRIBED = "subscribed"


class JobEvent(WireModel):
    """Typed envelope ``{type, jobId, data}`` delivered to subscribers."""

    type: EventType
    job_id: str = Field(..., min_length=1)
    data: dict[str, Any] | None = None

    def serialize(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ClientMessageType(StrEnum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class ClientMessage(WireModel):
    """Request sent by a socket client, e.g. ``{type: "subscribe", jobId}``."""

    type: ClientMessageType
    job_id: str = Field(..., min_length=1)
