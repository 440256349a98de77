"""Data models for ConvConv."""

from convconv.models.api import (
    ApiResponse,
    ConvertRequest,
    ConvertResponse,
    JobStatusResponse,
    PreviewResponse,
)
from convconv.models.errors import (
    ConvConvError,
    ErrorResponse,
    JobStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from convconv.models.events import ClientMessage, ClientMessageType, EventType, JobEvent
from convconv.models.ffmpeg import ConversionOptions, EncodeResult, ProgressSample
from convconv.models.job import Job, JobKind, JobStatus
from convconv.models.test_source import (
    TestSourceBatch,
    TestSourceJob,
    TestSourceOptions,
    TestSourcePreset,
    TestSourceRequest,
)

__all__ = [
    "ApiResponse",
    "ClientMessage",
    "ClientMessageType",
    "ConvConvError",
    "ConversionOptions",
    "ConvertRequest",
    "ConvertResponse",
    "EncodeResult",
    "ErrorResponse",
    "EventType",
    "Job",
    "JobEvent",
    "JobKind",
    "JobStateError",
    "JobStatus",
    "JobStatusResponse",
    "NotFoundError",
    "PreviewResponse",
    "ProgressSample",
    "StorageError",
    "TestSourceBatch",
    "TestSourceJob",
    "TestSourceOptions",
    "TestSourcePreset",
    "TestSourceRequest",
    "ValidationError",
]
