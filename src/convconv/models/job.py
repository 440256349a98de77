"""Job record and lifecycle states."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class JobStatus(StrEnum):
    """Lifecycle states of a job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})


class JobKind(StrEnum):
    CONVERSION = "conversion"
    TEST_SOURCE = "test-source"


class Job(BaseModel):
    """One tracked unit of conversion or generation work."""

    job_id: str = Field(..., min_length=1)
    kind: JobKind = Field(default=JobKind.CONVERSION)
    status: JobStatus = Field(default=JobStatus.PENDING)
    input_path: str
    output_path: str
    progress: int | None = Field(default=None, ge=0, le=100)
    download_url: str | None = None
    error: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
