"""Request and response bodies for the HTTP API."""

from typing import Any

from pydantic import Field

from convconv.models.ffmpeg import ConversionOptions
from convconv.models.job import Job, JobStatus
from convconv.models.wire import WireModel


class ApiResponse(WireModel):
    """Envelope shared by every successful JSON response."""

    success: bool = True
    data: Any = None
    error: str | None = None


class ConvertRequest(WireModel):
    file: str = Field(..., min_length=1, description="Path returned by the upload endpoint")
    output_format: str = Field(..., pattern=r"^[A-Za-z0-9]+$", max_length=10)
    options: ConversionOptions = Field(default_factory=ConversionOptions)


class ConvertResponse(WireModel):
    job_id: str
    status: JobStatus


class JobStatusResponse(WireModel):
    """Polling view of a job."""

    job_id: str
    status: JobStatus
    progress: int | None = None
    download_url: str | None = None
    error: str | None = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusResponse":
        return cls(
            job_id=job.job_id,
            status=job.status,
            progress=job.progress,
            download_url=job.download_url,
            error=job.error,
        )


class PreviewResponse(WireModel):
    command: str
