"""Download endpoint."""

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from convconv.api.dependencies import get_registry
from convconv.jobs.registry import JobRegistry
from convconv.models.errors import NotFoundError
from convconv.models.job import JobStatus

router = APIRouter(prefix="/api", tags=["download"])


@router.get("/download/{job_id}")
async def download_output(job_id: str, registry: JobRegistry = Depends(get_registry)):
    """Stream the finished output file."""
    job = registry.get(job_id)
    if not job or job.status != JobStatus.COMPLETED:
        raise NotFoundError("File not ready", details={"job_id": job_id})

    output = Path(job.output_path)
    if not output.is_file():
        raise NotFoundError("Output file not found", details={"job_id": job_id})

    return FileResponse(path=output, filename=output.name)
