"""Job status and cancellation endpoints."""

from fastapi import APIRouter, Depends

from convconv.api.dependencies import get_orchestrator, get_registry
from convconv.jobs.orchestrator import ConversionOrchestrator
from convconv.jobs.registry import JobRegistry
from convconv.models.api import ApiResponse, JobStatusResponse
from convconv.models.errors import NotFoundError

router = APIRouter(prefix="/api", tags=["jobs"])


@router.get("/jobs/{job_id}")
async def get_job_status(job_id: str, registry: JobRegistry = Depends(get_registry)):
    """Poll the current state of a job."""
    job = registry.get(job_id)
    if not job:
        raise NotFoundError(f"Job {job_id} not found")
    return ApiResponse(data=JobStatusResponse.from_job(job).to_wire()).to_wire()


@router.delete("/jobs/{job_id}")
async def cancel_job(
    job_id: str,
    orchestrator: ConversionOrchestrator = Depends(get_orchestrator),
):
    """Cancel a pending or running job."""
    job = await orchestrator.cancel(job_id)
    if not job:
        raise NotFoundError(f"Job {job_id} not found")
    return ApiResponse(data=JobStatusResponse.from_job(job).to_wire()).to_wire()
