"""Conversion and command preview endpoints."""

from pathlib import Path

from fastapi import APIRouter, Depends

from convconv.api.dependencies import get_orchestrator, get_registry, get_runner, get_storage
from convconv.encoding.runner import FFmpegRunner
from convconv.jobs.orchestrator import ConversionOrchestrator
from convconv.jobs.registry import JobRegistry
from convconv.models.api import ApiResponse, ConvertRequest, ConvertResponse, PreviewResponse
from convconv.models.errors import ValidationError
from convconv.storage.file_store import StorageService

router = APIRouter(prefix="/api", tags=["convert"])


@router.post("/convert")
async def start_conversion(
    request: ConvertRequest,
    storage: StorageService = Depends(get_storage),
    registry: JobRegistry = Depends(get_registry),
    orchestrator: ConversionOrchestrator = Depends(get_orchestrator),
):
    """Create a conversion job and start it in the background."""
    if not Path(request.file).is_file():
        raise ValidationError(
            f"Input file not found: {request.file}", details={"file": request.file}
        )

    output_path = storage.get_output_path(request.file, request.output_format)
    job = registry.create(request.file, str(output_path))
    orchestrator.submit_conversion(job.job_id, request.options)

    response = ConvertResponse(job_id=job.job_id, status=job.status)
    return ApiResponse(data=response.to_wire()).to_wire()


@router.post("/preview")
async def preview_conversion(
    request: ConvertRequest,
    storage: StorageService = Depends(get_storage),
    runner: FFmpegRunner = Depends(get_runner),
):
    """Show the ffmpeg command a conversion would run, without running it."""
    output_path = storage.get_output_path(request.file, request.output_format)
    command = runner.preview(request.file, str(output_path), request.options)
    return ApiResponse(data=PreviewResponse(command=command).to_wire()).to_wire()
