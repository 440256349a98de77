"""Upload endpoint."""

from fastapi import APIRouter, Depends, UploadFile

from convconv.api.dependencies import get_app_settings, get_storage
from convconv.config import Settings
from convconv.models.api import ApiResponse
from convconv.models.errors import ValidationError
from convconv.storage.file_store import StorageService

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload")
async def upload_file(
    file: UploadFile,
    storage: StorageService = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    """Store a media file for a later conversion."""
    if not file.filename:
        raise ValidationError("No file provided")

    file_path = storage.save_uploaded_file(file.filename, file.file)

    size_mb = file_path.stat().st_size / (1024 * 1024)
    if size_mb > settings.upload_max_size_mb:
        file_path.unlink(missing_ok=True)
        raise ValidationError(
            f"File too large: {size_mb:.1f}MB exceeds {settings.upload_max_size_mb}MB limit",
            details={"size_mb": size_mb, "max_mb": settings.upload_max_size_mb},
        )

    return ApiResponse(data={"filePath": str(file_path)}).to_wire()
