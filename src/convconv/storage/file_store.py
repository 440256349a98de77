"""Upload/output file storage with time-based retention."""

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import BinaryIO

from convconv.config import get_settings
from convconv.models.errors import StorageError

logger = logging.getLogger(__name__)


class StorageService:
    """Owns the upload and output directories.

    Files older than ``retention_hours`` are deleted by a periodic cleanup
    task; job records are never touched here.
    """

    def __init__(
        self,
        upload_dir: Path | None = None,
        output_dir: Path | None = None,
        retention_hours: float | None = None,
        cleanup_interval_minutes: float | None = None,
    ):
        settings = get_settings()
        if retention_hours is None:
            retention_hours = settings.retention_hours
        if cleanup_interval_minutes is None:
            cleanup_interval_minutes = settings.cleanup_interval_minutes
        self.upload_dir = Path(upload_dir if upload_dir is not None else settings.upload_dir)
        self.output_dir = Path(output_dir if output_dir is not None else settings.output_dir)
        self.retention_seconds = retention_hours * 3600
        self.cleanup_interval_seconds = cleanup_interval_minutes * 60
        self._cleanup_task: asyncio.Task | None = None

    def initialize(self) -> None:
        """Create the storage directories."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def save_uploaded_file(self, filename: str, fileobj: BinaryIO) -> Path:
        """Store an upload as ``<ms timestamp>_<basename>`` and return its path."""
        name = Path(filename).name
        if not name:
            raise StorageError("Upload has no usable filename", details={"filename": filename})
        file_path = self.upload_dir / f"{int(time.time() * 1000)}_{name}"
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                shutil.copyfileobj(fileobj, f)
        except OSError as e:
            raise StorageError(f"Failed to store upload: {e}", details={"path": str(file_path)})
        logger.info("Stored upload %s", file_path)
        return file_path

    def get_output_path(self, input_path: str, output_format: str) -> Path:
        """Derive ``<output_dir>/<input stem>_output.<format>``."""
        stem = Path(input_path).name.split(".")[0] or "output"
        return self.output_dir / f"{stem}_output.{output_format}"

    def test_source_output_path(self, job_id: str, output_format: str) -> Path:
        return self.output_dir / f"test_{job_id}.{output_format}"

    def cleanup_expired(self, now: float | None = None) -> int:
        """Delete files past retention in both directories; returns the count."""
        now = now if now is not None else time.time()
        removed = 0
        for directory in (self.upload_dir, self.output_dir):
            if not directory.is_dir():
                continue
            for path in directory.iterdir():
                try:
                    if path.is_file() and now - path.stat().st_mtime > self.retention_seconds:
                        path.unlink()
                        removed += 1
                        logger.info("Deleted old file: %s", path)
                except OSError as e:
                    logger.error("Error cleaning %s: %s", path, e)
        return removed

    def start_cleanup(self) -> None:
        """Run cleanup now and then every ``cleanup_interval_minutes``."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop(), name="storage-cleanup")

    async def stop_cleanup(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        await asyncio.gather(self._cleanup_task, return_exceptions=True)
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        while True:
            logger.info("Running file cleanup...")
            self.cleanup_expired()
            await asyncio.sleep(self.cleanup_interval_seconds)
