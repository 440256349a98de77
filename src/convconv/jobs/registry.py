"""In-memory job registry, the single source of truth for job state."""

import logging
import threading
import uuid
from datetime import UTC, datetime

from convconv.models.errors import JobStateError
from convconv.models.job import Job, JobKind, JobStatus

logger = logging.getLogger(__name__)

# Legal source states for each transition
_START_FROM = frozenset({JobStatus.PENDING})
_COMPLETE_FROM = frozenset({JobStatus.PROCESSING})
_FAIL_FROM = frozenset({JobStatus.PENDING, JobStatus.PROCESSING})
_CANCEL_FROM = frozenset({JobStatus.PENDING, JobStatus.PROCESSING})
_PROGRESS_FROM = frozenset({JobStatus.PROCESSING})


class JobRegistry:
    """Stores job records and applies lifecycle transitions.

    Records are only changed through the transition methods below; callers
    always receive copies, so nothing outside the registry can mutate state.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}
        self._lock = threading.RLock()

    def create(
        self,
        input_path: str,
        output_path: str,
        job_id: str | None = None,
        kind: JobKind = JobKind.CONVERSION,
    ) -> Job:
        """Register a new pending job."""
        job = Job(
            job_id=job_id or str(uuid.uuid4()),
            kind=kind,
            status=JobStatus.PENDING,
            input_path=str(input_path),
            output_path=str(output_path),
            created_at=datetime.now(UTC),
        )
        with self._lock:
            if job.job_id in self._jobs:
                raise JobStateError(f"Job {job.job_id} already exists")
            self._jobs[job.job_id] = job
        logger.info("Created %s job %s", kind.value, job.job_id)
        return job.model_copy()

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy() if job else None

    def list_jobs(self) -> list[Job]:
        with self._lock:
            return [job.model_copy() for job in self._jobs.values()]

    def start(self, job_id: str) -> Job | None:
        return self._apply(
            job_id,
            _START_FROM,
            status=JobStatus.PROCESSING,
            started_at=datetime.now(UTC),
        )

    def complete(self, job_id: str, download_url: str) -> Job | None:
        return self._apply(
            job_id,
            _COMPLETE_FROM,
            status=JobStatus.COMPLETED,
            completed_at=datetime.now(UTC),
            download_url=download_url,
            progress=100,
        )

    def fail(self, job_id: str, error: str) -> Job | None:
        """Mark the job failed, keeping ``error`` and any progress so far."""
        return self._apply(
            job_id,
            _FAIL_FROM,
            status=JobStatus.FAILED,
            completed_at=datetime.now(UTC),
            error=error,
        )

    def cancel(self, job_id: str, reason: str = "Job cancelled") -> Job | None:
        return self._apply(
            job_id,
            _CANCEL_FROM,
            status=JobStatus.CANCELLED,
            completed_at=datetime.now(UTC),
            error=reason,
        )

    def set_progress(self, job_id: str, percent: int) -> Job | None:
        return self._apply(job_id, _PROGRESS_FROM, progress=max(0, min(100, int(percent))))

    def _apply(self, job_id: str, allowed_from: frozenset[JobStatus], **fields) -> Job | None:
        """Merge ``fields`` into the record if its status allows it."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.status not in allowed_from:
                target = fields.get("status", "progress update")
                raise JobStateError(
                    f"Job {job_id} cannot move from {job.status.value} to {target}",
                    details={"job_id": job_id, "status": job.status.value},
                )
            updated = job.model_copy(update=fields)
            self._jobs[job_id] = updated
        if "status" in fields:
            logger.info("Job %s: %s -> %s", job_id, job.status.value, updated.status.value)
        return updated.model_copy()
