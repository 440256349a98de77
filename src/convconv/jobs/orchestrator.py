"""Conversion orchestrator: drives one job from pending to a terminal state."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from convconv.encoding.progress import ProgressThrottle
from convconv.encoding.runner import FFmpegRunner, ProgressCallback
from convconv.events.broadcaster import EventBroadcaster
from convconv.jobs.registry import JobRegistry
from convconv.models.errors import JobStateError
from convconv.models.ffmpeg import ConversionOptions, EncodeResult, ProgressSample
from convconv.models.job import Job
from convconv.models.test_source import TestSourceOptions

logger = logging.getLogger(__name__)

# Wraps a runner call; receives the progress callback to pass through
Invocation = Callable[[ProgressCallback], Awaitable[EncodeResult]]

UNKNOWN_ERROR = "Unknown error"
CANCELLED_MESSAGE = "Job cancelled"


def download_url_for(job_id: str) -> str:
    return f"/api/download/{job_id}"


class ConversionOrchestrator:
    """Runs jobs in supervised background tasks.

    Each job gets at most one task, hence at most one encoder process. The
    task is the only writer of that job's progress and terminal state.
    """

    def __init__(
        self,
        registry: JobRegistry,
        broadcaster: EventBroadcaster,
        runner: FFmpegRunner,
        progress_interval_ms: int = 500,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.runner = runner
        self.progress_interval_ms = progress_interval_ms
        self._tasks: dict[str, asyncio.Task] = {}

    def submit_conversion(
        self, job_id: str, options: ConversionOptions | None = None
    ) -> asyncio.Task:
        """Start converting ``job_id`` in the background and return at once."""

        def invoke(on_progress: ProgressCallback) -> Awaitable[EncodeResult]:
            job = self.registry.get(job_id)
            return self.runner.convert(job.input_path, job.output_path, options, on_progress)

        return self._spawn(job_id, invoke)

    def submit_test_source(self, job_id: str, options: TestSourceOptions) -> asyncio.Task:
        """Start generating a synthetic clip for ``job_id`` in the background."""

        def invoke(on_progress: ProgressCallback) -> Awaitable[EncodeResult]:
            job = self.registry.get(job_id)
            return self.runner.generate(options, job.output_path, on_progress)

        return self._spawn(job_id, invoke)

    def is_running(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    async def run(self, job_id: str, invoke: Invocation) -> Job | None:
        """Execute one job to completion. No-op for unknown jobs."""
        job = self.registry.start(job_id)
        if job is None:
            logger.warning("Cannot start unknown job %s", job_id)
            return None

        throttle = ProgressThrottle(self.progress_interval_ms)
        initial = ProgressSample(percent=0)
        throttle.accept(initial)
        await self.broadcaster.broadcast_progress(job_id, initial)

        async def on_progress(sample: ProgressSample) -> None:
            if not throttle.accept(sample):
                return
            self.registry.set_progress(job_id, sample.percent)
            await self.broadcaster.broadcast_progress(job_id, sample)

        result = await invoke(on_progress)

        if result.success:
            download_url = download_url_for(job_id)
            job = self.registry.complete(job_id, download_url)
            logger.info("Job %s completed (%.1fs of media)", job_id, result.duration)
            await self.broadcaster.broadcast_complete(job_id, download_url)
        else:
            error = result.error or UNKNOWN_ERROR
            job = self.registry.fail(job_id, error)
            logger.error("Job %s failed: %s", job_id, error.splitlines()[0])
            await self.broadcaster.broadcast_error(job_id, error)
        return job

    async def cancel(self, job_id: str) -> Job | None:
        """Stop a pending or running job and mark it cancelled.

        Raises JobStateError if the job already finished.
        """
        job = self.registry.get(job_id)
        if job is None:
            return None
        if job.status.is_terminal:
            raise JobStateError(f"Job {job_id} already {job.status.value}")

        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        # A task cancelled before its first step never reaches its own handler
        await self._settle(job_id, self.registry.cancel, CANCELLED_MESSAGE)
        return self.registry.get(job_id)

    async def shutdown(self) -> None:
        """Cancel every job still running."""
        running = {job_id: task for job_id, task in self._tasks.items() if not task.done()}
        for task in running.values():
            task.cancel()
        if running:
            await asyncio.gather(*running.values(), return_exceptions=True)
        for job_id in running:
            await self._settle(job_id, self.registry.cancel, CANCELLED_MESSAGE)

    def _spawn(self, job_id: str, invoke: Invocation) -> asyncio.Task:
        if self.is_running(job_id):
            raise JobStateError(f"Job {job_id} is already running")
        task = asyncio.create_task(self._supervise(job_id, invoke), name=f"job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda t: self._forget(job_id, t))
        return task

    def _forget(self, job_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _supervise(self, job_id: str, invoke: Invocation) -> None:
        """Error boundary around ``run``; a job never stays stuck in processing."""
        try:
            await self.run(job_id, invoke)
        except asyncio.CancelledError:
            await self._settle(job_id, self.registry.cancel, CANCELLED_MESSAGE)
            raise
        except Exception as e:
            logger.exception("Unexpected error while processing job %s", job_id)
            await self._settle(job_id, self.registry.fail, f"Unexpected error: {e}")

    async def _settle(
        self, job_id: str, transition: Callable[[str, str], Job | None], message: str
    ) -> None:
        """Force a terminal state unless the job already reached one."""
        job = self.registry.get(job_id)
        if job is None or job.status.is_terminal:
            return
        try:
            transition(job_id, message)
        except JobStateError as e:
            logger.warning("Could not settle job %s: %s", job_id, e)
            return
        await self.broadcaster.broadcast_error(job_id, message)
