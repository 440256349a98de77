"""Synthetic test clip generation on top of the regular job machinery."""

import itertools
import logging
import uuid

from convconv.jobs.orchestrator import ConversionOrchestrator
from convconv.jobs.registry import JobRegistry
from convconv.models.job import JobKind
from convconv.models.test_source import (
    AudioChannel,
    AudioType,
    TestPattern,
    TestSourceBatch,
    TestSourceJob,
    TestSourceOptions,
    TestSourcePreset,
)
from convconv.storage.file_store import StorageService

logger = logging.getLogger(__name__)

BUILT_IN_PRESETS = [
    TestSourcePreset(
        id="broadcast-hd",
        name="Broadcast HD test",
        description="Standard HD broadcast test signal",
        options=TestSourceOptions(
            pattern=TestPattern.SMPTE,
            resolution="1920x1080",
            duration=30,
            frame_rate=29.97,
            audio_type=AudioType.SINE,
            audio_frequency=1000,
            audio_channel=AudioChannel.STEREO,
            sample_rate=48000,
            bit_depth=16,
            format="mp4",
            show_timecode=True,
        ),
    ),
    TestSourcePreset(
        id="web-720p",
        name="Web 720p test",
        description="Standard web video test",
        options=TestSourceOptions(
            pattern=TestPattern.RESOLUTION,
            resolution="1280x720",
            duration=10,
            frame_rate=30,
            audio_type=AudioType.SINE,
            audio_frequency=440,
            audio_channel=AudioChannel.STEREO,
            sample_rate=44100,
            bit_depth=16,
            format="mp4",
        ),
    ),
    TestSourcePreset(
        id="4k-test",
        name="4K UHD test",
        description="Ultra high definition test pattern",
        options=TestSourceOptions(
            pattern=TestPattern.HD,
            resolution="3840x2160",
            duration=10,
            frame_rate=60,
            audio_type=AudioType.SILENCE,
            audio_channel=AudioChannel.STEREO,
            sample_rate=48000,
            bit_depth=24,
            format="mp4",
            show_metadata=True,
        ),
    ),
]


class TestSourceService:
    """Creates test-source jobs and hands them to the orchestrator."""

    __test__ = False

    def __init__(
        self,
        registry: JobRegistry,
        orchestrator: ConversionOrchestrator,
        storage: StorageService,
    ):
        self.registry = registry
        self.orchestrator = orchestrator
        self.storage = storage

    def presets(self) -> list[TestSourcePreset]:
        return [preset.model_copy(deep=True) for preset in BUILT_IN_PRESETS]

    def generate(self, options: TestSourceOptions) -> TestSourceJob:
        """Register a job for ``options`` and start it in the background.

        Must be called from a running event loop.
        """
        job_id = str(uuid.uuid4())
        job = self.registry.create(
            input_path=f"test-source:{options.pattern.value}",
            output_path=str(self.storage.test_source_output_path(job_id, options.format)),
            job_id=job_id,
            kind=JobKind.TEST_SOURCE,
        )
        self.orchestrator.submit_test_source(job.job_id, options)
        logger.info("Queued test source %s (%s)", job.job_id, options.pattern.value)
        return TestSourceJob(job_id=job.job_id, options=options, status=job.status)

    def generate_batch(self, batch: TestSourceBatch) -> list[TestSourceJob]:
        return [self.generate(options) for options in self.expand_batch(batch)]

    def expand_batch(self, batch: TestSourceBatch) -> list[TestSourceOptions]:
        """Cross product of resolutions x patterns x formats over the base options."""
        base = batch.base_options
        variations = batch.variations
        resolutions = variations.resolutions or [base.resolution]
        patterns = variations.patterns or [base.pattern]
        formats = variations.formats or [base.format]
        return [
            base.model_copy(update={"resolution": r, "pattern": p, "format": f})
            for r, p, f in itertools.product(resolutions, patterns, formats)
        ]
