"""Dependency injection providers for FastAPI."""

from dataclasses import dataclass

from fastapi import Request
from starlette.requests import HTTPConnection

from convconv.config import Settings, get_settings
from convconv.encoding.runner import FFmpegRunner
from convconv.events.broadcaster import EventBroadcaster
from convconv.jobs.orchestrator import ConversionOrchestrator
from convconv.jobs.registry import JobRegistry
from convconv.jobs.test_sources import TestSourceService
from convconv.storage.file_store import StorageService


@dataclass
class Services:
    """Everything the routes need, built once per application."""

    settings: Settings
    storage: StorageService
    registry: JobRegistry
    broadcaster: EventBroadcaster
    runner: FFmpegRunner
    orchestrator: ConversionOrchestrator
    test_sources: TestSourceService


def build_services(settings: Settings | None = None, runner: FFmpegRunner | None = None) -> Services:
    settings = settings or get_settings()
    storage = StorageService(
        upload_dir=settings.upload_dir,
        output_dir=settings.output_dir,
        retention_hours=settings.retention_hours,
        cleanup_interval_minutes=settings.cleanup_interval_minutes,
    )
    registry = JobRegistry()
    broadcaster = EventBroadcaster()
    runner = runner or FFmpegRunner(settings.ffmpeg_binary_path)
    orchestrator = ConversionOrchestrator(
        registry, broadcaster, runner, progress_interval_ms=settings.progress_interval_ms
    )
    return Services(
        settings=settings,
        storage=storage,
        registry=registry,
        broadcaster=broadcaster,
        runner=runner,
        orchestrator=orchestrator,
        test_sources=TestSourceService(registry, orchestrator, storage),
    )


def get_services(connection: HTTPConnection) -> Services:
    return connection.app.state.services


def get_registry(request: Request) -> JobRegistry:
    return get_services(request).registry


def get_storage(request: Request) -> StorageService:
    return get_services(request).storage


def get_runner(request: Request) -> FFmpegRunner:
    return get_services(request).runner


def get_orchestrator(request: Request) -> ConversionOrchestrator:
    return get_services(request).orchestrator


def get_test_sources(request: Request) -> TestSourceService:
    return get_services(request).test_sources


def get_app_settings(request: Request) -> Settings:
    return get_services(request).settings
