"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from convconv.api.dependencies import build_services
from convconv.api.middleware import convconv_error_handler
from convconv.api.routes import convert, download, events, jobs, test_source, upload
from convconv.config import Settings
from convconv.encoding.runner import FFmpegRunner
from convconv.models.errors import ConvConvError


def create_app(settings: Settings | None = None, runner: FFmpegRunner | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    services = build_services(settings, runner)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services.storage.initialize()
        services.storage.start_cleanup()
        try:
            yield
        finally:
            await services.orchestrator.shutdown()
            await services.storage.stop_cleanup()

    app = FastAPI(
        title="ConvConv",
        description="Web front-end over ffmpeg with live job progress",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=services.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(ConvConvError, convconv_error_handler)

    # Routes
    app.include_router(upload.router)
    app.include_router(convert.router)
    app.include_router(jobs.router)
    app.include_router(download.router)
    app.include_router(test_source.router)
    app.include_router(events.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": "0.1.0"}

    return app
