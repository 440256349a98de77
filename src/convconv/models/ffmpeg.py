"""Encoder options, progress samples and run results."""

from pydantic import Field

from convconv.models.wire import WireModel


class ConversionOptions(WireModel):
    """User-tunable knobs for a conversion."""

    codec: str | None = Field(default=None, description="Generic -c override")
    bitrate: str | None = Field(default=None, description="Video bitrate, e.g. 2M")
    format: str | None = Field(default=None, description="Forced container (-f)")
    scale: str | None = Field(default=None, description="WIDTHxHEIGHT")
    custom_args: list[str] = Field(default_factory=list)


class ProgressSample(WireModel):
    """Point-in-time encoder progress reading."""

    percent: int = Field(default=0, ge=0, le=100)
    time: str = Field(default="00:00:00")
    bitrate: str = Field(default="")
    speed: str = Field(default="")


class EncodeResult(WireModel):
    """Terminal outcome of one encoder invocation."""

    success: bool
    output_path: str | None = None
    duration: float = Field(default=0.0, ge=0)
    error: str | None = None
