"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ConvConv configuration loaded from environment variables."""

    model_config = {"env_prefix": "CONVCONV_", "env_file": ".env", "extra": "ignore"}

    # Server
    host: str = "localhost"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Storage
    upload_dir: Path = Path("./uploads")
    output_dir: Path = Path("./outputs")
    upload_max_size_mb: int = 5120
    retention_hours: float = 24
    cleanup_interval_minutes: float = 60

    # Encoder
    ffmpeg_binary_path: str = "ffmpeg"
    progress_interval_ms: int = 500


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
