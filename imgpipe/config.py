from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from imgpipe.models import ImageFormat, OriginPolicy

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, frozen=True)

    # General
    project_id: Optional[str] = Field(default=None, description="GCP project ID")
    log_level: str = Field("INFO", description="Root log level, e.g. DEBUG or INFO.")
    app_host: str = Field("0.0.0.0")
    app_port: int = Field(8080)

    # Asset store
    storage_backend: Literal["gcs", "local"] = Field("gcs", description="Where base and watermark images are read from.")
    bucket_name: str = Field("images", description="GCS bucket holding the source assets.")
    local_asset_dir: str = Field("./assets", description="Base directory for the local backend.")

    # Encoding
    png_compression: int = Field(3, ge=0, le=9, description="PNG compression level (0-9), applied to every PNG response.")
    default_quality: int = Field(100, ge=0, le=100, description="JPEG/WEBP quality when the request omits it.")
    default_format: ImageFormat = Field(ImageFormat.JPEG)

    # Watermarks
    default_origin: OriginPolicy = Field(OriginPolicy.LEFT_TOP)
    default_watermark_alpha: float = Field(1.0, description="Watermark opacity when the request omits it.")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
