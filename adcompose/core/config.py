"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    app_name: str = Field(default="Ad Compose", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Optional log file path (rotated, zipped)")

    # ========================================================================
    # Composition Defaults
    # ========================================================================
    default_duration_seconds: float = Field(default=30.0, description="Default target video duration in seconds")
    default_resolution: str = Field(default="1080p", description="Default output resolution (480p, 720p, 1080p, 4k)")
    default_aspect_ratio: str = Field(
        default="portrait", description="Default aspect ratio (portrait, landscape, square)"
    )
    default_output_format: str = Field(default="mp4", description="Default container format (mp4, mov)")
    default_transition: str = Field(default="fade", description="Transition applied at the start of every clip")
    default_music_volume: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Music level used when the caller does not specify one"
    )

    # ========================================================================
    # Renderer Settings
    # ========================================================================
    renderer_url: Optional[str] = Field(
        default=None,
        description="Render service endpoint that accepts composition requests. Set via RENDERER_URL env var.",
    )
    renderer_api_key: Optional[str] = Field(default=None, description="Bearer token for the render service")
    renderer_timeout_seconds: float = Field(
        default=600.0, description="Timeout for a single render request (default: 600)"
    )

    # ========================================================================
    # Compile Coordination & Usage
    # ========================================================================
    compile_timeout_seconds: float = Field(
        default=600.0,
        description="Age after which an in-flight compile flag is considered stale and cleared (default: 600)",
    )
    render_unit_cost: float = Field(default=0.1, description="Cost recorded per billing unit of rendered video")
    render_billing_block_seconds: float = Field(
        default=30.0, description="Seconds of output video per billing unit (default: 30)"
    )
    max_parallel_fetches: int = Field(
        default=3, description="Maximum number of concurrent upstream reads when loading a project (default: 3)"
    )

    # ========================================================================
    # Storage Settings
    # ========================================================================
    storage_path: str = Field(default="storage/projects", description="Storage path for project records")
    asset_storage_path: str = Field(default="storage/assets", description="Storage path for rendered videos")
    download_timeout_seconds: float = Field(default=120.0, description="Timeout for downloading rendered output")


# Global settings instance
settings = Settings()
