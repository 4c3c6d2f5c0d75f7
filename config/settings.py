"""Global configuration management using pydantic-settings.

Values are loaded from environment variables (or a local .env file) with
strict type validation. The lru_cache singleton keeps a single validated
configuration for the lifetime of a run.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GlobalConfig(BaseSettings):
    """Centralized configuration with environment variable binding.

    Attributes:
        app_name: Application identifier for logging.
        environment: Deployment environment (development/staging/production).
        debug: Enable verbose loguru backtraces.
        log_level: Minimum log level for output filtering.
        log_dir: Directory path for structured JSON log files.
        log_rotation: Log file rotation interval.
        log_retention: Log file retention period.
        source_url: Page holding the seismic event table.
        headless: Run the browser without a window.
        request_timeout_ms: Page load timeout in milliseconds.
        settle_delay_ms: Extra wait after load for late table rendering.
        user_agent: User-agent string presented by the browser context.
        snapshot_path: JSON file holding the previous run's row signatures.
        strong_magnitude: Minimum magnitude of a "strong" quake.
        major_magnitude: Minimum magnitude of a "major" quake (always shown).
        recent_limit: Number of most recent strong quakes kept.
        report_limit: Maximum number of lines in the strong-quake list.
        location_cell_index: Row cell holding the "N km X of Place" text.
        depth_cell_index: Row cell holding the depth value.
        color_output: Wrap report lines in ANSI color codes.
        export_reports: Write Excel and HTML exports after each run.
        output_dir: Directory for exported reports.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Metadata
    app_name: str = Field(default="QuakePulse", description="Application identifier")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Minimum log level"
    )
    log_dir: Path = Field(default=Path("logs"), description="Log output directory")
    log_rotation: str = Field(default="1 week", description="Log rotation interval")
    log_retention: str = Field(default="1 month", description="Log retention period")

    # Source Configuration
    source_url: str = Field(
        default="https://earthquake.phivolcs.dost.gov.ph/",
        description="Page holding the earthquake table",
    )
    headless: bool = Field(default=True, description="Run browser in headless mode")
    request_timeout_ms: int = Field(
        default=30000, ge=5000, le=120000, description="Page load timeout in milliseconds"
    )
    settle_delay_ms: int = Field(
        default=2000, ge=0, le=30000, description="Wait after load before reading the table"
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="Browser user-agent",
    )

    # Snapshot Persistence
    snapshot_path: Path = Field(
        default=Path("last_quakes.json"), description="Previous-run signature file"
    )

    # Selection Thresholds
    strong_magnitude: float = Field(default=4.0, ge=0.0, le=10.0)
    major_magnitude: float = Field(default=5.0, ge=0.0, le=10.0)
    recent_limit: int = Field(default=20, ge=1, le=500)
    report_limit: int = Field(default=30, ge=1, le=500)

    # Fixed cell positions used for location and depth
    location_cell_index: int = Field(default=5, ge=0)
    depth_cell_index: int = Field(default=3, ge=0)

    # Output Configuration
    color_output: bool = Field(default=True, description="Colorize report lines")
    export_reports: bool = Field(default=False, description="Write Excel/HTML exports")
    output_dir: Path = Field(default=Path("output"), description="Report output directory")

    @field_validator("log_dir", "output_dir", "snapshot_path", mode="before")
    @classmethod
    def ensure_path(cls, value: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(value) if isinstance(value, str) else value

    @model_validator(mode="after")
    def validate_thresholds(self) -> "GlobalConfig":
        """Keep the major tier inside the strong tier and the report cap above the recent cap."""
        if self.major_magnitude < self.strong_magnitude:
            raise ValueError("major_magnitude must be >= strong_magnitude")
        if self.report_limit < self.recent_limit:
            raise ValueError("report_limit must be >= recent_limit")
        return self


@lru_cache(maxsize=1)
def get_config() -> GlobalConfig:
    """Retrieve the singleton GlobalConfig instance.

    Returns:
        GlobalConfig: The validated configuration instance.
    """
    return GlobalConfig()
