"""
styleguard engine settings

Configuration management using pydantic settings.
Loads from environment variables with the STYLEGUARD_ prefix; values from a
config file or the command line take precedence over these.
"""

import os
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Engine runtime settings.

    Environment variables:
    - STYLEGUARD_WORKERS: Worker threads for checking files (default: CPU count)
    - STYLEGUARD_MAX_DEPTH: Maximum tree depth before a unit fails (default: 512)
    - STYLEGUARD_MAX_NODES: Maximum nodes per unit (default: unlimited)
    - STYLEGUARD_STRICT: Unknown rule ids are fatal (default: true)
    - STYLEGUARD_TIMEOUT: Seconds before the run is cancelled (default: none)
    - STYLEGUARD_LOG_LEVEL: Logging level for the CLI (default: WARNING)
    - STYLEGUARD_EXCLUDE_RAW: Comma-separated exclude globs
    """

    model_config = SettingsConfigDict(
        env_prefix="STYLEGUARD_",
        env_file=".env",
        extra="ignore",
    )

    workers: Optional[int] = Field(default=None, ge=1)
    max_depth: int = Field(default=512, ge=1)
    max_nodes: Optional[int] = Field(default=None, ge=1)
    strict: bool = True
    timeout: Optional[float] = Field(default=None, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    # Raw string field for comma-separated values
    exclude_raw: str = ""

    @computed_field
    @property
    def exclude(self) -> List[str]:
        """Parse comma-separated exclude globs into list."""
        if not self.exclude_raw:
            return []
        return [v.strip() for v in self.exclude_raw.split(",") if v.strip()]

    @computed_field
    @property
    def effective_workers(self) -> int:
        """Worker count, defaulting to the available parallelism."""
        return self.workers or os.cpu_count() or 1


def load_settings() -> EngineSettings:
    """Read settings from the environment (and a local .env file)."""
    return EngineSettings()
