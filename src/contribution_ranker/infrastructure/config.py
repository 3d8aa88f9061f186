"""Application configuration, loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Centrality
    damping_factor: float = Field(default=0.85, gt=0.0, lt=1.0)
    convergence_tolerance: float = Field(default=0.001, gt=0.0)
    max_iterations: int = Field(default=100, ge=1)

    # Complexity
    cyclomatic_ceiling: int = Field(default=20, ge=1)
    nesting_ceiling: int = Field(default=6, ge=1)
    size_threshold_loc: int = Field(default=500, ge=0)
    size_penalty_span_loc: int = Field(default=1500, ge=1)
    complexity_batch_size: int = Field(default=64, ge=1)

    # Structural metrics extraction
    metrics_concurrency: int = Field(default=8, ge=1)

    # Contribution path
    candidate_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    min_path_length: int = Field(default=10, ge=1)
    max_path_length: int = Field(default=15, ge=1)
    milestone_interval: int = Field(default=3, ge=3, le=4)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @model_validator(mode="after")
    def _path_bounds(self) -> Settings:
        if self.min_path_length > self.max_path_length:
            msg = "min_path_length must not exceed max_path_length."
            raise ValueError(msg)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
