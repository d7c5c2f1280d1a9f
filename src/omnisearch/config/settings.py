"""Environment-driven engine settings.

All values are loaded from environment variables (prefix ``OMNISEARCH_``)
or a ``.env`` file at the project root.  Engines receive a
:class:`Settings` instance explicitly; :func:`get_settings` exists for the
CLI only.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimulationSettings(BaseSettings):
    """Latency and failure behaviour of simulated connectors.

    Delays are ``[min, max]`` ranges in milliseconds; each operation sleeps
    for a uniformly sampled value.
    """

    model_config = SettingsConfigDict(env_prefix="OMNISEARCH_SIM_")

    connect_delay_min_ms: int = Field(default=1500, ge=0)
    connect_delay_max_ms: int = Field(default=3000, ge=0)
    search_delay_min_ms: int = Field(default=300, ge=0)
    search_delay_max_ms: int = Field(default=800, ge=0)
    sync_delay_min_ms: int = Field(default=1000, ge=0)
    sync_delay_max_ms: int = Field(default=3000, ge=0)
    disconnect_delay_ms: int = Field(default=500, ge=0)
    failure_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    """Probability that a simulated connect attempt fails."""
    seed: int | None = None
    """Seed for dataset generation and failure sampling (``None`` = random)."""

    @model_validator(mode="after")
    def _ranges_ordered(self) -> SimulationSettings:
        for name in ("connect", "search", "sync"):
            low = getattr(self, f"{name}_delay_min_ms")
            high = getattr(self, f"{name}_delay_max_ms")
            if low > high:
                raise ValueError(f"{name}_delay_min_ms ({low}) exceeds {name}_delay_max_ms ({high})")
        return self


class HealthSettings(BaseSettings):
    """Health monitor tuning knobs."""

    model_config = SettingsConfigDict(env_prefix="OMNISEARCH_HEALTH_")

    interval_seconds: float = Field(default=30.0, gt=0.0, le=3600.0)
    probe_timeout_seconds: float = Field(default=10.0, gt=0.0, le=300.0)
    slow_probe_threshold_ms: float = Field(default=5000.0, gt=0.0)
    """Successful probes slower than this are reported as ``warning``."""


class GoogleSettings(BaseSettings):
    """Endpoints used by credential-backed Google connectors."""

    model_config = SettingsConfigDict(env_prefix="OMNISEARCH_GOOGLE_")

    gmail_api: str = "https://gmail.googleapis.com/gmail/v1"
    calendar_api: str = "https://www.googleapis.com/calendar/v3"
    drive_api: str = "https://www.googleapis.com/drive/v3"
    request_timeout_seconds: float = Field(default=15.0, gt=0.0)


class Settings(BaseSettings):
    """Top-level settings aggregator."""

    model_config = SettingsConfigDict(
        env_prefix="OMNISEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)

    # Per-call bounds applied by the registry and aggregator.
    connect_timeout_seconds: float = Field(default=15.0, gt=0.0, le=300.0)
    search_timeout_seconds: float = Field(default=10.0, gt=0.0, le=300.0)
    sync_timeout_seconds: float = Field(default=15.0, gt=0.0, le=300.0)

    deduplicate_results: bool = True
    """Drop repeated result ids (first occurrence wins) before ranking."""


# Module-level singleton for the CLI; engines take settings explicitly.
settings = Settings()


def get_settings() -> Settings:
    """Return the module-level Settings singleton."""
    return settings
