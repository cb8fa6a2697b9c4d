from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nearpay.models import Location


class ProximitySettings(BaseSettings):
    radius_m: float = Field(
        default=700.0,
        ge=0.0,
        description="Closed-interval radius in meters defining 'nearby'",
    )
    near_m: float = Field(default=100.0, ge=0.0)
    mid_m: float = Field(default=300.0, ge=0.0)
    fallback_lat: float = Field(default=16.922251, ge=-90.0, le=90.0)
    fallback_lng: float = Field(default=82.000117, ge=-180.0, le=180.0)

    model_config = SettingsConfigDict(env_prefix="PROXIMITY_")

    @model_validator(mode="after")
    def check_bands(self) -> Self:
        if not self.near_m <= self.mid_m <= self.radius_m:
            raise ValueError(
                f"Proximity bands must satisfy near <= mid <= radius, got "
                f"{self.near_m} / {self.mid_m} / {self.radius_m}"
            )
        return self

    @property
    def fallback_location(self) -> Location:
        return Location(lat=self.fallback_lat, lng=self.fallback_lng)


class SyncSettings(BaseSettings):
    interval_seconds: float = Field(
        default=3.0,
        gt=0.0,
        description="Sim-seconds between cross-device sync ticks",
    )
    min_interval_ms: int = Field(
        default=3000,
        ge=0,
        description="A sync runs only when more than this has passed since the last one",
    )
    notification_ttl_ms: int = Field(default=300_000, gt=0)
    recent_login_window_ms: int = Field(default=300_000, gt=0)
    new_user_request_window_ms: int = Field(default=600_000, gt=0)
    recent_login_capacity: int = Field(default=10, ge=1)
    external_login_capacity: int = Field(default=20, ge=1)

    model_config = SettingsConfigDict(env_prefix="SYNC_")


class SimulationSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"
    seed: int | None = None
    username: str = Field(default="DemoUser", min_length=1)
    duration_seconds: float = Field(
        default=600.0,
        gt=0.0,
        description="Simulated seconds the demo runs for",
    )
    movement_interval_seconds: float = Field(default=15.0, gt=0.0)
    movement_jitter_deg: float = Field(
        default=0.0001,
        ge=0.0,
        le=0.01,
        description="Full span of the random per-axis offset applied on each movement tick",
    )
    location_drift_interval_seconds: float = Field(default=30.0, gt=0.0)
    proximity_check_interval_seconds: float = Field(default=10.0, gt=0.0)
    external_detection_interval_seconds: float = Field(default=10.0, gt=0.0)
    extra_population: int = Field(
        default=0,
        ge=0,
        le=500,
        description="Faker-generated users added around the demo center",
    )

    model_config = SettingsConfigDict(env_prefix="SIM_")


class StorageSettings(BaseSettings):
    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = Field(
        default="nearpay.db",
        description="SQLite file backing the shared registry; ':memory:' keeps it in process",
    )

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class Settings(BaseSettings):
    proximity: ProximitySettings = Field(default_factory=ProximitySettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
