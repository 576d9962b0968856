"""Runtime configuration for geocoin."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="GEOCOIN_", env_file=".env", extra="ignore")

    app_name: str = "geocoin"
    log_level: str = "INFO"
    tile_width: float = Field(default=1e-4, gt=0, description="Grid tile edge length in degrees.")
    neighborhood_size: int = Field(default=8, ge=0, description="Visibility radius in tiles.")
    cache_spawn_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    origin_lat: float = 36.98949379578401
    origin_lng: float = -122.06277128548504
    state_path: str = Field(
        default="geocoin-state.json",
        description="JSON file backing the durable key-value store.",
    )
    state_key: str = "state"
    sensor_lat: float | None = Field(default=None, description="Fixed latitude reported by the sensor command.")
    sensor_lng: float | None = Field(default=None, description="Fixed longitude reported by the sensor command.")
    cache_preview_size: int = 5


settings = Settings()
