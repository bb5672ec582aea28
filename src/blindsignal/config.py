"""Configuration management using Pydantic settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Ping core settings. Every field has a default; env vars are optional."""

    model_config = SettingsConfigDict(
        env_prefix="BLINDSIGNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Identity of the local player (populated from auth in a real client)
    player_id: str = "local-player"

    # Channel backend: True = local simulator, False = MQTT transport
    mock_mode: bool = True

    # Simulator
    mock_ping_interval: float = Field(default=3.0, gt=0.0)
    mock_bounds: float = Field(default=30.0, ge=0.0)  # half-extent of the square
    mock_intensity_min: float = Field(default=1.0, ge=0.0)
    mock_intensity_max: float = Field(default=5.0, ge=0.0)
    mock_seed: int | None = None

    # Emission policy
    movement_ping_interval: float = Field(default=0.5, gt=0.0)
    movement_threshold: float = Field(default=0.05, ge=0.0)
    discharge_cooldown: float = Field(default=0.5, ge=0.0)
    discharge_noise: float = Field(default=15.0, ge=0.0)

    # Fan-out: per-subscriber queue depth before the oldest ping is dropped
    subscriber_queue_size: int = Field(default=100, gt=0)

    # MQTT transport
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_session_id: str = "lobby"
    mqtt_topic: str = "pings"
    mqtt_username: str = ""
    mqtt_password: str = ""

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_intensity_range(self) -> "Settings":
        if self.mock_intensity_min > self.mock_intensity_max:
            raise ValueError(
                f"mock_intensity_min ({self.mock_intensity_min}) exceeds "
                f"mock_intensity_max ({self.mock_intensity_max})"
            )
        return self

