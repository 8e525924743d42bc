"""Configuration management using Pydantic settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Run tunables loaded from environment variables.

    Every component takes explicit overrides in its constructor and falls
    back to these values, so tests can build isolated sessions without
    touching the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Threat / debt escalation
    threat_base_rate: float = 1.0          # live threat per second
    threat_debt_rate: float = 0.5          # debt per second while accumulating
    threat_debt_per_kill: float = 2.0
    threat_debt_per_pickup: float = 5.0
    threat_growth_multiplier: float = 1.0

    # Encounter spawner
    spawn_base_interval: float = 2.0       # seconds at zero threat
    spawn_min_interval: float = 0.2        # hard floor on cadence
    spawn_radius: float = 15.0
    run_back_spawn_rate_multiplier: float = 1.5
    run_back_spawn_radius_multiplier: float = 0.6
    run_back_enemy_speed_multiplier: float = 1.2
    final_stand_spawn_rate_multiplier: float = 0.7
    final_stand_spawn_radius_multiplier: float = 0.5
    enemy_move_speed: float = 5.0

    # Ship issues
    issue_min_count: int = Field(default=3, ge=0)
    issue_max_count: int = Field(default=3, ge=0)
    repair_duration: float = 3.0

    # Shared cargo / deployment points
    cargo_slots: int = 6
    points_per_salvage: int = 10

    # Return zone
    expected_players: int = 0              # 0 = unknown until set

    @model_validator(mode="after")
    def _check_issue_counts(self) -> "Settings":
        if self.issue_min_count > self.issue_max_count:
            raise ValueError(
                f"issue_min_count ({self.issue_min_count}) must not exceed "
                f"issue_max_count ({self.issue_max_count})"
            )
        return self


settings = Settings()
