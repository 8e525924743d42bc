"""Mission configuration and the per-session mission record."""

from __future__ import annotations

from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from .cargo import ItemKind


class MissionConfig(BaseModel):
    """Static description of one mission. Validated on construction."""
    mission_id: str = ""
    display_name: str = ""
    required_power_cores: int = Field(default=2, ge=0)
    required_fuel_gels: int = Field(default=2, ge=0)
    starting_threat: float = Field(default=0.0, ge=0)
    threat_growth_multiplier: float = Field(default=1.0, ge=0)

    def requirements(self) -> dict[ItemKind, int]:
        """Objective thresholds keyed by item kind."""
        return {
            ItemKind.POWER_CORE: self.required_power_cores,
            ItemKind.FUEL_GEL: self.required_fuel_gels,
        }


class MissionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAIL = "fail"


class MissionSession:
    """Which mission is being played and how it ended."""

    def __init__(self) -> None:
        self.current: MissionConfig | None = None
        self.state = MissionState.NOT_STARTED

    def start(self, config: MissionConfig) -> None:
        self.current = config
        self.state = MissionState.IN_PROGRESS
        logger.info(f"[MissionSession] Started mission {config.mission_id or '<unnamed>'}")

    def end_success(self) -> None:
        self.state = MissionState.SUCCESS
        logger.info("[MissionSession] Mission SUCCESS")

    def end_fail(self) -> None:
        self.state = MissionState.FAIL
        logger.info("[MissionSession] Mission FAIL")

    def clear(self) -> None:
        self.current = None
        self.state = MissionState.NOT_STARTED

    def get_state(self) -> dict:
        return {
            "mission": self.current.model_dump() if self.current else None,
            "state": self.state.value,
        }
