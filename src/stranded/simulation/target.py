"""Hostile — one encounter unit created by the EncounterSpawner.

A flat dataclass carrying only what the orchestrator decides at spawn
time: where the unit appears, how fast it moves, and where it heads.
Movement, health and contact damage belong to the game's own enemy
controller, which reads these fields when it instantiates the unit.

Positions are (x, y) on the ground plane; height is fixed by the host.
"""

from __future__ import annotations

import time as _time
import uuid
from dataclasses import dataclass, field


@dataclass
class Hostile:
    """A spawned enemy unit."""

    target_id: str
    name: str
    position: tuple[float, float]
    speed: float
    destination: tuple[float, float] | None = None
    phase: str = ""
    spawned_at: float = field(default_factory=_time.time)

    @classmethod
    def create(
        cls,
        position: tuple[float, float],
        speed: float,
        destination: tuple[float, float] | None = None,
        phase: str = "",
        index: int = 0,
    ) -> Hostile:
        return cls(
            target_id=f"hostile-{uuid.uuid4().hex[:8]}",
            name=f"Swarmer #{index}" if index else "Swarmer",
            position=position,
            speed=speed,
            destination=destination,
            phase=phase,
        )

    def apply_speed_multiplier(self, multiplier: float) -> None:
        self.speed *= multiplier

    def to_dict(self) -> dict:
        return {
            "target_id": self.target_id,
            "name": self.name,
            "position": {"x": self.position[0], "y": self.position[1]},
            "speed": self.speed,
            "destination": (
                {"x": self.destination[0], "y": self.destination[1]}
                if self.destination is not None else None
            ),
            "phase": self.phase,
        }
