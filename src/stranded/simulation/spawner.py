"""EncounterSpawner — threat-scaled hostile cadence.

Architecture
------------
The spawner runs a local timer while spawning is active.  Every tick it
recomputes the interval from the PressureSystem's live threat and the
current phase profile:

  interval = max(base / (1 + live_threat / 100) / rate_multiplier, floor)

  live_threat   0 -> base
  live_threat 100 -> base / 2
  live_threat 300 -> base / 4

When the timer reaches the interval one Hostile is created and the timer
restarts from zero (one spawn per tick at most).

Phase profiles (rate, radius, speed multipliers) come from a table keyed
by phase, so each phase's enter hook just installs its row:

  expedition   active, normal cadence
  run_back     active, faster spawns, closer ring, faster units
  final_stand  active, slower spawns, ring pulled in toward the ship
  landing / prep / end_*   inactive

Spawn position is a random direction on the ring of the phase-adjusted
radius around the anchor.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from loguru import logger

from stranded.config import settings

from .phases import RunPhase
from .target import Hostile

if TYPE_CHECKING:
    from stranded.comms.event_bus import EventBus
    from .phases import PhaseController
    from .pressure import PressureSystem

SpawnListener = Callable[[Hostile], None]


@dataclass(frozen=True)
class SpawnProfile:
    """Per-phase spawning modifiers."""

    label: str
    active: bool
    rate_multiplier: float = 1.0      # >1 spawns faster
    radius_multiplier: float = 1.0    # <1 spawns closer
    speed_multiplier: float = 1.0     # applied to each new unit


def compute_spawn_interval(
    base_interval: float,
    live_threat: float,
    rate_multiplier: float = 1.0,
    floor: float = 0.2,
) -> float:
    """Seconds between spawns for a given threat and phase multiplier."""
    interval = base_interval / (1.0 + max(0.0, live_threat) / 100.0)
    if rate_multiplier > 0:
        interval /= rate_multiplier
    return max(interval, floor)


class EncounterSpawner:
    """Spawns hostiles on a threat-driven timer during combat phases."""

    def __init__(
        self,
        phases: PhaseController,
        pressure: PressureSystem | None,
        event_bus: EventBus | None = None,
        anchor: tuple[float, float] = (0.0, 0.0),
        destination: tuple[float, float] | None = None,
        rng: random.Random | None = None,
        base_interval: float | None = None,
        min_interval: float | None = None,
        radius: float | None = None,
        enemy_speed: float | None = None,
    ) -> None:
        self._phases = phases
        self._pressure = pressure
        self._event_bus = event_bus
        self.anchor = anchor
        self.destination = destination
        self._rng = rng or random.Random()

        self.base_interval = (
            settings.spawn_base_interval if base_interval is None else base_interval
        )
        self.min_interval = (
            settings.spawn_min_interval if min_interval is None else min_interval
        )
        self.radius = settings.spawn_radius if radius is None else radius
        self.enemy_speed = settings.enemy_move_speed if enemy_speed is None else enemy_speed

        idle = SpawnProfile("idle", active=False)
        self._profiles: dict[RunPhase, SpawnProfile] = {
            RunPhase.LANDING: idle,
            RunPhase.EXPEDITION: SpawnProfile("normal", active=True),
            RunPhase.RUN_BACK: SpawnProfile(
                "run_back",
                active=True,
                rate_multiplier=settings.run_back_spawn_rate_multiplier,
                radius_multiplier=settings.run_back_spawn_radius_multiplier,
                speed_multiplier=settings.run_back_enemy_speed_multiplier,
            ),
            RunPhase.PREP: idle,
            RunPhase.FINAL_STAND: SpawnProfile(
                "final_stand",
                active=True,
                rate_multiplier=settings.final_stand_spawn_rate_multiplier,
                radius_multiplier=settings.final_stand_spawn_radius_multiplier,
            ),
            RunPhase.END_SUCCESS: idle,
            RunPhase.END_FAIL: idle,
        }
        self._profile: SpawnProfile = self._profiles[phases.current]
        self._spawning: bool = self._profile.active
        self._timer: float = 0.0
        self._current_interval: float = self.base_interval
        self._total_spawned: int = 0
        self._listeners: list[SpawnListener] = []
        self._missing_pressure_reported = False

        for phase in RunPhase:
            phases.on_enter(phase, self._make_enter_hook(phase))

        if self.destination is None:
            logger.warning(
                "[EncounterSpawner] No enemy destination configured. "
                "Spawned units will have nowhere to go."
            )

    # -- Accessors --------------------------------------------------------------

    @property
    def spawning(self) -> bool:
        return self._spawning

    @property
    def profile(self) -> SpawnProfile:
        return self._profile

    @property
    def current_interval(self) -> float:
        return self._current_interval

    @property
    def total_spawned(self) -> int:
        return self._total_spawned

    @property
    def effective_radius(self) -> float:
        return self.radius * self._profile.radius_multiplier

    def profile_for(self, phase: RunPhase) -> SpawnProfile:
        return self._profiles[phase]

    def on_spawn(self, listener: SpawnListener) -> None:
        self._listeners.append(listener)

    # -- Tick -------------------------------------------------------------------

    def tick(self, dt: float) -> Hostile | None:
        """Advance the spawn timer. Returns the unit spawned this tick, if any."""
        if not self._spawning:
            return None

        self._current_interval = self.compute_interval()

        self._timer += max(0.0, dt)
        if self._timer >= self._current_interval:
            self._timer = 0.0
            return self._spawn()
        return None

    def compute_interval(self) -> float:
        return compute_spawn_interval(
            self.base_interval,
            self._read_threat(),
            self._profile.rate_multiplier,
            self.min_interval,
        )

    def force_spawn(self) -> Hostile:
        """Spawn immediately, bypassing the timer."""
        return self._spawn()

    # -- Internals --------------------------------------------------------------

    def _read_threat(self) -> float:
        if self._pressure is None:
            if not self._missing_pressure_reported:
                logger.error(
                    "[EncounterSpawner] PressureSystem not available, "
                    "using base interval"
                )
                self._missing_pressure_reported = True
            return 0.0
        return self._pressure.live_threat

    def _spawn(self) -> Hostile:
        position = self._random_spawn_position()
        self._total_spawned += 1
        hostile = Hostile.create(
            position=position,
            speed=self.enemy_speed,
            destination=self.destination,
            phase=self._phases.current.value,
            index=self._total_spawned,
        )
        if self._profile.speed_multiplier != 1.0:
            hostile.apply_speed_multiplier(self._profile.speed_multiplier)

        logger.debug(
            f"[EncounterSpawner] Spawned enemy #{self._total_spawned} "
            f"({self._profile.label}) at ({position[0]:.1f}, {position[1]:.1f}) | "
            f"interval: {self._current_interval:.2f}s"
        )

        for listener in list(self._listeners):
            try:
                listener(hostile)
            except Exception:
                logger.exception("[EncounterSpawner] spawn listener failed")
        if self._event_bus is not None:
            self._event_bus.publish("encounter_spawned", hostile.to_dict())
        return hostile

    def _random_spawn_position(self) -> tuple[float, float]:
        angle = self._rng.uniform(0.0, 2.0 * math.pi)
        r = self.effective_radius
        return (
            self.anchor[0] + math.cos(angle) * r,
            self.anchor[1] + math.sin(angle) * r,
        )

    def _make_enter_hook(self, phase: RunPhase) -> Callable[[], None]:
        def _enter() -> None:
            self._apply_profile(self._profiles[phase])
        return _enter

    def _apply_profile(self, profile: SpawnProfile) -> None:
        was_spawning = self._spawning
        self._profile = profile
        self._spawning = profile.active
        if profile.active:
            self._timer = 0.0
            logger.info(f"[EncounterSpawner] Spawning ACTIVE ({profile.label})")
        elif was_spawning:
            logger.info("[EncounterSpawner] Spawning STOPPED")

    # -- Serialisation ----------------------------------------------------------

    def get_state(self) -> dict:
        return {
            "spawning": self._spawning,
            "mode": self._profile.label,
            "interval": round(self._current_interval, 2),
            "next_spawn_in": round(max(0.0, self._current_interval - self._timer), 2),
            "radius": round(self.effective_radius, 2),
            "total_spawned": self._total_spawned,
        }
