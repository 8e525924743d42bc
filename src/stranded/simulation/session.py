"""RunSession — owns every run-lifecycle component for one play session.

Architecture
------------
One RunSession per session; nothing here is a process-wide singleton.
The session builds the EventBus and PhaseController first and hands them
to each collaborator by reference:

  PhaseController  <- hub, only phase mutator
  PressureSystem   <- live threat + debt
  EncounterSpawner <- reads PressureSystem, emits Hostile
  IssueTracker     <- ship problems, rolled on prep
  SharedCargo      <- team cargo, read by MissionFlowTrigger
  ReturnZone       <- ship area occupancy, feeds MissionFlowTrigger
  MissionFlowTrigger, CompletionMonitor <- request transitions
  RepairStation(s), DeploymentPoints, MissionSession

``tick(dt)`` is the single driver and advances, in order: phase clock,
threat, spawner, repair stations, completion monitor.  It is meant to be
called from one thread; the first thread to tick owns the session and
ticks from any other thread, or re-entrant ticks, are logged and skipped.
"""

from __future__ import annotations

import random
import threading
from typing import TYPE_CHECKING

from loguru import logger

from stranded.comms.event_bus import EventBus

from .cargo import SharedCargo
from .completion import CompletionMonitor
from .deployment import DeploymentPoints
from .issues import IssueTracker
from .mission import MissionSession
from .mission_flow import MissionFlowTrigger
from .phases import PhaseController, RunPhase
from .pressure import PressureSystem
from .repair import RepairStation
from .spawner import EncounterSpawner
from .zone import ReturnZone

if TYPE_CHECKING:
    from .cargo import ItemKind
    from .issues import IssueKind
    from .mission import MissionConfig
    from .target import Hostile


class RunSession:
    """Explicit context wiring the run lifecycle together."""

    def __init__(
        self,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        anchor: tuple[float, float] = (0.0, 0.0),
        destination: tuple[float, float] | None = (0.0, 0.0),
        expected_players: int | None = None,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self._rng = rng or random.Random()

        self.phases = PhaseController(self.event_bus)
        self.pressure = PressureSystem(self.phases)
        self.spawner = EncounterSpawner(
            self.phases,
            self.pressure,
            event_bus=self.event_bus,
            anchor=anchor,
            destination=destination,
            rng=self._rng,
        )
        self.issues = IssueTracker(self.phases, rng=self._rng)
        self.cargo = SharedCargo(self.phases)
        self.zone = ReturnZone(expected_players)
        self.flow = MissionFlowTrigger(self.phases, self.cargo, self.zone)
        self.completion = CompletionMonitor(self.phases, self.issues)
        self.points = DeploymentPoints()
        self.mission = MissionSession()
        self.stations: dict[IssueKind, RepairStation] = {}

        self._hostiles: dict[str, Hostile] = {}
        self._owner_thread: int | None = None
        self._ticking = False
        self._ticks = 0

        self.spawner.on_spawn(self._on_hostile_spawned)
        self.phases.on_enter(RunPhase.LANDING, self._on_landing_enter)
        self.phases.on_enter(RunPhase.END_SUCCESS, self._on_end_success)
        self.phases.on_enter(RunPhase.END_FAIL, self._on_end_fail)

        logger.info("[RunSession] Session created")

    # -- Mission bootstrap ------------------------------------------------------

    def start_mission(self, config: MissionConfig) -> None:
        """Begin *config* as a fresh run from landing."""
        self.mission.start(config)
        self.phases.reset()
        self.cargo.clear()
        self.points.reset()
        self.flow.configure_requirements(config.requirements())
        # After the landing reset, which zeroes live threat
        self.pressure.set_starting_threat(config.starting_threat)
        self.pressure.set_growth_multiplier(config.threat_growth_multiplier)
        logger.info(
            f"[RunSession] Mission {config.mission_id or '<unnamed>'} ready "
            f"(threat {config.starting_threat:g}, growth x{config.threat_growth_multiplier:g})"
        )
        self.event_bus.publish("mission_started", config.model_dump())

    def new_run(self) -> None:
        """Land again without changing the mission."""
        self.phases.reset()

    # -- Repair stations --------------------------------------------------------

    def add_repair_station(
        self, kind: IssueKind, duration: float | None = None
    ) -> RepairStation:
        if kind in self.stations:
            logger.warning(f"[RunSession] Repair station for {kind.value} already exists")
            return self.stations[kind]
        station = RepairStation(kind, self.phases, self.issues, duration=duration)
        self.stations[kind] = station
        return station

    # -- Signals from the host --------------------------------------------------

    def register_kill(self, target_id: str | None = None) -> None:
        if target_id is not None:
            self._hostiles.pop(target_id, None)
        self.pressure.register_kill()

    def register_pickup(self, kind: ItemKind | None = None) -> bool:
        """Count a pickup toward debt and, when *kind* is given, stow it."""
        self.pressure.register_pickup()
        if kind is None:
            return True
        return self.cargo.try_add(kind)

    def trigger_defeat(self) -> bool:
        return self.phases.trigger_defeat()

    # -- Tick -------------------------------------------------------------------

    def tick(self, dt: float) -> Hostile | None:
        """Advance the whole run by *dt* seconds. Returns a hostile if one spawned."""
        ident = threading.get_ident()
        if self._owner_thread is None:
            self._owner_thread = ident
        elif ident != self._owner_thread:
            logger.error(
                f"[RunSession] tick() from thread {ident}, owned by "
                f"{self._owner_thread}; skipped"
            )
            return None
        if self._ticking:
            logger.error("[RunSession] Re-entrant tick() skipped")
            return None

        self._ticking = True
        try:
            self.phases.tick(dt)
            self.pressure.tick(dt)
            spawned = self.spawner.tick(dt)
            for station in list(self.stations.values()):
                station.tick(dt)
            self.completion.tick(dt)
            self._ticks += 1
        finally:
            self._ticking = False
        return spawned

    # -- Accessors --------------------------------------------------------------

    @property
    def hostiles(self) -> list[Hostile]:
        return list(self._hostiles.values())

    @property
    def tick_count(self) -> int:
        return self._ticks

    # -- Phase reactions --------------------------------------------------------

    def _on_hostile_spawned(self, hostile: Hostile) -> None:
        self._hostiles[hostile.target_id] = hostile

    def _on_landing_enter(self) -> None:
        self._hostiles.clear()
        self.zone.clear()

    def _on_end_success(self) -> None:
        self.mission.end_success()

    def _on_end_fail(self) -> None:
        self.mission.end_fail()

    # -- Serialisation ----------------------------------------------------------

    def snapshot(self) -> dict:
        """Full state of every component, JSON-friendly."""
        return {
            "phase": self.phases.get_state(),
            "pressure": self.pressure.get_state(),
            "spawner": self.spawner.get_state(),
            "issues": self.issues.get_state(),
            "cargo": self.cargo.get_state(),
            "flow": self.flow.get_state(),
            "points": self.points.get_state(),
            "mission": self.mission.get_state(),
            "stations": [s.get_state() for s in self.stations.values()],
            "hostiles": [h.to_dict() for h in self._hostiles.values()],
            "completion_active": self.completion.active,
        }

    def get_state(self) -> dict:
        """Compact summary for HUD / overlay consumers."""
        return {
            "phase": self.phases.current.value,
            "live_threat": round(self.pressure.live_threat, 2),
            "debt": round(self.pressure.debt, 2),
            "threat_category": self.pressure.category,
            "issues_resolved": self.issues.resolved_count,
            "issues_total": self.issues.total,
            "cargo": self.cargo.count,
            "points": self.points.points,
            "hostiles": len(self._hostiles),
            "mission_state": self.mission.state.value,
        }
