"""MissionFlowTrigger — forward-only phase requests from mission signals.

Listens to two external signals and asks the PhaseController to advance:

  zone exit            while landing                     -> expedition
  objectives complete  while expedition                  -> run_back
  zone enter / stay    while run_back and objectives met -> final_stand

Objectives are complete when every configured per-kind threshold is met
by the shared cargo count.  With no thresholds configured the objectives
never read complete.

The trigger never looks at phases other than the three above and never
requests a backward transition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from loguru import logger

from .cargo import ItemKind
from .phases import RunPhase

if TYPE_CHECKING:
    from .cargo import SharedCargo
    from .phases import PhaseController
    from .zone import ReturnZone


class MissionFlowTrigger:
    """Small state machine layered over the phase controller."""

    def __init__(
        self,
        phases: PhaseController,
        cargo: SharedCargo | None,
        zone: ReturnZone | None = None,
        requirements: Mapping[ItemKind, int] | None = None,
    ) -> None:
        self._phases = phases
        self._cargo = cargo
        self._requirements: dict[ItemKind, int] = {}
        self._objectives_complete = False
        self._in_zone = False
        self._has_left_zone = False

        if requirements:
            self.configure_requirements(requirements)

        if cargo is not None:
            cargo.on_item_added(self._on_item_added)
        if zone is not None:
            zone.on_enter(self._on_zone_enter)
            zone.on_stay(self._on_zone_enter)
            zone.on_exit(self._on_zone_exit)
        phases.on_enter(RunPhase.LANDING, self._on_landing_enter)

    # -- Accessors --------------------------------------------------------------

    @property
    def requirements(self) -> dict[ItemKind, int]:
        return dict(self._requirements)

    @property
    def objectives_complete(self) -> bool:
        return self._objectives_complete

    @property
    def in_zone(self) -> bool:
        return self._in_zone

    # -- Configuration ----------------------------------------------------------

    def configure_requirements(self, counts: Mapping[ItemKind, int]) -> None:
        """Replace the per-kind thresholds. Non-positive counts are dropped."""
        self._requirements = {
            kind: int(count) for kind, count in counts.items()
            if count > 0 and kind is not ItemKind.NONE
        }
        self._objectives_complete = False
        self._in_zone = False
        logger.info(
            "[MissionFlow] Requirements: "
            + (", ".join(f"{k.value} x{v}" for k, v in self._requirements.items())
               or "none")
        )

    # -- Signal handlers --------------------------------------------------------

    def on_objective_progress(self) -> None:
        """Re-check objective counts. Called on every cargo addition."""
        if self._objectives_complete:
            return
        if not self._check_objectives():
            return

        self._objectives_complete = True
        logger.info("[MissionFlow] All repair parts collected")

        if self._phases.current == RunPhase.EXPEDITION:
            logger.info("[MissionFlow] Objectives complete -> run_back")
            self._phases.transition_to(RunPhase.RUN_BACK)

        if self._phases.current == RunPhase.RUN_BACK and self._in_zone:
            logger.info("[MissionFlow] Parts collected while in zone -> final_stand")
            self._phases.transition_to(RunPhase.FINAL_STAND)

    def _on_item_added(self, _kind: ItemKind) -> None:
        self.on_objective_progress()

    def _on_zone_enter(self, _player_id: str) -> None:
        self._in_zone = True
        if self._objectives_complete and self._phases.current == RunPhase.RUN_BACK:
            logger.info("[MissionFlow] Returned to zone with parts -> final_stand")
            self._phases.transition_to(RunPhase.FINAL_STAND)

    def _on_zone_exit(self, _player_id: str) -> None:
        self._in_zone = False
        if self._phases.current == RunPhase.LANDING:
            if not self._has_left_zone:
                logger.info("[MissionFlow] Left zone -> expedition")
            else:
                logger.info("[MissionFlow] Left zone -> expedition (repeat)")
            self._has_left_zone = True
            self._phases.transition_to(RunPhase.EXPEDITION)

    def _on_landing_enter(self) -> None:
        self._objectives_complete = False
        self._in_zone = False

    # -- Internals --------------------------------------------------------------

    def _check_objectives(self) -> bool:
        if self._cargo is None:
            logger.error("[MissionFlow] SharedCargo not available, objectives unchecked")
            return False
        if not self._requirements:
            return False
        return all(
            self._cargo.count_of(kind) >= needed
            for kind, needed in self._requirements.items()
        )

    def get_state(self) -> dict:
        return {
            "requirements": {k.value: v for k, v in self._requirements.items()},
            "objectives_complete": self._objectives_complete,
            "in_zone": self._in_zone,
        }
