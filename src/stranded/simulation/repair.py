"""RepairStation — hold-to-repair for one ship issue.

A station is bound to a single ``IssueKind``.  While a player is nearby
and holding the interact input, progress accumulates each tick; leaving
the station, letting go, or taking damage drops progress back to zero.
Reaching ``duration`` resolves the issue on the tracker exactly once.

Stations only work during the final stand and only while their issue is
active and unresolved.  They are reset when the team lands for a new run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from stranded.config import settings

from .phases import RunPhase

if TYPE_CHECKING:
    from .issues import IssueKind, IssueTracker
    from .phases import PhaseController


class RepairStation:
    """One repair console in the ship."""

    def __init__(
        self,
        kind: IssueKind,
        phases: PhaseController,
        tracker: IssueTracker | None,
        duration: float | None = None,
    ) -> None:
        self.kind = kind
        self.duration = settings.repair_duration if duration is None else duration
        self._phases = phases
        self._tracker = tracker
        self._player_nearby = False
        self._repairing = False
        self._repaired = False
        self._progress = 0.0
        self._holding = False

        phases.on_enter(RunPhase.LANDING, self.reset)

    # -- Accessors --------------------------------------------------------------

    @property
    def player_nearby(self) -> bool:
        return self._player_nearby

    @property
    def repairing(self) -> bool:
        return self._repairing

    @property
    def repaired(self) -> bool:
        return self._repaired

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def progress_percent(self) -> float:
        if self.duration <= 0:
            return 100.0 if self._repaired else 0.0
        return min(100.0, self._progress / self.duration * 100.0)

    @property
    def usable(self) -> bool:
        """True when this station can currently make progress."""
        return not self._repaired and self._valid_phase() and self._issue_active()

    # -- Player interaction -----------------------------------------------------

    def player_enter(self) -> None:
        self._player_nearby = True
        if self.usable:
            logger.info(f"[RepairStation] Player approached {self.kind.value} station")

    def player_exit(self) -> None:
        self._player_nearby = False
        if self._repairing and not self._repaired:
            self._cancel("player left")

    def interrupt(self, damage: float = 0.0) -> None:
        """Damage taken by the repairing player. Progress is lost."""
        if not self._repairing:
            return
        logger.info(
            f"[RepairStation] Repair of {self.kind.value} INTERRUPTED BY DAMAGE "
            f"({damage:g}), progress lost ({self._progress:.1f}s/{self.duration:g}s)"
        )
        self._repairing = False
        self._progress = 0.0

    def hold(self) -> None:
        self._holding = True

    def release(self) -> None:
        self._holding = False

    def tick(self, dt: float, holding: bool | None = None) -> bool:
        """Advance repair progress. Returns True on the tick that completes it.

        *holding* overrides the state set with hold() / release().
        """
        if holding is None:
            holding = self._holding
        if not self.usable:
            if self._repairing:
                self._cancel("station no longer usable")
            return False

        if not (self._player_nearby and holding):
            if self._repairing:
                self._cancel("released")
            return False

        if not self._repairing:
            self._repairing = True
            self._progress = 0.0
            logger.info(
                f"[RepairStation] Started repairing {self.kind.value} "
                f"(hold for {self.duration:g}s)"
            )

        if dt > 0:
            self._progress += dt
        if self._progress >= self.duration:
            self._complete()
            return True
        return False

    def reset(self) -> None:
        self._repairing = False
        self._repaired = False
        self._progress = 0.0
        self._holding = False
        logger.debug(f"[RepairStation] {self.kind.value} station reset")

    # -- Internals --------------------------------------------------------------

    def _valid_phase(self) -> bool:
        return self._phases.current == RunPhase.FINAL_STAND

    def _issue_active(self) -> bool:
        if self._tracker is None:
            return False
        return self._tracker.is_active and self._tracker.has_unresolved(self.kind)

    def _cancel(self, reason: str) -> None:
        logger.info(
            f"[RepairStation] Repair of {self.kind.value} interrupted ({reason}), "
            f"progress lost ({self._progress:.1f}s/{self.duration:g}s)"
        )
        self._repairing = False
        self._progress = 0.0

    def _complete(self) -> None:
        self._repairing = False
        self._repaired = True
        self._progress = self.duration
        logger.info(f"[RepairStation] {self.kind.value} repair COMPLETE")

        if self._tracker is None:
            logger.error("[RepairStation] IssueTracker not available, cannot resolve")
            return
        self._tracker.resolve(self.kind)

    def get_state(self) -> dict:
        return {
            "kind": self.kind.value,
            "player_nearby": self._player_nearby,
            "repairing": self._repairing,
            "repaired": self._repaired,
            "progress": round(self._progress, 2),
            "duration": self.duration,
        }

    def debug_info(self) -> str:
        if self._repaired:
            return f"{self.kind.value}: REPAIRED"
        if self._repairing:
            return (
                f"{self.kind.value}: Repairing... {self._progress:.1f}s/"
                f"{self.duration:g}s ({self.progress_percent:.0f}%)"
            )
        if self._player_nearby:
            return f"{self.kind.value}: Hold to repair"
        return f"{self.kind.value}: NEEDS REPAIR"
