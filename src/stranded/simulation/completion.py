"""CompletionMonitor — calls the win once the ship is repaired."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .phases import RunPhase

if TYPE_CHECKING:
    from .issues import IssueTracker
    from .phases import PhaseController


class CompletionMonitor:
    """Active only during final_stand; triggers victory exactly once."""

    def __init__(self, phases: PhaseController, issues: IssueTracker | None) -> None:
        self._phases = phases
        self._issues = issues
        self._active = phases.current == RunPhase.FINAL_STAND
        self._victories = 0

        phases.on_enter(RunPhase.FINAL_STAND, self._on_final_stand_enter)
        phases.on_exit(RunPhase.FINAL_STAND, self._on_final_stand_exit)
        phases.on_changed(self._on_phase_changed)

    @property
    def active(self) -> bool:
        return self._active

    @property
    def victories_triggered(self) -> int:
        return self._victories

    def tick(self, dt: float) -> bool:
        """Check the win condition. Returns True if victory was triggered."""
        if not self._active:
            return False
        if self._issues is None:
            logger.error("[CompletionMonitor] IssueTracker not available, check skipped")
            return False
        if not self._issues.all_resolved:
            return False

        logger.info("[CompletionMonitor] All repairs complete, triggering VICTORY")
        # Deactivate before transitioning so a re-entrant tick cannot fire twice
        self._active = False
        self._victories += 1
        self._phases.trigger_victory()
        return True

    def _on_final_stand_enter(self) -> None:
        self._active = True
        logger.info("[CompletionMonitor] Victory condition ACTIVE (repair all systems)")

    def _on_final_stand_exit(self) -> None:
        self._active = False
        logger.info("[CompletionMonitor] Victory condition INACTIVE")

    def _on_phase_changed(self, _old: RunPhase, new: RunPhase) -> None:
        self._active = new == RunPhase.FINAL_STAND

    def debug_info(self) -> str:
        if not self._active:
            return "INACTIVE (not in final_stand)"
        return "Waiting for repairs to complete"
