"""PhaseController — the run's phase state machine and notification hub.

Architecture
------------
A run moves through seven phases:

  landing -> expedition -> run_back -> prep -> final_stand -> end_success
  (any phase) -> end_fail

``transition_to()`` is the only mutator.  Each transition runs, in order:

  1. exit hooks registered for the old phase
  2. phase swap + phase clock reset
  3. enter hooks registered for the new phase
  4. changed hooks, called with ``(old, new)``

All hooks run synchronously before ``transition_to()`` returns.  Order
between hooks registered for the *same* step is registration order today,
but subscribers must not rely on it.  A hook that raises is logged and the
remaining hooks still run.

Hooks are kept in per-phase tables built from the enum, so every phase has
an (possibly empty) enter list and exit list and there is no switch to
fall out of.

Every transition is mirrored on the EventBus for observers that are not
in-process subscribers:
  - ``phase_change``: ``{"old": ..., "new": ...}``
  - ``<phase>_enter`` / ``<phase>_exit`` named notifications (terminal
    phases publish enter only)
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

if TYPE_CHECKING:
    from stranded.comms.event_bus import EventBus

PhaseHook = Callable[[], None]
ChangedHook = Callable[["RunPhase", "RunPhase"], None]


class RunPhase(str, Enum):
    """Named stages of a run."""

    LANDING = "landing"            # safe bubble, players ready up
    EXPEDITION = "expedition"      # explore, gather objective parts
    RUN_BACK = "run_back"          # chase back to the ship
    PREP = "prep"                  # place deployables before the defense
    FINAL_STAND = "final_stand"    # defend the ship and repair it
    END_SUCCESS = "end_success"    # ship launched
    END_FAIL = "end_fail"          # ship destroyed or team wiped


TERMINAL_PHASES: frozenset[RunPhase] = frozenset(
    {RunPhase.END_SUCCESS, RunPhase.END_FAIL}
)

# Total successor table used by transition_to_next()
PHASE_SUCCESSORS: dict[RunPhase, RunPhase] = {
    RunPhase.LANDING: RunPhase.EXPEDITION,
    RunPhase.EXPEDITION: RunPhase.RUN_BACK,
    RunPhase.RUN_BACK: RunPhase.PREP,
    RunPhase.PREP: RunPhase.FINAL_STAND,
    RunPhase.FINAL_STAND: RunPhase.END_SUCCESS,
    RunPhase.END_SUCCESS: RunPhase.LANDING,
    RunPhase.END_FAIL: RunPhase.LANDING,
}

_ENTER_MESSAGES: dict[RunPhase, str] = {
    RunPhase.LANDING: "safe bubble active, ready up",
    RunPhase.EXPEDITION: "exploration begins",
    RunPhase.RUN_BACK: "chase mode, hunters spawning",
    RunPhase.PREP: "place deployables",
    RunPhase.FINAL_STAND: "defend ship and repair systems",
    RunPhase.END_SUCCESS: "VICTORY, ship launched",
    RunPhase.END_FAIL: "DEFEAT, ship destroyed or team wiped",
}


class PhaseController:
    """Holds the current phase, executes transitions, fans out hooks."""

    INITIAL_PHASE = RunPhase.LANDING

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus
        self._current: RunPhase = self.INITIAL_PHASE
        self._phase_elapsed: float = 0.0
        self._transition_count: int = 0
        self._enter_hooks: dict[RunPhase, list[PhaseHook]] = {p: [] for p in RunPhase}
        self._exit_hooks: dict[RunPhase, list[PhaseHook]] = {p: [] for p in RunPhase}
        self._changed_hooks: list[ChangedHook] = []
        self._transitioning = False
        self._deferred: deque[RunPhase] = deque()

    # -- Accessors --------------------------------------------------------------

    @property
    def current(self) -> RunPhase:
        return self._current

    @property
    def phase_elapsed(self) -> float:
        """Seconds since the current phase began."""
        return self._phase_elapsed

    @property
    def transition_count(self) -> int:
        return self._transition_count

    @property
    def is_terminal(self) -> bool:
        return self._current in TERMINAL_PHASES

    # -- Subscription -----------------------------------------------------------

    def on_enter(self, phase: RunPhase, hook: PhaseHook) -> None:
        self._enter_hooks[phase].append(hook)

    def on_exit(self, phase: RunPhase, hook: PhaseHook) -> None:
        self._exit_hooks[phase].append(hook)

    def on_changed(self, hook: ChangedHook) -> None:
        self._changed_hooks.append(hook)

    def remove_enter(self, phase: RunPhase, hook: PhaseHook) -> None:
        _discard(self._enter_hooks[phase], hook)

    def remove_exit(self, phase: RunPhase, hook: PhaseHook) -> None:
        _discard(self._exit_hooks[phase], hook)

    def remove_changed(self, hook: ChangedHook) -> None:
        _discard(self._changed_hooks, hook)

    # -- Transitions ------------------------------------------------------------

    def transition_to(self, phase: RunPhase) -> bool:
        """Move to *phase*. Returns False if the request was ignored.

        A request made by a hook while another transition is running is
        queued and executed once the running transition has finished its
        changed notification, still before the outermost call returns.
        """
        if self._transitioning:
            logger.debug(f"[PhaseController] Queued transition to {phase.value}")
            self._deferred.append(phase)
            return True

        if phase == self._current:
            logger.warning(
                f"[PhaseController] Already in {phase.value} phase. Ignoring transition."
            )
            return False

        self._transitioning = True
        try:
            self._apply(phase)
            while self._deferred:
                queued = self._deferred.popleft()
                if queued == self._current:
                    logger.warning(
                        f"[PhaseController] Already in {queued.value} phase. "
                        "Ignoring queued transition."
                    )
                    continue
                self._apply(queued)
        finally:
            self._transitioning = False
        return True

    def transition_to_next(self) -> bool:
        """Advance along the fixed successor table."""
        return self.transition_to(PHASE_SUCCESSORS[self._current])

    def trigger_victory(self) -> bool:
        return self.transition_to(RunPhase.END_SUCCESS)

    def trigger_defeat(self) -> bool:
        return self.transition_to(RunPhase.END_FAIL)

    def reset(self) -> None:
        """New-run reset: land again.

        From any other phase this is an ordinary transition to landing.
        When already landed, the landing enter hooks are re-run and the
        clock restarts so every subsystem clears its per-run state; no
        changed notification fires because the phase did not change.
        """
        if self._current != RunPhase.LANDING:
            self.transition_to(RunPhase.LANDING)
            return
        logger.info("[PhaseController] New run from landing, re-entering landing")
        self._phase_elapsed = 0.0
        self._run_hooks(self._enter_hooks[RunPhase.LANDING], "landing_enter")
        self._publish(f"{RunPhase.LANDING.value}_enter")

    # -- Tick -------------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance the phase clock. No other state changes on tick."""
        if dt > 0:
            self._phase_elapsed += dt

    # -- Serialisation ----------------------------------------------------------

    def get_state(self) -> dict:
        return {
            "phase": self._current.value,
            "elapsed": round(self._phase_elapsed, 1),
            "terminal": self.is_terminal,
            "transitions": self._transition_count,
        }

    def debug_info(self) -> str:
        return f"Phase: {self._current.value} | Elapsed: {self._phase_elapsed:.1f}s"

    # -- Internals --------------------------------------------------------------

    def _apply(self, new: RunPhase) -> None:
        old = self._current

        self._run_hooks(self._exit_hooks[old], f"{old.value}_exit")
        if old not in TERMINAL_PHASES:
            self._publish(f"{old.value}_exit")

        self._current = new
        self._phase_elapsed = 0.0
        self._transition_count += 1

        logger.info(f"[PhaseController] [{new.value}] Entered - {_ENTER_MESSAGES[new]}")
        self._run_hooks(self._enter_hooks[new], f"{new.value}_enter")
        self._publish(f"{new.value}_enter")

        for hook in list(self._changed_hooks):
            try:
                hook(old, new)
            except Exception:
                logger.exception("[PhaseController] phase_change hook failed")
        self._publish("phase_change", {"old": old.value, "new": new.value})

        logger.info(f"[PhaseController] Phase transition: {old.value} -> {new.value}")

    @staticmethod
    def _run_hooks(hooks: list[PhaseHook], label: str) -> None:
        for hook in list(hooks):
            try:
                hook()
            except Exception:
                logger.exception(f"[PhaseController] {label} hook failed")

    def _publish(self, topic: str, data: dict | None = None) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(topic, data)


def _discard(hooks: list, hook) -> None:
    try:
        hooks.remove(hook)
    except ValueError:
        pass
