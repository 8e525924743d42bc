"""PressureSystem — live threat and accumulated threat debt.

Two scalars escalate over a run:

  live_threat — moment-to-moment danger.  Grows while the team is out in
                the field (expedition, run_back) and drives spawn cadence.
                Zeroed when the team lands for a new run.
  debt        — accumulated pressure.  Grows with time in the field and
                with every kill and pickup.  Never decays and is NOT
                cleared on landing; it carries from one run into the next.

Growth per tick while accumulating:

  live_threat += base_rate * growth_multiplier * dt
  debt        += debt_rate * dt

Kills and pickups add debt in every phase, accumulating or not.

The coarse ladder (``category``):  low < 50 <= medium < 150 <= high < 300 <= critical
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from stranded.config import settings

from .phases import RunPhase

if TYPE_CHECKING:
    from .phases import PhaseController

# Threat ladder, checked in order: (exclusive upper bound, label)
THREAT_CATEGORIES: list[tuple[float, str]] = [
    (50.0, "Low"),
    (150.0, "Medium"),
    (300.0, "High"),
]
CRITICAL = "Critical"

_ACCUMULATING_PHASES = (RunPhase.EXPEDITION, RunPhase.RUN_BACK)
_PAUSED_PHASES = (RunPhase.PREP, RunPhase.FINAL_STAND)


def threat_category(level: float) -> str:
    """Map a live threat value onto the coarse ladder."""
    for bound, label in THREAT_CATEGORIES:
        if level < bound:
            return label
    return CRITICAL


class PressureSystem:
    """Threat / debt escalation driven by phase and kill/pickup events."""

    def __init__(
        self,
        phases: PhaseController,
        base_rate: float | None = None,
        debt_rate: float | None = None,
        debt_per_kill: float | None = None,
        debt_per_pickup: float | None = None,
        growth_multiplier: float | None = None,
    ) -> None:
        self.base_rate = settings.threat_base_rate if base_rate is None else base_rate
        self.debt_rate = settings.threat_debt_rate if debt_rate is None else debt_rate
        self.debt_per_kill = (
            settings.threat_debt_per_kill if debt_per_kill is None else debt_per_kill
        )
        self.debt_per_pickup = (
            settings.threat_debt_per_pickup if debt_per_pickup is None else debt_per_pickup
        )
        self._growth_multiplier = max(0.0, (
            settings.threat_growth_multiplier if growth_multiplier is None
            else growth_multiplier
        ))

        self._live_threat: float = 0.0
        self._debt: float = 0.0
        self._kill_count: int = 0
        self._accumulating: bool = False

        for phase in _ACCUMULATING_PHASES:
            phases.on_enter(phase, self._start_accumulating)
        for phase in _PAUSED_PHASES:
            phases.on_enter(phase, self._pause_accumulating)
        phases.on_enter(RunPhase.LANDING, self._on_landing_enter)

    # -- Accessors --------------------------------------------------------------

    @property
    def live_threat(self) -> float:
        return self._live_threat

    @property
    def debt(self) -> float:
        return self._debt

    @property
    def kill_count(self) -> int:
        return self._kill_count

    @property
    def accumulating(self) -> bool:
        return self._accumulating

    @property
    def growth_multiplier(self) -> float:
        return self._growth_multiplier

    @property
    def category(self) -> str:
        return threat_category(self._live_threat)

    # -- Tick -------------------------------------------------------------------

    def tick(self, dt: float) -> None:
        if not self._accumulating or dt <= 0:
            return
        self._live_threat += self.base_rate * self._growth_multiplier * dt
        self._debt += self.debt_rate * dt

    # -- Event inputs -----------------------------------------------------------

    def register_kill(self) -> None:
        """An enemy died. Adds debt regardless of phase."""
        self._debt += self.debt_per_kill
        self._kill_count += 1
        logger.debug(
            f"[PressureSystem] Enemy killed, debt +{self.debt_per_kill} -> {self._debt:.2f}"
        )

    def register_pickup(self) -> None:
        """Salvage picked up. Adds debt regardless of phase."""
        self._debt += self.debt_per_pickup
        logger.debug(
            f"[PressureSystem] Salvage picked up, debt +{self.debt_per_pickup} "
            f"-> {self._debt:.2f}"
        )

    def add_threat(self, amount: float) -> bool:
        """Manually raise live threat (special events, cargo weight)."""
        if amount < 0:
            logger.warning(f"[PressureSystem] Ignoring negative threat amount {amount}")
            return False
        self._live_threat += amount
        return True

    def add_debt(self, amount: float) -> bool:
        if amount < 0:
            logger.warning(f"[PressureSystem] Ignoring negative debt amount {amount}")
            return False
        self._debt += amount
        return True

    # -- Mission configuration --------------------------------------------------

    def set_starting_threat(self, value: float) -> None:
        self._live_threat = max(0.0, float(value))

    def set_growth_multiplier(self, multiplier: float) -> None:
        self._growth_multiplier = max(0.0, float(multiplier))

    def clear_debt(self) -> None:
        """Hard reset of the carried-over debt. Landing never calls this."""
        logger.info(f"[PressureSystem] Debt cleared (was {self._debt:.2f})")
        self._debt = 0.0

    # -- Phase hooks ------------------------------------------------------------

    def _start_accumulating(self) -> None:
        self._accumulating = True
        logger.info("[PressureSystem] Threat accumulation ACTIVE")

    def _pause_accumulating(self) -> None:
        self._accumulating = False
        logger.info(
            f"[PressureSystem] Threat accumulation PAUSED | threat: "
            f"{self._live_threat:.2f} | debt: {self._debt:.2f}"
        )

    def _on_landing_enter(self) -> None:
        previous = self._live_threat
        self._live_threat = 0.0
        self._kill_count = 0
        self._accumulating = False
        logger.info(
            f"[PressureSystem] Landing - threat reset to 0 (was {previous:.2f}), "
            f"debt preserved: {self._debt:.2f}"
        )

    # -- Serialisation ----------------------------------------------------------

    def get_state(self) -> dict:
        return {
            "live_threat": round(self._live_threat, 2),
            "debt": round(self._debt, 2),
            "kill_count": self._kill_count,
            "accumulating": self._accumulating,
            "growth_multiplier": self._growth_multiplier,
            "category": self.category,
        }
