"""Ship issues — the repair objectives that gate victory.

On entering prep the tracker rolls a fresh set of issues, each a distinct
``IssueKind`` drawn from the repairable pool.  Repair stations resolve
them one at a time during the final stand; the completion monitor polls
``all_resolved`` to call the win.

Only kinds with a repair station in the ship are ever generated.
LIFE_SUPPORT and COMMUNICATION_LOSS are defined but have no station, so
they stay out of ``REPAIRABLE_KINDS``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from stranded.config import settings

from .phases import RunPhase

if TYPE_CHECKING:
    from .phases import PhaseController


class IssueKind(str, Enum):
    POWER_FAILURE = "power_failure"
    HULL_BREACH = "hull_breach"
    NAVIGATION_ERROR = "navigation_error"
    LIFE_SUPPORT = "life_support"
    COMMUNICATION_LOSS = "communication_loss"


REPAIRABLE_KINDS: tuple[IssueKind, ...] = (
    IssueKind.POWER_FAILURE,
    IssueKind.HULL_BREACH,
    IssueKind.NAVIGATION_ERROR,
)


@dataclass
class Issue:
    """A single ship problem awaiting repair."""

    kind: IssueKind
    resolved: bool = False

    def resolve(self) -> bool:
        """Mark resolved. Returns False (and warns) if it already was."""
        if self.resolved:
            logger.warning(f"[Issue] {self.kind.value} already resolved")
            return False
        self.resolved = True
        logger.info(f"[Issue] {self.kind.value} has been RESOLVED")
        return True

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "resolved": self.resolved}

    def __str__(self) -> str:
        status = "RESOLVED" if self.resolved else "NEEDS REPAIR"
        return f"{self.kind.value}: {status}"


class IssueTracker:
    """Owns the active issue set for the current run."""

    def __init__(
        self,
        phases: PhaseController,
        min_count: int | None = None,
        max_count: int | None = None,
        pool: tuple[IssueKind, ...] = REPAIRABLE_KINDS,
        rng: random.Random | None = None,
    ) -> None:
        self._phases = phases
        self.min_count = settings.issue_min_count if min_count is None else min_count
        self.max_count = settings.issue_max_count if max_count is None else max_count
        self._pool = tuple(pool)
        self._rng = rng or random.Random()
        self._issues: list[Issue] = []
        self._all_resolved = False

        phases.on_enter(RunPhase.PREP, self._on_prep_enter)
        phases.on_enter(RunPhase.FINAL_STAND, self._on_final_stand_enter)
        phases.on_enter(RunPhase.LANDING, self.reset)

    # -- Accessors --------------------------------------------------------------

    @property
    def issues(self) -> list[Issue]:
        """Copy of the active set, in generation order."""
        return list(self._issues)

    @property
    def all_resolved(self) -> bool:
        return self._all_resolved

    @property
    def total(self) -> int:
        return len(self._issues)

    @property
    def resolved_count(self) -> int:
        return sum(1 for i in self._issues if i.resolved)

    @property
    def is_active(self) -> bool:
        return self._phases.current in (RunPhase.PREP, RunPhase.FINAL_STAND)

    def get(self, kind: IssueKind) -> Issue | None:
        for issue in self._issues:
            if issue.kind == kind:
                return issue
        return None

    def has_unresolved(self, kind: IssueKind) -> bool:
        issue = self.get(kind)
        return issue is not None and not issue.resolved

    # -- Operations -------------------------------------------------------------

    def generate(self) -> list[Issue]:
        """Replace the active set with a fresh random draw."""
        self._issues.clear()
        self._all_resolved = False

        low = max(0, self.min_count)
        high = self.max_count
        if high < low:
            logger.warning(
                f"[IssueTracker] max_count {high} below min_count {low}, using {low}"
            )
            high = low
        count = self._rng.randint(low, high)
        count = max(0, min(count, len(self._pool)))

        kinds = list(self._pool)
        self._rng.shuffle(kinds)
        self._issues = [Issue(kind) for kind in kinds[:count]]

        logger.info(
            f"[IssueTracker] Generated {count} ship problems: "
            f"{', '.join(i.kind.value for i in self._issues) or 'none'}"
        )
        return self.issues

    def resolve(self, kind: IssueKind) -> bool:
        """Resolve the issue of *kind*. Unknown or repeated kinds are ignored."""
        issue = self.get(kind)
        if issue is None:
            logger.warning(f"[IssueTracker] No active problem of type {kind.value}")
            return False
        if not issue.resolve():
            return False
        self._evaluate()
        return True

    def reset(self) -> None:
        self._issues.clear()
        self._all_resolved = False
        logger.info("[IssueTracker] Problems cleared for new run")

    # -- Internals --------------------------------------------------------------

    def _evaluate(self) -> None:
        if not self._issues:
            self._all_resolved = False
            return
        was = self._all_resolved
        self._all_resolved = all(i.resolved for i in self._issues)
        if self._all_resolved and not was:
            logger.info("[IssueTracker] Ship fully repaired, all systems operational")

    def _on_prep_enter(self) -> None:
        self.generate()

    def _on_final_stand_enter(self) -> None:
        # Runs that jump straight from run_back to final_stand never saw prep
        if not self._issues:
            self.generate()

    # -- Serialisation ----------------------------------------------------------

    def get_state(self) -> dict:
        return {
            "issues": [i.to_dict() for i in self._issues],
            "resolved": self.resolved_count,
            "total": self.total,
            "all_resolved": self._all_resolved,
        }
