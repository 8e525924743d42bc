"""DeploymentPoints — currency spent on deployables during the final stand.

Salvage picked up on the expedition is converted at the ship into points
(``points_per_salvage`` each); listeners receive ``(old, new)`` on every
change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from stranded.config import settings

from .cargo import SALVAGE_KINDS

if TYPE_CHECKING:
    from .cargo import SharedCargo

PointsListener = Callable[[int, int], None]


class DeploymentPoints:
    def __init__(self, points_per_salvage: int | None = None, starting: int = 0) -> None:
        self.points_per_salvage = (
            settings.points_per_salvage if points_per_salvage is None else points_per_salvage
        )
        self._points = max(0, starting)
        self._listeners: list[PointsListener] = []

    @property
    def points(self) -> int:
        return self._points

    def on_changed(self, listener: PointsListener) -> None:
        self._listeners.append(listener)

    def has_enough(self, amount: int) -> bool:
        return self._points >= amount

    def add(self, amount: int) -> bool:
        if amount <= 0:
            logger.warning(f"[DeploymentPoints] Attempted to add invalid amount: {amount}")
            return False
        old = self._points
        self._points += amount
        logger.info(f"[DeploymentPoints] +{amount} DP | Total: {self._points}")
        self._notify(old)
        return True

    def spend(self, amount: int) -> bool:
        if amount <= 0:
            logger.warning(f"[DeploymentPoints] Attempted to spend invalid amount: {amount}")
            return False
        if self._points < amount:
            logger.warning(
                f"[DeploymentPoints] Not enough DP, need {amount}, have {self._points}"
            )
            return False
        old = self._points
        self._points -= amount
        logger.info(f"[DeploymentPoints] -{amount} DP | Remaining: {self._points}")
        self._notify(old)
        return True

    def reset(self) -> None:
        old = self._points
        self._points = 0
        self._notify(old)

    def convert_salvage(self, cargo: SharedCargo | None) -> int:
        """Move every salvage item out of *cargo* into points. Returns DP gained."""
        if cargo is None:
            logger.error("[DeploymentPoints] SharedCargo not available, cannot convert salvage")
            return 0

        converted = 0
        for kind in SALVAGE_KINDS:
            while cargo.contains(kind):
                cargo.remove(kind)
                converted += 1

        if converted == 0:
            logger.info("[DeploymentPoints] No salvage to convert")
            return 0

        gained = converted * self.points_per_salvage
        self.add(gained)
        logger.info(
            f"[DeploymentPoints] Converted {converted} salvage -> {gained} DP "
            f"({self.points_per_salvage} DP per item)"
        )
        return gained

    def _notify(self, old: int) -> None:
        for listener in list(self._listeners):
            try:
                listener(old, self._points)
            except Exception:
                logger.exception("[DeploymentPoints] listener failed")

    def get_state(self) -> dict:
        return {"points": self._points, "points_per_salvage": self.points_per_salvage}
