"""SharedCargo — the team's shared, fixed-slot cargo hold.

Cargo persists across phases within a run and is emptied when the team
lands for a new one.  The mission flow trigger reads objective counts
from here (``count_of``); deployment points convert salvage out of it.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from stranded.config import settings

from .phases import RunPhase

if TYPE_CHECKING:
    from .phases import PhaseController


class ItemKind(str, Enum):
    NONE = "none"

    # Critical parts (objectives)
    POWER_CORE = "power_core"
    FUEL_GEL = "fuel_gel"

    # Salvage (converted to deployment points)
    SCRAP_METAL = "scrap_metal"
    ALIEN_TECH = "alien_tech"
    RARE_COMPONENTS = "rare_components"

    MEDICAL_SUPPLIES = "medical_supplies"
    ENERGY_CELL = "energy_cell"


OBJECTIVE_KINDS: tuple[ItemKind, ...] = (ItemKind.POWER_CORE, ItemKind.FUEL_GEL)
SALVAGE_KINDS: tuple[ItemKind, ...] = (
    ItemKind.SCRAP_METAL,
    ItemKind.ALIEN_TECH,
    ItemKind.RARE_COMPONENTS,
)

ItemListener = Callable[[ItemKind], None]


class SharedCargo:
    """Fixed number of slots; each holds one item or is empty."""

    def __init__(
        self,
        phases: PhaseController | None = None,
        slots: int | None = None,
    ) -> None:
        self.max_slots = settings.cargo_slots if slots is None else slots
        self._slots: list[ItemKind] = [ItemKind.NONE] * self.max_slots
        self._added: list[ItemListener] = []
        self._removed: list[ItemListener] = []
        self._cleared: list[Callable[[], None]] = []
        self._full: list[Callable[[], None]] = []

        if phases is not None:
            phases.on_enter(RunPhase.LANDING, self._on_landing_enter)

    # -- Listeners --------------------------------------------------------------

    def on_item_added(self, listener: ItemListener) -> None:
        self._added.append(listener)

    def on_item_removed(self, listener: ItemListener) -> None:
        self._removed.append(listener)

    def on_cleared(self, listener: Callable[[], None]) -> None:
        self._cleared.append(listener)

    def on_full(self, listener: Callable[[], None]) -> None:
        self._full.append(listener)

    # -- Queries ----------------------------------------------------------------

    @property
    def count(self) -> int:
        return sum(1 for s in self._slots if s is not ItemKind.NONE)

    @property
    def free_slots(self) -> int:
        return self.max_slots - self.count

    @property
    def is_full(self) -> bool:
        return all(s is not ItemKind.NONE for s in self._slots)

    @property
    def fill_fraction(self) -> float:
        if self.max_slots == 0:
            return 1.0
        return self.count / self.max_slots

    def count_of(self, kind: ItemKind) -> int:
        return sum(1 for s in self._slots if s is kind)

    def contains(self, kind: ItemKind) -> bool:
        return kind in self._slots

    def items(self) -> list[ItemKind]:
        return [s for s in self._slots if s is not ItemKind.NONE]

    # -- Mutation ---------------------------------------------------------------

    def try_add(self, kind: ItemKind) -> bool:
        """Put *kind* into the first empty slot. False if full or NONE."""
        if kind is ItemKind.NONE:
            logger.warning("[SharedCargo] Cannot add NONE item type")
            return False
        if self.is_full:
            logger.warning(f"[SharedCargo] Cargo is full, cannot add {kind.value}")
            _notify(self._full)
            return False

        index = self._slots.index(ItemKind.NONE)
        self._slots[index] = kind
        logger.info(
            f"[SharedCargo] Added {kind.value} to slot {index} "
            f"({self.count}/{self.max_slots})"
        )
        _notify(self._added, kind)
        return True

    def remove(self, kind: ItemKind) -> bool:
        """Remove the first *kind* in the hold. False if none present."""
        if kind is ItemKind.NONE:
            logger.warning("[SharedCargo] Cannot remove NONE item type")
            return False
        try:
            index = self._slots.index(kind)
        except ValueError:
            logger.warning(f"[SharedCargo] Could not find {kind.value} to remove")
            return False

        self._slots[index] = ItemKind.NONE
        logger.info(
            f"[SharedCargo] Removed {kind.value} from slot {index} "
            f"({self.count}/{self.max_slots})"
        )
        _notify(self._removed, kind)
        return True

    def clear(self) -> None:
        self._slots = [ItemKind.NONE] * self.max_slots
        _notify(self._cleared)

    def _on_landing_enter(self) -> None:
        self.clear()
        logger.info("[SharedCargo] Landing - cargo cleared for new run")

    def get_state(self) -> dict:
        return {
            "slots": [s.value for s in self._slots],
            "count": self.count,
            "max_slots": self.max_slots,
        }


def _notify(listeners: list, *args) -> None:
    for listener in list(listeners):
        try:
            listener(*args)
        except Exception:
            logger.exception("[SharedCargo] listener failed")
