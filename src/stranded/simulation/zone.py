"""ReturnZone — occupancy of the ship / portal area.

The host's trigger volume reports player ids entering, leaving and
lingering; the zone keeps the set of ids inside and forwards each report
to its listeners.  The mission flow trigger is the main listener: leaving
the zone during landing starts the expedition, and standing in it with
the objectives collected starts the final stand.
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

from stranded.config import settings

ZoneListener = Callable[[str], None]


class ReturnZone:
    """Tracks which players are inside the return area."""

    def __init__(self, expected_players: int | None = None) -> None:
        self.expected_players = (
            settings.expected_players if expected_players is None else expected_players
        )
        self._inside: set[str] = set()
        self._enter: list[ZoneListener] = []
        self._exit: list[ZoneListener] = []
        self._stay: list[ZoneListener] = []

    # -- Listeners --------------------------------------------------------------

    def on_enter(self, listener: ZoneListener) -> None:
        self._enter.append(listener)

    def on_exit(self, listener: ZoneListener) -> None:
        self._exit.append(listener)

    def on_stay(self, listener: ZoneListener) -> None:
        self._stay.append(listener)

    # -- Reports from the host --------------------------------------------------

    def enter(self, player_id: str) -> None:
        if player_id not in self._inside:
            self._inside.add(player_id)
            logger.debug(
                f"[ReturnZone] {player_id} entered, inside: "
                f"{self.inside_count}/{self.expected_players}"
            )
        self._notify(self._enter, player_id)

    def exit(self, player_id: str) -> None:
        if player_id in self._inside:
            self._inside.discard(player_id)
            logger.debug(
                f"[ReturnZone] {player_id} left, inside: "
                f"{self.inside_count}/{self.expected_players}"
            )
        self._notify(self._exit, player_id)

    def stay(self, player_id: str) -> None:
        self._inside.add(player_id)
        self._notify(self._stay, player_id)

    def clear(self) -> None:
        self._inside.clear()

    # -- Queries ----------------------------------------------------------------

    @property
    def inside_count(self) -> int:
        return len(self._inside)

    @property
    def occupied(self) -> bool:
        return bool(self._inside)

    @property
    def all_inside(self) -> bool:
        return self.expected_players > 0 and self.inside_count >= self.expected_players

    def players_inside(self) -> list[str]:
        return sorted(self._inside)

    @staticmethod
    def _notify(listeners: list[ZoneListener], player_id: str) -> None:
        for listener in list(listeners):
            try:
                listener(player_id)
            except Exception:
                logger.exception("[ReturnZone] listener failed")
