from __future__ import annotations

import logging
from dataclasses import replace

from ...core.models import Player

__all__ = ["Roster"]

logger = logging.getLogger(__name__)


class Roster:
    """Registered league players and who is checked in for the next round."""

    def __init__(self) -> None:
        self._players: dict[str, Player] = {}
        self._checked_in: set[str] = set()

    def register(self, name: str, *, priority: bool = False) -> Player:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("player name must not be blank")
        player = Player(player_id=str(len(self._players) + 1), name=cleaned, priority=priority)
        self._players[player.player_id] = player
        # new players are checked in straight away
        self._checked_in.add(player.player_id)
        logger.debug("Player registered", extra={"player_id": player.player_id})
        return player

    def get(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise KeyError(f"player '{player_id}' not found")
        return player

    def set_priority(self, player_id: str, flag: bool) -> Player:
        player = replace(self.get(player_id), priority=bool(flag))
        self._players[player_id] = player
        return player

    def set_checked_in(self, player_id: str, flag: bool) -> Player:
        player = self.get(player_id)
        if flag:
            self._checked_in.add(player_id)
        else:
            self._checked_in.discard(player_id)
        return player

    def toggle_check_in(self, player_id: str) -> bool:
        flag = not self.is_checked_in(player_id)
        self.set_checked_in(player_id, flag)
        return flag

    def is_checked_in(self, player_id: str) -> bool:
        self.get(player_id)
        return player_id in self._checked_in

    def players(self) -> list[Player]:
        return list(self._players.values())

    def checked_in(self) -> list[Player]:
        return [p for p in self._players.values() if p.player_id in self._checked_in]

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players
