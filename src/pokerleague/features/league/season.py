from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from ...core.models import ZERO, HistoricalRoundRecord, Player

__all__ = ["SeasonLedger", "SeasonStanding"]


@dataclass(frozen=True)
class SeasonStanding:
    player_id: str
    name: str
    points: float
    rounds: int
    wins: int
    net_balance: Decimal


class SeasonLedger:
    """Append-only history of finalized rounds."""

    def __init__(self) -> None:
        self._records: list[HistoricalRoundRecord] = []

    @property
    def records(self) -> tuple[HistoricalRoundRecord, ...]:
        return tuple(self._records)

    def next_round_number(self) -> int:
        return len(self._records) + 1

    def append(self, record: HistoricalRoundRecord) -> None:
        self._records.append(record)

    def standings(self, players: Iterable[Player]) -> list[SeasonStanding]:
        """Running totals per known player, best points first.

        Players without any recorded round are listed with zeros; results for
        ids no longer on the roster are skipped.
        """

        order: dict[str, int] = {}
        names: dict[str, str] = {}
        totals: dict[str, list] = {}
        for index, player in enumerate(players):
            order[player.player_id] = index
            names[player.player_id] = player.name
            totals[player.player_id] = [0.0, 0, 0, ZERO]

        for record in self._records:
            for result in record.results:
                entry = totals.get(result.player_id)
                if entry is None:
                    continue
                entry[0] += result.points
                entry[1] += 1
                if result.rank == 1:
                    entry[2] += 1
                entry[3] += result.net_balance

        standings = [
            SeasonStanding(
                player_id=pid,
                name=names[pid],
                points=entry[0],
                rounds=entry[1],
                wins=entry[2],
                net_balance=entry[3],
            )
            for pid, entry in totals.items()
        ]
        standings.sort(key=lambda s: (-s.points, order[s.player_id]))
        return standings

    def __len__(self) -> int:
        return len(self._records)
