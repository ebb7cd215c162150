"""Table draw for a league round.

Priority ("dealer") players are dealt round-robin across tables first so the
first one to reach each table holds seat 0. Everyone else is shuffled and
dropped onto whichever table is currently smallest, which keeps table sizes
within one seat of each other. The shuffle is the only random step, and its
source is injected so a draw can be replayed from its seed.
"""

from __future__ import annotations

import logging
import random
import secrets
from collections.abc import Sequence

from .models import Player, Table

__all__ = ["MAX_TABLES", "MIN_TABLES", "assign_tables", "clamp_table_count", "make_rng", "new_seed"]

logger = logging.getLogger(__name__)

MIN_TABLES = 1
MAX_TABLES = 3


def clamp_table_count(table_count: int) -> int:
    return max(MIN_TABLES, min(MAX_TABLES, int(table_count)))


def new_seed() -> int:
    return secrets.SystemRandom().getrandbits(32)


def make_rng(seed: int | None = None) -> random.Random:
    return random.Random(seed if seed is not None else new_seed())  # noqa: S311


def assign_tables(
    players: Sequence[Player],
    table_count: int,
    rng: random.Random | None = None,
) -> list[Table]:
    if not players:
        return []

    count = clamp_table_count(table_count)
    if count != table_count:
        logger.debug("Table count clamped", extra={"requested": table_count, "used": count})
    rng = rng or make_rng()

    seats: list[list[str]] = [[] for _ in range(count)]
    priority = [p for p in players if p.priority]
    others = [p for p in players if not p.priority]

    for index, player in enumerate(priority):
        seats[index % count].append(player.player_id)

    # random.Random.shuffle is an unbiased Fisher-Yates permutation
    shuffled = list(others)
    rng.shuffle(shuffled)

    for player in shuffled:
        smallest = min(range(count), key=lambda idx: (len(seats[idx]), idx))
        seats[smallest].append(player.player_id)

    return [Table(table_id=idx + 1, players=tuple(ids)) for idx, ids in enumerate(seats)]
