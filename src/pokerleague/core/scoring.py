from __future__ import annotations

from collections.abc import Sequence

from .models import PlayerSession


def points(n: int, p: int | None) -> float:
    """League points for finishing position ``p`` among ``n`` players.

    ``(n + 1) - p + n / p`` with true division, so fractional scores such as
    ``points(25, 3) == 31.333...`` are expected. Unranked or non-positive
    positions score zero.
    """

    if p is None or p <= 0:
        return 0.0
    return float((n + 1) - p + (n / p))


def round_points(sessions: Sequence[PlayerSession]) -> dict[str, float]:
    n = len(sessions)
    return {session.player_id: points(n, session.rank) for session in sessions}
