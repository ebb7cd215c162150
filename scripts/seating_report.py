#!/usr/bin/env python3
"""Report table-size spread and seat-position bias of the table draw.

Usage:
    python scripts/seating_report.py --players 11 --tables 3 --draws 20000
"""

from __future__ import annotations

import argparse

import numpy as np

from pokerleague.core.models import Player
from pokerleague.core.seating import assign_tables, clamp_table_count, make_rng


def run(players: int, tables: int, draws: int, seed: int) -> tuple[np.ndarray, np.ndarray]:
    roster = [Player(player_id=str(i), name=f"P{i}") for i in range(players)]
    count = clamp_table_count(tables)
    rng = make_rng(seed)

    spreads = np.zeros(draws, dtype=int)
    # positions[player, table] counts how often a player landed at a table
    positions = np.zeros((players, count), dtype=int)
    for draw in range(draws):
        result = assign_tables(roster, count, rng)
        sizes = [len(t) for t in result]
        spreads[draw] = max(sizes) - min(sizes) if sizes else 0
        for index, table in enumerate(result):
            for player_id in table.players:
                positions[int(player_id), index] += 1
    return spreads, positions


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check the table draw for bias.")
    parser.add_argument("--players", type=int, default=10)
    parser.add_argument("--tables", type=int, default=2)
    parser.add_argument("--draws", type=int, default=10000)
    parser.add_argument("--seed", type=int, default=1)
    args = parser.parse_args(argv)
    if args.players <= 0 or args.draws <= 0:
        print("nothing to report: need at least one player and one draw")
        return 0

    spreads, positions = run(args.players, args.tables, args.draws, args.seed)
    print(f"draws: {args.draws}, max size spread: {spreads.max()}")

    shares = positions / args.draws
    expected = shares.mean(axis=0)
    deviation = np.abs(shares - expected).max()
    print("expected share per table: " + ", ".join(f"{value:.3f}" for value in expected))
    print(f"largest per-player deviation: {deviation:.4f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
