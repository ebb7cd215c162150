"""Typed failures raised by the round engine.

Ledger operations on unknown players are no-ops rather than errors; only the
conditions below are reported to callers.
"""

from __future__ import annotations


class LeagueError(Exception):
    """Base class for rule violations raised by the engine."""


class InsufficientPlayersError(LeagueError):
    def __init__(self, count: int, minimum: int = 2) -> None:
        self.count = count
        self.minimum = minimum
        super().__init__(f"a round needs at least {minimum} players, got {count}")


class DuplicatePlayerError(LeagueError):
    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"player '{player_id}' appears more than once in the roster")


class PhaseClosedError(LeagueError):
    """The purchase window for ``operation`` is not open in ``phase``."""

    def __init__(self, operation: str, phase: str) -> None:
        self.operation = operation
        self.phase = phase
        super().__init__(f"{operation} not allowed during {phase}")


class RoundFinalizedError(LeagueError):
    """The round has been settled and its ledger is read-only."""
