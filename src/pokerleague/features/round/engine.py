from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from ...core.exceptions import (
    DuplicatePlayerError,
    InsufficientPlayersError,
    PhaseClosedError,
    RoundFinalizedError,
)
from ...core.models import (
    ZERO,
    CostConfig,
    HistoricalRoundRecord,
    Player,
    PlayerResult,
    PlayerSession,
    RoundPhase,
    SettlementResult,
    Table,
)
from ...core.scoring import round_points
from ...core.seating import assign_tables
from ...core.settlement import settle

__all__ = ["MIN_PLAYERS", "RoundSession"]

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


class RoundSession:
    """Ledger and phase state machine for one round.

    Sessions are frozen values replaced on every mutation; callers only ever
    receive snapshots. Settlement and points are recomputed from the ledger on
    each read.
    """

    def __init__(
        self,
        players: Sequence[Player],
        tables: Sequence[Table],
        config: CostConfig,
        *,
        round_date: date | None = None,
    ) -> None:
        self._players: dict[str, Player] = {p.player_id: p for p in players}
        self._sessions: dict[str, PlayerSession] = {p.player_id: PlayerSession(player_id=p.player_id) for p in players}
        self._tables: tuple[Table, ...] = tuple(tables)
        self._config = config
        self._phase = RoundPhase.REBUYS_OPEN
        self._finalized = False
        self.round_date = round_date or date.today()

    @classmethod
    def start(
        cls,
        players: Sequence[Player],
        table_count: int,
        config: CostConfig,
        *,
        rng: random.Random | None = None,
        round_date: date | None = None,
    ) -> RoundSession:
        if len(players) < MIN_PLAYERS:
            raise InsufficientPlayersError(len(players), MIN_PLAYERS)
        seen: set[str] = set()
        for player in players:
            if player.player_id in seen:
                raise DuplicatePlayerError(player.player_id)
            seen.add(player.player_id)
        tables = assign_tables(players, table_count, rng)
        logger.info(
            "Round started",
            extra={"players": len(players), "tables": len(tables)},
        )
        return cls(players, tables, config, round_date=round_date)

    # ------------------------------------------------------------------ reads
    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def config(self) -> CostConfig:
        return self._config

    @property
    def tables(self) -> tuple[Table, ...]:
        return self._tables

    @property
    def players(self) -> tuple[Player, ...]:
        return tuple(self._players.values())

    @property
    def player_count(self) -> int:
        return len(self._sessions)

    @property
    def active_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.is_active)

    def player(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def session(self, player_id: str) -> PlayerSession | None:
        return self._sessions.get(player_id)

    def sessions(self) -> tuple[PlayerSession, ...]:
        return tuple(self._sessions.values())

    def settlement(self) -> SettlementResult:
        return settle(self.sessions(), self._config)

    def points(self) -> dict[str, float]:
        return round_points(self.sessions())

    # ------------------------------------------------------------------ phase
    def advance(self) -> bool:
        self._ensure_open()
        following = self._phase.next()
        if following is None:
            logger.debug("Advance ignored; round already in freezeout")
            return False
        self._phase = following
        logger.info("Round phase advanced", extra={"phase": following.value})
        return True

    # ------------------------------------------------------------------ ledger
    def adjust_rebuys(self, player_id: str, delta: int) -> PlayerSession | None:
        self._ensure_open()
        current = self._sessions.get(player_id)
        if current is None:
            return None
        self._require_phase(RoundPhase.REBUYS_OPEN, "rebuy")
        return self._store(replace(current, rebuys=max(0, current.rebuys + delta)))

    def adjust_add_on(self, player_id: str, delta: int) -> PlayerSession | None:
        self._ensure_open()
        current = self._sessions.get(player_id)
        if current is None:
            return None
        self._require_phase(RoundPhase.ADDONS_OPEN, "add-on")
        return self._store(replace(current, add_ons=max(0, min(1, current.add_ons + delta))))

    def bulk_add_on(self) -> int:
        self._require_phase(RoundPhase.ADDONS_OPEN, "add-on")
        updated = 0
        for session in self.sessions():
            if session.is_active and session.add_ons != 1:
                self._store(replace(session, add_ons=1))
                updated += 1
        return updated

    def eliminate(self, player_id: str) -> int | None:
        """Rank ``player_id`` with the worst position still free.

        The first player out takes rank N, the last one standing takes 1.
        Already-ranked players and unknown ids are left untouched.
        """

        self._ensure_open()
        current = self._sessions.get(player_id)
        if current is None:
            return None
        if current.rank is not None:
            return current.rank
        taken = {s.rank for s in self._sessions.values() if s.rank is not None}
        rank = self.player_count
        while rank > 0 and rank in taken:
            rank -= 1
        if rank == 0:
            logger.debug("Elimination ignored; every rank is assigned", extra={"player_id": player_id})
            return None
        self._assign_rank(player_id, rank)
        return rank

    def set_rank(self, player_id: str, rank: int | None) -> PlayerSession | None:
        self._ensure_open()
        if player_id not in self._sessions:
            return None
        current = self._sessions[player_id]
        if rank is None or rank <= 0:
            return self._store(replace(current, rank=None))
        if rank > self.player_count:
            logger.debug("Rank outside the field ignored", extra={"player_id": player_id, "rank": rank})
            return current
        return self._assign_rank(player_id, rank)

    def update_config(self, config: CostConfig) -> None:
        self._ensure_open()
        self._config = config

    def finalize(self, round_number: int, round_date: date | None = None) -> HistoricalRoundRecord:
        self._ensure_open()
        settlement = self.settlement()
        scores = self.points()
        results = []
        for session in self.sessions():
            balance = settlement.balance_for(session.player_id)
            results.append(
                PlayerResult(
                    player_id=session.player_id,
                    points=scores[session.player_id],
                    net_balance=balance.net_balance if balance else ZERO,
                    rank=session.rank,
                )
            )
        self._finalized = True
        record = HistoricalRoundRecord(
            round_number=round_number,
            round_date=round_date or self.round_date,
            gross_total=settlement.gross_total,
            results=tuple(results),
        )
        logger.info(
            "Round finalized",
            extra={"round_number": round_number, "gross_total": str(settlement.gross_total)},
        )
        return record

    # ------------------------------------------------------------------ internals
    def _assign_rank(self, player_id: str, rank: int) -> PlayerSession:
        for other in self.sessions():
            if other.player_id != player_id and other.rank == rank:
                self._store(replace(other, rank=None))
        return self._store(replace(self._sessions[player_id], rank=rank))

    def _store(self, session: PlayerSession) -> PlayerSession:
        self._sessions[session.player_id] = session
        return session

    def _ensure_open(self) -> None:
        if self._finalized:
            raise RoundFinalizedError("round has been finalized")

    def _require_phase(self, phase: RoundPhase, operation: str) -> None:
        self._ensure_open()
        if self._phase is not phase:
            raise PhaseClosedError(operation, self._phase.value)
