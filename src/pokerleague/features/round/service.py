from __future__ import annotations

import logging
import secrets
import string
import threading
from dataclasses import dataclass
from datetime import date

from ...core.models import CostConfig, HistoricalRoundRecord, SettlementResult
from ...core.seating import make_rng, new_seed
from ..league import Roster, SeasonLedger
from .concurrency import run_blocking
from .engine import RoundSession
from .schemas import (
    AdvancePayload,
    BalancePayload,
    CostPayload,
    EliminationPayload,
    HistoryPayload,
    PlayerPayload,
    PlayerResultPayload,
    PrizesPayload,
    RoundPayload,
    SeatPayload,
    SessionPayload,
    SettlementPayload,
    StandingPayload,
    TablePayload,
)

__all__ = ["LeagueManager", "RoundConfig"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundConfig:
    """Parameters for starting a round from the checked-in roster."""

    table_count: int = 1
    costs: CostConfig | None = None
    seed: int | None = None
    round_date: date | None = None


class LeagueManager:
    """Single owner of the roster, the live rounds and the season history.

    Every public method takes the same lock, so mutations of a round's ledger
    are serialised and readers always see a consistent snapshot.
    """

    def __init__(
        self,
        *,
        roster: Roster | None = None,
        season: SeasonLedger | None = None,
        default_costs: CostConfig | None = None,
    ) -> None:
        self._roster = roster or Roster()
        self._season = season or SeasonLedger()
        self._default_costs = default_costs or CostConfig()
        self._rounds: dict[str, RoundSession] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ roster
    def register_player(self, name: str, *, priority: bool = False) -> PlayerPayload:
        with self._lock:
            player = self._roster.register(name, priority=priority)
            return _player_payload(self._roster, player.player_id)

    def set_priority(self, player_id: str, flag: bool) -> PlayerPayload:
        with self._lock:
            self._roster.set_priority(player_id, flag)
            return _player_payload(self._roster, player_id)

    def set_checked_in(self, player_id: str, flag: bool) -> PlayerPayload:
        with self._lock:
            self._roster.set_checked_in(player_id, flag)
            return _player_payload(self._roster, player_id)

    def players(self) -> list[PlayerPayload]:
        with self._lock:
            return [_player_payload(self._roster, p.player_id) for p in self._roster.players()]

    # ------------------------------------------------------------------ rounds
    def start_round(self, config: RoundConfig) -> str:
        seed = config.seed if config.seed is not None else new_seed()
        with self._lock:
            session = RoundSession.start(
                self._roster.checked_in(),
                config.table_count,
                config.costs or self._default_costs,
                rng=make_rng(seed),
                round_date=config.round_date,
            )
            round_id = _rid()
            self._rounds[round_id] = session
        logger.info("Round registered", extra={"round_id": round_id, "seed": seed})
        return round_id

    async def start_round_async(self, config: RoundConfig) -> str:
        return await run_blocking(self.start_round, config)

    def round_state(self, round_id: str) -> RoundPayload:
        with self._lock:
            return _round_payload(round_id, self._require_round(round_id))

    async def round_state_async(self, round_id: str) -> RoundPayload:
        return await run_blocking(self.round_state, round_id)

    def tables(self, round_id: str) -> list[TablePayload]:
        with self._lock:
            return _table_payloads(self._require_round(round_id))

    def advance(self, round_id: str) -> AdvancePayload:
        with self._lock:
            session = self._require_round(round_id)
            advanced = session.advance()
            return AdvancePayload(phase=session.phase.value, advanced=advanced)

    def adjust_rebuys(self, round_id: str, player_id: str, delta: int) -> RoundPayload:
        with self._lock:
            session = self._require_round(round_id)
            if session.adjust_rebuys(player_id, delta) is None:
                logger.debug("Rebuy for unknown player ignored", extra={"round_id": round_id, "player_id": player_id})
            return _round_payload(round_id, session)

    def adjust_add_on(self, round_id: str, player_id: str, delta: int) -> RoundPayload:
        with self._lock:
            session = self._require_round(round_id)
            if session.adjust_add_on(player_id, delta) is None:
                logger.debug("Add-on for unknown player ignored", extra={"round_id": round_id, "player_id": player_id})
            return _round_payload(round_id, session)

    def bulk_add_on(self, round_id: str) -> RoundPayload:
        with self._lock:
            session = self._require_round(round_id)
            updated = session.bulk_add_on()
            logger.debug("Bulk add-on applied", extra={"round_id": round_id, "updated": updated})
            return _round_payload(round_id, session)

    def eliminate(self, round_id: str, player_id: str) -> EliminationPayload:
        with self._lock:
            session = self._require_round(round_id)
            rank = session.eliminate(player_id)
            return EliminationPayload(rank=rank, round=_round_payload(round_id, session))

    def set_rank(self, round_id: str, player_id: str, rank: int | None) -> RoundPayload:
        with self._lock:
            session = self._require_round(round_id)
            session.set_rank(player_id, rank)
            return _round_payload(round_id, session)

    def update_costs(self, round_id: str, costs: CostConfig) -> RoundPayload:
        with self._lock:
            session = self._require_round(round_id)
            session.update_config(costs)
            return _round_payload(round_id, session)

    def settlement(self, round_id: str) -> SettlementPayload:
        with self._lock:
            session = self._require_round(round_id)
            return _settlement_payload(session, session.settlement())

    async def settlement_async(self, round_id: str) -> SettlementPayload:
        return await run_blocking(self.settlement, round_id)

    def finalize_round(self, round_id: str, round_date: date | None = None) -> HistoryPayload:
        with self._lock:
            session = self._require_round(round_id)
            record = session.finalize(self._season.next_round_number(), round_date)
            self._season.append(record)
            self._rounds.pop(round_id, None)
        return _history_payload(record)

    def discard_round(self, round_id: str) -> None:
        with self._lock:
            self._require_round(round_id)
            self._rounds.pop(round_id)
        logger.info("Round discarded without saving", extra={"round_id": round_id})

    # ------------------------------------------------------------------ season
    def standings(self) -> list[StandingPayload]:
        with self._lock:
            standings = self._season.standings(self._roster.players())
        return [
            StandingPayload(
                player_id=s.player_id,
                name=s.name,
                points=s.points,
                rounds=s.rounds,
                wins=s.wins,
                net_balance=s.net_balance,
            )
            for s in standings
        ]

    def history(self) -> list[HistoryPayload]:
        with self._lock:
            records = self._season.records
        return [_history_payload(record) for record in records]

    def _require_round(self, round_id: str) -> RoundSession:
        session = self._rounds.get(round_id)
        if session is None:
            raise KeyError(f"round '{round_id}' not found")
        return session


def _rid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _player_payload(roster: Roster, player_id: str) -> PlayerPayload:
    player = roster.get(player_id)
    return PlayerPayload(
        id=player.player_id,
        name=player.name,
        priority=player.priority,
        checked_in=roster.is_checked_in(player_id),
    )


def _player_name(session: RoundSession, player_id: str) -> str:
    player = session.player(player_id)
    return player.name if player else player_id


def _table_payloads(session: RoundSession) -> list[TablePayload]:
    tables: list[TablePayload] = []
    for table in session.tables:
        seats = []
        for index, player_id in enumerate(table.players):
            player = session.player(player_id)
            seats.append(
                SeatPayload(
                    seat=index + 1,
                    player_id=player_id,
                    name=player.name if player else player_id,
                    priority=bool(player and player.priority),
                )
            )
        tables.append(TablePayload(id=table.table_id, seats=seats))
    return tables


def _round_payload(round_id: str, session: RoundSession) -> RoundPayload:
    scores = session.points()
    return RoundPayload(
        round_id=round_id,
        round_date=session.round_date,
        phase=session.phase.value,
        player_count=session.player_count,
        active_count=session.active_count,
        costs=CostPayload.from_config(session.config),
        tables=_table_payloads(session),
        sessions=[
            SessionPayload(
                player_id=s.player_id,
                name=_player_name(session, s.player_id),
                buy_ins=s.buy_ins,
                rebuys=s.rebuys,
                add_ons=s.add_ons,
                rank=s.rank,
                points=scores[s.player_id],
                active=s.is_active,
            )
            for s in session.sessions()
        ],
    )


def _settlement_payload(session: RoundSession, result: SettlementResult) -> SettlementPayload:
    return SettlementPayload(
        gross_total=result.gross_total,
        admin_tax=result.admin_tax,
        main_event_pot=result.main_event_pot,
        net_prize_pool=result.net_prize_pool,
        prizes=PrizesPayload(
            first=result.prizes.first,
            second=result.prizes.second,
            third=result.prizes.third,
        ),
        rounding_adjustment=result.rounding_adjustment,
        balances=[
            BalancePayload(
                player_id=b.player_id,
                name=_player_name(session, b.player_id),
                total_paid=b.total_paid,
                prize_received=b.prize_received,
                bbq_share=b.bbq_share,
                net_balance=b.net_balance,
            )
            for b in result.balances
        ],
    )


def _history_payload(record: HistoricalRoundRecord) -> HistoryPayload:
    return HistoryPayload(
        round_number=record.round_number,
        round_date=record.round_date,
        gross_total=record.gross_total,
        results=[
            PlayerResultPayload(
                player_id=r.player_id,
                points=r.points,
                net_balance=r.net_balance,
                rank=r.rank,
            )
            for r in record.results
        ],
    )
