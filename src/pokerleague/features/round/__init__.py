"""Round feature: engine, service layer, schemas, and API router."""

from .engine import MIN_PLAYERS, RoundSession
from .router import create_league_routers
from .schemas import (
    AdvancePayload,
    BalancePayload,
    CostPayload,
    EliminationPayload,
    HistoryPayload,
    PlayerPayload,
    RoundPayload,
    SessionPayload,
    SettlementPayload,
    StandingPayload,
    TablePayload,
)
from .service import LeagueManager, RoundConfig

__all__ = [
    "AdvancePayload",
    "BalancePayload",
    "CostPayload",
    "EliminationPayload",
    "HistoryPayload",
    "LeagueManager",
    "MIN_PLAYERS",
    "PlayerPayload",
    "RoundConfig",
    "RoundPayload",
    "RoundSession",
    "SessionPayload",
    "SettlementPayload",
    "StandingPayload",
    "TablePayload",
    "create_league_routers",
]
