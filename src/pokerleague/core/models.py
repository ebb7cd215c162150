from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

__all__ = [
    "CostConfig",
    "HistoricalRoundRecord",
    "Player",
    "PlayerBalance",
    "PlayerResult",
    "PlayerSession",
    "PrizeSplit",
    "RoundPhase",
    "SettlementResult",
    "Table",
    "ZERO",
    "to_money",
]

ZERO = Decimal(0)


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` into an exact :class:`~decimal.Decimal` amount.

    Floats are routed through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("boolean is not a monetary amount")
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        return Decimal(value)
    raise TypeError(f"cannot interpret {type(value).__name__} as money")


class RoundPhase(str, Enum):
    """Purchase window of a round. Moves forward only."""

    REBUYS_OPEN = "rebuys_open"
    ADDONS_OPEN = "addons_open"
    FREEZEOUT = "freezeout"

    def next(self) -> RoundPhase | None:
        order = _PHASE_ORDER
        idx = order.index(self)
        return order[idx + 1] if idx + 1 < len(order) else None


_PHASE_ORDER: tuple[RoundPhase, ...] = (
    RoundPhase.REBUYS_OPEN,
    RoundPhase.ADDONS_OPEN,
    RoundPhase.FREEZEOUT,
)


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    priority: bool = False


@dataclass(frozen=True)
class PlayerSession:
    """One player's ledger for a single round."""

    player_id: str
    buy_ins: int = 1
    rebuys: int = 0
    add_ons: int = 0
    rank: int | None = None

    @property
    def is_active(self) -> bool:
        return self.rank is None


@dataclass(frozen=True)
class Table:
    table_id: int
    players: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.players)


@dataclass(frozen=True)
class CostConfig:
    """Unit costs for a round; ``bbq`` is a fixed total split across everyone."""

    buy_in: Decimal = Decimal(50)
    rebuy: Decimal = Decimal(50)
    add_on: Decimal = Decimal(50)
    bbq: Decimal = Decimal(300)

    def __post_init__(self) -> None:
        for name in ("buy_in", "rebuy", "add_on", "bbq"):
            amount = to_money(getattr(self, name))
            if not amount.is_finite():
                raise ValueError(f"{name} cost must be a finite amount, got {amount}")
            if amount < 0:
                raise ValueError(f"{name} cost must be non-negative, got {amount}")
            object.__setattr__(self, name, amount)

    def paid_in(self, session: PlayerSession) -> Decimal:
        return session.buy_ins * self.buy_in + session.rebuys * self.rebuy + session.add_ons * self.add_on


@dataclass(frozen=True)
class PrizeSplit:
    first: Decimal = ZERO
    second: Decimal = ZERO
    third: Decimal = ZERO

    def for_rank(self, rank: int | None) -> Decimal:
        if rank == 1:
            return self.first
        if rank == 2:
            return self.second
        if rank == 3:
            return self.third
        return ZERO

    @property
    def total(self) -> Decimal:
        return self.first + self.second + self.third


@dataclass(frozen=True)
class PlayerBalance:
    player_id: str
    total_paid: Decimal
    prize_received: Decimal
    bbq_share: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class SettlementResult:
    gross_total: Decimal
    admin_tax: Decimal
    main_event_pot: Decimal
    net_prize_pool: Decimal
    prizes: PrizeSplit
    rounding_adjustment: Decimal
    balances: tuple[PlayerBalance, ...] = ()

    def balance_for(self, player_id: str) -> PlayerBalance | None:
        return next((b for b in self.balances if b.player_id == player_id), None)


@dataclass(frozen=True)
class PlayerResult:
    player_id: str
    points: float
    net_balance: Decimal
    rank: int | None


@dataclass(frozen=True)
class HistoricalRoundRecord:
    round_number: int
    round_date: date
    gross_total: Decimal
    results: tuple[PlayerResult, ...] = field(default_factory=tuple)
