from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...core.models import CostConfig

__all__ = [
    "AdvancePayload",
    "BalancePayload",
    "CostPayload",
    "EliminationPayload",
    "HistoryPayload",
    "PlayerPayload",
    "PlayerResultPayload",
    "PrizesPayload",
    "RoundPayload",
    "SeatPayload",
    "SessionPayload",
    "SettlementPayload",
    "StandingPayload",
    "TablePayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CostPayload(_APIModel):
    buy_in: Decimal = Field(default=Decimal(50), ge=0)
    rebuy: Decimal = Field(default=Decimal(50), ge=0)
    add_on: Decimal = Field(default=Decimal(50), ge=0)
    bbq: Decimal = Field(default=Decimal(300), ge=0)

    def to_config(self) -> CostConfig:
        return CostConfig(buy_in=self.buy_in, rebuy=self.rebuy, add_on=self.add_on, bbq=self.bbq)

    @classmethod
    def from_config(cls, config: CostConfig) -> CostPayload:
        return cls(buy_in=config.buy_in, rebuy=config.rebuy, add_on=config.add_on, bbq=config.bbq)


class PlayerPayload(_APIModel):
    id: str
    name: str
    priority: bool
    checked_in: bool | None = None


class SeatPayload(_APIModel):
    seat: int
    player_id: str
    name: str
    priority: bool


class TablePayload(_APIModel):
    id: int
    seats: list[SeatPayload]


class SessionPayload(_APIModel):
    player_id: str
    name: str
    buy_ins: int
    rebuys: int
    add_ons: int
    rank: int | None = None
    points: float
    active: bool


class RoundPayload(_APIModel):
    round_id: str
    round_date: date = Field(alias="date")
    phase: str
    player_count: int
    active_count: int
    costs: CostPayload
    tables: list[TablePayload]
    sessions: list[SessionPayload]


class AdvancePayload(_APIModel):
    phase: str
    advanced: bool


class EliminationPayload(_APIModel):
    rank: int | None = None
    round: RoundPayload


class PrizesPayload(_APIModel):
    first: Decimal
    second: Decimal
    third: Decimal


class BalancePayload(_APIModel):
    player_id: str
    name: str
    total_paid: Decimal
    prize_received: Decimal
    bbq_share: Decimal
    net_balance: Decimal


class SettlementPayload(_APIModel):
    gross_total: Decimal
    admin_tax: Decimal
    main_event_pot: Decimal
    net_prize_pool: Decimal
    prizes: PrizesPayload
    rounding_adjustment: Decimal
    balances: list[BalancePayload]


class PlayerResultPayload(_APIModel):
    player_id: str
    points: float
    net_balance: Decimal
    rank: int | None = None


class HistoryPayload(_APIModel):
    round_number: int
    round_date: date = Field(alias="date")
    gross_total: Decimal
    results: list[PlayerResultPayload]


class StandingPayload(_APIModel):
    player_id: str
    name: str
    points: float
    rounds: int
    wins: int
    net_balance: Decimal
