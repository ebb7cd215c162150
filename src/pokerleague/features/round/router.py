from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, model_validator

from ...core.exceptions import (
    DuplicatePlayerError,
    InsufficientPlayersError,
    PhaseClosedError,
    RoundFinalizedError,
)
from ...core.seating import clamp_table_count
from .concurrency import run_blocking
from .schemas import CostPayload
from .service import LeagueManager, RoundConfig

__all__ = [
    "AdjustRequest",
    "FinalizeRequest",
    "FlagRequest",
    "RankRequest",
    "RegisterPlayerRequest",
    "StartRoundRequest",
    "create_league_routers",
]


class RegisterPlayerRequest(BaseModel):
    name: str
    priority: bool = False


class FlagRequest(BaseModel):
    value: bool


class StartRoundRequest(BaseModel):
    table_count: int | None = None
    costs: CostPayload | None = None
    seed: int | None = None
    round_date: date | None = Field(default=None, alias="date")

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        for field in ("table_count", "seed"):
            value = cleaned.get(field)
            if value in (None, ""):
                cleaned[field] = None
                continue
            if isinstance(value, str):
                try:
                    cleaned[field] = int(value)
                except ValueError:
                    cleaned[field] = None
        return cleaned

    @model_validator(mode="after")
    def _normalize(self) -> StartRoundRequest:
        if self.table_count is not None:
            self.table_count = clamp_table_count(self.table_count)
        return self


class AdjustRequest(BaseModel):
    delta: int = 1


class RankRequest(BaseModel):
    rank: int | None = None


class FinalizeRequest(BaseModel):
    round_date: date | None = Field(default=None, alias="date")


class _LeagueController:
    def __init__(self, manager: LeagueManager, default_tables: int) -> None:
        self.manager = manager
        self.default_tables = default_tables

    # ------------------------------------------------------------------ helpers
    def _json_response(self, data: Any) -> JSONResponse:
        return JSONResponse(data)

    async def _call(self, func: Callable[..., Any], /, *args: Any) -> Any:
        try:
            return await run_blocking(func, *args)
        except KeyError as exc:
            raise HTTPException(404, exc.args[0] if exc.args else "not found") from exc
        except (InsufficientPlayersError, DuplicatePlayerError) as exc:
            raise HTTPException(422, str(exc)) from exc
        except (PhaseClosedError, RoundFinalizedError) as exc:
            raise HTTPException(409, str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc

    async def _payload(self, func: Callable[..., Any], /, *args: Any) -> Response:
        result = await self._call(func, *args)
        if isinstance(result, list):
            return self._json_response([item.to_dict() for item in result])
        return self._json_response(result.to_dict())

    # ------------------------------------------------------------------ roster
    async def players(self) -> Response:
        return await self._payload(self.manager.players)

    async def register(self, body: RegisterPlayerRequest) -> Response:
        player = await self._call(lambda: self.manager.register_player(body.name, priority=body.priority))
        return self._json_response(player.to_dict())

    async def set_priority(self, pid: str, body: FlagRequest) -> Response:
        return await self._payload(self.manager.set_priority, pid, body.value)

    async def set_checked_in(self, pid: str, body: FlagRequest) -> Response:
        return await self._payload(self.manager.set_checked_in, pid, body.value)

    # ------------------------------------------------------------------ rounds
    async def start(self, body: StartRoundRequest) -> Response:
        config = RoundConfig(
            table_count=body.table_count if body.table_count is not None else self.default_tables,
            costs=body.costs.to_config() if body.costs else None,
            seed=body.seed,
            round_date=body.round_date,
        )
        round_id = await self._call(self.manager.start_round, config)
        return await self._payload(self.manager.round_state, round_id)

    async def state(self, rid: str) -> Response:
        return await self._payload(self.manager.round_state, rid)

    async def tables(self, rid: str) -> Response:
        return await self._payload(self.manager.tables, rid)

    async def advance(self, rid: str) -> Response:
        return await self._payload(self.manager.advance, rid)

    async def rebuys(self, rid: str, pid: str, body: AdjustRequest) -> Response:
        return await self._payload(self.manager.adjust_rebuys, rid, pid, body.delta)

    async def add_on(self, rid: str, pid: str, body: AdjustRequest) -> Response:
        return await self._payload(self.manager.adjust_add_on, rid, pid, body.delta)

    async def bulk_add_on(self, rid: str) -> Response:
        return await self._payload(self.manager.bulk_add_on, rid)

    async def eliminate(self, rid: str, pid: str) -> Response:
        return await self._payload(self.manager.eliminate, rid, pid)

    async def set_rank(self, rid: str, pid: str, body: RankRequest) -> Response:
        return await self._payload(self.manager.set_rank, rid, pid, body.rank)

    async def costs(self, rid: str, body: CostPayload) -> Response:
        return await self._payload(self.manager.update_costs, rid, body.to_config())

    async def settlement(self, rid: str) -> Response:
        return await self._payload(self.manager.settlement, rid)

    async def finalize(self, rid: str, body: FinalizeRequest | None) -> Response:
        return await self._payload(self.manager.finalize_round, rid, body.round_date if body else None)

    async def discard(self, rid: str) -> Response:
        await self._call(self.manager.discard_round, rid)
        return Response(status_code=204)

    # ------------------------------------------------------------------ season
    async def standings(self) -> Response:
        return await self._payload(self.manager.standings)

    async def history(self) -> Response:
        return await self._payload(self.manager.history)


def create_league_routers(manager: LeagueManager, *, default_tables: int = 1) -> APIRouter:
    controller = _LeagueController(manager, default_tables)

    router = APIRouter(prefix="/api/v1")

    @router.get("/players", tags=["roster"])
    async def list_players() -> Response:
        return await controller.players()

    @router.post("/players", tags=["roster"])
    async def register_player(body: RegisterPlayerRequest) -> Response:
        return await controller.register(body)

    @router.post("/players/{pid}/priority", tags=["roster"])
    async def set_priority(pid: str, body: FlagRequest) -> Response:
        return await controller.set_priority(pid, body)

    @router.post("/players/{pid}/check-in", tags=["roster"])
    async def set_checked_in(pid: str, body: FlagRequest) -> Response:
        return await controller.set_checked_in(pid, body)

    @router.post("/rounds", tags=["round"])
    async def start_round(body: StartRoundRequest) -> Response:
        return await controller.start(body)

    @router.get("/rounds/{rid}", tags=["round"])
    async def get_round(rid: str) -> Response:
        return await controller.state(rid)

    @router.delete("/rounds/{rid}", tags=["round"])
    async def discard_round(rid: str) -> Response:
        return await controller.discard(rid)

    @router.get("/rounds/{rid}/tables", tags=["round"])
    async def get_tables(rid: str) -> Response:
        return await controller.tables(rid)

    @router.post("/rounds/{rid}/advance", tags=["round"])
    async def advance_phase(rid: str) -> Response:
        return await controller.advance(rid)

    @router.post("/rounds/{rid}/players/{pid}/rebuys", tags=["round"])
    async def adjust_rebuys(rid: str, pid: str, body: AdjustRequest) -> Response:
        return await controller.rebuys(rid, pid, body)

    @router.post("/rounds/{rid}/players/{pid}/add-on", tags=["round"])
    async def adjust_add_on(rid: str, pid: str, body: AdjustRequest) -> Response:
        return await controller.add_on(rid, pid, body)

    @router.post("/rounds/{rid}/add-ons", tags=["round"])
    async def bulk_add_on(rid: str) -> Response:
        return await controller.bulk_add_on(rid)

    @router.post("/rounds/{rid}/players/{pid}/eliminate", tags=["round"])
    async def eliminate(rid: str, pid: str) -> Response:
        return await controller.eliminate(rid, pid)

    @router.put("/rounds/{rid}/players/{pid}/rank", tags=["round"])
    async def set_rank(rid: str, pid: str, body: RankRequest) -> Response:
        return await controller.set_rank(rid, pid, body)

    @router.put("/rounds/{rid}/costs", tags=["round"])
    async def update_costs(rid: str, body: CostPayload) -> Response:
        return await controller.costs(rid, body)

    @router.get("/rounds/{rid}/settlement", tags=["settlement"])
    async def get_settlement(rid: str) -> Response:
        return await controller.settlement(rid)

    @router.post("/rounds/{rid}/finalize", tags=["settlement"])
    async def finalize_round(rid: str, body: FinalizeRequest | None = None) -> Response:
        return await controller.finalize(rid, body)

    @router.get("/season/standings", tags=["season"])
    async def season_standings() -> Response:
        return await controller.standings()

    @router.get("/season/history", tags=["season"])
    async def season_history() -> Response:
        return await controller.history()

    return router
