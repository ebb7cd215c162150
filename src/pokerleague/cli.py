from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator

from .config import LeagueSettings
from .core.models import Player, PlayerSession
from .core.scoring import round_points
from .core.seating import assign_tables, make_rng, new_seed
from .core.settlement import settle
from .features.round.schemas import CostPayload
from .log_config import setup_logging
from .ui.presenters import RichPresenter


class RosterEntry(BaseModel):
    id: str
    name: str
    priority: bool = False


class LedgerEntry(BaseModel):
    player_id: str
    name: str | None = None
    buy_ins: int = Field(default=1, ge=1)
    rebuys: int = Field(default=0, ge=0)
    add_ons: int = Field(default=0, ge=0, le=1)
    rank: int | None = None


class RoundFile(BaseModel):
    costs: CostPayload = Field(default_factory=CostPayload)
    sessions: list[LedgerEntry]

    @model_validator(mode="after")
    def _unique_entries(self) -> RoundFile:
        ids = [e.player_id for e in self.sessions]
        if len(set(ids)) != len(ids):
            raise ValueError("player_id values must be unique")
        ranks = [e.rank for e in self.sessions if e.rank is not None]
        if len(set(ranks)) != len(ranks):
            raise ValueError("each rank may be held by one player only")
        return self


_ROSTER = TypeAdapter(list[RosterEntry])


def _load_json(path: str) -> object:
    with Path(path).open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--no-color", action="store_true", help="Disable colored output")


def _cmd_serve(args: argparse.Namespace, settings: LeagueSettings) -> int:
    from .web.app import main as serve

    overrides = {}
    if args.bind:
        overrides["bind"] = args.bind
    if args.port:
        overrides["port"] = args.port
    serve(replace(settings, **overrides))
    return 0


def _cmd_seat(args: argparse.Namespace, settings: LeagueSettings) -> int:
    raw = _load_json(args.roster)
    entries = _ROSTER.validate_python(raw)
    players = [Player(player_id=e.id, name=e.name, priority=e.priority) for e in entries]
    seed = args.seed if args.seed is not None else new_seed()
    tables = assign_tables(players, args.tables or settings.default_tables, make_rng(seed))
    RichPresenter(no_color=args.no_color).show_tables(tables, {p.player_id: p for p in players}, seed=seed)
    return 0


def _cmd_settle(args: argparse.Namespace, settings: LeagueSettings) -> int:
    round_file = RoundFile.model_validate(_load_json(args.round))
    sessions = [
        PlayerSession(
            player_id=e.player_id,
            buy_ins=e.buy_ins,
            rebuys=e.rebuys,
            add_ons=e.add_ons,
            rank=e.rank,
        )
        for e in round_file.sessions
    ]
    result = settle(sessions, round_file.costs.to_config())
    names = {e.player_id: e.name or e.player_id for e in round_file.sessions}
    ranks = {s.player_id: s.rank for s in sessions}
    RichPresenter(no_color=args.no_color).show_settlement(result, names, round_points(sessions), ranks)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="poker-league", description="Poker league round engine")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--bind", type=str, default=None, help="Interface to bind (default from env)")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on (default from env)")

    seat = sub.add_parser("seat", help="Draw tables for a roster JSON file")
    seat.add_argument("roster", help='JSON list of {"id", "name", "priority"}')
    seat.add_argument("--tables", type=int, default=None, help="Number of tables (clamped to 1-3)")
    # If omitted a random seed is drawn and printed so the draw can be reproduced.
    seat.add_argument("--seed", type=int, default=None, help="RNG seed (random if omitted)")
    _add_common_args(seat)

    settle_cmd = sub.add_parser("settle", help="Settle a round ledger JSON file")
    settle_cmd.add_argument("round", help='JSON object with "costs" and "sessions"')
    _add_common_args(settle_cmd)

    return parser


_COMMANDS = {"serve": _cmd_serve, "seat": _cmd_seat, "settle": _cmd_settle}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    settings = LeagueSettings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    try:
        return _COMMANDS[args.command](args, settings)
    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as exc:
        print(f"poker-league: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
