"""Environment-driven settings for the league service.

Every knob is read from a ``POKERLEAGUE_*`` environment variable so the same
build can run the API, the CLI, and the tests without a config file::

    POKERLEAGUE_PORT=9000 POKERLEAGUE_BBQ=240 poker-league serve

Cost defaults match the values the league has always opened a round with.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import InvalidOperation
from pathlib import Path
from typing import Final

from .core.models import CostConfig, to_money
from .core.seating import clamp_table_count

__all__ = ["ENV_PREFIX", "LeagueSettings"]

ENV_PREFIX: Final = "POKERLEAGUE_"


def _read(environ: Mapping[str, str], key: str) -> str | None:
    raw = environ.get(ENV_PREFIX + key)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _read(environ, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}") from None


def _cost(environ: Mapping[str, str], key: str, default: object) -> object:
    raw = _read(environ, key)
    if raw is None:
        return default
    try:
        amount = to_money(raw)
    except InvalidOperation:
        raise ValueError(f"{ENV_PREFIX}{key} must be a decimal amount, got {raw!r}") from None
    if not amount.is_finite():
        raise ValueError(f"{ENV_PREFIX}{key} must be a finite amount, got {raw!r}")
    return amount


def _level(environ: Mapping[str, str]) -> int:
    raw = (_read(environ, "LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ValueError(f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {raw!r}")
    return level


@dataclass(frozen=True)
class LeagueSettings:
    bind: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    log_level: int = logging.INFO
    default_tables: int = 1
    default_costs: CostConfig = field(default_factory=CostConfig)
    log_dir: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LeagueSettings:
        env = os.environ if environ is None else environ
        log_dir = _read(env, "LOG_DIR")
        base = CostConfig()
        costs = CostConfig(
            buy_in=_cost(env, "BUY_IN", base.buy_in),
            rebuy=_cost(env, "REBUY", base.rebuy),
            add_on=_cost(env, "ADD_ON", base.add_on),
            bbq=_cost(env, "BBQ", base.bbq),
        )
        return cls(
            bind=_read(env, "BIND") or cls.bind,
            port=_int(env, "PORT", cls.port),
            log_level=_level(env),
            default_tables=clamp_table_count(_int(env, "TABLES", cls.default_tables)),
            default_costs=costs,
            log_dir=Path(log_dir) if log_dir else None,
        )
