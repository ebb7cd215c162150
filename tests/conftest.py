from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure "src" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from pokerleague.core.models import CostConfig, Player  # noqa: E402


def make_players(count: int, *, priority: tuple[int, ...] = ()) -> list[Player]:
    """Players "p1".."pN"; indexes in ``priority`` (1-based) carry the dealer flag."""

    return [Player(player_id=f"p{i}", name=f"Player {i}", priority=i in priority) for i in range(1, count + 1)]


@pytest.fixture
def four_players() -> list[Player]:
    return make_players(4)


@pytest.fixture
def league_costs() -> CostConfig:
    return CostConfig(buy_in=50, rebuy=50, add_on=50, bbq=40)
