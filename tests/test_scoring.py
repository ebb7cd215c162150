from __future__ import annotations

import math

import pytest

from pokerleague.core import scoring
from pokerleague.core.models import PlayerSession


def test_points_regression_fixture() -> None:
    assert scoring.points(25, 1) == 50.0
    assert scoring.points(25, 3) == pytest.approx(31.3333333, rel=1e-9)


@pytest.mark.parametrize("n", [1, 2, 5, 12, 25, 100])
def test_winner_scores_twice_the_field(n) -> None:
    assert scoring.points(n, 1) == 2 * n


def test_points_keep_fractional_part() -> None:
    value = scoring.points(10, 4)
    assert value == pytest.approx(9.5)
    assert not math.isclose(value, round(value))


@pytest.mark.parametrize("p", [0, -1, -10, None])
def test_non_positive_or_missing_position_scores_zero(p) -> None:
    assert scoring.points(12, p) == 0.0


def test_round_points_uses_session_count_as_field_size() -> None:
    sessions = [
        PlayerSession(player_id="a", rank=1),
        PlayerSession(player_id="b", rank=2),
        PlayerSession(player_id="c", rank=3),
        PlayerSession(player_id="d"),
    ]

    result = scoring.round_points(sessions)

    assert result["a"] == 8.0
    assert result["b"] == 5.0
    assert result["c"] == pytest.approx(2 + 4 / 3)
    assert result["d"] == 0.0
