from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

import pytest
from conftest import make_players

from pokerleague.core.exceptions import (
    DuplicatePlayerError,
    InsufficientPlayersError,
    PhaseClosedError,
    RoundFinalizedError,
)
from pokerleague.core.models import CostConfig, Player, RoundPhase
from pokerleague.features.round.engine import RoundSession


def _start(count: int = 4, *, costs: CostConfig | None = None, tables: int = 1) -> RoundSession:
    return RoundSession.start(
        make_players(count),
        tables,
        costs or CostConfig(buy_in=50, rebuy=50, add_on=50, bbq=40),
        rng=random.Random(1),
        round_date=date(2026, 3, 14),
    )


def test_start_creates_one_buy_in_per_player() -> None:
    session = _start(5, tables=2)

    assert session.phase is RoundPhase.REBUYS_OPEN
    assert session.player_count == 5
    assert session.active_count == 5
    assert all(s.buy_ins == 1 and s.rebuys == 0 and s.add_ons == 0 for s in session.sessions())
    assert len(session.tables) == 2
    assert session.round_date == date(2026, 3, 14)


def test_start_requires_two_players() -> None:
    with pytest.raises(InsufficientPlayersError) as info:
        RoundSession.start(make_players(1), 1, CostConfig())
    assert info.value.count == 1


def test_start_rejects_duplicate_ids() -> None:
    players = [Player("a", "Ann"), Player("b", "Bob"), Player("a", "Again")]
    with pytest.raises(DuplicatePlayerError):
        RoundSession.start(players, 1, CostConfig())


def test_phases_only_move_forward() -> None:
    session = _start()

    assert session.advance() is True
    assert session.phase is RoundPhase.ADDONS_OPEN
    assert session.advance() is True
    assert session.phase is RoundPhase.FREEZEOUT
    assert session.advance() is False
    assert session.phase is RoundPhase.FREEZEOUT


def test_rebuys_clamp_at_zero() -> None:
    session = _start()

    session.adjust_rebuys("p1", 2)
    assert session.session("p1").rebuys == 2
    session.adjust_rebuys("p1", -5)
    assert session.session("p1").rebuys == 0


def test_rebuys_closed_after_rebuy_phase() -> None:
    session = _start()
    session.advance()

    with pytest.raises(PhaseClosedError):
        session.adjust_rebuys("p1", 1)
    assert session.session("p1").rebuys == 0


def test_add_on_only_during_add_on_phase() -> None:
    session = _start()
    with pytest.raises(PhaseClosedError):
        session.adjust_add_on("p1", 1)

    session.advance()
    session.adjust_add_on("p1", 1)
    session.adjust_add_on("p1", 1)
    assert session.session("p1").add_ons == 1
    session.adjust_add_on("p1", -3)
    assert session.session("p1").add_ons == 0

    session.advance()
    with pytest.raises(PhaseClosedError):
        session.adjust_add_on("p1", 1)


def test_unknown_player_is_ignored() -> None:
    session = _start()

    assert session.adjust_rebuys("ghost", 1) is None
    assert session.eliminate("ghost") is None
    assert session.set_rank("ghost", 1) is None
    assert session.settlement().gross_total == Decimal(200)


def test_bulk_add_on_skips_busted_players() -> None:
    session = _start()
    session.eliminate("p4")
    session.advance()
    session.adjust_add_on("p1", 1)

    assert session.bulk_add_on() == 2
    assert [s.add_ons for s in session.sessions()] == [1, 1, 1, 0]


def test_bulk_add_on_requires_add_on_phase() -> None:
    session = _start()
    with pytest.raises(PhaseClosedError):
        session.bulk_add_on()


def test_eliminations_count_down_to_winner() -> None:
    session = _start()

    assert session.eliminate("p3") == 4
    assert session.eliminate("p1") == 3
    assert session.eliminate("p4") == 2
    assert session.active_count == 1
    assert session.eliminate("p2") == 1
    assert session.active_count == 0


def test_eliminating_ranked_player_keeps_rank() -> None:
    session = _start()
    session.eliminate("p2")

    assert session.eliminate("p2") == 4
    assert session.eliminate("p1") == 3


def test_elimination_fills_worst_free_rank() -> None:
    session = _start()
    session.set_rank("p1", 4)
    session.set_rank("p2", 2)

    assert session.eliminate("p3") == 3
    assert session.eliminate("p4") == 1


def test_set_rank_evicts_previous_holder() -> None:
    session = _start()
    session.set_rank("p1", 1)
    session.set_rank("p2", 1)

    assert session.session("p1").rank is None
    assert session.session("p2").rank == 1


@pytest.mark.parametrize("rank", [0, -3, None])
def test_set_rank_clears_with_non_positive(rank) -> None:
    session = _start()
    session.eliminate("p1")
    session.set_rank("p1", rank)

    assert session.session("p1").rank is None
    assert session.session("p1").is_active


def test_set_rank_outside_field_is_ignored() -> None:
    session = _start()
    session.eliminate("p1")
    session.set_rank("p3", 2)

    unchanged = session.set_rank("p2", 9)
    session.set_rank("p3", 5)

    assert unchanged.rank is None
    assert session.session("p1").rank == 4
    assert session.session("p2").rank is None
    assert session.session("p3").rank == 2


def test_unknown_player_ignored_even_when_phase_closed() -> None:
    session = _start()
    assert session.adjust_add_on("ghost", 1) is None

    session.advance()
    assert session.adjust_rebuys("ghost", 1) is None
    with pytest.raises(PhaseClosedError):
        session.adjust_rebuys("p1", 1)


def test_points_follow_ranks() -> None:
    session = _start()
    for pid in ("p4", "p3", "p2", "p1"):
        session.eliminate(pid)

    points = session.points()
    assert points["p1"] == 8.0
    assert points["p2"] == 5.0
    assert points["p3"] == pytest.approx(10 / 3)
    assert points["p4"] == 2.0


def test_settlement_tracks_ledger_and_costs() -> None:
    session = _start()
    session.adjust_rebuys("p1", 2)
    assert session.settlement().gross_total == Decimal(300)

    session.update_config(CostConfig(buy_in=10, rebuy=5, add_on=0, bbq=0))
    assert session.settlement().gross_total == Decimal(50)


def test_finalize_records_results_and_freezes_round() -> None:
    session = _start()
    for pid in ("p4", "p3", "p2", "p1"):
        session.eliminate(pid)

    record = session.finalize(3)

    assert record.round_number == 3
    assert record.round_date == date(2026, 3, 14)
    assert record.gross_total == Decimal(200)
    by_id = {r.player_id: r for r in record.results}
    assert by_id["p1"].points == 8.0
    assert by_id["p1"].net_balance == Decimal(20)
    assert by_id["p4"].net_balance == Decimal(-60)
    assert session.finalized

    with pytest.raises(RoundFinalizedError):
        session.eliminate("p1")
    with pytest.raises(RoundFinalizedError):
        session.advance()
    with pytest.raises(RoundFinalizedError):
        session.finalize(4)


def test_finalize_accepts_date_override() -> None:
    session = _start()
    record = session.finalize(1, date(2026, 4, 1))

    assert record.round_date == date(2026, 4, 1)
