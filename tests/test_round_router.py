from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient

from pokerleague.config import LeagueSettings
from pokerleague.core.models import CostConfig
from pokerleague.features.round import LeagueManager
from pokerleague.web.app import create_app

BASE = "/api/v1"


def _client(players: tuple[str, ...] = ("Ann", "Bob", "Cid", "Dee")) -> tuple[TestClient, LeagueManager]:
    manager = LeagueManager(default_costs=CostConfig(buy_in=50, rebuy=50, add_on=50, bbq=40))
    client = TestClient(create_app(LeagueSettings(), manager))
    for name in players:
        assert client.post(f"{BASE}/players", json={"name": name}).status_code == 200
    return client, manager


def _money(value: str) -> Decimal:
    return Decimal(value)


def test_roster_endpoints() -> None:
    client, _ = _client(("Ann",))

    created = client.post(f"{BASE}/players", json={"name": "Bob", "priority": True}).json()
    assert created == {"id": "2", "name": "Bob", "priority": True, "checked_in": True}

    r = client.post(f"{BASE}/players/1/check-in", json={"value": False})
    assert r.json()["checked_in"] is False
    r = client.post(f"{BASE}/players/1/priority", json={"value": True})
    assert r.json()["priority"] is True

    listing = client.get(f"{BASE}/players").json()
    assert [p["name"] for p in listing] == ["Ann", "Bob"]

    assert client.post(f"{BASE}/players", json={"name": "  "}).status_code == 400
    assert client.post(f"{BASE}/players/99/priority", json={"value": True}).status_code == 404


def test_round_lifecycle_over_http() -> None:
    client, _ = _client()

    r = client.post(f"{BASE}/rounds", json={"table_count": 2, "seed": 11, "date": "2026-02-20"})
    assert r.status_code == 200
    state = r.json()
    rid = state["round_id"]
    assert state["phase"] == "rebuys_open"
    assert state["date"] == "2026-02-20"
    assert state["player_count"] == 4
    assert [len(t["seats"]) for t in state["tables"]] == [2, 2]

    tables = client.get(f"{BASE}/rounds/{rid}/tables").json()
    assert tables == state["tables"]

    r = client.post(f"{BASE}/rounds/{rid}/players/1/rebuys", json={"delta": 2})
    assert next(s for s in r.json()["sessions"] if s["player_id"] == "1")["rebuys"] == 2

    advance = client.post(f"{BASE}/rounds/{rid}/advance").json()
    assert advance == {"phase": "addons_open", "advanced": True}

    r = client.post(f"{BASE}/rounds/{rid}/add-ons")
    assert all(s["add_ons"] == 1 for s in r.json()["sessions"])

    for pid, rank in (("4", 4), ("3", 3), ("2", 2), ("1", 1)):
        body = client.post(f"{BASE}/rounds/{rid}/players/{pid}/eliminate").json()
        assert body["rank"] == rank
    assert body["round"]["active_count"] == 0

    settlement = client.get(f"{BASE}/rounds/{rid}/settlement").json()
    gross = _money(settlement["gross_total"])
    assert gross == Decimal(500)
    reconciled = (
        _money(settlement["admin_tax"])
        + _money(settlement["main_event_pot"])
        + sum(_money(settlement["prizes"][k]) for k in ("first", "second", "third"))
    )
    assert reconciled == gross

    record = client.post(f"{BASE}/rounds/{rid}/finalize", json={}).json()
    assert record["round_number"] == 1
    assert record["date"] == "2026-02-20"
    assert client.get(f"{BASE}/rounds/{rid}").status_code == 404

    standings = client.get(f"{BASE}/season/standings").json()
    assert standings[0]["player_id"] == "1"
    assert standings[0]["wins"] == 1
    history = client.get(f"{BASE}/season/history").json()
    assert len(history) == 1


def test_phase_violation_returns_conflict() -> None:
    client, _ = _client()
    rid = client.post(f"{BASE}/rounds", json={"seed": 1}).json()["round_id"]

    r = client.post(f"{BASE}/rounds/{rid}/players/1/add-on", json={"delta": 1})
    assert r.status_code == 409
    assert "add-on" in r.json()["detail"]


def test_start_round_input_handling() -> None:
    client, _ = _client(("Solo",))
    assert client.post(f"{BASE}/rounds", json={}).status_code == 422

    client.post(f"{BASE}/players", json={"name": "Duo"})
    r = client.post(f"{BASE}/rounds", json={"table_count": "", "seed": "7"})
    assert r.status_code == 200
    assert len(r.json()["tables"]) == 1

    r = client.post(f"{BASE}/rounds", json={"table_count": 9})
    assert len(r.json()["tables"]) == 3

    r = client.post(f"{BASE}/rounds", json={"costs": {"buy_in": -5}})
    assert r.status_code == 422


def test_rank_and_costs_updates() -> None:
    client, _ = _client()
    rid = client.post(f"{BASE}/rounds", json={"seed": 2}).json()["round_id"]

    r = client.put(f"{BASE}/rounds/{rid}/players/3/rank", json={"rank": 1})
    session = next(s for s in r.json()["sessions"] if s["player_id"] == "3")
    assert session["rank"] == 1
    assert session["active"] is False

    r = client.put(f"{BASE}/rounds/{rid}/players/3/rank", json={"rank": None})
    session = next(s for s in r.json()["sessions"] if s["player_id"] == "3")
    assert "rank" not in session
    assert session["active"] is True

    r = client.put(f"{BASE}/rounds/{rid}/costs", json={"buy_in": "12.5", "rebuy": 0, "add_on": 0, "bbq": 0})
    assert _money(r.json()["costs"]["buy_in"]) == Decimal("12.5")
    settlement = client.get(f"{BASE}/rounds/{rid}/settlement").json()
    assert _money(settlement["gross_total"]) == Decimal(50)


def test_discard_and_finalized_round_handling() -> None:
    client, _ = _client()
    rid = client.post(f"{BASE}/rounds", json={"seed": 3}).json()["round_id"]

    assert client.delete(f"{BASE}/rounds/{rid}").status_code == 204
    assert client.delete(f"{BASE}/rounds/{rid}").status_code == 404
    assert client.get(f"{BASE}/season/history").json() == []

    rid = client.post(f"{BASE}/rounds", json={"seed": 3}).json()["round_id"]
    assert client.post(f"{BASE}/rounds/{rid}/finalize").status_code == 200
    assert client.post(f"{BASE}/rounds/{rid}/finalize").status_code == 404
