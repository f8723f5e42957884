from __future__ import annotations

from conftest import add_participants, ledger, statuses, wait_for_idle


def _data(response):
    body = response.get_json()
    assert body["success"] is True, body
    return body["data"]


def _error(response):
    body = response.get_json()
    assert body["success"] is False, body
    return body["error"]


def test_health_reports_draw_state(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert _data(response) == {"status": "ok", "draw": "idle"}


def test_create_and_list_participants(client) -> None:
    created = client.post("/api/participants", json={"drawNumber": 7, "name": "Siti", "group": "RT 02"})
    assert created.status_code == 201
    assert _data(created) == {"drawNumber": 7, "name": "Siti", "group": "RT 02", "status": "eligible"}

    client.post("/api/participants", json={"drawNumber": 3, "name": "Budi", "group": "RT 01"})

    listed = _data(client.get("/api/participants"))
    assert [p["drawNumber"] for p in listed] == [3, 7]


def test_leading_whitespace_is_trimmed_not_rejected(client) -> None:
    created = client.post("/api/participants", json={"drawNumber": 4, "name": " Siti", "group": " RT 02"})
    assert created.status_code == 201
    assert _data(created)["name"] == "Siti"
    assert _data(created)["group"] == "RT 02"

    updated = client.patch("/api/participants/4", json={"name": "  Siti Aminah"})
    assert updated.status_code == 200
    assert _data(updated)["name"] == "Siti Aminah"


def test_duplicate_draw_number_conflicts(client) -> None:
    client.post("/api/participants", json={"drawNumber": 1, "name": "A", "group": "G"})
    response = client.post("/api/participants", json={"drawNumber": 1, "name": "B", "group": "G"})
    assert response.status_code == 409
    assert _error(response)["code"] == "conflict"


def test_create_requires_all_fields(client) -> None:
    response = client.post("/api/participants", json={"drawNumber": 1, "name": " "})
    assert response.status_code == 400
    error = _error(response)
    assert error["code"] == "validation_error"
    assert set(error["details"]) == {"name", "group"}


def test_filters(client, app_session_factory) -> None:
    add_participants(app_session_factory, 2, start=1, group="RT 01")
    add_participants(app_session_factory, 2, start=10, group="RT 02")

    by_group = _data(client.get("/api/participants?group=RT%2002"))
    assert [p["drawNumber"] for p in by_group] == [10, 11]

    by_name = _data(client.get("/api/participants?name=participant%201"))
    assert [p["drawNumber"] for p in by_name] == [1, 10, 11]

    unknown_status = _data(client.get("/api/participants?status=bogus"))
    assert len(unknown_status) == 4


def test_bulk_import_counts_failures(client, app_session_factory) -> None:
    add_participants(app_session_factory, 1, start=2)
    text = "1, Ani, RT 01\n\n2, Duplicate, RT 01\nnot a line\n3,Citra,RT 03\nx,Bad,RT 01\n"

    response = client.post("/api/participants/bulk", json={"data": text})

    assert _data(response) == {"added": 2, "failed": 3}
    assert sorted(statuses(app_session_factory)) == [1, 2, 3]


def test_update_name_and_group_but_not_status(client, app_session_factory) -> None:
    add_participants(app_session_factory, 1)

    updated = client.patch("/api/participants/1", json={"name": "Renamed"})
    assert _data(updated)["name"] == "Renamed"

    response = client.patch("/api/participants/1", json={"status": "won"})
    assert response.status_code == 400
    assert statuses(app_session_factory) == {1: "eligible"}

    assert client.patch("/api/participants/99", json={"name": "x"}).status_code == 404


def test_draw_over_http_and_winner_protection(app, client, app_session_factory) -> None:
    add_participants(app_session_factory, 5)

    response = client.post("/api/draw", json={"prizeName": "Bicycle", "winnerCount": 3, "revealDelayMs": 0})
    assert response.status_code == 202
    draw_id = _data(response)["drawId"]
    wait_for_idle(app.extensions["draw_controller"])

    winners = _data(client.get("/api/winners"))
    assert len(winners) == 3
    assert {w["drawId"] for w in winners} == {draw_id}
    assert {w["prize"] for w in winners} == {"Bicycle"}
    assert _data(client.get("/api/winners?prize=Radio")) == []

    winner_number = winners[0]["drawNumber"]
    blocked = client.delete(f"/api/participants/{winner_number}")
    assert blocked.status_code == 409
    assert _error(blocked)["details"] == {"drawNumbers": [winner_number]}

    eligible = [n for n, s in statuses(app_session_factory).items() if s == "eligible"]
    bulk_blocked = client.post("/api/participants/delete", json={"drawNumbers": [eligible[0], winner_number]})
    assert bulk_blocked.status_code == 409
    assert len(statuses(app_session_factory)) == 5

    assert _data(client.delete(f"/api/participants/{eligible[0]}")) == {"deleted": 1}
    assert _data(client.post("/api/participants/delete", json={"drawNumbers": [eligible[1]]})) == {"deleted": 1}
    assert len(ledger(app_session_factory)) == 3


def test_draw_validation_errors(client, app_session_factory) -> None:
    add_participants(app_session_factory, 1)

    bad_count = client.post("/api/draw", json={"prizeName": "Radio", "winnerCount": 0})
    assert bad_count.status_code == 400
    assert _error(bad_count)["code"] == "invalid_count"

    fractional = client.post("/api/draw", json={"prizeName": "Radio", "winnerCount": 2.9})
    assert fractional.status_code == 400
    assert _error(fractional)["code"] == "invalid_count"

    too_slow = client.post("/api/draw", json={"prizeName": "Radio", "winnerCount": 1, "revealDelayMs": 10**9})
    assert too_slow.status_code == 400
    assert "revealDelayMs" in _error(too_slow)["details"]


def test_prize_name_with_leading_space_is_accepted(app, client, app_session_factory) -> None:
    add_participants(app_session_factory, 2)

    response = client.post("/api/draw", json={"prizeName": " Radio", "winnerCount": 1, "revealDelayMs": 0})
    assert response.status_code == 202
    wait_for_idle(app.extensions["draw_controller"])

    assert [w.prize for w in ledger(app_session_factory)] == ["Radio"]


def test_cancel_without_draw_conflicts(client) -> None:
    response = client.post("/api/draw/cancel")
    assert response.status_code == 409
    assert _error(response)["code"] == "no_active_draw"


def test_draw_state_snapshot(client) -> None:
    assert _data(client.get("/api/draw")) == {
        "state": "idle",
        "drawId": None,
        "prizeName": None,
        "winnerCount": None,
    }


def test_unknown_route_uses_envelope(client) -> None:
    response = client.get("/nope")
    assert response.status_code == 404
    assert _error(response)["code"] == "not_found"
