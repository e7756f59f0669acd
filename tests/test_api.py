"""API-level tests for the Flask app."""

from datetime import datetime

import pytest

from app import app
from barbuddy_app.notify import RecordingNotifier

NOW = datetime(2026, 10, 17, 22, 0)


@pytest.fixture(autouse=True)
def env_setup(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_DB_PATH", str(tmp_path / "app.db"))
    monkeypatch.setitem(app.config, "CLOCK", lambda: NOW)
    yield


@pytest.fixture
def notifier(monkeypatch):
    recorder = RecordingNotifier()
    monkeypatch.setitem(app.extensions, "barbuddy_notifier", recorder)
    return recorder


@pytest.fixture
def client(notifier):
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def add_drink(client, **payload):
    res = client.post("/api/drink", json=payload)
    assert res.status_code == 200, res.get_json()
    return res.get_json()


def add_contact(client, name="Sam Williams", phone="555-987-6543", **extra):
    res = client.post("/api/contacts", json={"name": name, "phone": phone, **extra})
    assert res.status_code == 200, res.get_json()
    return res.get_json()["item"]


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_drink_types_catalog(client):
    res = client.get("/api/drink-types")
    keys = [t["key"] for t in res.get_json()["drink_types"]]
    assert keys == ["beer", "wine", "cocktail", "shot", "other"]


def test_state_starts_empty(client):
    data = client.get("/api/state").get_json()
    assert data["current_total"] == 0
    assert data["drink_count"] == 0
    assert data["drink_limit"] == 4.0
    assert data["safety_status"] == "safe"
    assert data["next_reset"] == "2026-10-18T04:00:00"
    assert data["time_until_reset_seconds"] == 6 * 3600
    assert data["profile"]["weight_lb"] == 160


def test_add_drink_updates_state_and_schedules_hydration(client, notifier):
    body = add_drink(client, drink_key="beer")
    assert body["drink"]["standard_drinks"] == 1.0
    assert body["drink"]["estimated_calories"] == 159
    assert body["state"]["current_total"] == 1.0
    assert body["state"]["session_started_at"] == "2026-10-17T22:00:00"
    assert [n.category for n in notifier.notifications] == ["hydration"]

    add_drink(client, drink_key="shot", hydration_reminder=False)
    assert len(notifier.notifications) == 1
    assert client.get("/api/state").get_json()["current_total"] == 2.0


def test_add_drink_custom_serving_and_backdated(client):
    body = add_drink(client, drink_key="wine", volume_oz=10, abv_percent=12, timestamp="2026-10-17T21:15:00")
    assert body["drink"]["timestamp"] == "2026-10-17T21:15:00"
    assert body["drink"]["standard_drinks"] == 2.0

    # Clamped to 24 hours back: last night, so not part of the current count.
    old = add_drink(client, drink_key="beer", hours_ago=30)
    assert old["drink"]["timestamp"] == "2026-10-16T22:00:00"
    assert old["state"]["current_total"] == 2.0


@pytest.mark.parametrize(
    "payload",
    [
        {"drink_key": "mead"},
        {"drink_key": "beer", "volume_oz": 0},
        {"drink_key": "beer", "abv_percent": 140},
        {"drink_key": "beer", "volume_oz": "lots"},
        {"drink_key": "beer", "timestamp": "2026-10-18T02:00:00"},
        {"drink_key": "beer", "cost": -3},
    ],
)
def test_add_drink_rejects_bad_input(client, payload):
    res = client.post("/api/drink", json=payload)
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_drink_cost_and_delete(client):
    drink_id = add_drink(client, drink_key="cocktail")["drink"]["id"]
    res = client.post(f"/api/drink/{drink_id}/cost", json={"cost": 13.5})
    assert res.get_json()["drink"]["cost"] == 13.5
    assert client.get("/api/state").get_json()["total_cost"] == 13.5

    assert client.post("/api/drink/nope/cost", json={"cost": 1}).status_code == 404
    assert client.delete(f"/api/drink/{drink_id}").status_code == 200
    assert client.delete(f"/api/drink/{drink_id}").status_code == 404
    assert client.get("/api/state").get_json()["drink_count"] == 0


def test_reset_clears_drinks(client):
    add_drink(client, drink_key="beer")
    add_drink(client, drink_key="beer")
    res = client.post("/api/reset")
    assert res.get_json() == {"ok": True, "removed": 2}
    assert client.get("/api/state").get_json()["current_total"] == 0


def test_limit_update_and_validation(client):
    res = client.post("/api/limit", json={"drink_limit": 3})
    assert res.get_json()["drink_limit"] == 3.0
    assert client.post("/api/limit", json={"drink_limit": 0}).status_code == 400
    assert client.post("/api/limit", json={"drink_limit": "many"}).status_code == 400
    add_drink(client, drink_key="beer")
    add_drink(client, drink_key="beer")
    add_drink(client, drink_key="beer", volume_oz=6)
    assert client.get("/api/state").get_json()["safety_status"] == "borderline"


def test_reaching_limit_alerts_user_and_auto_contacts(client, notifier):
    add_contact(client, auto_notify=True)
    add_contact(client, name="Jordan Lee", phone="555-246-8101")
    client.post("/api/limit", json={"drink_limit": 2})

    add_drink(client, drink_key="beer", hydration_reminder=False)
    assert notifier.notifications == []

    state = add_drink(client, drink_key="beer", hydration_reminder=False)["state"]
    assert state["safety_status"] == "unsafe"
    assert [n.title for n in notifier.notifications] == ["Drink Limit Reached"]
    assert [c.name for c, _ in notifier.messages] == ["Sam Williams"]

    add_drink(client, drink_key="beer", hydration_reminder=False)
    assert len(notifier.messages) == 1


def test_profile_update(client):
    res = client.post("/api/profile", json={"weight_lb": 135, "gender": "female", "height_in": 64})
    assert res.status_code == 200
    profile = client.get("/api/profile").get_json()
    assert profile["weight_lb"] == 135
    assert profile["gender"] == "female"

    assert client.post("/api/profile", json={"weight_lb": 20}).status_code == 400
    assert client.post("/api/profile", json={"gender": "robot"}).status_code == 400


def test_contacts_crud_and_messages(client, notifier):
    item = add_contact(client, name="Alex Johnson", phone="5551234567", relationship_label="Roommate")
    assert item["formatted_phone"] == "(555) 123-4567"
    listed = client.get("/api/contacts").get_json()["items"]
    assert [c["name"] for c in listed] == ["Alex Johnson"]

    res = client.post(f"/api/contacts/{item['id']}", json={"auto_notify": "yes"})
    assert res.get_json()["item"]["auto_notify"] is True
    assert client.post(f"/api/contacts/{item['id']}", json={"phone": "nope"}).status_code == 400

    res = client.post(f"/api/contacts/{item['id']}/message", json={"kind": "location", "location": "5th & Main"})
    assert "5th & Main" in res.get_json()["message"]
    assert client.post(f"/api/contacts/{item['id']}/message", json={"kind": "fax"}).status_code == 400
    assert client.post(f"/api/contacts/{item['id']}/message", json={"kind": "custom"}).status_code == 400
    assert client.post("/api/contacts/missing/message", json={}).status_code == 404
    assert len(notifier.messages) == 1

    assert client.delete(f"/api/contacts/{item['id']}").status_code == 200
    assert client.delete(f"/api/contacts/{item['id']}").status_code == 404
    assert client.get("/api/contacts").get_json()["items"] == []


def test_contact_requires_valid_phone(client):
    res = client.post("/api/contacts", json={"name": "Pat", "phone": "call me"})
    assert res.status_code == 400


def test_shares_create_list_delete(client):
    add_drink(client, drink_key="beer")
    res = client.post("/api/shares", json={"message": "On my way home", "include_location": True, "location": "Elm St"})
    body = res.get_json()
    assert body["item"]["drink_count"] == 1.0
    assert body["item"]["expires_at"] == "2026-10-18T00:00:00"
    assert body["text"] == "On my way home\n\nCurrent Status: 1.0 of 4.0 drinks\nApproximate Location: Elm St"

    items = client.get("/api/shares").get_json()["items"]
    assert [s["id"] for s in items] == [body["item"]["id"]]
    assert client.post("/api/shares", json={"expiration_hours": 48}).status_code == 400
    assert client.delete(f"/api/shares/{body['item']['id']}").status_code == 200
    assert client.delete(f"/api/shares/{body['item']['id']}").status_code == 404


def test_suggestions_over_limit_are_non_alcoholic(client):
    client.post("/api/limit", json={"drink_limit": 1})
    add_drink(client, drink_key="shot")
    data = client.get("/api/suggestions?seed=1").get_json()
    assert data["safety_status"] == "unsafe"
    assert data["items"][0]["name"] == "Water"
    assert all(item["non_alcoholic"] for item in data["items"])


def test_history_and_stats(client):
    add_drink(client, drink_key="beer", hours_ago=24, cost=6)
    add_drink(client, drink_key="wine", cost=9)
    items = client.get("/api/history?days=3").get_json()["items"]
    assert [i["date"] for i in items] == ["2026-10-15", "2026-10-16", "2026-10-17"]
    assert [i["total_drinks"] for i in items] == [0, 1, 1]

    stats = client.get("/api/stats?date=2026-10-16").get_json()
    assert stats["cost"] == 6
    assert client.get("/api/stats").get_json()["cost"] == 9
    assert client.get("/api/stats?date=yesterday").status_code == 400


def test_settings_update_prunes_history(client):
    add_drink(client, drink_key="beer", hours_ago=24)
    res = client.post("/api/settings", json={"save_drinks_for_days": 1, "enable_morning_check_ins": True})
    body = res.get_json()
    assert body["pruned"] == 0
    assert body["settings"]["enable_morning_check_ins"] is True
    assert client.get("/api/settings").get_json()["save_drinks_for_days"] == 1
    assert client.post("/api/settings", json={"save_drinks_for_days": 0}).status_code == 400
    assert client.post("/api/settings", json={"preferred_drink_types": ["mead"]}).status_code == 400


def test_reminders_follow_the_session(client):
    assert client.get("/api/reminders").get_json()["items"] == []
    add_drink(client, drink_key="beer", timestamp="2026-10-17T20:30:00")
    items = client.get("/api/reminders").get_json()["items"]
    ids = [i["identifier"] for i in items]
    assert "duration-3hr" in ids and "duration-5hr" in ids
    assert items == sorted(items, key=lambda i: i["deliver_at"])


def test_unknown_route_returns_json_error(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert "error" in res.get_json()


def test_settings_toggles_accept_string_booleans(client):
    res = client.post("/api/settings", json={"enable_drink_alerts": "false", "enable_morning_check_ins": "0"})
    assert res.status_code == 200
    settings = client.get("/api/settings").get_json()
    assert settings["enable_drink_alerts"] is False
    assert settings["enable_morning_check_ins"] is False

    client.post("/api/settings", json={"enable_morning_check_ins": "yes"})
    assert client.get("/api/settings").get_json()["enable_morning_check_ins"] is True
    assert client.post("/api/settings", json={"enable_drink_alerts": "sometimes"}).status_code == 400
    assert client.post("/api/settings", json=["enable_drink_alerts"]).status_code == 400


def test_profile_rejects_explicit_zero_weight(client):
    client.post("/api/profile", json={"weight_lb": 150})
    assert client.post("/api/profile", json={"weight_lb": 0}).status_code == 400
    assert client.post("/api/profile", json={"weight_lb": None, "gender": "female"}).status_code == 200
    assert client.get("/api/profile").get_json()["weight_lb"] == 150


def test_contact_relationship_must_be_known(client):
    item = add_contact(client, name="Casey", phone="555-111-2222", relationship_label="significant other")
    assert item["relationship_label"] == "Significant Other"
    res = client.post("/api/contacts", json={"name": "Pat", "phone": "555-111-3333", "relationship_label": "Bartender"})
    assert res.status_code == 400
