"""BarBuddy Flask app.

Run from project root:
    python app.py
"""

import logging
import os
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from barbuddy_app.alerts import AlertDispatcher
from barbuddy_app.contacts import ContactBook
from barbuddy_app.drinks import list_drink_types
from barbuddy_app.notify import LogNotifier, plan_reminders
from barbuddy_app.profile import Gender, UserProfile
from barbuddy_app.settings import TOGGLE_FIELDS
from barbuddy_app.sharing import ShareManager, create_share_message
from barbuddy_app.store import init_db
from barbuddy_app.suggestions import suggest
from barbuddy_app.tracker import DrinkTracker

app = Flask(__name__)
app.config["SECRET_KEY"] = os.environ.get("APP_SECRET_KEY", "dev-only-change-me")
# Optional zero-arg callable returning "now"; tests pin it.
app.config["CLOCK"] = None
app.extensions["barbuddy_notifier"] = LogNotifier(app.logger)
app.logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

MAX_HOURS_AGO = 24.0
MAX_HISTORY_DAYS = 90

DEFAULT_DB_PATH = str(Path("instance") / "barbuddy.db")


def _db_path() -> str:
    return os.environ.get("APP_DB_PATH", DEFAULT_DB_PATH)


def _ensure_db() -> None:
    db_path = Path(_db_path())
    db_path.parent.mkdir(parents=True, exist_ok=True)
    init_db(str(db_path))


def _notifier():
    return app.extensions["barbuddy_notifier"]


def _tracker() -> DrinkTracker:
    """Services for this request, wired once and shared through ``g``."""
    if "tracker" not in g:
        _ensure_db()
        tracker = DrinkTracker(_db_path(), clock=app.config.get("CLOCK"))
        g.contacts = ContactBook(tracker, _notifier())
        g.alerts = AlertDispatcher(tracker, _notifier(), g.contacts)
        g.tracker = tracker
    return g.tracker


def _contacts() -> ContactBook:
    _tracker()
    return g.contacts


def _parse_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "y", "on"}:
            return True
        if lowered in {"false", "0", "no", "n", "off"}:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _clamp_float(value: Any, default: float, min_value: float, max_value: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = default
    return max(min_value, min(max_value, parsed))


def _optional_float(data: dict, key: str) -> float | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number") from None


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _state_payload(tracker: DrinkTracker) -> dict[str, Any]:
    snap = tracker.snapshot()
    return {**snap, "profile": tracker.profile.to_dict()}


@app.errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    return jsonify({"error": exc.description}), exc.code


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/drink-types")
def api_drink_types():
    return jsonify({"drink_types": list_drink_types()})


@app.route("/api/state")
def api_state():
    return jsonify(_state_payload(_tracker()))


@app.route("/api/drink", methods=["POST"])
def api_drink():
    tracker = _tracker()
    data = request.get_json(silent=True) or {}
    drink_key = str(data.get("drink_key", "beer"))
    try:
        volume_oz = _optional_float(data, "volume_oz")
        abv_percent = _optional_float(data, "abv_percent")
        cost = _optional_float(data, "cost")
        timestamp = None
        if data.get("timestamp"):
            timestamp = datetime.fromisoformat(str(data["timestamp"]).replace("Z", "+00:00"))
        elif data.get("hours_ago") is not None:
            hours_ago = _clamp_float(data.get("hours_ago"), 0.0, 0.0, MAX_HOURS_AGO)
            timestamp = tracker.now() - timedelta(hours=hours_ago)
        drink = tracker.add_drink(drink_key, volume_oz, abv_percent, timestamp=timestamp, cost=cost)
    except ValueError as exc:
        return _error(str(exc))

    if _parse_bool(data.get("hydration_reminder"), default=True):
        for reminder in plan_reminders(tracker.snapshot(), tracker.settings):
            if reminder.category == "hydration":
                _notifier().notify(reminder)
    return jsonify({"ok": True, "drink": drink.to_dict(), "state": tracker.snapshot()})


@app.route("/api/drink/<drink_id>", methods=["DELETE"])
def api_drink_delete(drink_id: str):
    tracker = _tracker()
    try:
        tracker.remove_drink(drink_id)
    except LookupError:
        return _error("Drink not found", 404)
    return jsonify({"ok": True, "state": tracker.snapshot()})


@app.route("/api/drink/<drink_id>/cost", methods=["POST"])
def api_drink_cost(drink_id: str):
    tracker = _tracker()
    data = request.get_json(silent=True) or {}
    try:
        drink = tracker.set_cost(drink_id, _optional_float(data, "cost"))
    except LookupError:
        return _error("Drink not found", 404)
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "drink": drink.to_dict()})


@app.route("/api/reset", methods=["POST"])
def api_reset():
    tracker = _tracker()
    removed = tracker.clear_drinks()
    return jsonify({"ok": True, "removed": removed})


@app.route("/api/limit", methods=["POST"])
def api_limit():
    data = request.get_json(silent=True) or {}
    try:
        limit = _tracker().update_drink_limit(data.get("drink_limit"))
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "drink_limit": limit})


@app.route("/api/profile")
def api_profile():
    return jsonify(_tracker().profile.to_dict())


@app.route("/api/profile", methods=["POST"])
def api_profile_update():
    tracker = _tracker()
    data = request.get_json(silent=True) or {}
    current = tracker.profile
    try:
        weight = _optional_float(data, "weight_lb")
        height = _optional_float(data, "height_in") if "height_in" in data else current.height_in
        profile = UserProfile(
            weight_lb=current.weight_lb if weight is None else weight,
            gender=Gender.parse(data.get("gender", current.gender.value)),
            height_in=height,
            emergency_contacts=current.emergency_contacts,
        )
        profile = tracker.update_profile(profile)
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "profile": profile.to_dict()})


@app.route("/api/contacts")
def api_contacts():
    return jsonify({"items": [c.to_dict() for c in _contacts().list()]})


@app.route("/api/contacts", methods=["POST"])
def api_contacts_add():
    data = request.get_json(silent=True) or {}
    try:
        contact = _contacts().add(
            name=str(data.get("name", "")),
            phone=str(data.get("phone", "")),
            relationship_label=str(data.get("relationship_label", "Friend")),
            auto_notify=_parse_bool(data.get("auto_notify"), default=False),
        )
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "item": contact.to_dict()})


@app.route("/api/contacts/<contact_id>", methods=["POST"])
def api_contacts_update(contact_id: str):
    data = request.get_json(silent=True) or {}
    changes = {k: data[k] for k in ("name", "phone", "relationship_label") if k in data}
    if "auto_notify" in data:
        changes["auto_notify"] = _parse_bool(data["auto_notify"])
    try:
        contact = _contacts().update(contact_id, changes)
    except LookupError:
        return _error("Contact not found", 404)
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "item": contact.to_dict()})


@app.route("/api/contacts/<contact_id>", methods=["DELETE"])
def api_contacts_delete(contact_id: str):
    try:
        _contacts().remove(contact_id)
    except LookupError:
        return _error("Contact not found", 404)
    return jsonify({"ok": True})


@app.route("/api/contacts/<contact_id>/message", methods=["POST"])
def api_contacts_message(contact_id: str):
    data = request.get_json(silent=True) or {}
    kind = str(data.get("kind", "check_in")).strip().lower()
    contacts = _contacts()
    try:
        if kind == "check_in":
            body = contacts.send_check_in(contact_id)
        elif kind == "location":
            body = contacts.send_location(contact_id, str(data.get("location", "")))
        elif kind == "custom":
            body = contacts.send_custom(contact_id, str(data.get("message", "")))
        else:
            return _error("kind must be check_in, location, or custom")
    except LookupError:
        return _error("Contact not found", 404)
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "message": body})


@app.route("/api/shares")
def api_shares():
    shares = ShareManager(_tracker()).active_shares()
    return jsonify({"items": [s.to_dict() for s in shares]})


@app.route("/api/shares", methods=["POST"])
def api_shares_add():
    tracker = _tracker()
    data = request.get_json(silent=True) or {}
    try:
        share = ShareManager(tracker).add_share(
            message=str(data.get("message", "")) or None,
            expiration_hours=_optional_float(data, "expiration_hours"),
        )
    except ValueError as exc:
        return _error(str(exc))
    text = create_share_message(
        share.drink_count,
        share.drink_limit,
        custom_message=share.message,
        include_location=_parse_bool(data.get("include_location"), default=False),
        location=str(data.get("location", "")),
    )
    return jsonify({"ok": True, "item": share.to_dict(), "text": text})


@app.route("/api/shares/<share_id>", methods=["DELETE"])
def api_shares_delete(share_id: str):
    if not ShareManager(_tracker()).remove_share(share_id):
        return _error("Share not found", 404)
    return jsonify({"ok": True})


@app.route("/api/suggestions")
def api_suggestions():
    tracker = _tracker()
    seed = request.args.get("seed", type=int)
    items = suggest(
        tracker.current_total(),
        tracker.drink_limit,
        tracker.settings,
        rng=random.Random(seed),
    )
    return jsonify({"safety_status": tracker.safety_status().value, "items": [s.to_dict() for s in items]})


@app.route("/api/history")
def api_history():
    days = int(_clamp_float(request.args.get("days"), 7, 1, MAX_HISTORY_DAYS))
    return jsonify({"items": [s.to_dict() for s in _tracker().history(days)]})


@app.route("/api/stats")
def api_stats():
    tracker = _tracker()
    raw = request.args.get("date", type=str)
    if raw:
        try:
            day = datetime.strptime(raw, "%Y-%m-%d").date()
        except ValueError:
            return _error("date must be YYYY-MM-DD")
    else:
        day = tracker.history(1)[0].day
    return jsonify(tracker.daily_stats(day).to_dict())


@app.route("/api/settings")
def api_settings():
    tracker = _tracker()
    return jsonify({**tracker.settings.to_dict(), "drink_limit": tracker.drink_limit})


@app.route("/api/settings", methods=["POST"])
def api_settings_update():
    tracker = _tracker()
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return _error("Expected a JSON object")
    # Unrecognized toggle values are passed through and rejected by the settings.
    changes = {k: _parse_bool(v, default=v) if k in TOGGLE_FIELDS else v for k, v in data.items()}
    try:
        settings = tracker.update_settings(changes)
        pruned = tracker.prune_history() if "save_drinks_for_days" in data else 0
    except ValueError as exc:
        return _error(str(exc))
    return jsonify({"ok": True, "settings": settings.to_dict(), "pruned": pruned})


@app.route("/api/reminders")
def api_reminders():
    tracker = _tracker()
    planned = plan_reminders(tracker.snapshot(), tracker.settings)
    return jsonify({"items": [n.to_dict() for n in planned]})


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
