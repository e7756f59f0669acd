"""
Drink tracker service: drink log, profile, drink limit, rollover and history.
Built explicitly with its database path and clock (no shared instance);
state changes are pushed to subscribers as snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from barbuddy_app import rollover, store
from barbuddy_app.drinks import Drink
from barbuddy_app.profile import UserProfile
from barbuddy_app.safety import SafetyStatus, classify, drinks_remaining
from barbuddy_app.settings import DEFAULT_DRINK_LIMIT, AppSettings, validate_drink_limit

logger = logging.getLogger(__name__)

PROFILE_KEY = "user_profile"
DRINK_LIMIT_KEY = "drink_limit"
APP_SETTINGS_KEY = "app_settings"

# Drinks may be logged slightly ahead of the clock (device skew), not more.
MAX_FUTURE_SKEW = timedelta(minutes=5)

Clock = Callable[[], datetime]
Listener = Callable[[str, Dict[str, Any]], None]


class DrinkNotFound(LookupError):
    pass


@dataclass
class DailyStats:
    day: date
    total_drinks: int
    standard_drinks: float
    calories: int
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "total_drinks": self.total_drinks,
            "standard_drinks": round(self.standard_drinks, 2),
            "calories": self.calories,
            "cost": round(self.cost, 2),
        }


class DrinkTracker:
    def __init__(self, db_path: str, clock: Optional[Clock] = None) -> None:
        self.db_path = db_path
        self.clock: Clock = clock or datetime.now
        self._listeners: List[Listener] = []
        self._drinks: List[Drink] = []
        self._load()

    def _load(self) -> None:
        drinks = []
        for raw in store.list_drinks(self.db_path):
            try:
                drinks.append(Drink.from_dict(raw))
            except (KeyError, ValueError):
                logger.warning("Skipping unreadable drink row %s", raw.get("id"))
        self._drinks = drinks

    def now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event, snapshot)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> Dict[str, Any]:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(event, snap)
        return snap

    # Drinks

    @property
    def drinks(self) -> List[Drink]:
        return list(self._drinks)

    def get_drink(self, drink_id: str) -> Drink:
        for d in self._drinks:
            if d.id == drink_id:
                return d
        raise DrinkNotFound(drink_id)

    def add_drink(
        self,
        drink_key: str,
        volume_oz: Optional[float] = None,
        abv_percent: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        cost: Optional[float] = None,
    ) -> Drink:
        now = self.now()
        if timestamp is None:
            ts = now
        elif timestamp.tzinfo is not None:
            # Stored timestamps are local wall-clock time.
            ts = timestamp.astimezone().replace(tzinfo=None, microsecond=0)
        else:
            ts = timestamp.replace(microsecond=0)
        if ts > now + MAX_FUTURE_SKEW:
            raise ValueError("Drink timestamp cannot be in the future")
        drink = Drink.new(drink_key, volume_oz, abv_percent, timestamp=ts, cost=cost)
        store.insert_drink(self.db_path, drink.to_dict())
        self._drinks.append(drink)
        self._drinks.sort(key=lambda d: d.timestamp)
        logger.debug("Logged %s (%.2f standard drinks)", drink.type, drink.standard_drinks)
        self._emit("drink_added")
        return drink

    def remove_drink(self, drink_id: str) -> Drink:
        drink = self.get_drink(drink_id)
        store.delete_drink(self.db_path, drink_id)
        self._drinks = [d for d in self._drinks if d.id != drink_id]
        self._emit("drink_removed")
        return drink

    def set_cost(self, drink_id: str, cost: Optional[float]) -> Drink:
        updated = self.get_drink(drink_id).with_cost(cost)
        store.update_drink_cost(self.db_path, drink_id, updated.cost)
        self._drinks = [updated if d.id == drink_id else d for d in self._drinks]
        self._emit("drink_updated")
        return updated

    def clear_drinks(self) -> int:
        removed = store.delete_all_drinks(self.db_path)
        self._drinks = []
        self._emit("drinks_cleared")
        return removed

    def current_drinks(self) -> List[Drink]:
        now = self.now()
        return [d for d in self._drinks if rollover.is_current(d.timestamp, now)]

    def current_total(self) -> float:
        return sum(d.standard_drinks for d in self.current_drinks())

    # Profile, limit, settings

    @property
    def profile(self) -> UserProfile:
        raw = store.get_setting(self.db_path, PROFILE_KEY)
        if not isinstance(raw, dict):
            return UserProfile()
        try:
            return UserProfile.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored profile is invalid; using defaults")
            return UserProfile()

    def update_profile(self, profile: UserProfile) -> UserProfile:
        profile = profile.validated()
        store.set_setting(self.db_path, PROFILE_KEY, profile.to_dict())
        self._emit("profile_updated")
        return profile

    @property
    def drink_limit(self) -> float:
        raw = store.get_setting(self.db_path, DRINK_LIMIT_KEY)
        try:
            return validate_drink_limit(raw)
        except ValueError:
            return DEFAULT_DRINK_LIMIT

    def update_drink_limit(self, limit: Any) -> float:
        limit = validate_drink_limit(limit)
        store.set_setting(self.db_path, DRINK_LIMIT_KEY, limit)
        self._emit("limit_updated")
        return limit

    @property
    def settings(self) -> AppSettings:
        return AppSettings.from_dict(store.get_setting(self.db_path, APP_SETTINGS_KEY))

    def update_settings(self, changes: Dict[str, Any]) -> AppSettings:
        updated = self.settings.merged(changes)
        store.set_setting(self.db_path, APP_SETTINGS_KEY, updated.to_dict())
        self._emit("settings_updated")
        return updated

    # Status

    def safety_status(self) -> SafetyStatus:
        return classify(self.current_total(), self.drink_limit)

    def time_until_reset(self) -> timedelta:
        return rollover.time_until_reset(self.now())

    # History

    def daily_stats(self, day: date) -> DailyStats:
        """Totals for one drinking day (04:00 to 04:00)."""
        day_drinks = [d for d in self._drinks if rollover.drinking_day(d.timestamp) == day]
        return DailyStats(
            day=day,
            total_drinks=len(day_drinks),
            standard_drinks=sum(d.standard_drinks for d in day_drinks),
            calories=sum(d.estimated_calories for d in day_drinks),
            cost=sum(d.cost or 0.0 for d in day_drinks),
        )

    def history(self, days: int = 7) -> List[DailyStats]:
        """One entry per drinking day for the last ``days`` days, oldest first."""
        today = rollover.drinking_day(self.now())
        return [self.daily_stats(today - timedelta(days=offset)) for offset in range(max(1, days) - 1, -1, -1)]

    def prune_history(self) -> int:
        """Delete drinks older than the retention window in the settings."""
        cutoff = rollover.last_reset(self.now()) - timedelta(days=self.settings.save_drinks_for_days)
        removed = store.delete_drinks_before(self.db_path, cutoff)
        if removed:
            self._drinks = [d for d in self._drinks if d.timestamp >= cutoff]
            logger.info("Pruned %d drinks older than %s", removed, cutoff.date().isoformat())
            self._emit("history_pruned")
        return removed

    def snapshot(self) -> Dict[str, Any]:
        now = self.now()
        current = [d for d in self._drinks if rollover.is_current(d.timestamp, now)]
        total = sum(d.standard_drinks for d in current)
        limit = self.drink_limit
        status = classify(total, limit)
        return {
            "now": now.isoformat(timespec="seconds"),
            "current_total": round(total, 2),
            "drink_limit": limit,
            "safety_status": status.value,
            "safety_label": status.label,
            "drinks_remaining": drinks_remaining(total, limit),
            "drink_count": len(current),
            "total_calories": sum(d.estimated_calories for d in current),
            "total_cost": round(sum(d.cost or 0.0 for d in current), 2),
            "current_drinks": [d.to_dict() for d in current],
            "session_started_at": current[0].timestamp.isoformat(timespec="seconds") if current else None,
            "last_reset": rollover.last_reset(now).isoformat(timespec="seconds"),
            "next_reset": rollover.next_reset(now).isoformat(timespec="seconds"),
            "time_until_reset_seconds": int(rollover.time_until_reset(now).total_seconds()),
        }
