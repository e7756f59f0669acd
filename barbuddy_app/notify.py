"""Reminder planning and the outbound notification/messaging interface.

Delivery itself (push notifications, SMS, the watch) is an external
collaborator behind :class:`Notifier`. This module only decides *what* to
send and *when*.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Protocol

from barbuddy_app.profile import EmergencyContact
from barbuddy_app.rollover import drinking_day
from barbuddy_app.safety import SafetyStatus, classify
from barbuddy_app.settings import AppSettings

logger = logging.getLogger(__name__)

HYDRATION_DELAY_MINUTES = 30
DURATION_ALERT_HOURS = (3, 5)
MORNING_CHECK_IN_HOUR = 10


@dataclass(frozen=True)
class Notification:
    identifier: str
    title: str
    body: str
    category: str
    deliver_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "body": self.body,
            "category": self.category,
            "deliver_at": self.deliver_at.isoformat(timespec="seconds"),
        }


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...

    def send_message(self, contact: EmergencyContact, body: str) -> None: ...


class LogNotifier:
    """Writes every delivery to the log. Used when no real transport is wired in."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def notify(self, notification: Notification) -> None:
        self.log.info(
            "notification %s at %s: %s - %s",
            notification.identifier,
            notification.deliver_at.isoformat(timespec="seconds"),
            notification.title,
            notification.body,
        )

    def send_message(self, contact: EmergencyContact, body: str) -> None:
        self.log.info("message to %s (%s): %s", contact.name, contact.formatted_phone, body)


class RecordingNotifier:
    """Keeps deliveries in memory."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []
        self.messages: list[tuple[EmergencyContact, str]] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def send_message(self, contact: EmergencyContact, body: str) -> None:
        self.messages.append((contact, body))


def limit_alert(count: float, limit: float, now: datetime, settings: AppSettings) -> Notification | None:
    """Immediate alert when the count is borderline or over the limit."""
    if not settings.enable_drink_alerts:
        return None
    status = classify(count, limit)
    if status == SafetyStatus.UNSAFE:
        return Notification(
            identifier="drink-limit-alert",
            title="Drink Limit Reached",
            body=f"You've reached your drink limit of {int(limit)} standard drinks. Consider switching to water.",
            category="drink_limit",
            deliver_at=now,
        )
    if status == SafetyStatus.BORDERLINE:
        return Notification(
            identifier="drink-limit-alert",
            title="Approaching Drink Limit",
            body=f"You're approaching your drink limit of {int(limit)} standard drinks. Consider slowing down.",
            category="drink_limit",
            deliver_at=now,
        )
    return None


def hydration_reminder(now: datetime, settings: AppSettings, after_minutes: int = HYDRATION_DELAY_MINUTES) -> Notification | None:
    if not settings.enable_hydration_reminders:
        return None
    deliver_at = now + timedelta(minutes=after_minutes)
    return Notification(
        identifier=f"hydration-{deliver_at.strftime('%Y%m%d%H%M')}",
        title="Hydration Reminder",
        body="Remember to drink water between alcoholic drinks to stay hydrated.",
        category="hydration",
        deliver_at=deliver_at,
    )


def duration_alerts(session_start: datetime, now: datetime, settings: AppSettings) -> list[Notification]:
    """Alerts 3h and 5h after the first drink of the night; past ones are skipped."""
    if not settings.enable_duration_alerts:
        return []
    bodies = {
        3: ("Drinking Duration Alert", "You've been drinking for 3 hours. Consider taking a break or switching to water."),
        5: ("Extended Drinking Alert", "You've been drinking for 5 hours. Consider ending your session or getting a ride home."),
    }
    out = []
    for hours in DURATION_ALERT_HOURS:
        deliver_at = session_start + timedelta(hours=hours)
        if deliver_at < now:
            continue
        title, body = bodies[hours]
        out.append(
            Notification(
                identifier=f"duration-{hours}hr",
                title=title,
                body=body,
                category="drinking_duration",
                deliver_at=deliver_at,
            )
        )
    return out


def morning_check_in(now: datetime, settings: AppSettings) -> Notification | None:
    if not settings.enable_morning_check_ins:
        return None
    deliver_at = datetime.combine(drinking_day(now) + timedelta(days=1), time(hour=MORNING_CHECK_IN_HOUR))
    return Notification(
        identifier="morning-checkin",
        title="Morning Check-In",
        body="Good morning! How are you feeling today? Remember to hydrate and rest if needed.",
        category="after_party",
        deliver_at=deliver_at,
    )


def plan_reminders(snapshot: dict[str, Any], settings: AppSettings) -> list[Notification]:
    """All reminders that apply to a tracker snapshot, ordered by delivery time."""
    now = datetime.fromisoformat(snapshot["now"])
    planned: list[Notification] = []
    if snapshot["drink_count"] == 0:
        return planned

    alert = limit_alert(snapshot["current_total"], snapshot["drink_limit"], now, settings)
    if alert is not None:
        planned.append(alert)
    reminder = hydration_reminder(now, settings)
    if reminder is not None:
        planned.append(reminder)
    if snapshot.get("session_started_at"):
        planned.extend(duration_alerts(datetime.fromisoformat(snapshot["session_started_at"]), now, settings))
    check_in = morning_check_in(now, settings)
    if check_in is not None:
        planned.append(check_in)
    return sorted(planned, key=lambda n: n.deliver_at)
