"""Reacts to tracker changes: limit alerts for the user and auto-messages to contacts.

Only an upward status change (safe -> borderline, borderline -> unsafe, ...)
triggers deliveries, so logging a fifth drink past the limit does not
re-alert anyone.
"""

import logging
from typing import Any, Callable, Dict

from barbuddy_app.contacts import ContactBook
from barbuddy_app.notify import Notifier, limit_alert
from barbuddy_app.rollover import format_duration
from barbuddy_app.safety import SafetyStatus
from barbuddy_app.tracker import DrinkTracker

logger = logging.getLogger(__name__)

_ALERT_EVENTS = {"drink_added", "drink_updated", "limit_updated"}


class AlertDispatcher:
    def __init__(self, tracker: DrinkTracker, notifier: Notifier, contacts: ContactBook) -> None:
        self.tracker = tracker
        self.notifier = notifier
        self.contacts = contacts
        self._last_status = tracker.safety_status()
        self._unsubscribe: Callable[[], None] = tracker.subscribe(self.on_change)

    def close(self) -> None:
        self._unsubscribe()

    def on_change(self, event: str, snapshot: Dict[str, Any]) -> None:
        status = SafetyStatus(snapshot["safety_status"])
        previous, self._last_status = self._last_status, status
        if event not in _ALERT_EVENTS or status.rank <= previous.rank:
            return

        settings = self.tracker.settings
        alert = limit_alert(snapshot["current_total"], snapshot["drink_limit"], self.tracker.now(), settings)
        if alert is not None:
            self.notifier.notify(alert)
        if status == SafetyStatus.UNSAFE:
            sent = self.contacts.notify_auto_contacts(snapshot)
            if sent:
                logger.info(
                    "Limit reached; notified %d contact(s). Count resets in %s",
                    len(sent),
                    format_duration(self.tracker.time_until_reset()),
                )
