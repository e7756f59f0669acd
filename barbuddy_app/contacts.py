"""Emergency contacts kept on the user profile, plus check-in and alert messaging."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from barbuddy_app.notify import Notifier
from barbuddy_app.profile import EmergencyContact
from barbuddy_app.safety import SafetyStatus
from barbuddy_app.tracker import DrinkTracker

logger = logging.getLogger(__name__)

CHECK_IN_MESSAGE = "Hi, just checking in to let you know I made it home safely. (Sent via BarBuddy)"
LOCATION_MESSAGE = "BarBuddy Emergency: I need help. Here is my current location: {location}"
MAX_CUSTOM_MESSAGE = 500


class ContactNotFound(LookupError):
    pass


def limit_reached_message(count: float, limit: float) -> str:
    return (
        f"BarBuddy alert: I've reached my drink limit tonight "
        f"({count:.1f} of {limit:.1f} standard drinks). Please check in on me."
    )


class ContactBook:
    """Contact list operations over the tracker's profile. Every change replaces the profile."""

    def __init__(self, tracker: DrinkTracker, notifier: Notifier) -> None:
        self.tracker = tracker
        self.notifier = notifier

    def list(self) -> list[EmergencyContact]:
        return list(self.tracker.profile.emergency_contacts)

    def get(self, contact_id: str) -> EmergencyContact:
        for c in self.list():
            if c.id == contact_id:
                return c
        raise ContactNotFound(contact_id)

    def add(
        self,
        name: str,
        phone: str,
        relationship_label: str = "Friend",
        auto_notify: bool = False,
    ) -> EmergencyContact:
        contact = EmergencyContact.new(name, phone, relationship_label, auto_notify)
        profile = self.tracker.profile
        self.tracker.update_profile(profile.with_contacts([*profile.emergency_contacts, contact]))
        return contact

    def update(self, contact_id: str, changes: dict[str, Any]) -> EmergencyContact:
        current = self.get(contact_id)
        allowed = {k: v for k, v in changes.items() if k in {"name", "phone", "relationship_label", "auto_notify"}}
        updated = replace(current, **allowed).validated()
        profile = self.tracker.profile
        contacts = [updated if c.id == contact_id else c for c in profile.emergency_contacts]
        self.tracker.update_profile(profile.with_contacts(contacts))
        return updated

    def remove(self, contact_id: str) -> EmergencyContact:
        contact = self.get(contact_id)
        profile = self.tracker.profile
        self.tracker.update_profile(profile.with_contacts([c for c in profile.emergency_contacts if c.id != contact_id]))
        return contact

    # Messaging

    def send_check_in(self, contact_id: str) -> str:
        return self._send(self.get(contact_id), CHECK_IN_MESSAGE)

    def send_location(self, contact_id: str, location: str = "") -> str:
        location = location.strip()[:120] or "unavailable"
        return self._send(self.get(contact_id), LOCATION_MESSAGE.format(location=location))

    def send_custom(self, contact_id: str, message: str) -> str:
        message = message.strip()
        if not message:
            raise ValueError("Message is required")
        return self._send(self.get(contact_id), message[:MAX_CUSTOM_MESSAGE])

    def notify_auto_contacts(self, snapshot: dict[str, Any]) -> list[EmergencyContact]:
        """Message every auto-notify contact when the snapshot is over the limit."""
        if snapshot["safety_status"] != SafetyStatus.UNSAFE.value:
            return []
        body = limit_reached_message(snapshot["current_total"], snapshot["drink_limit"])
        sent = []
        for contact in self.list():
            if contact.auto_notify:
                self._send(contact, body)
                sent.append(contact)
        return sent

    def _send(self, contact: EmergencyContact, body: str) -> str:
        self.notifier.send_message(contact, body)
        logger.debug("Sent message to contact %s", contact.id)
        return body
