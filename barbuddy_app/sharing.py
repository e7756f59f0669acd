"""Time-limited status shares sent to friends."""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from barbuddy_app import store
from barbuddy_app.safety import SafetyStatus, classify
from barbuddy_app.tracker import DrinkTracker

logger = logging.getLogger(__name__)

MAX_ACTIVE_SHARES = 10
DEFAULT_SHARE_HOURS = 2.0
MAX_SHARE_HOURS = 24.0

MESSAGE_TEMPLATES = (
    "Checking in with my current status.",
    "Just tracking my drinks for safety.",
    "Staying responsible tonight.",
    "Keeping an eye on my drinking.",
    "Safety first.",
)


@dataclass(frozen=True)
class DrinkShare:
    id: str
    drink_count: float
    drink_limit: float
    message: str
    timestamp: datetime
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at

    @property
    def safety_status(self) -> SafetyStatus:
        return classify(self.drink_count, self.drink_limit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "drink_count": self.drink_count,
            "drink_limit": self.drink_limit,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "expires_at": self.expires_at.isoformat(timespec="seconds"),
            "safety_status": self.safety_status.value,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DrinkShare":
        return cls(
            id=str(raw["id"]),
            drink_count=float(raw["drink_count"]),
            drink_limit=float(raw["drink_limit"]),
            message=str(raw["message"]),
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            expires_at=datetime.fromisoformat(raw["expires_at"]),
        )


def create_share_message(
    drink_count: float,
    drink_limit: float,
    custom_message: str | None = None,
    include_location: bool = False,
    location: str = "",
    rng: random.Random | None = None,
) -> str:
    base = (custom_message or "").strip() or (rng or random).choice(MESSAGE_TEMPLATES)
    if drink_count >= drink_limit:
        status = "reached my drink limit"
    else:
        status = f"{drink_count:.1f} of {drink_limit:.1f} drinks"
    message = f"{base}\n\nCurrent Status: {status}"
    if include_location:
        message += f"\nApproximate Location: {location.strip() or 'unavailable'}"
    return message


class ShareManager:
    def __init__(self, tracker: DrinkTracker, rng: random.Random | None = None) -> None:
        self.tracker = tracker
        self.db_path = tracker.db_path
        self.rng = rng or random.Random()

    def active_shares(self) -> list[DrinkShare]:
        """Unexpired shares, oldest first. Expired ones are deleted."""
        now = self.tracker.now()
        active = []
        for share in (DrinkShare.from_dict(raw) for raw in store.list_shares(self.db_path)):
            if share.is_active(now):
                active.append(share)
            else:
                store.delete_share(self.db_path, share.id)
                logger.info("Share %s expired and was removed.", share.id)
        return active

    def add_share(self, message: str | None = None, expiration_hours: float | None = None) -> DrinkShare:
        """Share the current count and limit. The oldest share is dropped past the cap."""
        hours = DEFAULT_SHARE_HOURS if expiration_hours is None else float(expiration_hours)
        if hours <= 0 or hours > MAX_SHARE_HOURS:
            raise ValueError(f"expiration_hours must be between 0 and {MAX_SHARE_HOURS:g}")

        active = self.active_shares()
        while len(active) >= MAX_ACTIVE_SHARES:
            oldest = active.pop(0)
            logger.warning("Max active shares reached. Removing oldest share %s", oldest.id)
            store.delete_share(self.db_path, oldest.id)

        now = self.tracker.now()
        share = DrinkShare(
            id=uuid.uuid4().hex,
            drink_count=round(self.tracker.current_total(), 2),
            drink_limit=self.tracker.drink_limit,
            message=(message or "").strip()[:280] or self.rng.choice(MESSAGE_TEMPLATES),
            timestamp=now,
            expires_at=now + timedelta(hours=hours),
        )
        store.insert_share(self.db_path, share.to_dict())
        return share

    def remove_share(self, share_id: str) -> bool:
        return store.delete_share(self.db_path, share_id)
