"""User profile and emergency contacts."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

MIN_WEIGHT_LB = 80.0
MAX_WEIGHT_LB = 400.0
DEFAULT_WEIGHT_LB = 160.0

RELATIONSHIPS = ("Friend", "Family", "Significant Other", "Roommate", "Other")

_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: Any) -> "Gender":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError("Gender must be male or female") from None


def digits_only(phone: str) -> str:
    return "".join(ch for ch in phone if ch.isdigit())


def is_valid_phone(phone: str) -> bool:
    """E.164-style check after dropping spaces, dashes, dots and parentheses."""
    compact = re.sub(r"[\s\-().]", "", phone or "")
    return bool(_PHONE_RE.match(compact))


def format_phone(phone: str) -> str:
    digits = digits_only(phone)
    if len(digits) < 10:
        return phone
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:10]}"


def _relationship(label: Any) -> str:
    """Canonical relationship label; blank means Friend."""
    text = str(label or "").strip()
    if not text:
        return "Friend"
    for known in RELATIONSHIPS:
        if known.lower() == text.lower():
            return known
    raise ValueError(f"Relationship must be one of: {', '.join(RELATIONSHIPS)}")


def _stored_relationship(label: Any) -> str:
    try:
        return _relationship(label)
    except ValueError:
        return "Other"


@dataclass(frozen=True)
class EmergencyContact:
    id: str
    name: str
    phone: str
    relationship_label: str = "Friend"
    auto_notify: bool = False

    @classmethod
    def new(
        cls,
        name: str,
        phone: str,
        relationship_label: str = "Friend",
        auto_notify: bool = False,
    ) -> "EmergencyContact":
        return cls(uuid.uuid4().hex, name, phone, relationship_label, auto_notify).validated()

    def validated(self) -> "EmergencyContact":
        name = str(self.name).strip()
        phone = str(self.phone).strip()
        if not name:
            raise ValueError("Contact name is required")
        if not phone:
            raise ValueError("Contact phone is required")
        if not is_valid_phone(phone):
            raise ValueError("Contact phone is not a valid number")
        label = _relationship(self.relationship_label)
        return replace(self, name=name[:60], phone=phone, relationship_label=label, auto_notify=bool(self.auto_notify))

    @property
    def formatted_phone(self) -> str:
        return format_phone(self.phone)

    @property
    def dial_number(self) -> str:
        return digits_only(self.phone)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "formatted_phone": self.formatted_phone,
            "relationship_label": self.relationship_label,
            "auto_notify": self.auto_notify,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "EmergencyContact":
        return cls(
            id=str(raw.get("id") or uuid.uuid4().hex),
            name=str(raw.get("name", "")),
            phone=str(raw.get("phone", "")),
            relationship_label=_stored_relationship(raw.get("relationship_label")),
            auto_notify=bool(raw.get("auto_notify", False)),
        ).validated()


@dataclass(frozen=True)
class UserProfile:
    """Replaced wholesale on every update."""

    weight_lb: float = DEFAULT_WEIGHT_LB
    gender: Gender = Gender.MALE
    height_in: float | None = None
    emergency_contacts: tuple[EmergencyContact, ...] = field(default_factory=tuple)

    def validated(self) -> "UserProfile":
        weight = float(self.weight_lb)
        if weight < MIN_WEIGHT_LB or weight > MAX_WEIGHT_LB:
            raise ValueError("Weight must be between 80 and 400 lb")
        height = None if self.height_in is None else float(self.height_in)
        if height is not None and not 36 <= height <= 96:
            raise ValueError("Height must be between 36 and 96 in")
        return replace(
            self,
            weight_lb=weight,
            gender=Gender.parse(self.gender.value if isinstance(self.gender, Gender) else self.gender),
            height_in=height,
            emergency_contacts=tuple(self.emergency_contacts),
        )

    @property
    def bmi(self) -> float | None:
        if not self.height_in:
            return None
        height_m = self.height_in * 0.0254
        weight_kg = self.weight_lb * 0.453592
        return round(weight_kg / (height_m * height_m), 1)

    @property
    def body_water_ratio(self) -> float:
        return 0.58 if self.gender == Gender.MALE else 0.49

    def with_contacts(self, contacts: list[EmergencyContact] | tuple[EmergencyContact, ...]) -> "UserProfile":
        return replace(self, emergency_contacts=tuple(contacts))

    def to_dict(self) -> dict[str, Any]:
        return {
            "weight_lb": self.weight_lb,
            "gender": self.gender.value,
            "height_in": self.height_in,
            "bmi": self.bmi,
            "emergency_contacts": [c.to_dict() for c in self.emergency_contacts],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "UserProfile":
        contacts = raw.get("emergency_contacts") or []
        return cls(
            weight_lb=raw.get("weight_lb", DEFAULT_WEIGHT_LB),
            gender=Gender.parse(raw.get("gender", "male")),
            height_in=raw.get("height_in"),
            emergency_contacts=tuple(EmergencyContact.from_dict(c) for c in contacts if isinstance(c, dict)),
        ).validated()
