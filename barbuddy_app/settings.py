"""User-adjustable app settings: reminder toggles, history retention, suggestion preferences."""

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Tuple

from barbuddy_app.drinks import DRINK_TYPES

DEFAULT_DRINK_LIMIT = 4.0
MIN_DRINK_LIMIT = 0.5
MAX_DRINK_LIMIT = 30.0

MIN_RETENTION_DAYS = 1
MAX_RETENTION_DAYS = 3650


@dataclass(frozen=True)
class AppSettings:
    enable_drink_alerts: bool = True
    enable_hydration_reminders: bool = True
    enable_duration_alerts: bool = True
    enable_morning_check_ins: bool = False
    save_drinks_for_days: int = 90
    preferred_drink_types: Tuple[str, ...] = field(default_factory=tuple)
    show_low_alcohol_suggestions: bool = False
    show_moderate_options: bool = True
    show_hydration_suggestions: bool = True

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["preferred_drink_types"] = list(self.preferred_drink_types)
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> "AppSettings":
        """Lenient load: unknown keys are dropped, bad values fall back to defaults."""
        settings = cls()
        if not isinstance(raw, dict):
            return settings
        for key, value in raw.items():
            try:
                settings = settings.merged({key: value})
            except ValueError:
                continue
        return settings

    def merged(self, changes: Dict[str, Any]) -> "AppSettings":
        """Apply a partial update. Raises ValueError on an invalid value."""
        known = {f.name for f in fields(self)}
        updates: Dict[str, Any] = {}
        for key, value in changes.items():
            if key not in known:
                continue
            if key == "save_drinks_for_days":
                try:
                    days = int(value)
                except (TypeError, ValueError):
                    raise ValueError("save_drinks_for_days must be an integer") from None
                if days < MIN_RETENTION_DAYS or days > MAX_RETENTION_DAYS:
                    raise ValueError("save_drinks_for_days must be between 1 and 3650")
                updates[key] = days
            elif key == "preferred_drink_types":
                if not isinstance(value, (list, tuple)):
                    raise ValueError("preferred_drink_types must be a list")
                keys = []
                for item in value:
                    k = str(item).strip().lower()
                    if k not in DRINK_TYPES:
                        raise ValueError(f"Unknown drink type: {item!r}")
                    if k not in keys:
                        keys.append(k)
                updates[key] = tuple(keys)
            else:
                if not isinstance(value, bool):
                    raise ValueError(f"{key} must be true or false")
                updates[key] = value
        return replace(self, **updates)


def validate_drink_limit(value: Any) -> float:
    try:
        limit = float(value)
    except (TypeError, ValueError):
        raise ValueError("Drink limit must be a number") from None
    if limit < MIN_DRINK_LIMIT or limit > MAX_DRINK_LIMIT:
        raise ValueError(f"Drink limit must be between {MIN_DRINK_LIMIT} and {MAX_DRINK_LIMIT}")
    return round(limit, 2)


TOGGLE_FIELDS = frozenset(f.name for f in fields(AppSettings) if isinstance(f.default, bool))
