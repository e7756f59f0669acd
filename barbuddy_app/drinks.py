"""Drink definitions, standard-drink and calorie helpers.

US standard drink = 0.6 fl oz of pure ethanol.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

# US standard drink in fluid ounces of pure ethanol.
STANDARD_DRINK_OZ = 0.6

# Ethanol density used by the calorie estimate.
ETHANOL_DENSITY = 0.789
CALORIES_PER_GRAM_ALCOHOL = 7


@dataclass(frozen=True)
class DrinkType:
    """A drink category with default serving and carb-calorie multiplier."""

    key: str
    name: str
    default_oz: float
    default_abv: float  # percent, e.g. 5.0 for 5%
    carb_calories_per_oz: int
    icon: str


DRINK_TYPES: Dict[str, DrinkType] = {
    "beer": DrinkType("beer", "Beer", 12.0, 5.0, 13, "🍺"),
    "wine": DrinkType("wine", "Wine", 5.0, 12.0, 4, "🍷"),
    "cocktail": DrinkType("cocktail", "Cocktail", 4.0, 15.0, 12, "🍸"),
    "shot": DrinkType("shot", "Shot", 1.5, 40.0, 2, "🥃"),
    "other": DrinkType("other", "Other", 8.0, 10.0, 8, "🍹"),
}


def standard_drinks(volume_oz: float, abv_percent: float) -> float:
    """Standard drinks in a serving: ethanol oz / 0.6."""
    pure_alcohol_oz = volume_oz * (abv_percent / 100.0)
    return pure_alcohol_oz / STANDARD_DRINK_OZ


def estimated_calories(drink_key: str, volume_oz: float, abv_percent: float) -> int:
    """Alcohol calories plus a per-type carbohydrate addend, each truncated."""
    dt = get_drink_type(drink_key)
    alcohol_grams = volume_oz * (abv_percent / 100.0) * ETHANOL_DENSITY
    alcohol_calories = int(alcohol_grams * CALORIES_PER_GRAM_ALCOHOL)
    carb_calories = int(volume_oz * dt.carb_calories_per_oz)
    return alcohol_calories + carb_calories


def get_drink_type(drink_key: str) -> DrinkType:
    dt = DRINK_TYPES.get(str(drink_key).strip().lower())
    if dt is None:
        raise ValueError(f"Unknown drink type: {drink_key!r}")
    return dt


def list_drink_types() -> List[Dict[str, Any]]:
    """Return drink types with their defaults for UI pickers."""
    return [
        {
            "key": d.key,
            "name": d.name,
            "default_oz": d.default_oz,
            "default_abv": d.default_abv,
            "icon": d.icon,
        }
        for d in DRINK_TYPES.values()
    ]


def validate_serving(volume_oz: float, abv_percent: float) -> Tuple[float, float]:
    volume_oz = float(volume_oz)
    abv_percent = float(abv_percent)
    if not volume_oz > 0:
        raise ValueError("volume_oz must be > 0")
    if not 0 <= abv_percent <= 100:
        raise ValueError("abv_percent must be between 0 and 100")
    return volume_oz, abv_percent


def _validate_cost(cost: Optional[float]) -> Optional[float]:
    if cost is None:
        return None
    cost = float(cost)
    if cost < 0:
        raise ValueError("cost must be >= 0")
    return round(cost, 2)


@dataclass(frozen=True)
class Drink:
    """One logged drink. Only ``cost`` can change, via :meth:`with_cost`."""

    id: str
    type: str
    volume_oz: float
    abv_percent: float
    timestamp: datetime
    cost: Optional[float] = None

    @classmethod
    def new(
        cls,
        drink_key: str,
        volume_oz: Optional[float] = None,
        abv_percent: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        cost: Optional[float] = None,
    ) -> "Drink":
        """Build a drink, filling size/ABV from the type defaults when omitted."""
        dt = get_drink_type(drink_key)
        volume, abv = validate_serving(
            dt.default_oz if volume_oz is None else volume_oz,
            dt.default_abv if abv_percent is None else abv_percent,
        )
        return cls(
            id=uuid.uuid4().hex,
            type=dt.key,
            volume_oz=volume,
            abv_percent=abv,
            timestamp=timestamp or datetime.now(),
            cost=_validate_cost(cost),
        )

    @property
    def standard_drinks(self) -> float:
        return standard_drinks(self.volume_oz, self.abv_percent)

    @property
    def estimated_calories(self) -> int:
        return estimated_calories(self.type, self.volume_oz, self.abv_percent)

    def with_cost(self, cost: Optional[float]) -> "Drink":
        return replace(self, cost=_validate_cost(cost))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "volume_oz": self.volume_oz,
            "abv_percent": self.abv_percent,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "cost": self.cost,
            "standard_drinks": round(self.standard_drinks, 2),
            "estimated_calories": self.estimated_calories,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Drink":
        dt = get_drink_type(raw["type"])
        volume, abv = validate_serving(raw["volume_oz"], raw["abv_percent"])
        ts = raw["timestamp"]
        if not isinstance(ts, datetime):
            ts = datetime.fromisoformat(str(ts))
        return cls(
            id=str(raw["id"]),
            type=dt.key,
            volume_oz=volume,
            abv_percent=abv,
            timestamp=ts,
            cost=_validate_cost(raw.get("cost")),
        )
