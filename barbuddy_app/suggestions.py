"""
Next-drink suggestions: water, non-alcoholic, low-alcohol and moderate options
chosen by how close the user is to their limit.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from barbuddy_app.drinks import standard_drinks
from barbuddy_app.safety import BORDERLINE_RATIO
from barbuddy_app.settings import AppSettings


@dataclass(frozen=True)
class DrinkSuggestion:
    name: str
    type: str
    abv_percent: float
    size_oz: float
    non_alcoholic: bool
    emoji: str
    description: str
    ingredients: Tuple[str, ...] = ()

    @property
    def standard_drinks(self) -> float:
        if self.non_alcoholic:
            return 0.0
        return round(standard_drinks(self.size_oz, self.abv_percent), 1)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "type": self.type,
            "abv_percent": self.abv_percent,
            "size_oz": self.size_oz,
            "non_alcoholic": self.non_alcoholic,
            "standard_drinks": self.standard_drinks,
            "emoji": self.emoji,
            "description": self.description,
            "ingredients": list(self.ingredients),
        }


def _s(name, dtype, abv, oz, na, emoji, desc, *ingredients) -> DrinkSuggestion:
    return DrinkSuggestion(name, dtype, abv, oz, na, emoji, desc, tuple(ingredients))


WATER = _s("Water", "other", 0, 16, True, "💧", "Stay hydrated to help process alcohol and avoid hangovers.", "Water")

NON_ALCOHOLIC: List[DrinkSuggestion] = [
    _s("Club Soda", "other", 0, 12, True, "🥤", "Refreshing and bubbly without the alcohol.", "Carbonated water"),
    _s("Virgin Mojito", "cocktail", 0, 12, True, "🍃", "Refreshing mint and lime drink without the rum.", "Lime juice", "Mint leaves", "Sugar", "Club soda"),
    _s("Shirley Temple", "cocktail", 0, 12, True, "🍒", "Classic non-alcoholic cocktail with grenadine.", "Ginger ale", "Grenadine", "Maraschino cherry"),
    _s("Kombucha", "other", 0.5, 12, True, "🍵", "Fermented tea with probiotics and very minimal alcohol.", "Fermented tea", "Probiotics", "Fruit flavors"),
]

LOW_ALCOHOL: List[DrinkSuggestion] = [
    _s("Light Beer", "beer", 3.5, 12, False, "🍺", "Lower alcohol beer to pace your drinking.", "Malted barley", "Hops", "Water", "Yeast"),
    _s("Radler/Shandy", "beer", 2.5, 12, False, "🍋", "Beer mixed with lemonade or citrus soda.", "Beer", "Lemonade or citrus soda"),
    _s("White Wine Spritzer", "wine", 6.0, 6, False, "🥂", "White wine diluted with soda water.", "White wine", "Club soda", "Optional citrus"),
    _s("Aperol Spritz", "cocktail", 8.0, 8, False, "🧡", "Classic Italian aperitif with prosecco and soda water.", "Aperol", "Prosecco", "Club soda", "Orange slice"),
    _s("Campari & Soda", "cocktail", 7.0, 6, False, "🔴", "Bitter Italian aperitif with soda water.", "Campari", "Club soda", "Optional citrus"),
]

MODERATE: List[DrinkSuggestion] = [
    _s("Standard Beer", "beer", 5.0, 12, False, "🍺", "Regular beer with balanced flavor.", "Malted barley", "Hops", "Water", "Yeast"),
    _s("Glass of Wine", "wine", 12.0, 5, False, "🍷", "Standard serving of wine.", "Fermented grapes"),
    _s("Moscow Mule", "cocktail", 10.0, 8, False, "🥃", "Refreshing ginger and vodka drink.", "Vodka", "Ginger beer", "Lime juice"),
    _s("Tom Collins", "cocktail", 10.0, 8, False, "🍋", "Classic gin cocktail with lemon and soda.", "Gin", "Lemon juice", "Simple syrup", "Club soda"),
    _s("Vodka Soda", "cocktail", 12.0, 6, False, "🥂", "Simple mixed drink with fewer calories.", "Vodka", "Club soda", "Lime"),
]


def _preferred(options: List[DrinkSuggestion], preferred: Tuple[str, ...]) -> List[DrinkSuggestion]:
    if not preferred:
        return list(options)
    return [o for o in options if o.type in preferred]


def suggest(
    drink_count: float,
    drink_limit: float,
    settings: Optional[AppSettings] = None,
    rng: Optional[random.Random] = None,
) -> List[DrinkSuggestion]:
    """Water first (unless hydration suggestions are off), then options by safety band."""
    settings = settings or AppSettings()
    rng = rng or random.Random()
    out: List[DrinkSuggestion] = []
    if settings.show_hydration_suggestions:
        out.append(WATER)

    # At or over the limit: non-alcoholic only.
    if drink_count >= drink_limit:
        out.extend(NON_ALCOHOLIC[:4])
        return out

    if drink_count >= drink_limit * BORDERLINE_RATIO:
        if settings.show_low_alcohol_suggestions:
            out.extend(_preferred(LOW_ALCOHOL, settings.preferred_drink_types)[:3])
        out.extend(rng.sample(NON_ALCOHOLIC, 2))
        return out

    options: List[DrinkSuggestion] = []
    if settings.show_low_alcohol_suggestions:
        options.extend(LOW_ALCOHOL)
    if settings.show_moderate_options:
        options.extend(MODERATE)
    options = _preferred(options, settings.preferred_drink_types)
    rng.shuffle(options)
    out.extend(options[:4])
    out.append(rng.choice(NON_ALCOHOLIC))
    return out
