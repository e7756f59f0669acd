"""
BarBuddy drink tracker: standard drinks, 4 AM rollover, safety status,
emergency contacts, shares, reminders and suggestions.
Use from project root: python -m barbuddy_app.main
"""

from barbuddy_app.drinks import (
    DRINK_TYPES,
    STANDARD_DRINK_OZ,
    Drink,
    estimated_calories,
    list_drink_types,
    standard_drinks,
)
from barbuddy_app.profile import EmergencyContact, Gender, UserProfile
from barbuddy_app.rollover import last_reset, next_reset, time_until_reset
from barbuddy_app.safety import SafetyStatus, classify
from barbuddy_app.tracker import DrinkNotFound, DrinkTracker

__all__ = [
    "DrinkTracker",
    "DrinkNotFound",
    "Drink",
    "standard_drinks",
    "estimated_calories",
    "list_drink_types",
    "DRINK_TYPES",
    "STANDARD_DRINK_OZ",
    "SafetyStatus",
    "classify",
    "last_reset",
    "next_reset",
    "time_until_reset",
    "EmergencyContact",
    "Gender",
    "UserProfile",
]
