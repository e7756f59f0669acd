"""Safety status from the current standard-drink count versus the user's limit."""

from enum import Enum

# At or above this share of the limit the status is borderline.
BORDERLINE_RATIO = 0.75


class SafetyStatus(str, Enum):
    SAFE = "safe"
    BORDERLINE = "borderline"
    UNSAFE = "unsafe"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def rank(self) -> int:
        return _RANKS[self]


_LABELS = {
    SafetyStatus.SAFE: "Under Limit",
    SafetyStatus.BORDERLINE: "Approaching Limit",
    SafetyStatus.UNSAFE: "Limit Reached",
}

_RANKS = {
    SafetyStatus.SAFE: 0,
    SafetyStatus.BORDERLINE: 1,
    SafetyStatus.UNSAFE: 2,
}


def classify(count: float, limit: float) -> SafetyStatus:
    """Return safe (< 75% of limit), borderline (75-100%) or unsafe (>= limit)."""
    if count >= limit:
        return SafetyStatus.UNSAFE
    if count >= limit * BORDERLINE_RATIO:
        return SafetyStatus.BORDERLINE
    return SafetyStatus.SAFE


def drinks_remaining(count: float, limit: float) -> float:
    """Standard drinks left before the limit (never negative)."""
    return round(max(0.0, limit - count), 2)
