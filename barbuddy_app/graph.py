"""
Drink history chart. Produces an image file or returns data for any frontend.
"""

from pathlib import Path
from typing import List, Tuple

from barbuddy_app.tracker import DrinkTracker


def history_data(tracker: DrinkTracker, days: int = 14) -> List[Tuple[str, float]]:
    """(YYYY-MM-DD, standard_drinks) per drinking day, oldest first."""
    return [(s.day.isoformat(), round(s.standard_drinks, 2)) for s in tracker.history(days)]


def save_history_graph(
    tracker: DrinkTracker,
    output_path: str = "drink_history.png",
    days: int = 14,
    title: str = "Standard drinks per night",
) -> str:
    """
    Bar chart of standard drinks per drinking day with the user's limit.
    Returns path to saved file. Requires: pip install matplotlib
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for save_history_graph. pip install matplotlib")

    points = history_data(tracker, days=days)
    labels = [day[5:] for day, _ in points]
    totals = [total for _, total in points]
    limit = tracker.drink_limit
    colors = ["#dc2626" if t >= limit else "#2563eb" for t in totals]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar(labels, totals, color=colors, alpha=0.8, label="Standard drinks")
    ax.axhline(y=limit, color="#dc2626", linestyle="--", linewidth=1, label=f"Limit ({limit:g})")
    ax.set_xlabel("Night of")
    ax.set_ylabel("Standard drinks")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, axis="y", alpha=0.3)
    fig.autofmt_xdate()
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
