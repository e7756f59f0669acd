"""
BarBuddy CLI demo. Run from project root: python -m barbuddy_app.main
Logs drinks into a local database, prints the current total, safety status
and time until the 4 AM reset, and optionally saves a history graph.
"""

import argparse
import logging
import sys
from pathlib import Path

from barbuddy_app import store
from barbuddy_app.drinks import DRINK_TYPES
from barbuddy_app.graph import history_data, save_history_graph
from barbuddy_app.rollover import format_duration
from barbuddy_app.tracker import DrinkTracker


def main(argv=None):
    parser = argparse.ArgumentParser(description="BarBuddy: log drinks and check your night against your limit")
    parser.add_argument("--db", type=str, default=str(Path("instance") / "barbuddy.db"), help="SQLite database path")
    parser.add_argument("--add", type=str, choices=sorted(DRINK_TYPES), help="Log one drink of this type")
    parser.add_argument("--oz", type=float, help="Serving size in fl oz (default: type default)")
    parser.add_argument("--abv", type=float, help="ABV percent (default: type default)")
    parser.add_argument("--limit", type=float, help="Set the drink limit (standard drinks)")
    parser.add_argument("--demo", action="store_true", help="Log a demo night (2 beers and a shot)")
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save history graph to FILE (e.g. history.png)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    store.init_db(args.db)
    tracker = DrinkTracker(args.db)

    if args.limit is not None:
        try:
            tracker.update_drink_limit(args.limit)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    if args.demo:
        tracker.add_drink("beer")
        tracker.add_drink("beer")
        tracker.add_drink("shot")
        print("Demo night: 2 beers and 1 shot logged")
    if args.add:
        try:
            drink = tracker.add_drink(args.add, volume_oz=args.oz, abv_percent=args.abv)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        print(f"Logged {drink.type}: {drink.standard_drinks:.2f} standard drinks, ~{drink.estimated_calories} kcal")

    snap = tracker.snapshot()
    print(f"Tonight: {snap['current_total']:.2f} of {snap['drink_limit']:g} standard drinks ({snap['safety_label']})")
    print(f"Count resets in {format_duration(tracker.time_until_reset())}")

    week = history_data(tracker, days=7)
    print("Last 7 nights: " + ", ".join(f"{day[5:]}={total:g}" for day, total in week))

    if args.graph:
        try:
            path = save_history_graph(tracker, output_path=args.graph)
            print(f"Graph saved: {path}")
        except ImportError:
            print("matplotlib not installed. pip install matplotlib", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
