#!/usr/bin/env python3
"""
weightwatch CLI entry point
Runs the web app, or records / shows / charts weights from the shell.
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from weightwatch.config import load_settings
from weightwatch.domains import weight as weight_domain
from weightwatch.errors import WeightWatchError

# ---------------- Helper functions -----------------

def print_weight_table(rows):
    if not rows:
        print("No weight records found.")
        return
    print(f"{'Date':<12} {'Weight':>8}")
    for m in rows:
        print(f"{m.date.isoformat():<12} {format(m.value, 'f'):>8}")


def newest(items, limit):
    if limit is None:
        return items
    return items[-limit:] if limit > 0 else []


def print_averages(title, averages, limit=None):
    print(f"Date         {title}")
    for d, val in newest(sorted(averages.items()), limit):
        print(f"{d.isoformat():<12} {val:>8.2f}")


def build_parser():
    ap = argparse.ArgumentParser(prog="weightwatch")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--data-file", help="Path to the measurements file")
    ap.add_argument("--output", dest="output_image", help="Path of the chart PNG")
    sub = ap.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the web app")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)

    add = sub.add_parser("add", help="Record a weight")
    add.add_argument("value")
    add.add_argument("--date", help="Date of the measurement (default: today)")

    show = sub.add_parser("show", help="List recorded weights")
    show.add_argument("--limit", type=int, help="Only the newest N entries (days, for daily/maN)")
    show.add_argument("--format", choices=["raw", "daily", "ma3", "ma5", "ma7"], default="raw")

    sub.add_parser("render", help="Regenerate the chart image")
    return ap

# ---------------- Main -----------------

def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {"data_file": args.data_file, "output_image": args.output_image}
    if args.command == "serve":
        overrides.update(host=args.host, port=args.port)
    try:
        settings = load_settings(**overrides)
    except ValidationError as e:
        print(f"ERROR: bad configuration: {e}", file=sys.stderr)
        return 1
    service = weight_domain.WeightService(settings)

    try:
        if args.command == "serve":
            from weightwatch.web import create_app
            app = create_app(settings, service)
            app.run(host=settings.host, port=settings.port, threaded=True)
        elif args.command == "add":
            m = service.add(args.value, args.date)
            print(f"✔ weight added: {format(m.value, 'f')} @ {m.date.isoformat()}")
        elif args.command == "show":
            rows = service.list_weights()
            if args.format == "daily":
                print_averages("Daily Avg", weight_domain.daily_averages(rows), args.limit)
            elif args.format.startswith("ma"):
                window = int(args.format[2:])
                print_averages(f"{window}-day MA", weight_domain.daily_moving_average(rows, window), args.limit)
            else:
                print_weight_table(newest(rows, args.limit))
        elif args.command == "render":
            path = service.render_chart()
            print(f"Wrote: {path}")
    except WeightWatchError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
