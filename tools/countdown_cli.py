#!/usr/bin/env python3
# tools/countdown_cli.py
"""
Nedtelling i terminalen med samme motor som web-demoen.
Eksempler:
  python tools/countdown_cli.py --seconds 90
  python tools/countdown_cli.py --at 2030-01-01T00:00:00 --format "Igjen: %s"
"""
from __future__ import annotations
import argparse
import sys
import threading

from chronometer.chronometer import CountdownChronometer
from chronometer.countdown import _now_ms, target_ms_from_iso


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Tell ned til et tidspunkt.")
    group = ap.add_mutually_exclusive_group(required=True)
    group.add_argument("--seconds", type=int, help="sekunder fra nå")
    group.add_argument("--at", help="ISO-tidspunkt (naiv = lokal TZ)")
    ap.add_argument("--format", default=None, help='ytre mal, f.eks. "Igjen: %%s"')
    ap.add_argument("--custom-format", default=None, help="layout-mal for nivået")
    ap.add_argument("--message", default="We have lift off!", help="tekst når ferdig")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.at:
        try:
            target = target_ms_from_iso(args.at)
        except ValueError as e:
            print(f"Ugyldig --at: {e}", file=sys.stderr)
            return 2
    else:
        target = _now_ms() + args.seconds * 1000

    done = threading.Event()
    chrono = CountdownChronometer(target)
    chrono.format = args.format
    chrono.custom_format = args.custom_format
    chrono.on_tick = lambda c: print(f"\r{c.text}   ", end="", flush=True)

    def complete(c: CountdownChronometer) -> None:
        print(f"\r{c.text}   \n{args.message}", flush=True)
        done.set()

    chrono.on_complete = complete
    chrono.start()
    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        print()
        return 130
    finally:
        chrono.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
