"""
CLI wrapper for compute_chart().

Usage:
    wuxing-chart --birth-date YYYY-MM-DD --birth-time HH:MM \
        [--lunar [--leap-month]] [--longitude LON] [--latitude LAT] \
        [--calendar lunar|ephemeris] [--verbose]
"""

import argparse
import json
import logging
import sys

from wuxing.astro_calendar import STANDARD_MERIDIAN
from wuxing.calendars import CALENDARS, get_calendar
from wuxing.chart import BirthRecord, CalendarSystem, compute_chart
from wuxing.errors import ChartError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute a four-pillar chart and its element balance.")
    parser.add_argument("--birth-date", required=True, dest="birth_date",
                        help="YYYY-MM-DD (lunar year-month-day with --lunar)")
    parser.add_argument("--birth-time", required=True, dest="birth_time", help="HH:MM clock time")
    parser.add_argument("--lunar", action="store_true", help="birth date is a lunar date")
    parser.add_argument("--leap-month", action="store_true", dest="leap_month",
                        help="lunar month is the intercalary month")
    parser.add_argument("--longitude", type=float, default=STANDARD_MERIDIAN)
    parser.add_argument("--latitude", type=float, default=None,
                        help="enables time zone and DST detection")
    parser.add_argument("--calendar", default="lunar", choices=sorted(CALENDARS))
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    record = BirthRecord(
        birth_date=args.birth_date,
        birth_time=args.birth_time,
        calendar=CalendarSystem.LUNAR if args.lunar else CalendarSystem.SOLAR,
        is_leap_month=args.leap_month,
        longitude=args.longitude,
        latitude=args.latitude,
    )

    try:
        result = compute_chart(record, get_calendar(args.calendar))
    except ChartError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
