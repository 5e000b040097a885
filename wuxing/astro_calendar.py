"""
Civil time parsing and true solar time correction.

China keeps a single clock based on the 120°E meridian. BaZi pillars are
read from the Sun's actual position, so the civil birth time is shifted by
the longitude offset from the standard meridian and by the Equation of Time
before the pillars are computed.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from wuxing.errors import InputError

logger = logging.getLogger(__name__)

STANDARD_MERIDIAN = 120.0
MINUTES_PER_DEGREE = 4.0

_DATE_RE = re.compile(r"^\s*(\d{1,4})-(\d{1,2})-(\d{1,2})\s*$")
_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")

_tf: Optional[TimezoneFinder] = None


@dataclass(frozen=True)
class CorrectedInstant:
    """Civil fields after true-solar-time adjustment, to the minute."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    longitude_offset: float  # minutes
    equation_of_time: float  # minutes

    @property
    def total_offset(self) -> float:
        return self.longitude_offset + self.equation_of_time

    def to_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute)

    def __str__(self):
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d}"


# ============================================================
# PARSING
# ============================================================

def parse_date_fields(value: Union[date, str]) -> tuple[int, int, int]:
    """
    Split a date into (year, month, day) without calendar validation.

    Lunar dates such as month 2 day 30 are legal, so range checks are left
    to whichever calendar interprets the fields.
    """
    if isinstance(value, date):
        return value.year, value.month, value.day
    if not isinstance(value, str):
        raise InputError(f"Birth date must be a date or 'YYYY-MM-DD' string, got {value!r}")
    match = _DATE_RE.match(value)
    if match is None:
        raise InputError(f"Malformed birth date {value!r}, expected YYYY-MM-DD")
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def parse_time_fields(value: Union[time, str]) -> tuple[int, int]:
    """Split a clock time into (hour, minute). Seconds are ignored."""
    if isinstance(value, time):
        return value.hour, value.minute
    if not isinstance(value, str):
        raise InputError(f"Birth time must be a time or 'HH:MM' string, got {value!r}")
    match = _TIME_RE.match(value)
    if match is None:
        raise InputError(f"Malformed birth time {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InputError(f"Birth time {value!r} out of range")
    return hour, minute


def parse_civil(birth_date: Union[date, str], birth_time: Union[time, str]) -> datetime:
    """
    Combine a Gregorian date and clock time into a naive datetime.

    Raises:
        InputError: if either string is malformed or the date does not exist.
    """
    year, month, day = parse_date_fields(birth_date)
    hour, minute = parse_time_fields(birth_time)
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError as exc:
        raise InputError(f"Invalid birth date {year:04d}-{month:02d}-{day:02d}: {exc}") from exc


def validate_longitude(longitude) -> float:
    try:
        longitude = float(longitude)
    except (TypeError, ValueError):
        raise InputError(f"Longitude must be a number, got {longitude!r}") from None
    if not -180.0 <= longitude <= 180.0:
        raise InputError(f"Longitude {longitude} outside [-180, 180]")
    return longitude


def validate_latitude(latitude) -> float:
    try:
        latitude = float(latitude)
    except (TypeError, ValueError):
        raise InputError(f"Latitude must be a number, got {latitude!r}") from None
    if not -90.0 <= latitude <= 90.0:
        raise InputError(f"Latitude {latitude} outside [-90, 90]")
    return latitude


# ============================================================
# TRUE SOLAR TIME
# ============================================================

def lmt_correction(longitude: float, standard_meridian: float = STANDARD_MERIDIAN) -> float:
    """
    Calculate Local Mean Time correction in minutes.

    Args:
        longitude: birth location longitude in degrees (east positive)
        standard_meridian: timezone standard meridian (120.0 for China/CST)

    Returns:
        Correction in minutes (negative = subtract from clock time)

    Example:
        Nanning (108.37°E): correction = (108.37 - 120.0) * 4 = -46.52 min
    """
    return (longitude - standard_meridian) * MINUTES_PER_DEGREE


def equation_of_time(day_of_year: int) -> float:
    """
    Approximate Equation of Time in minutes for a day of the year (1-366).

    Positive values mean the apparent Sun runs ahead of the mean Sun.
    """
    b = (2 * math.pi / 364.0) * (day_of_year - 81)
    return 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def true_solar_time(civil: datetime, longitude: float = STANDARD_MERIDIAN,
                    standard_meridian: float = STANDARD_MERIDIAN) -> CorrectedInstant:
    """
    Convert clock time to true (apparent) solar time.

    True Solar Time = clock time + longitude offset + Equation of Time.
    Minute, hour, day, month and year carries are left to datetime
    arithmetic.

    Args:
        civil: naive clock datetime at the standard meridian
        longitude: birth location longitude (east positive)
        standard_meridian: meridian the clock is set to

    Returns:
        CorrectedInstant truncated to the minute
    """
    longitude = validate_longitude(longitude)
    longitude_offset = lmt_correction(longitude, standard_meridian)
    eot = equation_of_time(civil.timetuple().tm_yday)
    try:
        shifted = civil + timedelta(minutes=longitude_offset + eot)
    except OverflowError as exc:
        raise InputError(f"Corrected time for {civil.isoformat()} is out of range") from exc

    logger.debug("True solar time for %s at %.4f°E: %+.2f min longitude, %+.2f min EoT -> %s",
                 civil.isoformat(), longitude, longitude_offset, eot, shifted.isoformat())

    return CorrectedInstant(
        year=shifted.year,
        month=shifted.month,
        day=shifted.day,
        hour=shifted.hour,
        minute=shifted.minute,
        longitude_offset=longitude_offset,
        equation_of_time=eot,
    )


# ============================================================
# TIMEZONE DETECTION
# ============================================================

def _finder() -> TimezoneFinder:
    global _tf
    if _tf is None:
        _tf = TimezoneFinder()
    return _tf


def standard_offset_for(latitude: float, longitude: float, civil: datetime) -> tuple[float, float, str]:
    """
    Determine the zone's standard UTC offset and any DST in force.

    Detects historical DST (e.g., China 1986-1991). BaZi works from
    standard time, so the DST shift is reported separately for the
    caller to strip.

    Returns:
        (standard_offset_hours, dst_minutes, timezone_name)
    """
    tz_name = _finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise InputError(f"Could not determine timezone for ({latitude}, {longitude})")

    local_dt = civil.replace(tzinfo=ZoneInfo(tz_name))
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst = local_dt.dst()
    dst_minutes = dst.total_seconds() / 60 if dst else 0.0
    standard_offset = clock_offset - dst_minutes / 60

    return standard_offset, dst_minutes, tz_name
