"""
Calendar oracles: lunisolar -> Gregorian resolution and solar instant -> pillars.

The chart engine never does astronomy itself. It talks to a CalendarAdapter,
which has two pure operations:

- lunar_to_solar: resolve a (possibly intercalary) lunar date to a solar date
- solar_to_pillars: the four sexagenary pillars for a corrected instant

LunarCalendar answers both from the lunar_python tables. EphemerisCalendar
reads the month and year boundaries off the Sun's ecliptic longitude with
Swiss Ephemeris and counts stems with the Five Tigers / Five Rats rules.
"""

import logging
import os
from abc import ABC, abstractmethod
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional

import swisseph as swe
from lunar_python import Lunar, LunarYear, Solar

from wuxing.astro_calendar import CorrectedInstant
from wuxing.bazi import (
    Pillar,
    day_pillar,
    hour_pillar,
    month_pillar,
    pillar_from_chars,
    year_pillar,
)
from wuxing.errors import CalendarError, InputError

logger = logging.getLogger(__name__)

_DEFAULT_EPHE_PATH = str(Path(__file__).parent.parent / "ephe")

# Chinese calendar boundaries (solar terms, new moons) are reckoned in UTC+8.
CALENDAR_UTC_OFFSET = 8.0


class CalendarAdapter(ABC):
    """Oracle interface the chart pipeline depends on."""

    @abstractmethod
    def lunar_to_solar(self, year: int, month: int, day: int,
                       is_leap_month: bool = False) -> date:
        """
        Resolve a lunar date to its Gregorian equivalent.

        Raises:
            CalendarError: no such (leap) month in that lunar year, or the
                day is outside the month.
        """

    @abstractmethod
    def solar_to_pillars(self, instant: CorrectedInstant) -> tuple[Pillar, Pillar, Pillar, Pillar]:
        """Year, month, day and hour pillars for a corrected instant."""


# ============================================================
# LUNAR_PYTHON TABLES
# ============================================================

class LunarCalendar(CalendarAdapter):
    """Table-driven oracle backed by lunar_python."""

    def lunar_to_solar(self, year: int, month: int, day: int,
                       is_leap_month: bool = False) -> date:
        if not 1 <= month <= 12:
            raise CalendarError(f"Lunar month {month} out of range 1-12")
        if day < 1:
            raise CalendarError(f"Lunar day {day} out of range")

        try:
            lunar_year = LunarYear.fromYear(year)
        except Exception as exc:
            raise CalendarError(f"Lunar year {year} is not supported: {exc}") from exc

        # lunar_python marks intercalary months with a negative month number
        month_code = -month if is_leap_month else month
        lunar_month = lunar_year.getMonth(month_code)
        if lunar_month is None:
            if is_leap_month:
                leap = lunar_year.getLeapMonth()
                detail = f"its leap month is {leap}" if leap else "it has no leap month"
                raise CalendarError(f"Lunar year {year} has no leap month {month}; {detail}")
            raise CalendarError(f"Lunar year {year} has no month {month}")

        day_count = lunar_month.getDayCount()
        if day > day_count:
            kind = "leap month" if is_leap_month else "month"
            raise CalendarError(
                f"Lunar {kind} {month} of {year} has {day_count} days, got day {day}")

        try:
            solar = Lunar.fromYmd(year, month_code, day).getSolar()
        except Exception as exc:
            raise CalendarError(f"Cannot convert lunar date {year}-{month}-{day}: {exc}") from exc

        resolved = date(solar.getYear(), solar.getMonth(), solar.getDay())
        logger.debug("Lunar %d-%s%d-%d -> solar %s", year,
                     "leap " if is_leap_month else "", month, day, resolved.isoformat())
        return resolved

    def solar_to_pillars(self, instant: CorrectedInstant) -> tuple[Pillar, Pillar, Pillar, Pillar]:
        try:
            solar = Solar.fromYmdHms(instant.year, instant.month, instant.day,
                                     instant.hour, instant.minute, 0)
            eight_char = solar.getLunar().getEightChar()
            chars = (
                ("year", eight_char.getYearGan(), eight_char.getYearZhi()),
                ("month", eight_char.getMonthGan(), eight_char.getMonthZhi()),
                ("day", eight_char.getDayGan(), eight_char.getDayZhi()),
                ("hour", eight_char.getTimeGan(), eight_char.getTimeZhi()),
            )
        except Exception as exc:
            raise CalendarError(f"Cannot compute pillars for {instant}: {exc}") from exc

        return tuple(pillar_from_chars(position, stem, branch)
                     for position, stem, branch in chars)


# ============================================================
# SWISS EPHEMERIS SOLAR TERMS
# ============================================================

def _is_truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def initialize_swe_context(log: Optional[logging.Logger] = None) -> dict[str, Any]:
    """
    Point Swiss Ephemeris at its data files and report which backend answers.

    SWE_EPHE_PATH overrides the data directory. With SWE_REQUIRE_SWIEPH=1 a
    silent fallback to the Moshier analytic ephemeris is an error.
    """
    log = log or logger
    ephe_path = os.getenv("SWE_EPHE_PATH", _DEFAULT_EPHE_PATH)
    require_swieph = _is_truthy(os.getenv("SWE_REQUIRE_SWIEPH", "0"))
    swe.set_ephe_path(ephe_path)

    _, retflag = swe.calc_ut(swe.julday(2024, 1, 1, 0.0), swe.SUN, swe.FLG_SWIEPH)
    uses_moshier = bool(retflag & swe.FLG_MOSEPH)
    status = {
        "ephemeris_path": ephe_path,
        "ephemeris_backend": "moshier" if uses_moshier else "swieph",
        "require_swieph": require_swieph,
    }

    if uses_moshier:
        if require_swieph:
            raise CalendarError(
                "Swiss Ephemeris data files are not available. "
                f"Configured path: {ephe_path}.")
        log.warning("Swiss Ephemeris files not found at %s; using Moshier ephemeris", ephe_path)

    return status


def sun_longitude_to_month_branch_index(sun_lon: float) -> int:
    """
    Map Sun's ecliptic longitude to BaZi month branch index.

    Solar term Jie boundaries mark BaZi month transitions:
      315° (Li Chun)    → Yin (Tiger, index 2)
      345° (Jing Zhe)   → Mao (Rabbit, index 3)
       15° (Qing Ming)  → Chen (Dragon, index 4)
       45° (Li Xia)     → Si (Snake, index 5)
       75° (Mang Zhong) → Wu (Horse, index 6)
      105° (Xiao Shu)   → Wei (Goat, index 7)
      135° (Li Qiu)     → Shen (Monkey, index 8)
      165° (Bai Lu)     → You (Rooster, index 9)
      195° (Han Lu)     → Xu (Dog, index 10)
      225° (Li Dong)    → Hai (Pig, index 11)
      255° (Da Xue)     → Zi (Rat, index 0)
      285° (Xiao Han)   → Chou (Ox, index 1)
    """
    adjusted = (sun_lon - 315) % 360
    return (int(adjusted // 30) + 2) % 12


class EphemerisCalendar(CalendarAdapter):
    """
    Algorithmic oracle: pillars from the Sun's position.

    Lunar dates are still resolved through the lunar_python tables, since
    new-moon placement is a table lookup rather than a solar-term question.
    """

    def __init__(self, utc_offset: float = CALENDAR_UTC_OFFSET,
                 lunar: Optional[CalendarAdapter] = None):
        self.utc_offset = utc_offset
        self.lunar = lunar or LunarCalendar()
        self.status = initialize_swe_context()

    def lunar_to_solar(self, year: int, month: int, day: int,
                       is_leap_month: bool = False) -> date:
        return self.lunar.lunar_to_solar(year, month, day, is_leap_month)

    def sun_longitude(self, instant: CorrectedInstant) -> float:
        ut = instant.to_datetime() - timedelta(hours=self.utc_offset)
        jd = swe.julday(ut.year, ut.month, ut.day, ut.hour + ut.minute / 60.0)
        try:
            result, _ = swe.calc_ut(jd, swe.SUN, swe.FLG_SWIEPH)
        except swe.Error as exc:
            raise CalendarError(f"Sun position unavailable for {instant}: {exc}") from exc
        return result[0]

    def solar_to_pillars(self, instant: CorrectedInstant) -> tuple[Pillar, Pillar, Pillar, Pillar]:
        month_branch_index = sun_longitude_to_month_branch_index(self.sun_longitude(instant))

        # The year turns at Li Chun, so Zi/Chou months in Jan-Feb belong to
        # the previous year.
        effective_year = instant.year
        if instant.month <= 2 and month_branch_index in (0, 1):
            effective_year -= 1

        yp = year_pillar(effective_year)
        mp = month_pillar(yp.stem.index, month_branch_index)
        dp = day_pillar(int(swe.julday(instant.year, instant.month, instant.day, 12.0)))
        hp = hour_pillar(dp.stem.index, instant.hour)
        return yp, mp, dp, hp


CALENDARS = {
    "lunar": LunarCalendar,
    "ephemeris": EphemerisCalendar,
}


def get_calendar(name: str = "lunar") -> CalendarAdapter:
    """Instantiate a calendar oracle by name."""
    try:
        factory = CALENDARS[name]
    except KeyError:
        raise InputError(f"Unknown calendar {name!r}; choose from {', '.join(CALENDARS)}") from None
    return factory()
