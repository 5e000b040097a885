"""
Natal chart pipeline.

BirthRecord -> [lunar -> solar] -> true solar time -> pillars
            -> element tally + support score -> strength -> useful god

This is the main entry point for the display and narrative layers. It
COMPUTES; it does not interpret. Every stage either succeeds or raises a
ChartError, and no partial result is ever returned.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

from wuxing.astro_calendar import (
    STANDARD_MERIDIAN,
    CorrectedInstant,
    parse_civil,
    parse_date_fields,
    parse_time_fields,
    standard_offset_for,
    true_solar_time,
    validate_latitude,
    validate_longitude,
)
from wuxing.balance import ElementTally, SupportScore, element_tally, support_score
from wuxing.bazi import Element, HeavenlyStem, Pillar
from wuxing.calendars import CalendarAdapter, LunarCalendar
from wuxing.errors import InputError
from wuxing.strength import classify_strength
from wuxing.useful_god import UsefulGodResult, resolve_useful_god

logger = logging.getLogger(__name__)


class CalendarSystem(Enum):
    SOLAR = "solar"
    LUNAR = "lunar"


@dataclass(frozen=True)
class BirthRecord:
    """
    Birth data as entered.

    birth_date is Gregorian for solar records and the lunar
    year-month-day for lunar ones. latitude is optional; when present the
    local time zone (and any DST in force) is detected from the
    coordinates instead of assuming the 120°E meridian.
    """

    birth_date: Union[date, str]
    birth_time: Union[time, str]
    calendar: Union[CalendarSystem, str] = CalendarSystem.SOLAR
    is_leap_month: bool = False
    longitude: float = STANDARD_MERIDIAN
    latitude: Optional[float] = None


@dataclass(frozen=True)
class ChartResult:
    record: BirthRecord
    civil: datetime  # solar clock time fed to the correction
    corrected: CorrectedInstant
    pillars: tuple[Pillar, Pillar, Pillar, Pillar]
    tally: ElementTally
    support: SupportScore
    useful_god: UsefulGodResult
    standard_meridian: float = STANDARD_MERIDIAN
    timezone: Optional[str] = None

    @property
    def day_master(self) -> HeavenlyStem:
        return self.pillars[2].stem

    @property
    def day_master_element(self) -> Element:
        return self.day_master.element

    @property
    def pattern_label(self) -> str:
        return self.useful_god.pattern_label

    @property
    def favorable_elements(self) -> tuple[Element, ...]:
        return self.useful_god.favorable

    @property
    def unfavorable_elements(self) -> tuple[Element, ...]:
        return self.useful_god.unfavorable

    @property
    def zodiac_animal(self) -> str:
        return self.pillars[0].branch.animal

    def to_dict(self):
        return {
            "solar_time": {
                "civil": self.civil.strftime("%Y-%m-%d %H:%M"),
                "corrected": str(self.corrected),
                "corrected_time": f"{self.corrected.hour:02d}:{self.corrected.minute:02d}",
                "longitude_offset_minutes": round(self.corrected.longitude_offset, 2),
                "equation_of_time_minutes": round(self.corrected.equation_of_time, 2),
                "standard_meridian": self.standard_meridian,
                "timezone": self.timezone,
            },
            "pillars": [p.to_dict() for p in self.pillars],
            "five_elements": self.tally.to_list(),
            "day_master": {
                "chinese": self.day_master.chinese,
                "pinyin": self.day_master.pinyin,
                "element": self.day_master_element.value,
                "polarity": self.day_master.polarity.value,
                "description": str(self.day_master),
            },
            "zodiac_animal": self.zodiac_animal,
            "support": self.support.to_dict(),
            **self.useful_god.to_dict(),
        }


def _calendar_system(value: Union[CalendarSystem, str]) -> CalendarSystem:
    if isinstance(value, CalendarSystem):
        return value
    try:
        return CalendarSystem(str(value).lower())
    except ValueError:
        raise InputError(f"Unknown calendar system {value!r}, expected 'solar' or 'lunar'") from None


def resolve_civil(record: BirthRecord, calendar: CalendarAdapter) -> datetime:
    """Gregorian clock datetime for a birth record, resolving lunar dates."""
    system = _calendar_system(record.calendar)

    if system is CalendarSystem.SOLAR:
        if record.is_leap_month:
            raise InputError("Leap-month flag only applies to lunar dates")
        return parse_civil(record.birth_date, record.birth_time)

    year, month, day = parse_date_fields(record.birth_date)
    hour, minute = parse_time_fields(record.birth_time)
    solar = calendar.lunar_to_solar(year, month, day, record.is_leap_month)
    return datetime(solar.year, solar.month, solar.day, hour, minute)


def compute_chart(record: BirthRecord, calendar: Optional[CalendarAdapter] = None) -> ChartResult:
    """
    Compute a full chart from birth data.

    Args:
        record: birth data
        calendar: oracle for lunar dates and pillars (lunar_python tables
            by default)

    Returns:
        ChartResult with pillars, element tally, support score, and the
        favorable/unfavorable split

    Raises:
        InputError: malformed date/time or coordinates
        CalendarError: lunar date does not exist, or the oracle failed
    """
    calendar = calendar or LunarCalendar()

    civil = resolve_civil(record, calendar)
    longitude = validate_longitude(record.longitude)

    standard_meridian = STANDARD_MERIDIAN
    tz_name = None
    if record.latitude is not None:
        latitude = validate_latitude(record.latitude)
        standard_offset, dst_minutes, tz_name = standard_offset_for(latitude, longitude, civil)
        standard_meridian = standard_offset * 15
        if dst_minutes:
            # BaZi works from standard time; strip daylight saving first
            civil = civil - timedelta(minutes=dst_minutes)
            logger.debug("Stripped %.0f min DST (%s)", dst_minutes, tz_name)

    corrected = true_solar_time(civil, longitude, standard_meridian)
    pillars = calendar.solar_to_pillars(corrected)
    logger.debug("Pillars: %s", " ".join(f"{p.stem_char}{p.branch_char}" for p in pillars))

    tally = element_tally(pillars)
    support = support_score(pillars)
    pattern = classify_strength(support)
    useful_god = resolve_useful_god(pattern, pillars[1].branch)
    logger.debug("Pattern %s, favorable %s", useful_god.pattern_label,
                 [e.value for e in useful_god.favorable])

    return ChartResult(
        record=record,
        civil=civil,
        corrected=corrected,
        pillars=pillars,
        tally=tally,
        support=support,
        useful_god=useful_god,
        standard_meridian=standard_meridian,
        timezone=tz_name,
    )
