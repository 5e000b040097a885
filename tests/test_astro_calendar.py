"""Tests for civil time parsing and true solar time correction."""

from datetime import date, datetime, time

import pytest

from wuxing.astro_calendar import (
    equation_of_time,
    lmt_correction,
    parse_civil,
    parse_date_fields,
    parse_time_fields,
    standard_offset_for,
    true_solar_time,
)
from wuxing.errors import InputError


def test_no_longitude_offset_on_standard_meridian():
    assert lmt_correction(120.0) == 0.0


def test_lmt_correction_nanning():
    assert lmt_correction(108.37) == pytest.approx(-46.52)


def test_longitude_offset_strictly_increases():
    longitudes = [73.5, 100.0, 119.99, 120.0, 120.01, 135.0]
    offsets = [lmt_correction(lon) for lon in longitudes]
    assert offsets == sorted(offsets)
    assert len(set(offsets)) == len(offsets)


def test_equation_of_time_new_year():
    assert equation_of_time(1) == pytest.approx(-3.607, abs=0.01)


def test_new_year_noon_shifts_only_by_equation_of_time():
    civil = datetime(2000, 1, 1, 12, 0)
    corrected = true_solar_time(civil, 120.0)
    assert corrected.longitude_offset == 0.0
    assert corrected.equation_of_time == equation_of_time(1)
    assert corrected.total_offset == corrected.equation_of_time
    assert (corrected.hour, corrected.minute) == (11, 56)
    assert str(corrected) == "2000-01-01 11:56"


def test_correction_rolls_over_into_next_year():
    corrected = true_solar_time(datetime(2000, 12, 31, 23, 59), 135.0)
    assert (corrected.year, corrected.month, corrected.day, corrected.hour) == (2001, 1, 1, 0)


def test_correction_rolls_back_into_previous_year():
    corrected = true_solar_time(datetime(2000, 1, 1, 0, 10), 100.0)
    assert (corrected.year, corrected.month, corrected.day, corrected.hour) == (1999, 12, 31, 22)


def test_corrected_instant_round_trips_to_datetime():
    corrected = true_solar_time(datetime(2010, 6, 15, 8, 30), 116.4)
    assert corrected.to_datetime() == datetime(
        corrected.year, corrected.month, corrected.day, corrected.hour, corrected.minute)


@pytest.mark.parametrize("longitude", [180.5, -181, float("nan"), "east"])
def test_implausible_longitude_rejected(longitude):
    with pytest.raises(InputError):
        true_solar_time(datetime(2000, 1, 1, 12, 0), longitude)


def test_parse_civil_accepts_strings_and_objects():
    assert parse_civil("1990-03-15", "10:30") == datetime(1990, 3, 15, 10, 30)
    assert parse_civil(date(1990, 3, 15), time(10, 30)) == datetime(1990, 3, 15, 10, 30)
    assert parse_civil("1990-3-5", "7:05:59") == datetime(1990, 3, 5, 7, 5)


@pytest.mark.parametrize("birth_date, birth_time", [
    ("2000/01/01", "12:00"),
    ("2000-01-01", "12-00"),
    ("2000-01-01", "24:00"),
    ("2000-01-01", "12:60"),
    ("2001-02-29", "12:00"),
    ("", "12:00"),
    (20000101, "12:00"),
])
def test_parse_civil_rejects_malformed(birth_date, birth_time):
    with pytest.raises(InputError):
        parse_civil(birth_date, birth_time)


def test_lunar_style_fields_are_not_calendar_checked():
    assert parse_date_fields("2020-02-30") == (2020, 2, 30)
    assert parse_time_fields("23:15") == (23, 15)


def test_standard_offset_strips_china_summer_time():
    standard, dst_minutes, tz_name = standard_offset_for(31.23, 121.47, datetime(1988, 7, 1, 12, 0))
    assert tz_name == "Asia/Shanghai"
    assert standard == pytest.approx(8.0)
    assert dst_minutes == pytest.approx(60.0)


def test_standard_offset_without_dst():
    standard, dst_minutes, _ = standard_offset_for(31.23, 121.47, datetime(2000, 7, 1, 12, 0))
    assert standard == pytest.approx(8.0)
    assert dst_minutes == 0.0
