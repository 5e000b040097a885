"""Tests for element tally, support score, strength and the climate override."""

import pytest

from wuxing.balance import SupportScore, element_tally, support_score
from wuxing.bazi import BRANCH_BY_CHINESE, Element, pillar_from_chars
from wuxing.strength import Strength, classify_strength
from wuxing.useful_god import resolve_useful_god

W, F, E, M, A = Element.WOOD, Element.FIRE, Element.EARTH, Element.METAL, Element.WATER


def make_pillars(*pairs):
    return tuple(pillar_from_chars(position, pair[0], pair[1])
                 for position, pair in zip(("year", "month", "day", "hour"), pairs))


def resolve(pillars):
    pattern = classify_strength(support_score(pillars))
    return resolve_useful_god(pattern, pillars[1].branch)


# 2000-01-01 noon: Wu Earth Day Master in a Rat month
NEW_YEAR_2000 = make_pillars("己卯", "丙子", "戊午", "戊午")


# ============================================================
# TALLY
# ============================================================

def test_tally_counts_eight_characters():
    tally = element_tally(NEW_YEAR_2000)
    assert tally.total == 8
    assert [tally.count(e) for e in Element] == [1, 3, 3, 0, 1]


def test_tally_percentages_round_half_up():
    tally = element_tally(NEW_YEAR_2000)
    assert [tally.percentage(e) for e in Element] == [13, 38, 38, 0, 13]


def test_tally_serializes_with_labels():
    rows = element_tally(NEW_YEAR_2000).to_list()
    assert rows[0] == {"element": "Wood", "label": "木", "count": 1, "percentage": 13}
    assert [r["label"] for r in rows] == ["木", "火", "土", "金", "水"]


def test_single_element_chart():
    tally = element_tally(make_pillars("甲寅", "甲寅", "乙卯", "乙卯"))
    assert tally.count(W) == 8
    assert tally.percentage(W) == 100


# ============================================================
# SUPPORT SCORE
# ============================================================

def test_support_score_excludes_day_stem_and_weights_month_branch():
    score = support_score(NEW_YEAR_2000)
    assert score.day_master_element is E
    assert score.resource_element is F
    assert score.total_score == 100
    # 己 10 + 丙 10 + 午(day) 10 + 戊 10 + 午(hour) 10; 卯 and 子(40) do not help
    assert score.same_party_score == 50
    assert score.is_strong


def test_month_branch_weight_is_configurable():
    score = support_score(NEW_YEAR_2000, month_branch_weight=10)
    assert score.total_score == 70
    assert score.same_party_score == 50


def test_month_branch_alone_does_not_make_strong():
    # Only the month branch supports the Jia Day Master: 40/100
    pillars = make_pillars("庚申", "庚寅", "甲申", "庚午")
    score = support_score(pillars)
    assert score.same_party_score == 40
    assert not score.is_strong


@pytest.mark.parametrize("same, total, strong", [
    (45, 100, True),
    (9, 20, True),
    (44, 100, False),
    (46, 100, True),
])
def test_threshold_is_inclusive(same, total, strong):
    score = SupportScore(W, A, same_party_score=same, total_score=total)
    assert score.is_strong is strong


# ============================================================
# STRENGTH
# ============================================================

def test_strong_favors_other_party():
    pattern = classify_strength(SupportScore(E, F, 50, 100))
    assert pattern.strength is Strength.STRONG
    assert pattern.same_party == (E, F)
    assert pattern.favorable == (W, M, A)
    assert pattern.unfavorable == (E, F)


def test_weak_favors_same_party():
    pattern = classify_strength(SupportScore(A, M, 20, 100))
    assert pattern.strength is Strength.WEAK
    assert pattern.favorable == (A, M)
    assert pattern.unfavorable == (W, F, E)


# ============================================================
# CLIMATE OVERRIDE
# ============================================================

def test_winter_moves_fire_from_unfavorable_to_front():
    result = resolve(NEW_YEAR_2000)
    assert result.strength is Strength.STRONG
    assert result.favorable == (F, W, M, A)
    assert result.unfavorable == (E,)
    assert result.climate == "cold"
    assert result.pattern_label == "strong (favors Fire by climate)"


def test_summer_moves_water_from_unfavorable_to_front():
    # Strong Jia Wood in a Horse month: Water is Resource, so unfavorable
    pillars = make_pillars("甲寅", "庚午", "甲寅", "甲子")
    assert support_score(pillars).same_party_score == 50
    result = resolve(pillars)
    assert result.favorable == (A, F, E, M)
    assert result.unfavorable == (W,)
    assert result.pattern_label == "strong (favors Water by climate)"


def test_summer_water_already_favorable():
    pillars = make_pillars("丙午", "甲午", "壬寅", "丙午")
    result = resolve(pillars)
    assert result.strength is Strength.WEAK
    assert result.favorable == (A, M)
    assert result.unfavorable == (W, F, E)
    assert result.pattern_label == "weak (favors Water by climate)"


def test_summer_promotes_favorable_water_to_front():
    # Strong Geng Metal in a Goat month: Water is already favorable
    pillars = make_pillars("庚申", "癸未", "庚子", "壬午")
    result = resolve(pillars)
    assert result.strength is Strength.STRONG
    assert result.favorable == (A, W, F)
    assert result.unfavorable == (M, E)


def test_spring_month_has_no_override():
    pillars = make_pillars("甲寅", "丙寅", "甲子", "甲子")
    result = resolve(pillars)
    assert result.climate is None
    assert result.climate_note is None
    assert result.pattern_label == "strong"
    assert result.favorable == (F, E, M)
    assert result.unfavorable == (W, A)


@pytest.mark.parametrize("branch", ["亥", "子", "丑"])
def test_winter_branches_always_favor_fire(branch):
    for dm_stem in "甲丙戊庚壬":
        pattern = classify_strength(support_score(make_pillars("甲子", "丙" + branch, dm_stem + "子", "甲子")))
        result = resolve_useful_god(pattern, BRANCH_BY_CHINESE[branch])
        assert result.favorable[0] is F
        assert F not in result.unfavorable
        assert not set(result.favorable) & set(result.unfavorable)


@pytest.mark.parametrize("branch", ["巳", "午", "未"])
def test_summer_branches_always_favor_water(branch):
    for dm_stem in "乙丁己辛癸":
        pattern = classify_strength(support_score(make_pillars("丁巳", "乙" + branch, dm_stem + "巳", "丁巳")))
        result = resolve_useful_god(pattern, BRANCH_BY_CHINESE[branch])
        assert result.favorable[0] is A
        assert A not in result.unfavorable
        assert not set(result.favorable) & set(result.unfavorable)
