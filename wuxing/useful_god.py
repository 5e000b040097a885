"""
Useful God (Yong Shen) resolution with the seasonal climate override (Tiao Hou).

The strength split decides favorable and unfavorable elements, but a chart
born in deep winter or high summer is first of all too cold or too hot.
For those months the warming (Fire) or cooling (Water) element is always
favorable, ahead of anything the strength rule picked.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from wuxing.bazi import EarthlyBranch, Element
from wuxing.strength import Strength, StrengthPattern

logger = logging.getLogger(__name__)

WINTER_BRANCHES = frozenset({"亥", "子", "丑"})
SUMMER_BRANCHES = frozenset({"巳", "午", "未"})


@dataclass(frozen=True)
class UsefulGodResult:
    strength: Strength
    favorable: tuple[Element, ...]  # climate element first when an override applied
    unfavorable: tuple[Element, ...]
    climate: Optional[str] = None  # "cold" or "hot"
    climate_element: Optional[Element] = None

    @property
    def climate_note(self) -> Optional[str]:
        if self.climate_element is None:
            return None
        return f"favors {self.climate_element.value} by climate"

    @property
    def pattern_label(self) -> str:
        if self.climate_note is None:
            return self.strength.value
        return f"{self.strength.value} ({self.climate_note})"

    def to_dict(self):
        return {
            "pattern": self.pattern_label,
            "strength": self.strength.value,
            "climate": self.climate,
            "favorable_elements": [e.value for e in self.favorable],
            "unfavorable_elements": [e.value for e in self.unfavorable],
            "favorable_labels": [e.label for e in self.favorable],
            "unfavorable_labels": [e.label for e in self.unfavorable],
        }


def climate_of(month_branch: EarthlyBranch) -> tuple[Optional[str], Optional[Element]]:
    """Which element the birth season calls for, if any."""
    if month_branch.chinese in WINTER_BRANCHES:
        return "cold", Element.FIRE
    if month_branch.chinese in SUMMER_BRANCHES:
        return "hot", Element.WATER
    return None, None


def resolve_useful_god(pattern: StrengthPattern, month_branch: EarthlyBranch) -> UsefulGodResult:
    """
    Apply the climate override to a strength split.

    The climate element is moved to the front of the favorable list
    (inserted if the strength rule did not pick it) and dropped from the
    unfavorable list. No other element moves.
    """
    climate, element = climate_of(month_branch)
    if element is None:
        return UsefulGodResult(pattern.strength, pattern.favorable, pattern.unfavorable)

    favorable = (element,) + tuple(e for e in pattern.favorable if e is not element)
    unfavorable = tuple(e for e in pattern.unfavorable if e is not element)

    if element not in pattern.favorable:
        logger.debug("%s month branch %s: moving %s to favorable",
                     climate.capitalize(), month_branch.chinese, element.value)

    return UsefulGodResult(pattern.strength, favorable, unfavorable,
                           climate=climate, climate_element=element)
