"""
Five Element balance statistics for a set of four pillars.

Two numbers come out of the same chart and must not be mixed up:

- element_tally: an unweighted count of the eight visible characters,
  for display.
- support_score: a weighted score of how much of the chart backs the
  Day Master, for strength classification. The month branch carries the
  season and counts four times as much as any other slot; the Day Master
  itself is left out.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from wuxing.bazi import Element, Pillar, resource_of

logger = logging.getLogger(__name__)

SLOT_WEIGHT = 10
MONTH_BRANCH_WEIGHT = 40
STRONG_THRESHOLD = 0.45

TOTAL_SLOTS = 8


# ============================================================
# UNWEIGHTED TALLY
# ============================================================

@dataclass(frozen=True)
class ElementCount:
    element: Element
    count: int
    percentage: int

    @property
    def label(self) -> str:
        return self.element.label

    def to_dict(self):
        return {
            "element": self.element.value,
            "label": self.label,
            "count": self.count,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class ElementTally:
    counts: tuple[ElementCount, ...]  # one per element, in Element order

    def count(self, element: Element) -> int:
        return self[element].count

    def percentage(self, element: Element) -> int:
        return self[element].percentage

    @property
    def total(self) -> int:
        return sum(c.count for c in self.counts)

    def __getitem__(self, element: Element) -> ElementCount:
        for entry in self.counts:
            if entry.element is element:
                return entry
        raise KeyError(element)

    def __iter__(self):
        return iter(self.counts)

    def to_list(self) -> list[dict]:
        return [c.to_dict() for c in self.counts]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def element_tally(pillars: Sequence[Pillar]) -> ElementTally:
    """
    Count one element per stem and per branch across the four pillars.

    Percentages are count / 8 rounded half up, so they need not sum to 100.
    """
    counts = {e: 0 for e in Element}
    for pillar in pillars:
        counts[pillar.stem_element] += 1
        counts[pillar.branch_element] += 1

    return ElementTally(tuple(
        ElementCount(element=e, count=n, percentage=_round_half_up(n / TOTAL_SLOTS * 100))
        for e, n in counts.items()
    ))


# ============================================================
# WEIGHTED SUPPORT SCORE
# ============================================================

@dataclass(frozen=True)
class SupportScore:
    day_master_element: Element
    resource_element: Element
    same_party_score: int
    total_score: int
    threshold: float = STRONG_THRESHOLD

    @property
    def ratio(self) -> float:
        return self.same_party_score / self.total_score

    @property
    def is_strong(self) -> bool:
        # Inclusive boundary: exactly 45% is strong.
        return self.ratio >= self.threshold

    def to_dict(self):
        return {
            "day_master_element": self.day_master_element.value,
            "resource_element": self.resource_element.value,
            "same_party_score": self.same_party_score,
            "total_score": self.total_score,
            "ratio": round(self.ratio, 4),
            "is_strong": self.is_strong,
        }


def support_score(pillars: Sequence[Pillar],
                  slot_weight: int = SLOT_WEIGHT,
                  month_branch_weight: int = MONTH_BRANCH_WEIGHT,
                  threshold: float = STRONG_THRESHOLD) -> SupportScore:
    """
    Weighted share of the chart that belongs to the Day Master's party.

    Every visible character except the Day stem is a slot. The month
    branch weighs `month_branch_weight`, all others `slot_weight`. A slot
    is on the same party when its element is the Day Master's element or
    the Resource that generates it.

    Args:
        pillars: year, month, day, hour pillars in that order
    """
    by_position = {p.position: p for p in pillars}
    day_master_element = by_position["day"].stem_element
    resource_element = resource_of(day_master_element)
    same_party = {day_master_element, resource_element}

    same_party_score = 0
    total_score = 0
    for pillar in pillars:
        slots = [(pillar.branch_element,
                  month_branch_weight if pillar.position == "month" else slot_weight)]
        if pillar.position != "day":
            slots.append((pillar.stem_element, slot_weight))

        for element, weight in slots:
            total_score += weight
            if element in same_party:
                same_party_score += weight

    score = SupportScore(
        day_master_element=day_master_element,
        resource_element=resource_element,
        same_party_score=same_party_score,
        total_score=total_score,
        threshold=threshold,
    )
    logger.debug("Support score for %s Day Master: %d/%d (%.2f)",
                 day_master_element.value, same_party_score, total_score, score.ratio)
    return score
