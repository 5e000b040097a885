"""Strong/weak classification of the Day Master and the resulting element split."""

from dataclasses import dataclass
from enum import Enum

from wuxing.balance import SupportScore
from wuxing.bazi import Element


class Strength(Enum):
    STRONG = "strong"
    WEAK = "weak"


@dataclass(frozen=True)
class StrengthPattern:
    strength: Strength
    same_party: tuple[Element, ...]   # Day Master element, then its Resource
    other_party: tuple[Element, ...]  # the remaining three, in cycle order
    favorable: tuple[Element, ...]
    unfavorable: tuple[Element, ...]


def classify_strength(score: SupportScore) -> StrengthPattern:
    """
    A strong Day Master wants to be drained, a weak one wants support.

    strong: favorable = other party, unfavorable = same party
    weak:   favorable = same party,  unfavorable = other party
    """
    same_party = (score.day_master_element, score.resource_element)
    other_party = tuple(e for e in Element if e not in same_party)

    if score.is_strong:
        return StrengthPattern(Strength.STRONG, same_party, other_party,
                               favorable=other_party, unfavorable=same_party)
    return StrengthPattern(Strength.WEAK, same_party, other_party,
                           favorable=same_party, unfavorable=other_party)
