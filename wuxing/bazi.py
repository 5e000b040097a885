"""
Stems, branches, and their Five Element classification.

Handles:
- The 10 Heavenly Stems and 12 Earthly Branches as immutable records
- Character -> element lookup (the ElementClassifier)
- The generating (production) cycle and Resource lookup
- Pillar records and the sexagenary arithmetic that builds them
  (Five Tigers for month stems, Five Rats for hour stems)

Everything here is static data or a pure function of its arguments.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    # Declared in generating-cycle order.
    WOOD = "Wood"
    FIRE = "Fire"
    EARTH = "Earth"
    METAL = "Metal"
    WATER = "Water"

    @property
    def label(self) -> str:
        return ELEMENT_LABELS[self]


ELEMENT_LABELS = MappingProxyType({
    Element.WOOD: "木",
    Element.FIRE: "火",
    Element.EARTH: "土",
    Element.METAL: "金",
    Element.WATER: "水",
})


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element
    polarity: Polarity
    index: int  # 0-11 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.animal})"


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11),
)

# Lookup helpers
STEM_BY_CHINESE = MappingProxyType({s.chinese: s for s in HEAVENLY_STEMS})
BRANCH_BY_CHINESE = MappingProxyType({b.chinese: b for b in EARTHLY_BRANCHES})
BRANCH_BY_PINYIN = MappingProxyType({b.pinyin: b for b in EARTHLY_BRANCHES})

_ELEMENT_BY_CHAR = MappingProxyType({
    **{s.chinese: s.element for s in HEAVENLY_STEMS},
    **{b.chinese: b.element for b in EARTHLY_BRANCHES},
})


def element_of(char: str) -> Element:
    """Classify a stem or branch character into its element."""
    try:
        return _ELEMENT_BY_CHAR[char]
    except KeyError:
        raise KeyError(f"Not a heavenly stem or earthly branch: {char!r}") from None


# ============================================================
# GENERATING CYCLE
# ============================================================

# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = MappingProxyType({
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
})

_RESOURCE_OF = MappingProxyType({produced: producer
                                 for producer, produced in PRODUCTION_CYCLE.items()})


def resource_of(element: Element) -> Element:
    """The element that generates `element` (its Resource)."""
    return _RESOURCE_OF[element]


# ============================================================
# PILLARS
# ============================================================

POSITIONS = ("year", "month", "day", "hour")

POSITION_LABELS = MappingProxyType({
    "year": "年柱",
    "month": "月柱",
    "day": "日柱",
    "hour": "时柱",
})


@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    @property
    def stem_char(self) -> str:
        return self.stem.chinese

    @property
    def branch_char(self) -> str:
        return self.branch.chinese

    @property
    def stem_element(self) -> Element:
        return self.stem.element

    @property
    def branch_element(self) -> Element:
        return self.branch.element

    @property
    def label(self) -> str:
        return POSITION_LABELS[self.position]

    def __str__(self):
        return f"{self.stem.pinyin} {self.branch.pinyin} ({self.stem.polarity.value} {self.stem.element.value} {self.branch.animal})"

    def to_dict(self):
        return {
            "position": self.position,
            "name": self.label,
            "stem": {
                "chinese": self.stem.chinese,
                "pinyin": self.stem.pinyin,
                "element": self.stem.element.value,
                "polarity": self.stem.polarity.value,
            },
            "branch": {
                "chinese": self.branch.chinese,
                "pinyin": self.branch.pinyin,
                "animal": self.branch.animal,
                "element": self.branch.element.value,
                "polarity": self.branch.polarity.value,
            },
            "combined": f"{self.stem.chinese}{self.branch.chinese}",
            "description": str(self),
        }


def pillar_from_chars(position: str, stem_char: str, branch_char: str) -> Pillar:
    """Build a pillar from its two Chinese characters."""
    try:
        stem = STEM_BY_CHINESE[stem_char]
        branch = BRANCH_BY_CHINESE[branch_char]
    except KeyError as exc:
        raise KeyError(f"Invalid {position} pillar {stem_char}{branch_char}") from exc
    return Pillar(stem=stem, branch=branch, position=position)


# ============================================================
# SEXAGENARY ARITHMETIC
# ============================================================

# Five Tigers Escape: year stem -> stem of the Tiger (寅) month
_TIGER_START_STEMS = MappingProxyType({
    0: 2, 5: 2,   # Jia/Ji year → Bing Tiger
    1: 4, 6: 4,   # Yi/Geng year → Wu Tiger
    2: 6, 7: 6,   # Bing/Xin year → Geng Tiger
    3: 8, 8: 8,   # Ding/Ren year → Ren Tiger
    4: 0, 9: 0,   # Wu/Gui year → Jia Tiger
})

# Five Rats Escape: day stem -> stem of the Rat (子) hour
_RAT_START_STEMS = MappingProxyType({
    0: 0, 5: 0,   # Jia/Ji day → Jia Zi hour
    1: 2, 6: 2,   # Yi/Geng day → Bing Zi hour
    2: 4, 7: 4,   # Bing/Xin day → Wu Zi hour
    3: 6, 8: 6,   # Ding/Ren day → Geng Zi hour
    4: 8, 9: 8,   # Wu/Gui day → Ren Zi hour
})

# (JDN + offset) % 60 is the sexagenary day index, 0 = Jia Zi.
# 1949-10-01 (JDN 2433191) is a Jia Zi day.
JDN_SEXAGENARY_OFFSET = 49


def year_pillar(effective_year: int) -> Pillar:
    """
    Year pillar for a solar-term year.

    `effective_year` is the Gregorian year whose Li Chun has already
    passed; callers born before Li Chun pass the previous year.
    Year 4 CE was Jia Zi, the start of the cycle.
    """
    return Pillar(
        stem=HEAVENLY_STEMS[(effective_year - 4) % 10],
        branch=EARTHLY_BRANCHES[(effective_year - 4) % 12],
        position="year",
    )


def month_pillar(year_stem_index: int, month_branch_index: int) -> Pillar:
    """
    Month pillar via the Five Tigers Escape (Wu Hu Dun) rule.

    The branch comes from the solar term; the stem counts forward from the
    Tiger-month stem fixed by the year stem.
    """
    start_stem = _TIGER_START_STEMS[year_stem_index]
    months_from_tiger = (month_branch_index - 2) % 12
    return Pillar(
        stem=HEAVENLY_STEMS[(start_stem + months_from_tiger) % 10],
        branch=EARTHLY_BRANCHES[month_branch_index],
        position="month",
    )


def day_pillar(jdn: int) -> Pillar:
    """Day pillar from a Julian Day Number (noon-based integer day)."""
    sexagenary = (jdn + JDN_SEXAGENARY_OFFSET) % 60
    return Pillar(
        stem=HEAVENLY_STEMS[sexagenary % 10],
        branch=EARTHLY_BRANCHES[sexagenary % 12],
        position="day",
    )


def hour_branch_index(hour: int) -> int:
    """
    Two-hour block branch, anchored at 23:00.

    23:00-00:59 = Zi (0), 01:00-02:59 = Chou (1), ... 21:00-22:59 = Hai (11)
    """
    return ((hour + 1) // 2) % 12


def hour_pillar(day_stem_index: int, hour: int) -> Pillar:
    """
    Hour pillar via the Five Rats Escape (Wu Shu Dun) rule.

    The late Zi hour (23:00-23:59) already belongs to the next day's Rat
    cycle, so its stem is counted from the following day stem while the
    day pillar itself is left unchanged.
    """
    branch_index = hour_branch_index(hour)
    if hour == 23:
        day_stem_index = (day_stem_index + 1) % 10
    start_stem = _RAT_START_STEMS[day_stem_index]
    return Pillar(
        stem=HEAVENLY_STEMS[(start_stem + branch_index) % 10],
        branch=EARTHLY_BRANCHES[branch_index],
        position="hour",
    )
