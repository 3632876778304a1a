"""
Progression - XP to level, level to theme and daily goal.

All functions are pure. The level table below is the single rule for
deriving a profile level; every XP mutation goes through level_for_xp().
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional


THEORY_BONUS_XP = 30
XP_PER_CORRECT_ANSWER = 10


@dataclass(frozen=True)
class LevelBand:
    level: int
    name: str
    min_xp: int
    max_xp: Optional[int]  # None for the top band


@dataclass(frozen=True)
class LevelTheme:
    """Visual token bundle (HSL components) applied for a level."""
    name: str
    primary: str
    primary_foreground: str
    accent: str
    ring: str


@dataclass(frozen=True)
class RoadmapEntry:
    band: LevelBand
    is_current: bool
    is_completed: bool
    is_future: bool


LEVEL_BANDS: tuple[LevelBand, ...] = (
    LevelBand(1, "Beginner", 0, 299),
    LevelBand(2, "Apprentice", 300, 799),
    LevelBand(3, "Explorer", 800, 1499),
    LevelBand(4, "Connoisseur", 1500, 2499),
    LevelBand(5, "Specialist", 2500, 3999),
    LevelBand(6, "Master", 4000, 9999),
    LevelBand(7, "Legendary", 10000, None),
)

MAX_LEVEL = LEVEL_BANDS[-1].level

_THRESHOLDS = [band.min_xp for band in LEVEL_BANDS]

LEVEL_THEMES: dict[int, LevelTheme] = {
    1: LevelTheme("sky", "199 89% 48%", "0 0% 100%", "199 89% 48%", "199 89% 48%"),
    2: LevelTheme("gold", "45 93% 47%", "0 0% 0%", "45 93% 47%", "45 93% 47%"),
    3: LevelTheme("navy", "217 91% 35%", "0 0% 100%", "217 91% 35%", "217 91% 35%"),
    4: LevelTheme("green", "142 76% 36%", "0 0% 100%", "142 76% 36%", "142 76% 36%"),
    5: LevelTheme("purple", "271 81% 56%", "0 0% 100%", "271 81% 56%", "271 81% 56%"),
    6: LevelTheme("red", "0 84% 60%", "0 0% 100%", "0 84% 60%", "0 84% 60%"),
    7: LevelTheme("black", "240 10% 4%", "0 0% 100%", "240 10% 4%", "240 10% 4%"),
}

DAILY_GOALS: dict[int, int] = {
    1: 50,
    2: 60,
    3: 70,
    4: 80,
    5: 90,
    6: 100,
    7: 150,
}

DEFAULT_DAILY_GOAL = 50


# -----------------------------------------------------------------------------
# Level / theme / goal
# -----------------------------------------------------------------------------

def level_for_xp(xp: int) -> int:
    """Highest level whose threshold is <= xp. Negative XP is level 1."""
    if xp < 0:
        return 1
    return bisect_right(_THRESHOLDS, xp)


def theme_for_level(level: int) -> LevelTheme:
    """Theme for a level; unknown levels use level 1's theme."""
    return LEVEL_THEMES.get(level, LEVEL_THEMES[1])


def daily_goal_for_level(level: int) -> int:
    return DAILY_GOALS.get(level, DEFAULT_DAILY_GOAL)


def progress_percentage(earned: int, goal: int) -> float:
    """
    Percentage of goal reached, clamped to [0, 100].

    A non-positive goal counts as already met.
    """
    if goal <= 0:
        return 100.0
    return max(0.0, min(100.0, earned / goal * 100))


# -----------------------------------------------------------------------------
# Roadmap
# -----------------------------------------------------------------------------

def level_band(level: int) -> LevelBand:
    if 1 <= level <= MAX_LEVEL:
        return LEVEL_BANDS[level - 1]
    return LEVEL_BANDS[0]


def next_level_band(level: int) -> Optional[LevelBand]:
    """Band after `level`, or None at the top."""
    if level >= MAX_LEVEL:
        return None
    return level_band(level + 1)


def progress_to_next_level(xp: int) -> float:
    """Percentage of the way through the current band (100 at max level)."""
    band = level_band(level_for_xp(xp))
    if band.max_xp is None:
        return 100.0
    span = band.max_xp - band.min_xp + 1
    return progress_percentage(xp - band.min_xp, span)


def xp_to_next_level(xp: int) -> int:
    band = level_band(level_for_xp(xp))
    if band.max_xp is None:
        return 0
    return band.max_xp + 1 - max(xp, 0)


def roadmap(xp: int) -> list[RoadmapEntry]:
    current = level_for_xp(xp)
    return [
        RoadmapEntry(
            band=band,
            is_current=band.level == current,
            is_completed=band.level < current,
            is_future=band.level > current,
        )
        for band in LEVEL_BANDS
    ]
