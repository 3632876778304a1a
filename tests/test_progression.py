"""Tests for XP/level/theme/daily-goal rules."""

import pytest

from lexlingo.classroom.progression import (
    DEFAULT_DAILY_GOAL,
    LEVEL_BANDS,
    LEVEL_THEMES,
    MAX_LEVEL,
    daily_goal_for_level,
    level_for_xp,
    next_level_band,
    progress_percentage,
    progress_to_next_level,
    roadmap,
    theme_for_level,
    xp_to_next_level,
)


class TestLevelForXp:

    @pytest.mark.parametrize("xp,level", [
        (0, 1), (299, 1), (300, 2), (799, 2), (800, 3), (1499, 3),
        (1500, 4), (2500, 5), (3999, 5), (4000, 6), (9999, 6), (10000, 7),
        (10_000_000, 7),
    ])
    def test_thresholds(self, xp, level):
        assert level_for_xp(xp) == level

    def test_negative_xp_is_level_one(self):
        assert level_for_xp(-50) == 1

    def test_monotonic(self):
        levels = [level_for_xp(xp) for xp in range(0, 12000, 50)]
        assert levels == sorted(levels)

    def test_bands_are_contiguous(self):
        for band, following in zip(LEVEL_BANDS, LEVEL_BANDS[1:]):
            assert following.min_xp == band.max_xp + 1
        assert LEVEL_BANDS[-1].max_xp is None


class TestThemesAndGoals:

    def test_every_level_has_a_theme(self):
        assert set(LEVEL_THEMES) == set(range(1, MAX_LEVEL + 1))

    def test_unknown_level_falls_back_to_level_one_theme(self):
        assert theme_for_level(0) == LEVEL_THEMES[1]
        assert theme_for_level(42) == LEVEL_THEMES[1]

    @pytest.mark.parametrize("level,goal", [(1, 50), (2, 60), (3, 70), (4, 80), (5, 90), (6, 100), (7, 150)])
    def test_daily_goal_per_level(self, level, goal):
        assert daily_goal_for_level(level) == goal

    def test_unknown_level_uses_default_goal(self):
        assert daily_goal_for_level(99) == DEFAULT_DAILY_GOAL == 50


class TestProgressPercentage:

    def test_partial(self):
        assert progress_percentage(25, 50) == 50.0

    def test_clamped_above(self):
        assert progress_percentage(80, 50) == 100.0

    def test_zero_goal_counts_as_met(self):
        assert progress_percentage(0, 0) == 100.0


class TestRoadmap:

    def test_progress_within_band(self):
        assert progress_to_next_level(150) == 50.0
        assert xp_to_next_level(150) == 150

    def test_top_level_has_no_next(self):
        assert next_level_band(MAX_LEVEL) is None
        assert xp_to_next_level(12000) == 0
        assert progress_to_next_level(12000) == 100.0

    def test_roadmap_marks_current_level(self):
        entries = roadmap(900)
        assert len(entries) == len(LEVEL_BANDS)
        current = [e.band.level for e in entries if e.is_current]
        assert current == [3]
        assert [e.band.level for e in entries if e.is_completed] == [1, 2]
        assert all(e.is_future for e in entries[3:])
