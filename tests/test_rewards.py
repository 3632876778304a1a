"""Tests for XP awards and streak updates."""

from datetime import datetime, timedelta, timezone

import pytest

from lexlingo.classroom.rewards import award_xp, next_streak
from lexlingo.exceptions import InvalidAmount, StoreError

from conftest import NOW


class TestNextStreak:

    def test_first_activity_starts_streak(self):
        assert next_streak(0, None, NOW) == 1

    def test_same_day_keeps_streak(self):
        assert next_streak(4, NOW - timedelta(hours=2), NOW) == 4

    def test_same_day_minimum_one(self):
        assert next_streak(0, NOW - timedelta(hours=1), NOW) == 1

    def test_next_day_extends(self):
        assert next_streak(4, NOW - timedelta(days=1), NOW) == 5

    def test_gap_resets(self):
        assert next_streak(9, NOW - timedelta(days=3), NOW) == 1


class TestAwardXp:

    def test_award_updates_profile_and_daily_goal(self, tracker, daily_goal, user_id):
        award = award_xp(tracker, daily_goal, user_id, 30, NOW)

        assert award.xp == 30
        assert award.level == 1
        assert award.streak == 1
        profile = tracker.get_profile(user_id)
        assert profile.xp == 30
        assert profile.last_active == NOW
        assert daily_goal.get_today_progress(user_id).earned_xp == 30

    def test_level_is_rederived(self, tracker, daily_goal, user_id):
        tracker.update_profile(user_id, xp=290, level=1)
        award = award_xp(tracker, daily_goal, user_id, 20, NOW)
        assert award.level == 2
        assert award.leveled_up
        assert tracker.get_profile(user_id).level == 2

    def test_consecutive_days_extend_streak(self, tracker, daily_goal, user_id):
        award_xp(tracker, daily_goal, user_id, 10, NOW - timedelta(days=1))
        award = award_xp(tracker, daily_goal, user_id, 10, NOW)
        assert award.streak == 2

    def test_zero_award_still_counts_as_activity(self, tracker, daily_goal, user_id):
        award = award_xp(tracker, daily_goal, user_id, 0, NOW)
        assert award.xp == 0
        assert award.streak == 1

    def test_negative_amount_rejected(self, tracker, daily_goal, user_id):
        with pytest.raises(InvalidAmount):
            award_xp(tracker, daily_goal, user_id, -10, NOW)
        assert tracker.get_profile(user_id).xp == 0

    def test_missing_profile_writes_nothing(self, tracker, daily_goal):
        assert award_xp(tracker, daily_goal, "ghost", 10, NOW) is None
        assert daily_goal.get_today_progress("ghost").earned_xp == 0

    def test_failed_daily_credit_leaves_profile_untouched(
        self, tracker, daily_goal, user_id, monkeypatch
    ):
        def broken(*args, **kwargs):
            raise StoreError("database is locked")

        monkeypatch.setattr(tracker, "increment_daily_points", broken)
        with pytest.raises(StoreError):
            award_xp(tracker, daily_goal, user_id, 30, NOW)

        profile = tracker.get_profile(user_id)
        assert profile.xp == 0
        assert profile.streak == 0
        assert profile.last_active is None
