"""Tests for DailyGoalTracker."""

from datetime import date

import pytest

from lexlingo.classroom import DailyGoalTracker
from lexlingo.exceptions import InvalidAmount

from conftest import TODAY


class TestDailyGoalTracker:

    def test_no_activity_is_zero(self, daily_goal, user_id):
        status = daily_goal.get_today_progress(user_id)
        assert status.earned_xp == 0
        assert status.goal_xp == 50
        assert status.percentage == 0.0
        assert not status.is_goal_reached

    def test_add_xp_accumulates(self, daily_goal, user_id):
        assert daily_goal.add_xp(user_id, 30) == 30
        assert daily_goal.add_xp(user_id, 30) == 60
        status = daily_goal.get_today_progress(user_id)
        assert status.earned_xp == 60
        assert status.is_goal_reached
        assert status.percentage == 100.0
        assert status.remaining_xp == 0

    def test_goal_follows_level(self, tracker, daily_goal, user_id):
        tracker.update_profile(user_id, xp=1600, level=4)
        assert daily_goal.get_today_progress(user_id).goal_xp == 80

    def test_unknown_user_uses_level_one_goal(self, daily_goal):
        assert daily_goal.get_today_progress("nobody").goal_xp == 50

    def test_negative_amount_rejected(self, daily_goal, user_id):
        with pytest.raises(InvalidAmount):
            daily_goal.add_xp(user_id, -1)

    def test_new_day_starts_at_zero(self, tracker, user_id):
        day = {"value": TODAY}
        goal = DailyGoalTracker(tracker, clock=lambda: day["value"])
        goal.add_xp(user_id, 40)
        day["value"] = date(2026, 3, 11)
        assert goal.get_today_progress(user_id).earned_xp == 0
        assert goal.today() == "2026-03-11"

    def test_watch_reloads_on_changes(self, daily_goal, user_id):
        seen = []
        subscription = daily_goal.watch(user_id, seen.append)

        daily_goal.add_xp(user_id, 20)
        assert seen[-1].earned_xp == 20

        subscription.unsubscribe()
        daily_goal.add_xp(user_id, 20)
        assert seen[-1].earned_xp == 20
        assert daily_goal.tracker.feed.listener_count() == 0
