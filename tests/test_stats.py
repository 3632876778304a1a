"""Tests for daily XP history."""

from lexlingo.classroom import daily_history, summarize_history

from conftest import TODAY


class TestDailyHistory:

    def test_window_excludes_older_days(self, tracker, user_id):
        tracker.increment_daily_points(user_id, "2026-02-01", 99)
        tracker.increment_daily_points(user_id, "2026-03-08", 30)
        tracker.increment_daily_points(user_id, "2026-03-10", 50)

        frame = daily_history(tracker, user_id, 7, TODAY)
        assert list(frame["points"]) == [30, 50]
        assert frame.index.name == "date"

    def test_summary(self, tracker, user_id):
        tracker.increment_daily_points(user_id, "2026-03-08", 30)
        tracker.increment_daily_points(user_id, "2026-03-10", 50)

        summary = summarize_history(daily_history(tracker, user_id, 30, TODAY))
        assert summary.total_days == 2
        assert summary.total_points == 80
        assert summary.average_points == 40.0

    def test_empty_history(self, tracker, user_id):
        frame = daily_history(tracker, user_id, 7, TODAY)
        assert frame.empty
        summary = summarize_history(frame)
        assert summary.total_points == 0
        assert summary.average_points == 0.0
