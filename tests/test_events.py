"""Tests for the change feed."""

from lexlingo.classroom import ChangeFeed, ChangeType


class TestChangeFeed:

    def test_table_and_wildcard_listeners(self):
        feed = ChangeFeed()
        table_events, all_events = [], []
        feed.subscribe("profiles", table_events.append)
        feed.subscribe("*", all_events.append)

        feed.publish("profiles", ChangeType.UPDATE, {"id": "u1"})
        feed.publish("daily_progress", ChangeType.INSERT)

        assert len(table_events) == 1
        assert table_events[0].row == {"id": "u1"}
        assert [e.table for e in all_events] == ["profiles", "daily_progress"]

    def test_unsubscribe_is_idempotent(self):
        feed = ChangeFeed()
        subscription = feed.subscribe("profiles", lambda event: None)
        assert subscription.active
        subscription.unsubscribe()
        subscription.unsubscribe()
        assert not subscription.active
        assert feed.listener_count("profiles") == 0

    def test_context_manager_releases(self):
        feed = ChangeFeed()
        with feed.subscribe("profiles", lambda event: None):
            assert feed.listener_count() == 1
        assert feed.listener_count() == 0

    def test_failing_listener_does_not_stop_others(self):
        feed = ChangeFeed()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        feed.subscribe("profiles", broken)
        feed.subscribe("profiles", received.append)
        feed.publish("profiles", ChangeType.DELETE)
        assert len(received) == 1
