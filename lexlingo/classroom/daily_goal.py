"""
DailyGoalTracker - Today's XP against the level-dependent goal.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from lexlingo.exceptions import InvalidAmount

from .events import Subscription
from .progress import ProgressTracker
from .progression import daily_goal_for_level, progress_percentage

logger = logging.getLogger(__name__)

WATCHED_TABLES = ("daily_progress", "profiles")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class DailyGoalStatus:
    earned_xp: int
    goal_xp: int
    level: int

    @property
    def percentage(self) -> float:
        return progress_percentage(self.earned_xp, self.goal_xp)

    @property
    def is_goal_reached(self) -> bool:
        return self.earned_xp >= self.goal_xp

    @property
    def remaining_xp(self) -> int:
        return max(self.goal_xp - self.earned_xp, 0)


class _CompositeSubscription(Subscription):
    def __init__(self, parts: list[Subscription]):
        super().__init__(lambda: [part.unsubscribe() for part in parts])


class DailyGoalTracker:
    """
    Per-user, per-day XP counter.

    Days are keyed by the ISO date string of `clock()` (UTC by default).
    """

    def __init__(self, tracker: ProgressTracker, clock: Optional[Callable[[], date]] = None):
        self.tracker = tracker
        self.clock = clock or utc_today

    def today(self) -> str:
        return self.clock().isoformat()

    def get_today_progress(self, user_id: str) -> DailyGoalStatus:
        """Earned XP today and the goal for the user's level; absence is zero."""
        profile = self.tracker.get_profile(user_id)
        level = profile.level if profile else 1
        row = self.tracker.get_daily_progress(user_id, self.today())
        return DailyGoalStatus(
            earned_xp=row.points if row else 0,
            goal_xp=daily_goal_for_level(level),
            level=level,
        )

    def add_xp(self, user_id: str, amount: int) -> int:
        """Credit today's counter and return the new total."""
        if amount < 0:
            raise InvalidAmount(f"XP amount must be non-negative, got {amount}")
        row = self.tracker.increment_daily_points(user_id, self.today(), amount)
        logger.debug(f"Daily progress for {user_id} on {row.date}: {row.points}")
        return row.points

    def watch(self, user_id: str, callback: Callable[[DailyGoalStatus], None]) -> Subscription:
        """
        Reload today's status on any change to daily progress or profiles.

        Every event triggers a full reload, so redundant or out-of-order
        events are harmless.
        """
        def reload(_event):
            callback(self.get_today_progress(user_id))

        parts = [self.tracker.feed.subscribe(table, reload) for table in WATCHED_TABLES]
        return _CompositeSubscription(parts)
