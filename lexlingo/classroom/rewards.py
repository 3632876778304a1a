"""
Rewards - Credit XP to a profile and the day's goal.

Profile updates are read-modify-write through the ProgressTracker; the level
is always re-derived with level_for_xp() and the streak is advanced from
last_active. The profile and the daily total are written in one transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from lexlingo.exceptions import InvalidAmount
from lexlingo.schemas import Profile

from .daily_goal import DailyGoalTracker
from .progress import ProgressTracker
from .progression import level_for_xp

logger = logging.getLogger(__name__)


@dataclass
class XPAward:
    amount: int
    xp: int
    level: int
    previous_level: int
    streak: int

    @property
    def leveled_up(self) -> bool:
        return self.level > self.previous_level


def next_streak(streak: int, last_active: Optional[datetime], now: datetime) -> int:
    """
    Streak after activity at `now`.

    Same calendar day keeps the streak (minimum 1), the following day extends
    it, any longer gap restarts at 1.
    """
    if last_active is None:
        return 1
    gap = (now.date() - last_active.date()).days
    if gap <= 0:
        return max(streak, 1)
    if gap == 1:
        return streak + 1
    return 1


def award_xp(
    tracker: ProgressTracker,
    daily_goal: DailyGoalTracker,
    user_id: str,
    amount: int,
    now: Optional[datetime] = None,
) -> Optional[XPAward]:
    """
    Add XP to the profile, recompute level and streak, credit today's goal.

    Returns None when the user has no profile (nothing is written).
    """
    if amount < 0:
        raise InvalidAmount(f"XP amount must be non-negative, got {amount}")
    now = now or datetime.now(timezone.utc)

    with tracker.transaction():
        profile: Optional[Profile] = tracker.get_profile(user_id)
        if profile is None:
            logger.warning(f"No profile for user {user_id}; skipping award of {amount} XP")
            return None

        new_xp = profile.xp + amount
        new_level = level_for_xp(new_xp)
        new_streak = next_streak(profile.streak, profile.last_active, now)
        tracker.update_profile(
            user_id,
            xp=new_xp,
            level=new_level,
            streak=new_streak,
            last_active=now,
        )
        daily_goal.add_xp(user_id, amount)

    if new_level > profile.level:
        logger.info(f"User {user_id} reached level {new_level}")
    logger.info(f"Awarded {amount} XP to {user_id} (total {new_xp})")
    return XPAward(
        amount=amount,
        xp=new_xp,
        level=new_level,
        previous_level=profile.level,
        streak=new_streak,
    )
