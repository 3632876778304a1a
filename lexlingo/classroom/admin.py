"""
AdminService - Privileged profile overrides and full user resets.
"""

import logging
from typing import Optional

from lexlingo.config import Settings
from lexlingo.exceptions import ValidationError
from lexlingo.schemas import Profile

from .progress import ProgressTracker
from .progression import level_for_xp

logger = logging.getLogger(__name__)


def is_admin(email: Optional[str], settings: Settings) -> bool:
    return bool(email) and email.strip().lower() in settings.admin_emails


class AdminService:

    def __init__(self, tracker: ProgressTracker):
        self.tracker = tracker

    def list_users(self) -> list[Profile]:
        """Profiles, newest first."""
        return self.tracker.list_profiles()

    def update_user(
        self,
        user_id: str,
        xp: Optional[int] = None,
        streak: Optional[int] = None,
    ) -> Optional[Profile]:
        """
        Override XP and/or streak. XP may go down here; the level is always
        re-derived from XP.
        """
        fields = {}
        if xp is not None:
            if xp < 0:
                raise ValidationError("XP must be non-negative")
            fields["xp"] = xp
            fields["level"] = level_for_xp(xp)
        if streak is not None:
            if streak < 0:
                raise ValidationError("Streak must be non-negative")
            fields["streak"] = streak
        if not fields:
            return self.tracker.get_profile(user_id)

        profile = self.tracker.update_profile(user_id, **fields)
        logger.info(f"Admin override for {user_id}: {fields}")
        return profile

    def reset_user(self, user_id: str) -> Optional[Profile]:
        """Zero the profile and delete all of the user's progress rows."""
        with self.tracker.transaction():
            profile = self.tracker.update_profile(user_id, xp=0, level=1, streak=0)
            topics = self.tracker.delete_topic_progress_for_user(user_id)
            days = self.tracker.delete_daily_progress_for_user(user_id)
            saved = self.tracker.delete_quiz_states_for_user(user_id)
        logger.warning(
            f"Reset user {user_id}: removed {topics} topic rows, {days} daily rows, {saved} saved quizzes"
        )
        return profile
