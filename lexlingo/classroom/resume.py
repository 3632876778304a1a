"""
ResumeManager - Save quiz state before leaving a lesson and restore it once.

Two carriers hold a saved QuizSnapshot:
- the navigation payload handed to the next view (preferred)
- a durable row keyed by (user_id, topic_id), used when the payload is gone
  (e.g. after a full page reload)

Both carriers belong to one (user_id, topic_id). The durable row is deleted
on consumption and a payload is only honored while its row still exists, so
a save can be restored at most once and only into the lesson it came from.
"""

import logging
from typing import Optional

from lexlingo.schemas import QuizSnapshot, SavedQuiz

from .progress import ProgressTracker

logger = logging.getLogger(__name__)


class ResumeManager:

    def __init__(self, tracker: ProgressTracker):
        self.tracker = tracker

    def save(self, user_id: str, topic_id: int, snapshot: QuizSnapshot) -> SavedQuiz:
        """Persist the durable copy and return the navigation payload."""
        self.tracker.save_quiz_state(user_id, topic_id, snapshot)
        logger.debug(f"Saved quiz state for {user_id} topic {topic_id}: {snapshot}")
        return SavedQuiz(user_id=user_id, topic_id=topic_id, snapshot=snapshot.model_copy())

    def consume(
        self,
        user_id: str,
        topic_id: int,
        payload: Optional[SavedQuiz] = None,
    ) -> Optional[QuizSnapshot]:
        """
        Return the state to restore into (user_id, topic_id), or None.

        A payload saved for another user or topic is ignored. A matching
        payload wins over the durable row.
        """
        if payload is not None and (payload.user_id, payload.topic_id) != (user_id, topic_id):
            logger.debug(
                f"Ignoring quiz state saved for topic {payload.topic_id} "
                f"while opening topic {topic_id}"
            )
            payload = None

        if payload is not None:
            if not self.tracker.delete_quiz_state(user_id, topic_id):
                return None
            return payload.snapshot

        snapshot = self.tracker.get_quiz_state(user_id, topic_id)
        if snapshot is None or not self.tracker.delete_quiz_state(user_id, topic_id):
            return None
        return snapshot
