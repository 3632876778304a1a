"""
Navigator - Track/topic unlock gating and lesson entry.

Provides:
- Track gate: every topic of the previous track must be complete
- Topic gate: only the immediately preceding topic must be complete
- Curriculum overview with availability indicators
- Theory-or-quiz entry decision for a topic
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from lexlingo.exceptions import TopicLocked
from lexlingo.schemas import LessonPhase, Topic, TopicProgress, Track

from .loader import ContentLoader
from .progress import ProgressTracker

ProgressMap = Mapping[int, TopicProgress]


class TopicAvailability(str, Enum):
    """Topic availability status for UI display."""
    LOCKED = "locked"           # Predecessor not complete
    AVAILABLE = "available"     # Can start
    IN_PROGRESS = "in_progress" # Some lessons done
    COMPLETED = "completed"     # lessons_completed >= total_lessons


@dataclass
class NavigationTopic:
    """Topic with navigation metadata."""
    topic: Topic
    availability: TopicAvailability
    lessons_completed: int

    @property
    def locked(self) -> bool:
        return self.availability == TopicAvailability.LOCKED

    @property
    def crowns(self) -> int:
        """Number of full passes through the topic."""
        return self.lessons_completed // self.topic.total_lessons

    @property
    def progress_percent(self) -> float:
        return min(100.0, self.lessons_completed / self.topic.total_lessons * 100)


@dataclass
class NavigationTrack:
    """Track with unlock state and topic completion counts."""
    track: Track
    unlocked: bool
    completed_count: int
    total_count: int


# -----------------------------------------------------------------------------
# Gating rules
# -----------------------------------------------------------------------------

def lessons_completed(topic: Topic, progress: ProgressMap) -> int:
    row = progress.get(topic.id)
    return row.lessons_completed if row else 0


def is_topic_complete(topic: Topic, progress: ProgressMap) -> bool:
    return lessons_completed(topic, progress) >= topic.total_lessons


def is_track_unlocked(index: int, track_topics: Sequence[Sequence[Topic]], progress: ProgressMap) -> bool:
    """
    Track gate over tracks in order; track_topics[i] holds Track[i]'s topics.

    Track[0] is always unlocked. Track[i] needs ALL topics of Track[i-1]
    complete; an empty previous track gates nothing.
    """
    if index <= 0:
        return True
    return all(is_topic_complete(topic, progress) for topic in track_topics[index - 1])


def is_topic_unlocked(index: int, topics: Sequence[Topic], progress: ProgressMap) -> bool:
    """
    Topic gate within one track.

    Topic[0] is always unlocked. Topic[j] needs only Topic[j-1] complete.
    """
    if index <= 0:
        return True
    return is_topic_complete(topics[index - 1], progress)


def topic_availability(index: int, topics: Sequence[Topic], progress: ProgressMap) -> TopicAvailability:
    if not is_topic_unlocked(index, topics, progress):
        return TopicAvailability.LOCKED
    topic = topics[index]
    done = lessons_completed(topic, progress)
    if done >= topic.total_lessons:
        return TopicAvailability.COMPLETED
    if done > 0:
        return TopicAvailability.IN_PROGRESS
    return TopicAvailability.AVAILABLE


# -----------------------------------------------------------------------------
# Navigator
# -----------------------------------------------------------------------------

class Navigator:
    """
    Navigate through tracks and topics with unlock checking.

    Combines ContentLoader (content) with ProgressTracker (user state).
    """

    def __init__(self, loader: ContentLoader, progress: ProgressTracker):
        self.loader = loader
        self.progress = progress

    def _track_topics(self, tracks: list[Track]) -> list[list[Topic]]:
        return [self.loader.get_topics_for_track(track.id) for track in tracks]

    def get_track_overview(self, user_id: str) -> list[NavigationTrack]:
        tracks = self.loader.get_tracks()
        track_topics = self._track_topics(tracks)
        progress = self.progress.get_all_topic_progress(user_id)

        return [
            NavigationTrack(
                track=track,
                unlocked=is_track_unlocked(index, track_topics, progress),
                completed_count=sum(1 for t in track_topics[index] if is_topic_complete(t, progress)),
                total_count=len(track_topics[index]),
            )
            for index, track in enumerate(tracks)
        ]

    def is_track_available(self, user_id: str, track_id: int) -> bool:
        for nav_track in self.get_track_overview(user_id):
            if nav_track.track.id == track_id:
                return nav_track.unlocked
        return False

    def get_topic_overview(self, user_id: str, track_id: int) -> list[NavigationTopic]:
        topics = self.loader.get_topics_for_track(track_id)
        progress = self.progress.get_all_topic_progress(user_id)
        return [
            NavigationTopic(
                topic=topic,
                availability=topic_availability(index, topics, progress),
                lessons_completed=lessons_completed(topic, progress),
            )
            for index, topic in enumerate(topics)
        ]

    def is_topic_available(self, user_id: str, topic_id: int) -> bool:
        """Topic gate within its track, and the track itself unlocked."""
        topic = self.loader.get_topic(topic_id)
        if topic is None or not self.is_track_available(user_id, topic.track_id):
            return False
        for nav_topic in self.get_topic_overview(user_id, topic.track_id):
            if nav_topic.topic.id == topic_id:
                return not nav_topic.locked
        return False

    def entry_phase(self, user_id: str, topic_id: int) -> LessonPhase:
        """
        Where opening a topic lands: theory until the theory gate is passed,
        then straight to the quiz.
        """
        if not self.is_topic_available(user_id, topic_id):
            raise TopicLocked(topic_id)
        row: Optional[TopicProgress] = self.progress.get_topic_progress(user_id, topic_id)
        if row is None or not row.theory_gate_passed:
            return LessonPhase.THEORY
        return LessonPhase.QUIZ

    def get_progress_summary(self, user_id: str) -> dict:
        """Completion counts across all tracks for display."""
        overview = self.get_track_overview(user_id)
        completed = sum(t.completed_count for t in overview)
        total = sum(t.total_count for t in overview)
        return {
            "completed_topics": completed,
            "total_topics": total,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "unlocked_tracks": sum(1 for t in overview if t.unlocked),
            "total_tracks": len(overview),
        }
