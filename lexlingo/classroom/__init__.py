"""
LexLingo Classroom - Runtime components for content, progress and lessons.

This module provides:
- ContentLoader / QuestionBank: read-only content from content.db
- ProgressTracker: learner state in progress.db
- Navigator: track/topic unlock gating
- DailyGoalTracker: today's XP against the level goal
- LessonSession / ResumeManager: theory and quiz state machine
- SessionGateway: authentication state
- AdminService: privileged overrides and resets
"""

from .events import (
    ChangeFeed,
    ChangeEvent,
    ChangeType,
    Subscription,
)

from .loader import (
    ContentLoader,
    QuestionBank,
    StaticQuestionBank,
)

from .progress import ProgressTracker

from .progression import (
    THEORY_BONUS_XP,
    XP_PER_CORRECT_ANSWER,
    LEVEL_BANDS,
    LevelBand,
    LevelTheme,
    RoadmapEntry,
    level_for_xp,
    theme_for_level,
    daily_goal_for_level,
    progress_percentage,
    progress_to_next_level,
    xp_to_next_level,
    next_level_band,
    roadmap,
)

from .daily_goal import (
    DailyGoalTracker,
    DailyGoalStatus,
)

from .rewards import (
    XPAward,
    award_xp,
    next_streak,
)

from .navigator import (
    Navigator,
    TopicAvailability,
    NavigationTopic,
    NavigationTrack,
    is_track_unlocked,
    is_topic_unlocked,
)

from .lesson import (
    LessonSession,
    AnswerFeedback,
    LessonResult,
)

from .resume import ResumeManager

from .session import (
    SessionGateway,
    Session,
    AuthEvent,
)

from .admin import (
    AdminService,
    is_admin,
)

from .stats import (
    HISTORY_PERIODS,
    HistorySummary,
    daily_history,
    summarize_history,
)

__all__ = [
    # Events
    "ChangeFeed",
    "ChangeEvent",
    "ChangeType",
    "Subscription",
    # Content
    "ContentLoader",
    "QuestionBank",
    "StaticQuestionBank",
    # Progress
    "ProgressTracker",
    # Progression
    "THEORY_BONUS_XP",
    "XP_PER_CORRECT_ANSWER",
    "LEVEL_BANDS",
    "LevelBand",
    "LevelTheme",
    "RoadmapEntry",
    "level_for_xp",
    "theme_for_level",
    "daily_goal_for_level",
    "progress_percentage",
    "progress_to_next_level",
    "xp_to_next_level",
    "next_level_band",
    "roadmap",
    # Daily goal
    "DailyGoalTracker",
    "DailyGoalStatus",
    # Rewards
    "XPAward",
    "award_xp",
    "next_streak",
    # Navigator
    "Navigator",
    "TopicAvailability",
    "NavigationTopic",
    "NavigationTrack",
    "is_track_unlocked",
    "is_topic_unlocked",
    # Lesson
    "LessonSession",
    "AnswerFeedback",
    "LessonResult",
    "ResumeManager",
    # Session
    "SessionGateway",
    "Session",
    "AuthEvent",
    # Admin
    "AdminService",
    "is_admin",
    # Stats
    "HISTORY_PERIODS",
    "HistorySummary",
    "daily_history",
    "summarize_history",
]
