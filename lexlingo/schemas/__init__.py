"""
LexLingo Schemas - Pydantic models for the learning platform.

This module exports all schema classes for:
- Content: tracks, topics, theory sections, questions
- Progress: profiles, topic progress, daily progress, saved quiz state
"""

# Content schemas
from .content import (
    Track,
    Topic,
    TheorySection,
    Question,
    TopicContent,
)

# Progress schemas
from .progress import (
    LessonPhase,
    Profile,
    TopicProgress,
    DailyProgress,
    QuizSnapshot,
    SavedQuiz,
)

__all__ = [
    # Content
    'Track',
    'Topic',
    'TheorySection',
    'Question',
    'TopicContent',
    # Progress
    'LessonPhase',
    'Profile',
    'TopicProgress',
    'DailyProgress',
    'QuizSnapshot',
    'SavedQuiz',
]
