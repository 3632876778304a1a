"""
Progress schemas for LexLingo.

Defines Pydantic models for learner state:
- Profile (XP, level, streak)
- Per-topic progress and per-day XP
- Saved quiz state for suspend/resume
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LessonPhase(str, Enum):
    THEORY = "theory"
    QUIZ = "quiz"
    COMPLETE = "complete"


class Profile(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    xp: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    streak: int = Field(0, ge=0)
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TopicProgress(BaseModel):
    user_id: str
    topic_id: int
    lessons_completed: int = Field(0, ge=0)
    theory_completed: bool = False
    theory_skipped: bool = False

    @property
    def theory_gate_passed(self) -> bool:
        """Either flag satisfies the theory gate."""
        return self.theory_completed or self.theory_skipped


class DailyProgress(BaseModel):
    user_id: str
    date: str  # ISO date, YYYY-MM-DD
    points: int = Field(0, ge=0)


class QuizSnapshot(BaseModel):
    """Quiz position captured before navigating away from a lesson."""
    current_question: int = Field(0, ge=0)
    selected_answer: Optional[int] = None
    correct_answers: int = Field(0, ge=0)
    show_feedback: bool = False


class SavedQuiz(BaseModel):
    """Navigation payload for a saved quiz, keyed by the lesson it came from."""
    user_id: str
    topic_id: int
    snapshot: QuizSnapshot
