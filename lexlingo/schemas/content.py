"""
Content schemas for LexLingo.

Defines Pydantic models for authored, read-only content:
- Tracks and topics (ordered by order_index)
- Theory sections shown before a topic's quiz
- Multiple-choice quiz questions
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional


# -----------------------------------------------------------------------------
# Hierarchy
# -----------------------------------------------------------------------------

class Track(BaseModel):
    """Top-level ordered grouping of topics."""
    id: int
    title: str
    description: str = ""
    order_index: int = Field(..., ge=0)


class Topic(BaseModel):
    """Unit of study inside a track; one lesson is one full quiz pass."""
    id: int
    track_id: int
    title: str
    description: str = ""
    order_index: int = Field(..., ge=0)
    total_lessons: int = Field(..., ge=1)


# -----------------------------------------------------------------------------
# Topic content
# -----------------------------------------------------------------------------

class TheorySection(BaseModel):
    id: str
    topic_id: int
    order_index: int = Field(..., ge=0)
    title: str
    content: str
    image_url: Optional[str] = None


class Question(BaseModel):
    """
    Multiple-choice question with exactly one correct option.
    correct_answer is a 0-based index into options.
    """
    id: str
    topic_id: int
    question: str
    options: list[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)
    explanation: str = ""

    @model_validator(mode="after")
    def correct_answer_in_range(self):
        if self.correct_answer >= len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} out of range for {len(self.options)} options"
            )
        return self

    def is_correct(self, index: int) -> bool:
        return index == self.correct_answer


class TopicContent(BaseModel):
    """Authoring bundle for one topic (as written in content/*.yaml)."""
    topic: Topic
    theory: list[TheorySection] = []
    questions: list[Question] = []
