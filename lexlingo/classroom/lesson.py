"""
LessonSession - Theory and quiz state machine for one topic.

Phases:
- THEORY: sequential theory sections; completing or skipping awards a
  one-time bonus and opens the quiz
- QUIZ: fixed question sequence; select, check, next
- COMPLETE: quiz finalized, XP and lesson count persisted

Store writes happen before the in-memory transition, so a StoreError leaves
the session where it was and the action can be retried.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from lexlingo.exceptions import NoAnswerSelected, OperationPending, ValidationError
from lexlingo.schemas import LessonPhase, Question, QuizSnapshot, TheorySection, Topic

from .daily_goal import DailyGoalTracker
from .loader import QuestionBank
from .navigator import Navigator
from .progress import ProgressTracker
from .progression import THEORY_BONUS_XP, XP_PER_CORRECT_ANSWER
from .rewards import XPAward, award_xp

logger = logging.getLogger(__name__)


@dataclass
class AnswerFeedback:
    is_correct: bool
    selected_answer: int
    correct_answer: int
    explanation: str


@dataclass
class LessonResult:
    topic_id: int
    track_id: int
    correct_answers: int
    total_questions: int
    xp_earned: int
    lessons_completed: int
    award: Optional[XPAward] = None


class LessonSession:
    """Drive one user through a topic's theory and quiz."""

    def __init__(
        self,
        user_id: str,
        topic: Topic,
        sections: list[TheorySection],
        questions: list[Question],
        tracker: ProgressTracker,
        daily_goal: DailyGoalTracker,
        phase: LessonPhase = LessonPhase.THEORY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.user_id = user_id
        self.topic = topic
        self.sections = sections
        self.questions = questions
        self.tracker = tracker
        self.daily_goal = daily_goal
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.phase = phase
        self.section_index = 0
        self.current_question = 0
        self.selected_answer: Optional[int] = None
        self.correct_answers = 0
        self.show_feedback = False
        self.result: Optional[LessonResult] = None
        self._feedback: Optional[AnswerFeedback] = None
        self._busy = False

    @classmethod
    def open(
        cls,
        navigator: Navigator,
        question_bank: QuestionBank,
        daily_goal: DailyGoalTracker,
        user_id: str,
        topic_id: int,
        review_theory: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "LessonSession":
        """
        Open a topic at the phase its theory gate decides.

        review_theory forces the theory phase (returning to theory mid-quiz).
        Raises TopicLocked when the topic is not available.
        """
        phase = navigator.entry_phase(user_id, topic_id)
        if review_theory:
            phase = LessonPhase.THEORY
        return cls(
            user_id=user_id,
            topic=navigator.loader.get_topic(topic_id),
            sections=navigator.loader.get_theory_sections(topic_id),
            questions=question_bank.get_questions(topic_id),
            tracker=navigator.progress,
            daily_goal=daily_goal,
            phase=phase,
            clock=clock,
        )

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        """True while a store write guarding a transition is outstanding."""
        return self._busy

    @contextmanager
    def _pending(self) -> Iterator[None]:
        if self._busy:
            raise OperationPending("Previous action is still being saved")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _require(self, phase: LessonPhase):
        if self._busy:
            raise OperationPending("Previous action is still being saved")
        if self.phase != phase:
            raise ValidationError(f"Action requires {phase.value} phase, session is in {self.phase.value}")

    # -------------------------------------------------------------------------
    # Theory
    # -------------------------------------------------------------------------

    @property
    def current_section(self) -> Optional[TheorySection]:
        if 0 <= self.section_index < len(self.sections):
            return self.sections[self.section_index]
        return None

    @property
    def is_last_section(self) -> bool:
        return self.section_index >= len(self.sections) - 1

    def next_section(self) -> Optional[int]:
        """
        Advance one section. Past the last section theory is completed and
        the awarded XP is returned.
        """
        self._require(LessonPhase.THEORY)
        if self.is_last_section:
            return self.complete_theory()
        self.section_index += 1
        return None

    def previous_section(self):
        self._require(LessonPhase.THEORY)
        if self.section_index > 0:
            self.section_index -= 1

    def complete_theory(self) -> int:
        """Mark theory completed; returns XP awarded (bonus only the first time)."""
        return self._finish_theory(completed=True)

    def skip_theory(self) -> int:
        """Mark theory skipped; returns XP awarded (bonus only the first time)."""
        return self._finish_theory(completed=False)

    def _finish_theory(self, completed: bool) -> int:
        self._require(LessonPhase.THEORY)
        with self._pending(), self.tracker.transaction():
            row = self.tracker.get_topic_progress(self.user_id, self.topic.id)
            already_passed = row is not None and row.theory_gate_passed

            # Flag, bonus and daily points commit together or not at all.
            self.tracker.upsert_topic_progress(
                self.user_id,
                self.topic.id,
                theory_completed=True if completed else None,
                theory_skipped=None if completed else True,
            )
            award = None
            if not already_passed:
                award = award_xp(self.tracker, self.daily_goal, self.user_id, THEORY_BONUS_XP, self.clock())
        awarded = award.amount if award else 0

        action = "completed" if completed else "skipped"
        logger.info(f"User {self.user_id} {action} theory for topic {self.topic.id} (+{awarded} XP)")
        self.phase = LessonPhase.QUIZ
        return awarded

    # -------------------------------------------------------------------------
    # Quiz
    # -------------------------------------------------------------------------

    @property
    def question(self) -> Optional[Question]:
        if 0 <= self.current_question < len(self.questions):
            return self.questions[self.current_question]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question >= len(self.questions) - 1

    @property
    def answered_questions(self) -> int:
        return self.current_question + (1 if self.show_feedback else 0)

    @property
    def quiz_progress_percent(self) -> float:
        if not self.questions:
            return 100.0
        return (self.current_question + 1) / len(self.questions) * 100

    def select_answer(self, index: int):
        """Select an option; ignored once feedback is revealed."""
        self._require(LessonPhase.QUIZ)
        if self.show_feedback:
            return
        question = self.question
        if question is None or not 0 <= index < len(question.options):
            raise ValidationError(f"Answer index {index} out of range")
        self.selected_answer = index

    def check_answer(self) -> AnswerFeedback:
        """
        Reveal feedback for the selected option.

        Checking again before next_question() returns the same feedback
        without counting the answer twice.
        """
        self._require(LessonPhase.QUIZ)
        if self.show_feedback and self._feedback is not None:
            return self._feedback
        if self.selected_answer is None:
            raise NoAnswerSelected("Select an answer before checking")

        question = self.question
        is_correct = question.is_correct(self.selected_answer)
        if is_correct:
            self.correct_answers += 1
        self.show_feedback = True
        self._feedback = AnswerFeedback(
            is_correct=is_correct,
            selected_answer=self.selected_answer,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        )
        return self._feedback

    def next_question(self) -> Optional[LessonResult]:
        """Advance, or finalize the lesson after the last question."""
        self._require(LessonPhase.QUIZ)
        if not self.questions:
            return self._finalize()
        if not self.show_feedback:
            raise ValidationError("Check the answer before moving on")
        if not self.is_last_question:
            self.current_question += 1
            self.selected_answer = None
            self.show_feedback = False
            self._feedback = None
            return None
        return self._finalize()

    def _finalize(self) -> LessonResult:
        xp_earned = XP_PER_CORRECT_ANSWER * self.correct_answers
        with self._pending(), self.tracker.transaction():
            progress = self.tracker.increment_lessons_completed(self.user_id, self.topic.id)
            award = award_xp(self.tracker, self.daily_goal, self.user_id, xp_earned, self.clock())

        self.result = LessonResult(
            topic_id=self.topic.id,
            track_id=self.topic.track_id,
            correct_answers=self.correct_answers,
            total_questions=len(self.questions),
            xp_earned=xp_earned,
            lessons_completed=progress.lessons_completed,
            award=award,
        )
        self.phase = LessonPhase.COMPLETE
        logger.info(
            f"User {self.user_id} finished topic {self.topic.id}: "
            f"{self.correct_answers}/{len(self.questions)} correct, +{xp_earned} XP"
        )
        return self.result

    # -------------------------------------------------------------------------
    # Suspend / resume
    # -------------------------------------------------------------------------

    def snapshot(self) -> QuizSnapshot:
        return QuizSnapshot(
            current_question=self.current_question,
            selected_answer=self.selected_answer,
            correct_answers=self.correct_answers,
            show_feedback=self.show_feedback,
        )

    def restore(self, snapshot: QuizSnapshot):
        """Put the quiz back exactly where the snapshot left it."""
        self._require(LessonPhase.QUIZ)
        if self.questions and snapshot.current_question >= len(self.questions):
            raise ValidationError(f"Saved question {snapshot.current_question} is out of range")
        self.current_question = snapshot.current_question
        self.selected_answer = snapshot.selected_answer
        self.correct_answers = snapshot.correct_answers
        self.show_feedback = snapshot.show_feedback
        self._feedback = None
        question = self.question
        if self.show_feedback and question is not None and self.selected_answer is not None:
            self._feedback = AnswerFeedback(
                is_correct=question.is_correct(self.selected_answer),
                selected_answer=self.selected_answer,
                correct_answer=question.correct_answer,
                explanation=question.explanation,
            )
