"""Tests for the theory/quiz lesson state machine."""

import pytest

from lexlingo.classroom import LessonSession, StaticQuestionBank
from lexlingo.exceptions import (
    NoAnswerSelected,
    OperationPending,
    StoreError,
    TopicLocked,
    ValidationError,
)
from lexlingo.schemas import LessonPhase, QuizSnapshot

from conftest import NOW, make_question

# Correct options for topic 1 in content/topic_01_fundamentals.yaml
TOPIC_1_ANSWERS = [3, 2, 2]


@pytest.fixture
def open_lesson(navigator, loader, daily_goal, user_id):
    def _open(topic_id: int = 1, review_theory: bool = False, bank=None) -> LessonSession:
        return LessonSession.open(
            navigator, bank or loader, daily_goal, user_id, topic_id,
            review_theory=review_theory, clock=lambda: NOW,
        )
    return _open


def answer_all(lesson: LessonSession, answers: list[int]):
    result = None
    for index in answers:
        lesson.select_answer(index)
        lesson.check_answer()
        result = lesson.next_question()
    return result


def fail_once(monkeypatch, obj, name: str, message: str = "disk I/O error"):
    """Make obj.name raise StoreError on its first call only."""
    original = getattr(obj, name)
    calls = {"n": 0}

    def flaky(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise StoreError(message)
        return original(*args, **kwargs)

    monkeypatch.setattr(obj, name, flaky)
    return calls


class TestTheoryPhase:

    def test_new_topic_opens_in_theory(self, open_lesson):
        lesson = open_lesson()
        assert lesson.phase == LessonPhase.THEORY
        assert len(lesson.sections) == 3
        assert lesson.current_section.title == "What is an obligation?"

    def test_complete_theory_awards_bonus_once(self, open_lesson, tracker, user_id):
        lesson = open_lesson()
        assert lesson.complete_theory() == 30
        assert lesson.phase == LessonPhase.QUIZ
        assert tracker.get_profile(user_id).xp == 30

        again = open_lesson(review_theory=True)
        assert again.complete_theory() == 0
        assert tracker.get_profile(user_id).xp == 30

    def test_skip_after_complete_awards_nothing(self, open_lesson, tracker, user_id):
        open_lesson().complete_theory()
        review = open_lesson(review_theory=True)
        assert review.skip_theory() == 0
        row = tracker.get_topic_progress(user_id, 1)
        assert row.theory_completed and row.theory_skipped
        assert tracker.get_profile(user_id).xp == 30

    def test_skip_awards_bonus(self, open_lesson, tracker, user_id):
        lesson = open_lesson()
        assert lesson.skip_theory() == 30
        assert tracker.get_topic_progress(user_id, 1).theory_skipped

    def test_reopen_after_gate_goes_to_quiz(self, open_lesson):
        open_lesson().skip_theory()
        assert open_lesson().phase == LessonPhase.QUIZ

    def test_theory_flag_keeps_lessons_completed(self, open_lesson, tracker, user_id):
        tracker.upsert_topic_progress(user_id, 1, lessons_completed=2)
        open_lesson().complete_theory()
        assert tracker.get_topic_progress(user_id, 1).lessons_completed == 2

    def test_paging_through_sections_completes_theory(self, open_lesson):
        lesson = open_lesson()
        assert lesson.next_section() is None
        lesson.previous_section()
        assert lesson.section_index == 0
        lesson.next_section()
        lesson.next_section()
        assert lesson.is_last_section
        assert lesson.next_section() == 30
        assert lesson.phase == LessonPhase.QUIZ

    def test_previous_at_first_section_stays(self, open_lesson):
        lesson = open_lesson()
        lesson.previous_section()
        assert lesson.section_index == 0

    def test_locked_topic_cannot_open(self, open_lesson):
        with pytest.raises(TopicLocked):
            open_lesson(topic_id=2)


class TestQuizPhase:

    def test_full_lesson_scenario(self, open_lesson, tracker, daily_goal, user_id):
        lesson = open_lesson()
        lesson.complete_theory()
        result = answer_all(lesson, TOPIC_1_ANSWERS)

        assert lesson.phase == LessonPhase.COMPLETE
        assert result.correct_answers == 3
        assert result.xp_earned == 30
        assert result.lessons_completed == 1
        assert tracker.get_profile(user_id).xp == 60
        status = daily_goal.get_today_progress(user_id)
        assert status.earned_xp == 60
        assert status.is_goal_reached

    def test_two_of_three_correct(self, open_lesson, tracker, daily_goal, user_id):
        lesson = open_lesson()
        lesson.skip_theory()
        result = answer_all(lesson, [3, 0, 2])
        assert result.correct_answers == 2
        assert result.xp_earned == 20
        assert result.award.amount == 20
        assert tracker.get_profile(user_id).xp == 50
        assert daily_goal.get_today_progress(user_id).earned_xp == 50

    def test_all_wrong_still_counts_lesson(self, open_lesson, tracker, user_id):
        lesson = open_lesson()
        lesson.skip_theory()
        result = answer_all(lesson, [0, 0, 0])
        assert result.xp_earned == 0
        assert tracker.get_topic_progress(user_id, 1).lessons_completed == 1

    def test_check_without_selection(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        with pytest.raises(NoAnswerSelected):
            lesson.check_answer()

    def test_selection_locked_after_feedback(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        lesson.select_answer(3)
        feedback = lesson.check_answer()
        assert feedback.is_correct
        lesson.select_answer(0)
        assert lesson.selected_answer == 3

    def test_double_check_counts_once(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        lesson.select_answer(3)
        first = lesson.check_answer()
        second = lesson.check_answer()
        assert first == second
        assert lesson.correct_answers == 1

    def test_wrong_answer_feedback(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        lesson.select_answer(0)
        feedback = lesson.check_answer()
        assert not feedback.is_correct
        assert feedback.correct_answer == 3
        assert "criminal conviction" in feedback.explanation.lower()

    def test_next_requires_feedback(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        with pytest.raises(ValidationError):
            lesson.next_question()

    def test_out_of_range_selection(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        with pytest.raises(ValidationError):
            lesson.select_answer(4)

    def test_quiz_actions_rejected_during_theory(self, open_lesson):
        lesson = open_lesson()
        with pytest.raises(ValidationError):
            lesson.select_answer(0)

    def test_progress_percent(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        assert lesson.quiz_progress_percent == pytest.approx(100 / 3)

    def test_repeat_lessons_accumulate(self, open_lesson, tracker, user_id):
        first = open_lesson()
        first.skip_theory()
        answer_all(first, TOPIC_1_ANSWERS)
        second = open_lesson()
        assert second.phase == LessonPhase.QUIZ
        result = answer_all(second, TOPIC_1_ANSWERS)
        assert result.lessons_completed == 2
        assert tracker.get_profile(user_id).xp == 90

    def test_empty_question_list_finalizes_with_zero(self, open_lesson, tracker, user_id):
        lesson = open_lesson(bank=StaticQuestionBank({}))
        lesson.skip_theory()
        result = lesson.next_question()
        assert result.total_questions == 0
        assert result.xp_earned == 0
        assert lesson.phase == LessonPhase.COMPLETE
        assert tracker.get_topic_progress(user_id, 1).lessons_completed == 1

    def test_static_question_bank(self, open_lesson):
        bank = StaticQuestionBank({1: [make_question("x1", correct=1)]})
        lesson = open_lesson(bank=bank)
        lesson.skip_theory()
        result = answer_all(lesson, [1])
        assert result.xp_earned == 10


class TestStoreFailures:

    def finish_up_to_last_answer(self, lesson: LessonSession):
        lesson.skip_theory()
        answer_all(lesson, TOPIC_1_ANSWERS[:2])
        lesson.select_answer(TOPIC_1_ANSWERS[2])
        lesson.check_answer()

    def test_failed_finalize_can_be_retried(self, open_lesson, tracker, user_id, monkeypatch):
        lesson = open_lesson()
        self.finish_up_to_last_answer(lesson)
        fail_once(monkeypatch, tracker, "increment_lessons_completed")

        with pytest.raises(StoreError):
            lesson.next_question()
        assert lesson.phase == LessonPhase.QUIZ
        assert not lesson.busy

        result = lesson.next_question()
        assert result.xp_earned == 30
        assert tracker.get_profile(user_id).xp == 60

    def test_failed_daily_write_rolls_back_finalize(
        self, open_lesson, tracker, daily_goal, user_id, monkeypatch
    ):
        lesson = open_lesson()
        self.finish_up_to_last_answer(lesson)
        fail_once(monkeypatch, tracker, "increment_daily_points")

        with pytest.raises(StoreError):
            lesson.next_question()
        assert tracker.get_topic_progress(user_id, 1).lessons_completed == 0
        assert tracker.get_profile(user_id).xp == 30
        assert daily_goal.get_today_progress(user_id).earned_xp == 30

        result = lesson.next_question()
        assert result.lessons_completed == 1
        assert tracker.get_topic_progress(user_id, 1).lessons_completed == 1
        assert tracker.get_profile(user_id).xp == 60
        assert daily_goal.get_today_progress(user_id).earned_xp == 60

    def test_failed_finalize_publishes_nothing(self, open_lesson, tracker, monkeypatch):
        lesson = open_lesson()
        self.finish_up_to_last_answer(lesson)
        fail_once(monkeypatch, tracker, "increment_daily_points")
        events = []
        tracker.feed.subscribe("*", events.append)

        with pytest.raises(StoreError):
            lesson.next_question()
        assert events == []

        lesson.next_question()
        assert {event.table for event in events} == {"topic_progress", "profiles", "daily_progress"}

    def test_actions_rejected_while_saving(self, open_lesson, tracker, monkeypatch):
        lesson = open_lesson()
        self.finish_up_to_last_answer(lesson)

        original = tracker.increment_lessons_completed
        seen = []

        def reentrant(*args, **kwargs):
            with pytest.raises(OperationPending):
                lesson.next_question()
            seen.append(lesson.busy)
            return original(*args, **kwargs)

        monkeypatch.setattr(tracker, "increment_lessons_completed", reentrant)
        lesson.next_question()
        assert seen == [True]
        assert lesson.result.lessons_completed == 1

    def test_failed_theory_write_keeps_phase(self, open_lesson, tracker, user_id, monkeypatch):
        lesson = open_lesson()

        def broken(*args, **kwargs):
            raise StoreError("database is locked")

        monkeypatch.setattr(tracker, "upsert_topic_progress", broken)
        with pytest.raises(StoreError):
            lesson.complete_theory()
        assert lesson.phase == LessonPhase.THEORY
        assert tracker.get_profile(user_id).xp == 0

    def test_failed_bonus_leaves_gate_closed(
        self, open_lesson, tracker, daily_goal, user_id, monkeypatch
    ):
        lesson = open_lesson()
        fail_once(monkeypatch, tracker, "update_profile")

        with pytest.raises(StoreError):
            lesson.skip_theory()
        assert lesson.phase == LessonPhase.THEORY
        assert tracker.get_topic_progress(user_id, 1) is None
        assert tracker.get_profile(user_id).xp == 0
        assert open_lesson().phase == LessonPhase.THEORY

        assert lesson.skip_theory() == 30
        assert tracker.get_topic_progress(user_id, 1).theory_gate_passed
        assert tracker.get_profile(user_id).xp == 30
        assert daily_goal.get_today_progress(user_id).earned_xp == 30

    def test_theory_without_profile_awards_nothing(self, navigator, loader, daily_goal, tracker):
        lesson = LessonSession.open(navigator, loader, daily_goal, "no-profile", 1, clock=lambda: NOW)
        assert lesson.complete_theory() == 0
        assert lesson.phase == LessonPhase.QUIZ
        assert tracker.get_topic_progress("no-profile", 1).theory_completed
        assert daily_goal.get_today_progress("no-profile").earned_xp == 0


class TestSnapshot:

    def test_snapshot_and_restore(self, open_lesson):
        lesson = open_lesson()
        lesson.skip_theory()
        answer_all(lesson, [3])
        lesson.select_answer(1)
        lesson.check_answer()
        snapshot = lesson.snapshot()
        assert snapshot == QuizSnapshot(
            current_question=1, selected_answer=1, correct_answers=1, show_feedback=True
        )

        restored = open_lesson()
        restored.restore(snapshot)
        assert restored.current_question == 1
        assert restored.correct_answers == 1
        feedback = restored.check_answer()
        assert not feedback.is_correct
        assert restored.correct_answers == 1

    def test_restore_out_of_range(self, open_lesson):
        open_lesson().skip_theory()
        lesson = open_lesson()
        with pytest.raises(ValidationError):
            lesson.restore(QuizSnapshot(current_question=7))
