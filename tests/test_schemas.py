"""
Schema validation tests for LexLingo.

Tests all Pydantic models to ensure they validate correctly.
"""

import pytest
from pydantic import ValidationError

from lexlingo.schemas import (
    # Content
    Track,
    Topic,
    TheorySection,
    Question,
    TopicContent,
    # Progress
    LessonPhase,
    Profile,
    TopicProgress,
    DailyProgress,
    QuizSnapshot,
)


class TestTrackAndTopic:
    """Test hierarchy models."""

    def test_valid_track(self):
        track = Track(id=1, title="Law of Obligations", order_index=0)
        assert track.description == ""

    def test_negative_order_index_rejected(self):
        with pytest.raises(ValidationError):
            Track(id=1, title="T", order_index=-1)

    def test_topic_requires_at_least_one_lesson(self):
        with pytest.raises(ValidationError):
            Topic(id=1, track_id=1, title="T", order_index=0, total_lessons=0)

    def test_valid_topic(self):
        topic = Topic(id=1, track_id=1, title="Fundamentals", order_index=0, total_lessons=10)
        assert topic.total_lessons == 10


class TestQuestion:
    """Test multiple-choice question model."""

    def test_valid_question(self):
        q = Question(
            id="q1", topic_id=1, question="Which?",
            options=["A", "B", "C", "D"], correct_answer=3,
        )
        assert q.is_correct(3)
        assert not q.is_correct(0)

    def test_correct_answer_out_of_range(self):
        with pytest.raises(ValidationError):
            Question(id="q1", topic_id=1, question="Which?", options=["A", "B"], correct_answer=2)

    def test_negative_correct_answer(self):
        with pytest.raises(ValidationError):
            Question(id="q1", topic_id=1, question="Which?", options=["A", "B"], correct_answer=-1)

    def test_needs_two_options(self):
        with pytest.raises(ValidationError):
            Question(id="q1", topic_id=1, question="Which?", options=["A"], correct_answer=0)


class TestTopicContent:

    def test_defaults_to_empty_lists(self):
        content = TopicContent(topic=Topic(id=1, track_id=1, title="T", order_index=0, total_lessons=1))
        assert content.theory == []
        assert content.questions == []

    def test_theory_section_image_optional(self):
        section = TheorySection(id="s1", topic_id=1, order_index=0, title="Intro", content="Text")
        assert section.image_url is None


class TestProgressModels:
    """Test learner state models."""

    def test_new_profile_defaults(self):
        profile = Profile(id="u1")
        assert (profile.xp, profile.level, profile.streak) == (0, 1, 0)

    def test_profile_rejects_negative_xp(self):
        with pytest.raises(ValidationError):
            Profile(id="u1", xp=-5)

    def test_theory_gate_passed_by_either_flag(self):
        assert not TopicProgress(user_id="u", topic_id=1).theory_gate_passed
        assert TopicProgress(user_id="u", topic_id=1, theory_completed=True).theory_gate_passed
        assert TopicProgress(user_id="u", topic_id=1, theory_skipped=True).theory_gate_passed

    def test_daily_progress_points_non_negative(self):
        with pytest.raises(ValidationError):
            DailyProgress(user_id="u", date="2026-03-10", points=-1)

    def test_quiz_snapshot_json_roundtrip(self):
        snapshot = QuizSnapshot(current_question=2, selected_answer=1, correct_answers=1, show_feedback=True)
        assert QuizSnapshot.model_validate_json(snapshot.model_dump_json()) == snapshot

    def test_lesson_phase_values(self):
        assert LessonPhase("theory") == LessonPhase.THEORY
        assert LessonPhase.COMPLETE.value == "complete"
