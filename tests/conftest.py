"""Shared fixtures: temporary stores, compiled sample content, fixed clocks."""

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from lexlingo.classroom import (
    ContentLoader,
    DailyGoalTracker,
    Navigator,
    ProgressTracker,
)
from lexlingo.schemas import Question
from lexlingo.utils.content_db import compile_content_db

CONTENT_DIR = Path(__file__).parent.parent / "content"

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_question(qid: str = "q1", topic_id: int = 1, correct: int = 0, options=None) -> Question:
    return Question(
        id=qid,
        topic_id=topic_id,
        question=f"Question {qid}?",
        options=options or ["A", "B", "C", "D"],
        correct_answer=correct,
        explanation=f"Because of {qid}.",
    )


@pytest.fixture(scope="session")
def content_db(tmp_path_factory) -> Path:
    """content.db compiled once from the repository's content/ directory."""
    output = tmp_path_factory.mktemp("content") / "content.db"
    stats, issues = compile_content_db(CONTENT_DIR, output)
    assert issues == []
    return output


@pytest.fixture
def loader(content_db) -> ContentLoader:
    return ContentLoader(content_db)


@pytest.fixture
def tracker(tmp_path) -> ProgressTracker:
    return ProgressTracker(tmp_path / "progress.db")


@pytest.fixture
def daily_goal(tracker) -> DailyGoalTracker:
    return DailyGoalTracker(tracker, clock=lambda: TODAY)


@pytest.fixture
def navigator(loader, tracker) -> Navigator:
    return Navigator(loader, tracker)


@pytest.fixture
def user_id(tracker) -> str:
    tracker.create_profile("user-1", email="ana@example.com", name="Ana")
    return "user-1"
