"""
ContentLoader - Load data from content.db SQLite database.

Provides read-only access to:
- Tracks and topics (ordered by order_index)
- Theory sections per topic
- Quiz questions per topic (QuestionBank)
"""

import json
import sqlite3
from pathlib import Path
from typing import Optional, Protocol

from lexlingo.exceptions import StoreError
from lexlingo.schemas import Question, TheorySection, Topic, Track


class QuestionBank(Protocol):
    """Read-only quiz content keyed by topic id."""

    def get_questions(self, topic_id: int) -> list[Question]:
        ...


class StaticQuestionBank:
    """In-memory question bank, mainly for tests and fixtures."""

    def __init__(self, questions: dict[int, list[Question]]):
        self._questions = {topic_id: list(items) for topic_id, items in questions.items()}

    def get_questions(self, topic_id: int) -> list[Question]:
        return list(self._questions.get(topic_id, []))


class ContentLoader:
    """
    Load content from SQLite database.

    Thread-safe for read operations. Each method creates a new connection.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize loader with path to content.db.

        Args:
            db_path: Path to content.db file
        """
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            raise FileNotFoundError(f"Content database not found: {db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _fetch(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def get_all_metadata(self) -> dict[str, str]:
        """Get all metadata as a dictionary."""
        rows = self._fetch("SELECT key, value FROM metadata")
        return {row["key"]: row["value"] for row in rows}

    # -------------------------------------------------------------------------
    # Tracks
    # -------------------------------------------------------------------------

    def get_tracks(self) -> list[Track]:
        """Get all tracks ordered by order_index."""
        rows = self._fetch(
            "SELECT id, title, description, order_index FROM tracks ORDER BY order_index"
        )
        return [Track(**dict(row)) for row in rows]

    def get_track(self, track_id: int) -> Optional[Track]:
        rows = self._fetch(
            "SELECT id, title, description, order_index FROM tracks WHERE id = ?",
            (track_id,)
        )
        return Track(**dict(rows[0])) if rows else None

    # -------------------------------------------------------------------------
    # Topics
    # -------------------------------------------------------------------------

    def get_topics_for_track(self, track_id: int) -> list[Topic]:
        """Get all topics for a track, ordered by order_index."""
        rows = self._fetch(
            """SELECT id, track_id, title, description, order_index, total_lessons
               FROM topics
               WHERE track_id = ?
               ORDER BY order_index""",
            (track_id,)
        )
        return [Topic(**dict(row)) for row in rows]

    def get_topic(self, topic_id: int) -> Optional[Topic]:
        rows = self._fetch(
            """SELECT id, track_id, title, description, order_index, total_lessons
               FROM topics WHERE id = ?""",
            (topic_id,)
        )
        return Topic(**dict(rows[0])) if rows else None

    # -------------------------------------------------------------------------
    # Theory & Questions
    # -------------------------------------------------------------------------

    def get_theory_sections(self, topic_id: int) -> list[TheorySection]:
        """Theory sections for a topic, ordered by order_index."""
        rows = self._fetch(
            """SELECT id, topic_id, order_index, title, content, image_url
               FROM theory_sections
               WHERE topic_id = ?
               ORDER BY order_index""",
            (topic_id,)
        )
        return [TheorySection(**dict(row)) for row in rows]

    def get_questions(self, topic_id: int) -> list[Question]:
        """Quiz questions for a topic in authored order."""
        rows = self._fetch(
            """SELECT id, topic_id, question, options, correct_answer, explanation
               FROM questions
               WHERE topic_id = ?
               ORDER BY position""",
            (topic_id,)
        )
        return [
            Question(
                id=row["id"],
                topic_id=row["topic_id"],
                question=row["question"],
                options=json.loads(row["options"]),
                correct_answer=row["correct_answer"],
                explanation=row["explanation"] or "",
            )
            for row in rows
        ]
