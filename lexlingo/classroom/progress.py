"""
ProgressTracker - Learner state in ~/.lexlingo/progress.db.

Stores user progress separately from content database:
- Accounts and profiles (XP, level, streak)
- Per-topic progress (lessons completed, theory flags)
- Per-day XP totals
- Saved quiz state for suspend/resume

Every committed write is published on the ChangeFeed.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional
from uuid import uuid4

from lexlingo.config import DEFAULT_PROGRESS_DB
from lexlingo.exceptions import StoreError
from lexlingo.schemas import DailyProgress, Profile, QuizSnapshot, TopicProgress

from .events import ChangeFeed, ChangeType

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    user_id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    email TEXT,
    name TEXT,
    xp INTEGER NOT NULL DEFAULT 0,
    level INTEGER NOT NULL DEFAULT 1,
    streak INTEGER NOT NULL DEFAULT 0,
    last_active TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS topic_progress (
    user_id TEXT NOT NULL,
    topic_id INTEGER NOT NULL,
    lessons_completed INTEGER NOT NULL DEFAULT 0,
    theory_completed INTEGER NOT NULL DEFAULT 0,
    theory_skipped INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (user_id, topic_id)
);

CREATE TABLE IF NOT EXISTS daily_progress (
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    points INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (user_id, date)
);

CREATE TABLE IF NOT EXISTS saved_quiz_state (
    user_id TEXT NOT NULL,
    topic_id INTEGER NOT NULL,
    state JSON NOT NULL,
    saved_at TEXT NOT NULL,
    PRIMARY KEY (user_id, topic_id)
);

CREATE INDEX IF NOT EXISTS idx_daily_progress_user
ON daily_progress(user_id);
"""

PROFILE_FIELDS = {"email", "name", "xp", "level", "streak", "last_active"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class ProgressTracker:
    """
    Track learner progress in SQLite database.

    Progress is stored separately from content (content.db) so that:
    - Content can be recompiled without losing progress
    - Progress is user-specific, content is shared
    """

    def __init__(self, db_path: Optional[Path] = None, feed: Optional[ChangeFeed] = None):
        """
        Initialize progress tracker.

        Args:
            db_path: Path to progress.db (default: ~/.lexlingo/progress.db)
            feed: ChangeFeed receiving row change events
        """
        self.db_path = Path(db_path or DEFAULT_PROGRESS_DB)
        self.feed = feed or ChangeFeed()
        self._active: Optional[sqlite3.Connection] = None
        self._deferred: Optional[list] = None
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as conn:
            conn.executescript(SCHEMA)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and raises StoreError on failure.

        Inside transaction() the shared connection is reused and the commit
        is left to the outermost scope.
        """
        if self._active is not None:
            yield self._active
            return
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Progress store failure on {self.db_path}: {e}")
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Group several writes into one commit.

        Any exception inside the block discards every write made in it.
        Change events are held back and published only after the commit.
        Nested scopes join the outermost one.
        """
        if self._active is not None:
            yield self._active
            return
        deferred: list[tuple[str, ChangeType, dict]] = []
        self._deferred = deferred
        try:
            with self._connection() as conn:
                self._active = conn
                try:
                    yield conn
                finally:
                    self._active = None
        finally:
            self._deferred = None
        for table, change, row in deferred:
            self.feed.publish(table, change, row)

    def _publish(self, table: str, change: ChangeType, row: dict):
        if self._deferred is not None:
            self._deferred.append((table, change, row))
        else:
            self.feed.publish(table, change, row)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def create_account(self, email: str, password_hash: str) -> str:
        """Insert credentials and return the new user id."""
        user_id = str(uuid4())
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO accounts (user_id, email, password_hash, created_at)
                   VALUES (?, ?, ?, ?)""",
                (user_id, email, password_hash, _now())
            )
        return user_id

    def get_account(self, email: str) -> Optional[dict]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT user_id, email, password_hash FROM accounts WHERE email = ?",
                (email,)
            ).fetchone()
        return dict(row) if row else None

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def create_profile(self, user_id: str, email: Optional[str] = None,
                       name: Optional[str] = None) -> Profile:
        """Create a fresh profile (XP 0, level 1, streak 0)."""
        now = _now()
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO profiles (id, email, name, xp, level, streak, created_at, updated_at)
                   VALUES (?, ?, ?, 0, 1, 0, ?, ?)""",
                (user_id, email, name, now, now)
            )
        profile = self.get_profile(user_id)
        self._publish("profiles", ChangeType.INSERT, profile.model_dump(mode="json"))
        return profile

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with self._connection() as conn:
            row = conn.execute(
                """SELECT id, email, name, xp, level, streak, last_active, created_at, updated_at
                   FROM profiles WHERE id = ?""",
                (user_id,)
            ).fetchone()
        return self._row_to_profile(row) if row else None

    def list_profiles(self) -> list[Profile]:
        """All profiles, newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                """SELECT id, email, name, xp, level, streak, last_active, created_at, updated_at
                   FROM profiles ORDER BY created_at DESC"""
            ).fetchall()
        return [self._row_to_profile(row) for row in rows]

    def update_profile(self, user_id: str, **fields) -> Optional[Profile]:
        """
        Update profile columns by id. Last writer wins.

        Returns the updated profile, or None when no such profile exists.
        """
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        if isinstance(fields.get("last_active"), datetime):
            fields["last_active"] = fields["last_active"].isoformat()
        fields["updated_at"] = _now()

        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self._connection() as conn:
            cursor = conn.execute(
                f"UPDATE profiles SET {assignments} WHERE id = ?",
                (*fields.values(), user_id)
            )
            updated = cursor.rowcount > 0
        if not updated:
            return None
        profile = self.get_profile(user_id)
        self._publish("profiles", ChangeType.UPDATE, profile.model_dump(mode="json"))
        return profile

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> Profile:
        return Profile(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            xp=row["xp"],
            level=row["level"],
            streak=row["streak"],
            last_active=_parse_ts(row["last_active"]),
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    # -------------------------------------------------------------------------
    # Topic Progress
    # -------------------------------------------------------------------------

    def get_topic_progress(self, user_id: str, topic_id: int) -> Optional[TopicProgress]:
        with self._connection() as conn:
            row = conn.execute(
                """SELECT user_id, topic_id, lessons_completed, theory_completed, theory_skipped
                   FROM topic_progress WHERE user_id = ? AND topic_id = ?""",
                (user_id, topic_id)
            ).fetchone()
        return self._row_to_topic_progress(row) if row else None

    def get_all_topic_progress(self, user_id: str) -> dict[int, TopicProgress]:
        """All topic progress rows for a user keyed by topic id."""
        with self._connection() as conn:
            rows = conn.execute(
                """SELECT user_id, topic_id, lessons_completed, theory_completed, theory_skipped
                   FROM topic_progress WHERE user_id = ?""",
                (user_id,)
            ).fetchall()
        return {row["topic_id"]: self._row_to_topic_progress(row) for row in rows}

    def upsert_topic_progress(
        self,
        user_id: str,
        topic_id: int,
        theory_completed: Optional[bool] = None,
        theory_skipped: Optional[bool] = None,
        lessons_completed: Optional[int] = None,
    ) -> TopicProgress:
        """
        Insert or update the (user_id, topic_id) row.

        Arguments left as None keep their stored value (or the column default
        on insert).
        """
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO topic_progress
                     (user_id, topic_id, lessons_completed, theory_completed, theory_skipped)
                   VALUES (?, ?, COALESCE(?, 0), COALESCE(?, 0), COALESCE(?, 0))
                   ON CONFLICT(user_id, topic_id) DO UPDATE SET
                     lessons_completed = COALESCE(?, lessons_completed),
                     theory_completed = COALESCE(?, theory_completed),
                     theory_skipped = COALESCE(?, theory_skipped)""",
                (
                    user_id, topic_id, lessons_completed, theory_completed, theory_skipped,
                    lessons_completed, theory_completed, theory_skipped,
                )
            )
        progress = self.get_topic_progress(user_id, topic_id)
        self._publish("topic_progress", ChangeType.UPDATE, progress.model_dump())
        return progress

    def increment_lessons_completed(self, user_id: str, topic_id: int) -> TopicProgress:
        """Add one completed lesson, inserting the row at 1 if absent."""
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO topic_progress (user_id, topic_id, lessons_completed)
                   VALUES (?, ?, 1)
                   ON CONFLICT(user_id, topic_id) DO UPDATE SET
                     lessons_completed = lessons_completed + 1""",
                (user_id, topic_id)
            )
        progress = self.get_topic_progress(user_id, topic_id)
        self._publish("topic_progress", ChangeType.UPDATE, progress.model_dump())
        return progress

    def delete_topic_progress_for_user(self, user_id: str) -> int:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM topic_progress WHERE user_id = ?", (user_id,))
            deleted = cursor.rowcount
        self._publish("topic_progress", ChangeType.DELETE, {"user_id": user_id})
        return deleted

    @staticmethod
    def _row_to_topic_progress(row: sqlite3.Row) -> TopicProgress:
        return TopicProgress(
            user_id=row["user_id"],
            topic_id=row["topic_id"],
            lessons_completed=row["lessons_completed"],
            theory_completed=bool(row["theory_completed"]),
            theory_skipped=bool(row["theory_skipped"]),
        )

    # -------------------------------------------------------------------------
    # Daily Progress
    # -------------------------------------------------------------------------

    def get_daily_progress(self, user_id: str, date: str) -> Optional[DailyProgress]:
        """Row for an exact ISO date string, or None."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT user_id, date, points FROM daily_progress WHERE user_id = ? AND date = ?",
                (user_id, date)
            ).fetchone()
        return DailyProgress(**dict(row)) if row else None

    def increment_daily_points(self, user_id: str, date: str, amount: int) -> DailyProgress:
        """
        Add points to the (user_id, date) row in a single statement.

        The increment happens inside SQLite, so concurrent writers cannot
        overwrite each other's points.
        """
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO daily_progress (user_id, date, points)
                   VALUES (?, ?, ?)
                   ON CONFLICT(user_id, date) DO UPDATE SET
                     points = points + excluded.points""",
                (user_id, date, amount)
            )
        progress = self.get_daily_progress(user_id, date)
        self._publish("daily_progress", ChangeType.UPDATE, progress.model_dump())
        return progress

    def get_daily_history(self, user_id: str, since: str) -> list[DailyProgress]:
        """Rows with date >= since, oldest first."""
        with self._connection() as conn:
            rows = conn.execute(
                """SELECT user_id, date, points FROM daily_progress
                   WHERE user_id = ? AND date >= ?
                   ORDER BY date ASC""",
                (user_id, since)
            ).fetchall()
        return [DailyProgress(**dict(row)) for row in rows]

    def delete_daily_progress_for_user(self, user_id: str) -> int:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM daily_progress WHERE user_id = ?", (user_id,))
            deleted = cursor.rowcount
        self._publish("daily_progress", ChangeType.DELETE, {"user_id": user_id})
        return deleted

    # -------------------------------------------------------------------------
    # Saved Quiz State
    # -------------------------------------------------------------------------

    def save_quiz_state(self, user_id: str, topic_id: int, snapshot: QuizSnapshot):
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO saved_quiz_state (user_id, topic_id, state, saved_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(user_id, topic_id) DO UPDATE SET
                     state = excluded.state,
                     saved_at = excluded.saved_at""",
                (user_id, topic_id, snapshot.model_dump_json(), _now())
            )

    def get_quiz_state(self, user_id: str, topic_id: int) -> Optional[QuizSnapshot]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT state FROM saved_quiz_state WHERE user_id = ? AND topic_id = ?",
                (user_id, topic_id)
            ).fetchone()
        if not row:
            return None
        return QuizSnapshot(**json.loads(row["state"]))

    def delete_quiz_state(self, user_id: str, topic_id: int) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM saved_quiz_state WHERE user_id = ? AND topic_id = ?",
                (user_id, topic_id)
            )
            return cursor.rowcount > 0

    def delete_quiz_states_for_user(self, user_id: str) -> int:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM saved_quiz_state WHERE user_id = ?", (user_id,))
            return cursor.rowcount
