"""
Compile YAML content into the read-only content.db served at runtime.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from lexlingo.schemas import TopicContent, Track

from .content_files import load_topic_contents, load_tracks

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# SQLite Schema
# -----------------------------------------------------------------------------

SCHEMA = """
-- Tracks table
CREATE TABLE IF NOT EXISTS tracks (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    order_index INTEGER NOT NULL
);

-- Topics table
CREATE TABLE IF NOT EXISTS topics (
    id INTEGER PRIMARY KEY,
    track_id INTEGER NOT NULL REFERENCES tracks(id),
    title TEXT NOT NULL,
    description TEXT,
    order_index INTEGER NOT NULL,
    total_lessons INTEGER NOT NULL DEFAULT 1
);

-- Theory sections table
CREATE TABLE IF NOT EXISTS theory_sections (
    id TEXT PRIMARY KEY,
    topic_id INTEGER NOT NULL REFERENCES topics(id),
    order_index INTEGER NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    image_url TEXT
);

-- Questions table (options stored as JSON array)
CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    topic_id INTEGER NOT NULL REFERENCES topics(id),
    position INTEGER NOT NULL,
    question TEXT NOT NULL,
    options JSON NOT NULL,
    correct_answer INTEGER NOT NULL,
    explanation TEXT
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_topics_track ON topics(track_id);
CREATE INDEX IF NOT EXISTS idx_theory_topic ON theory_sections(topic_id);
CREATE INDEX IF NOT EXISTS idx_questions_topic ON questions(topic_id);

-- Metadata table
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""


# -----------------------------------------------------------------------------
# Database Population
# -----------------------------------------------------------------------------

def create_database(db_path: Path) -> sqlite3.Connection:
    """Create database and schema, replacing any previous build."""
    if db_path.exists():
        db_path.unlink()
        logger.info(f"Removed existing database: {db_path}")

    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    logger.info(f"Created database schema: {db_path}")
    return conn


def populate_tracks(conn: sqlite3.Connection, tracks: list[Track]):
    for track in tracks:
        conn.execute(
            "INSERT INTO tracks (id, title, description, order_index) VALUES (?, ?, ?, ?)",
            (track.id, track.title, track.description, track.order_index)
        )
    conn.commit()
    logger.info(f"Inserted {len(tracks)} tracks")


def populate_topics(conn: sqlite3.Connection, contents: list[TopicContent]):
    """Populate topics, theory sections and questions."""
    sections = questions = 0

    for content in contents:
        topic = content.topic
        conn.execute(
            """INSERT INTO topics
               (id, track_id, title, description, order_index, total_lessons)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (topic.id, topic.track_id, topic.title, topic.description,
             topic.order_index, topic.total_lessons)
        )
        for section in content.theory:
            conn.execute(
                """INSERT INTO theory_sections
                   (id, topic_id, order_index, title, content, image_url)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (section.id, topic.id, section.order_index, section.title,
                 section.content, section.image_url)
            )
            sections += 1
        for position, question in enumerate(content.questions):
            conn.execute(
                """INSERT INTO questions
                   (id, topic_id, position, question, options, correct_answer, explanation)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (question.id, topic.id, position, question.question,
                 json.dumps(question.options, ensure_ascii=False),
                 question.correct_answer, question.explanation)
            )
            questions += 1

    conn.commit()
    logger.info(f"Inserted {len(contents)} topics, {sections} theory sections, {questions} questions")


def populate_metadata(conn: sqlite3.Connection, stats: dict):
    for key, value in stats.items():
        conn.execute(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            (key, json.dumps(value) if isinstance(value, (dict, list)) else str(value))
        )
    conn.commit()
    logger.info("Inserted metadata")


# -----------------------------------------------------------------------------
# Integrity Checks
# -----------------------------------------------------------------------------

def run_integrity_checks(conn: sqlite3.Connection) -> list[str]:
    """Run integrity checks on the compiled database."""
    issues = []

    # Check: All topics belong to an existing track
    cursor = conn.execute("""
        SELECT t.id, t.track_id FROM topics t
        LEFT JOIN tracks tr ON t.track_id = tr.id
        WHERE tr.id IS NULL
    """)
    for row in cursor:
        issues.append(f"Topic {row[0]} references missing track: {row[1]}")

    # Check: All topics have at least one question
    cursor = conn.execute("""
        SELECT t.id FROM topics t
        LEFT JOIN questions q ON t.id = q.topic_id
        GROUP BY t.id
        HAVING COUNT(q.id) = 0
    """)
    for row in cursor:
        issues.append(f"Topic {row[0]} has no questions")

    # Check: order_index is unique within each track
    cursor = conn.execute("""
        SELECT track_id, order_index FROM topics
        GROUP BY track_id, order_index
        HAVING COUNT(*) > 1
    """)
    for row in cursor:
        issues.append(f"Track {row[0]} has duplicate topic order_index {row[1]}")

    cursor = conn.execute("""
        SELECT order_index FROM tracks
        GROUP BY order_index
        HAVING COUNT(*) > 1
    """)
    for row in cursor:
        issues.append(f"Duplicate track order_index {row[0]}")

    return issues


# -----------------------------------------------------------------------------
# Statistics
# -----------------------------------------------------------------------------

def compute_stats(conn: sqlite3.Connection) -> dict:
    """Compute content statistics."""
    stats = {
        "compiled_at": datetime.now().isoformat(),
        "total_tracks": conn.execute("SELECT COUNT(*) FROM tracks").fetchone()[0],
        "total_topics": conn.execute("SELECT COUNT(*) FROM topics").fetchone()[0],
        "total_theory_sections": conn.execute("SELECT COUNT(*) FROM theory_sections").fetchone()[0],
        "total_questions": conn.execute("SELECT COUNT(*) FROM questions").fetchone()[0],
    }
    stats["total_lessons"] = conn.execute(
        "SELECT COALESCE(SUM(total_lessons), 0) FROM topics"
    ).fetchone()[0]
    return stats


def compile_content_db(content_dir: Path | None, output: Path) -> tuple[dict, list[str]]:
    """
    Build content.db from a content directory.

    Returns:
        (stats, integrity issues)
    """
    tracks = load_tracks(content_dir)
    contents = load_topic_contents(content_dir)
    logger.info(f"Loaded {len(tracks)} tracks and {len(contents)} topic files")

    conn = create_database(output)
    try:
        populate_tracks(conn, tracks)
        populate_topics(conn, contents)

        issues = run_integrity_checks(conn)
        stats = compute_stats(conn)
        populate_metadata(conn, stats)
    finally:
        conn.close()

    return stats, issues
