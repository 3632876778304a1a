"""
Content file loader for LexLingo.

Loads YAML content (tracks and per-topic theory/questions) from the content/
directory and validates it through the content schemas.
"""

from pathlib import Path
from typing import Any
import yaml

from lexlingo.schemas import Question, TheorySection, Topic, TopicContent, Track


# Default content directory (relative to project root)
CONTENT_DIR = Path(__file__).parent.parent.parent / "content"

TRACKS_FILE = "tracks"
TOPIC_FILE_PREFIX = "topic_"


def load_content_file(name: str, content_dir: Path | None = None) -> dict[str, Any]:
    """
    Load a content file by name.

    Args:
        name: File name without .yaml extension (e.g., "tracks")
        content_dir: Optional custom content directory

    Returns:
        Dict containing the parsed YAML document

    Raises:
        FileNotFoundError: If content file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    dir_path = content_dir or CONTENT_DIR
    file_path = dir_path / f"{name}.yaml"

    if not file_path.exists():
        raise FileNotFoundError(f"Content file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_available_content_files(content_dir: Path | None = None) -> list[str]:
    """
    List all content files.

    Returns:
        Sorted list of names (without .yaml extension)
    """
    dir_path = content_dir or CONTENT_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))


def load_tracks(content_dir: Path | None = None) -> list[Track]:
    data = load_content_file(TRACKS_FILE, content_dir)
    return [Track(**item) for item in data.get("tracks", [])]


def parse_topic_document(data: dict[str, Any]) -> TopicContent:
    """
    Build a TopicContent from one topic document.

    Theory sections and questions are numbered in file order; ids and
    order_index are derived when not given.
    """
    topic = Topic(**data["topic"])
    theory = [
        TheorySection(
            id=item.get("id", f"t{topic.id}_s{position}"),
            topic_id=topic.id,
            order_index=item.get("order_index", position),
            title=item["title"],
            content=item["content"],
            image_url=item.get("image_url"),
        )
        for position, item in enumerate(data.get("theory") or [])
    ]
    questions = [
        Question(
            id=item.get("id", f"t{topic.id}_q{position}"),
            topic_id=topic.id,
            question=item["question"],
            options=item["options"],
            correct_answer=item["correct_answer"],
            explanation=item.get("explanation", ""),
        )
        for position, item in enumerate(data.get("questions") or [])
    ]
    return TopicContent(topic=topic, theory=theory, questions=questions)


def load_topic_contents(content_dir: Path | None = None) -> list[TopicContent]:
    """Load every topic_*.yaml file in the content directory."""
    return [
        parse_topic_document(load_content_file(name, content_dir))
        for name in get_available_content_files(content_dir)
        if name.startswith(TOPIC_FILE_PREFIX)
    ]
