"""LexLingo utilities."""

from .content_files import (
    load_content_file,
    get_available_content_files,
    load_tracks,
    load_topic_contents,
    parse_topic_document,
)
from .content_db import compile_content_db, run_integrity_checks, compute_stats

__all__ = [
    "load_content_file",
    "get_available_content_files",
    "load_tracks",
    "load_topic_contents",
    "parse_topic_document",
    "compile_content_db",
    "run_integrity_checks",
    "compute_stats",
]
