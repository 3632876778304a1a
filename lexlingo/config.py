"""
Runtime configuration for LexLingo.

Values come from the environment, optionally seeded from a `.env` file at the
project root.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_CONTENT_DB = PROJECT_ROOT / "data" / "content.db"
DEFAULT_PROGRESS_DIR = Path.home() / ".lexlingo"
DEFAULT_PROGRESS_DB = DEFAULT_PROGRESS_DIR / "progress.db"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class Settings(BaseModel):
    content_db: Path = DEFAULT_CONTENT_DB
    progress_db: Path = DEFAULT_PROGRESS_DB
    log_level: str = "INFO"
    admin_emails: list[str] = Field(default_factory=list)


def _parse_emails(raw: str) -> list[str]:
    return [email.strip().lower() for email in raw.split(",") if email.strip()]


@lru_cache
def get_settings() -> Settings:
    """Build settings from LEXLINGO_* environment variables."""
    return Settings(
        content_db=Path(os.environ.get("LEXLINGO_CONTENT_DB", DEFAULT_CONTENT_DB)).expanduser(),
        progress_db=Path(os.environ.get("LEXLINGO_PROGRESS_DB", DEFAULT_PROGRESS_DB)).expanduser(),
        log_level=os.environ.get("LEXLINGO_LOG_LEVEL", "INFO").upper(),
        admin_emails=_parse_emails(os.environ.get("LEXLINGO_ADMIN_EMAILS", "")),
    )


def configure_logging(level: str | None = None):
    """Configure root logging once for scripts and the app."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format=LOG_FORMAT,
    )
