#!/usr/bin/env python3
"""
compile_content.py - Bundle YAML content into the runtime content.db.

Validates tracks.yaml and every topic_*.yaml file against the content
schemas and writes a single SQLite database for the app.

Usage:
  python scripts/compile_content.py
  python scripts/compile_content.py --content content --output data/content.db
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from lexlingo.config import configure_logging, get_settings
from lexlingo.utils.content_db import compile_content_db
from lexlingo.utils.content_files import CONTENT_DIR

configure_logging()
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Compile content database from YAML tracks and topics",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--content",
        type=Path,
        default=CONTENT_DIR,
        help="Path to content directory"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=get_settings().content_db,
        help="Output database path"
    )
    parser.add_argument(
        "--stats-output",
        type=Path,
        default=None,
        help="Output path for stats JSON (default: alongside database)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error when integrity checks report issues"
    )

    args = parser.parse_args()

    try:
        stats, issues = compile_content_db(args.content, args.output)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except ValidationError as e:
        logger.error(f"Invalid content:\n{e}")
        sys.exit(1)

    if issues:
        logger.warning(f"Found {len(issues)} integrity issues:")
        for issue in issues[:10]:
            logger.warning(f"  - {issue}")
        if len(issues) > 10:
            logger.warning(f"  ... and {len(issues) - 10} more")
    else:
        logger.info("  All integrity checks passed!")

    stats_path = args.stats_output or args.output.with_suffix(".stats.json")
    with open(stats_path, "w", encoding="utf-8") as f:
        json.dump(stats, f, indent=2, ensure_ascii=False)
    logger.info(f"Saved stats to: {stats_path}")

    logger.info("\n" + "=" * 50)
    logger.info("COMPILATION COMPLETE")
    logger.info("=" * 50)
    logger.info(f"Database: {args.output}")
    logger.info(f"Tracks: {stats['total_tracks']}")
    logger.info(f"Topics: {stats['total_topics']} ({stats['total_lessons']} lessons)")
    logger.info(f"Theory sections: {stats['total_theory_sections']}")
    logger.info(f"Questions: {stats['total_questions']}")

    if issues and args.strict:
        sys.exit(1)


if __name__ == "__main__":
    main()
