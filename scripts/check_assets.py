#!/usr/bin/env python3
"""
check_assets.py - Report which lessons are missing their image, audio or video.

Reads the same configuration as the bot (environment / .env) so the report
matches what subscribers will actually receive. Missing assets never stop a
delivery; this script only makes the gaps visible before the bot runs.

Usage:
  python scripts/check_assets.py
  python scripts/check_assets.py --strict              # Exit 1 if anything is missing
  python scripts/check_assets.py --lessons other.json  # Override LESSONS_PATH
"""

import argparse
import logging
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

from dailylessons.classroom import LessonLoader, audio_filename, image_filename
from dailylessons.errors import ConfigurationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def audit(loader: LessonLoader) -> dict[str, list[int]]:
    """
    Collect lesson numbers with missing assets.

    Returns:
        Dictionary mapping asset kind ("text", "image", "audio", "video") to
        1-based lesson numbers lacking it
    """
    missing: dict[str, list[int]] = {"text": [], "image": [], "audio": [], "video": []}

    for index in range(loader.total_lessons):
        number = index + 1
        lesson = loader.get_lesson(index)
        if lesson is None:
            missing["text"].append(number)
            continue
        if lesson.image_path is None:
            missing["image"].append(number)
        if lesson.audio_path is None:
            missing["audio"].append(number)
        if lesson.video is None:
            missing["video"].append(number)

    return missing


def main():
    parser = argparse.ArgumentParser(
        description="Report lessons with missing image, audio or video assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Naming conventions:
  images/devine-name-<n>.jpg     (n = 1-based lesson number)
  tts_audio/lesson_<nnn>.wav     (zero-padded 1-based lesson number)

Example:
  python scripts/check_assets.py --strict
        """
    )
    parser.add_argument(
        "--lessons",
        type=Path,
        default=Path(os.environ.get("LESSONS_PATH", "daily_lessons.json")),
        help="JSON array of lesson texts"
    )
    parser.add_argument(
        "--images",
        type=Path,
        default=Path(os.environ.get("LESSON_IMAGES_DIR", "images")),
        help="Directory with lesson images"
    )
    parser.add_argument(
        "--audio",
        type=Path,
        default=Path(os.environ.get("LESSON_AUDIO_DIR", "tts_audio")),
        help="Directory with lesson audio"
    )
    parser.add_argument(
        "--videos",
        type=Path,
        default=Path(os.environ.get("LESSON_VIDEOS_PATH", "asma_ul_husna_videos.json")),
        help="JSON array of {title, url} video metadata"
    )
    parser.add_argument(
        "--max-lessons",
        type=int,
        default=int(os.environ.get("MAX_LESSONS", "100")),
        help="Maximum number of lessons (default: 100)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any asset is missing"
    )

    args = parser.parse_args()

    try:
        loader = LessonLoader(
            args.lessons, args.images, args.audio, args.videos, max_lessons=args.max_lessons
        )
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Checking {loader.total_lessons} lessons from {args.lessons}...")
    missing = audit(loader)

    for kind, numbers in missing.items():
        if not numbers:
            continue
        logger.warning(f"Missing {kind} for {len(numbers)} lesson(s): {numbers}")
        if kind == "image":
            logger.warning(f"  expected e.g. {args.images / image_filename(numbers[0])}")
        elif kind == "audio":
            logger.warning(f"  expected e.g. {args.audio / audio_filename(numbers[0])}")

    # Summary
    logger.info("=" * 50)
    logger.info("ASSET CHECK COMPLETE")
    logger.info("=" * 50)
    logger.info(f"Total lessons: {loader.total_lessons}")
    for kind, numbers in missing.items():
        logger.info(f"Missing {kind}: {len(numbers)}")

    if args.strict and any(missing.values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
