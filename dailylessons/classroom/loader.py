"""
LessonLoader - Read-only access to the lesson assets produced by preprocessing.

Provides:
- Lesson text from a JSON array of strings
- Image lookup by 1-based lesson number (devine-name-<n>.jpg)
- Audio lookup by zero-padded lesson number (lesson_<nnn>.wav)
- Video metadata from a JSON array aligned by lesson index

Any image, audio or video may be missing; only the lesson text is required.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dailylessons.errors import ConfigurationError
from dailylessons.schemas import Lesson, VideoRef

logger = logging.getLogger(__name__)


DEFAULT_MAX_LESSONS = 100


def image_filename(lesson_number: int) -> str:
    return f"devine-name-{lesson_number}.jpg"


def audio_filename(lesson_number: int) -> str:
    return f"lesson_{lesson_number:03d}.wav"


def _read_json(path: Path, fallback: Any) -> Any:
    """Read a JSON file, returning fallback if it does not exist."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return fallback


class LessonLoader:
    """
    Load lessons and resolve their assets.

    Lesson text and video metadata are read once at construction. Image and
    audio files are looked up on every call so that files added while the bot
    runs are picked up.
    """

    def __init__(
        self,
        lessons_path: str | Path,
        images_dir: str | Path,
        audio_dir: str | Path,
        videos_path: Optional[str | Path] = None,
        max_lessons: int = DEFAULT_MAX_LESSONS,
    ):
        """
        Initialize loader.

        Args:
            lessons_path: JSON file holding an array of lesson texts
            images_dir: Directory with devine-name-<n>.jpg images
            audio_dir: Directory with lesson_<nnn>.wav audio files
            videos_path: Optional JSON file holding an array of {title, url}
            max_lessons: Upper bound on the number of lessons served

        Raises:
            ConfigurationError: If the lesson file is unreadable, not an array or empty
        """
        self.lessons_path = Path(lessons_path)
        self.images_dir = Path(images_dir)
        self.audio_dir = Path(audio_dir)
        self.videos_path = Path(videos_path) if videos_path else None

        self._texts = self._load_texts(max_lessons)
        self._videos = self._load_videos(len(self._texts))

    def _load_texts(self, max_lessons: int) -> list[str]:
        try:
            data = _read_json(self.lessons_path, [])
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read lessons from {self.lessons_path}: {e}") from e

        if not isinstance(data, list):
            raise ConfigurationError(
                f"Expected an array in {self.lessons_path}, received {type(data).__name__}"
            )

        texts = [item if isinstance(item, str) else "" for item in data[:max_lessons]]
        if not texts:
            raise ConfigurationError(f"No lessons found in {self.lessons_path}")
        return texts

    def _load_videos(self, lesson_count: int) -> list[Optional[VideoRef]]:
        if self.videos_path is None:
            return []

        try:
            data = _read_json(self.videos_path, [])
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring videos: cannot read {self.videos_path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(
                f"Ignoring videos: expected an array in {self.videos_path}, "
                f"received {type(data).__name__}"
            )
            return []

        videos: list[Optional[VideoRef]] = []
        for position, item in enumerate(data[:lesson_count]):
            if not item:
                videos.append(None)
                continue
            try:
                videos.append(VideoRef.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping video metadata for lesson {position + 1}: {e}")
                videos.append(None)
        return videos

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    @property
    def total_lessons(self) -> int:
        """Total number of lessons in the curriculum."""
        return len(self._texts)

    def get_lesson(self, index: int) -> Optional[Lesson]:
        """
        Get a lesson with its resolved assets.

        Args:
            index: 0-based lesson index

        Returns:
            Lesson, or None if the index is out of range or has no text
        """
        if index < 0 or index >= len(self._texts):
            return None

        text = self._texts[index]
        if not text.strip():
            return None

        number = index + 1
        return Lesson(
            index=index,
            text=text,
            image_path=self.get_image_path(number),
            audio_path=self.get_audio_path(number),
            video=self.get_video(index),
        )

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    def get_image_path(self, lesson_number: int) -> Optional[Path]:
        """Get the image for a 1-based lesson number if it exists."""
        image_path = self.images_dir / image_filename(lesson_number)
        if image_path.is_file():
            return image_path
        return None

    def get_audio_path(self, lesson_number: int) -> Optional[Path]:
        """Get the audio file for a 1-based lesson number if it exists."""
        audio_path = self.audio_dir / audio_filename(lesson_number)
        if audio_path.is_file():
            return audio_path
        return None

    def get_video(self, index: int) -> Optional[VideoRef]:
        """Get video metadata for a 0-based lesson index."""
        if 0 <= index < len(self._videos):
            return self._videos[index]
        return None
