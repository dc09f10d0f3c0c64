"""
DailyLessons Classroom - Lesson content and subscriber progress.

This module provides:
- LessonLoader: Read lesson texts and resolve image/audio/video assets
- ProgressStore: Durable per-subscriber progress
"""

from .loader import (
    LessonLoader,
    DEFAULT_MAX_LESSONS,
    image_filename,
    audio_filename,
)

from .progress import (
    ProgressStore,
    ProgressBackend,
    JsonFileBackend,
    MemoryBackend,
    DEFAULT_PROGRESS_PATH,
)

__all__ = [
    # Loader
    "LessonLoader",
    "DEFAULT_MAX_LESSONS",
    "image_filename",
    "audio_filename",
    # Progress
    "ProgressStore",
    "ProgressBackend",
    "JsonFileBackend",
    "MemoryBackend",
    "DEFAULT_PROGRESS_PATH",
]
