"""
Lesson schemas for DailyLessons.

Lessons are read-only: text comes from the lesson file, image and audio
are resolved by file naming convention, video metadata from a JSON list.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class VideoRef(BaseModel):
    url: str = Field(min_length=1)
    title: Optional[str] = None


class Lesson(BaseModel):
    index: int = Field(ge=0)   # 0-based position in the curriculum
    text: str
    image_path: Optional[Path] = None
    audio_path: Optional[Path] = None
    video: Optional[VideoRef] = None

    @property
    def number(self) -> int:
        """1-based lesson number shown to subscribers."""
        return self.index + 1
