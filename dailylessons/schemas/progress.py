"""
Progress schemas for DailyLessons.

Defines Pydantic models for the persisted progress file:
- Subscriber records (one per chat)
- The whole progress document

Field aliases match the on-disk JSON keys.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriberRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    next_lesson_index: int = Field(default=0, ge=0, alias="currentLesson")
    last_delivered_at: Optional[datetime] = Field(default=None, alias="lastSentAt")
    registered_at: datetime = Field(default_factory=utcnow, alias="joinedAt")

    def delivered_count(self, total_lessons: int) -> int:
        return min(self.next_lesson_index, total_lessons)

    def is_due(self, total_lessons: int) -> bool:
        return self.next_lesson_index < total_lessons


class ProgressDocument(BaseModel):
    users: dict[str, SubscriberRecord] = {}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
