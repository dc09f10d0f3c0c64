"""
Delivery outcome schemas.

A DeliveryReport describes one (subscriber, lesson) attempt. It is never
persisted; only the Progress Store holds durable state.
"""

from enum import Enum

from pydantic import BaseModel


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"                          # primary text could not be sent
    LESSON_UNAVAILABLE = "lesson_unavailable"  # no text for the index


class DeliveryReport(BaseModel):
    chat_id: str
    lesson_index: int
    status: DeliveryStatus
    segments_sent: int = 0
    asset_failures: list[str] = []

    @property
    def delivered(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED


class TickSummary(BaseModel):
    """Counts for one scheduled run."""
    due: int = 0
    delivered: int = 0
    failed: int = 0
    unavailable: int = 0
