"""
DailyLessons Delivery - Sending lessons to subscribers.

This module provides:
- Channel / TelegramChannel: outbound messages
- DeliveryPipeline: one lesson with its assets to one subscriber
- LessonScheduler: daily delivery to every due subscriber
"""

from .channel import (
    Channel,
    TelegramChannel,
    normalize_chat_id,
)

from .pipeline import (
    DeliveryPipeline,
)

from .scheduler import (
    LessonScheduler,
    build_trigger,
)

__all__ = [
    # Channel
    "Channel",
    "TelegramChannel",
    "normalize_chat_id",
    # Pipeline
    "DeliveryPipeline",
    # Scheduler
    "LessonScheduler",
    "build_trigger",
]
