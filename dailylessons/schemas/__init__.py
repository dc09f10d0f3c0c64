"""
DailyLessons Schemas - Pydantic models for the lesson delivery bot.

This module exports all schema classes for:
- Lesson: lesson text and its optional image, audio and video
- Progress: subscriber records and the persisted progress document
- Delivery: per-attempt outcomes and scheduled run summaries
"""

# Lesson schemas
from .lesson import (
    VideoRef,
    Lesson,
)

# Progress schemas
from .progress import (
    SubscriberRecord,
    ProgressDocument,
    utcnow,
)

# Delivery schemas
from .delivery import (
    DeliveryStatus,
    DeliveryReport,
    TickSummary,
)

__all__ = [
    # Lesson
    'VideoRef',
    'Lesson',
    # Progress
    'SubscriberRecord',
    'ProgressDocument',
    'utcnow',
    # Delivery
    'DeliveryStatus',
    'DeliveryReport',
    'TickSummary',
]
