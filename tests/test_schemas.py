"""
Schema validation tests for DailyLessons.

Tests the Pydantic models, including the on-disk JSON field names.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from dailylessons.schemas import (
    # Lesson
    VideoRef,
    Lesson,
    # Progress
    SubscriberRecord,
    ProgressDocument,
    # Delivery
    DeliveryStatus,
    DeliveryReport,
    TickSummary,
)


class TestLessonSchemas:
    """Test lesson-related schemas."""

    def test_lesson_number_is_one_based(self):
        lesson = Lesson(index=0, text="First")
        assert lesson.number == 1
        assert lesson.image_path is None
        assert lesson.video is None

    def test_lesson_invalid_index(self):
        with pytest.raises(ValidationError):
            Lesson(index=-1, text="Nope")

    def test_video_title_optional(self):
        video = VideoRef(url="https://example.com/v")
        assert video.title is None

    def test_video_requires_url(self):
        with pytest.raises(ValidationError):
            VideoRef(title="No link")
        with pytest.raises(ValidationError):
            VideoRef(url="")


class TestProgressSchemas:
    """Test progress file schemas."""

    def test_subscriber_defaults(self):
        record = SubscriberRecord()
        assert record.next_lesson_index == 0
        assert record.last_delivered_at is None
        assert record.registered_at.tzinfo is not None

    def test_subscriber_from_json_aliases(self):
        record = SubscriberRecord.model_validate({
            "currentLesson": 4,
            "lastSentAt": "2025-03-01T02:30:00.000Z",
            "joinedAt": "2025-02-25T10:00:00.000Z",
        })
        assert record.next_lesson_index == 4
        assert record.last_delivered_at == datetime(2025, 3, 1, 2, 30, tzinfo=timezone.utc)

    def test_subscriber_negative_index(self):
        with pytest.raises(ValidationError):
            SubscriberRecord(next_lesson_index=-1)

    def test_delivered_count_capped(self):
        record = SubscriberRecord(next_lesson_index=7)
        assert record.delivered_count(5) == 5
        assert record.delivered_count(10) == 7

    def test_is_due(self):
        assert SubscriberRecord(next_lesson_index=2).is_due(3)
        assert not SubscriberRecord(next_lesson_index=3).is_due(3)

    def test_document_json_uses_file_keys(self):
        doc = ProgressDocument(users={"42": SubscriberRecord(next_lesson_index=1)})
        data = json.loads(doc.to_json())
        assert set(data) == {"users"}
        assert set(data["users"]["42"]) == {"currentLesson", "lastSentAt", "joinedAt"}
        assert data["users"]["42"]["currentLesson"] == 1
        assert data["users"]["42"]["lastSentAt"] is None

    def test_document_missing_users(self):
        assert ProgressDocument.model_validate({}).users == {}

    def test_document_invalid_users(self):
        with pytest.raises(ValidationError):
            ProgressDocument.model_validate({"users": ["42"]})


class TestDeliverySchemas:
    """Test delivery outcome schemas."""

    def test_report_delivered_flag(self):
        report = DeliveryReport(chat_id="42", lesson_index=0, status=DeliveryStatus.DELIVERED)
        assert report.delivered
        assert report.asset_failures == []

    def test_report_failed_flag(self):
        report = DeliveryReport(chat_id="42", lesson_index=0, status=DeliveryStatus.FAILED)
        assert not report.delivered

    def test_status_values(self):
        assert DeliveryStatus("lesson_unavailable") == DeliveryStatus.LESSON_UNAVAILABLE

    def test_tick_summary_defaults(self):
        summary = TickSummary()
        assert (summary.due, summary.delivered, summary.failed, summary.unavailable) == (0, 0, 0, 0)
