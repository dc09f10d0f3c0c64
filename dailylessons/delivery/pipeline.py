"""
DeliveryPipeline - Send one lesson, with all of its assets, to one subscriber.

Send order is fixed: image, text segments, audio, video link. Only the text
decides the outcome; image, audio and video failures are logged and the
delivery carries on.
"""

import logging
from typing import Optional

from dailylessons.classroom.loader import LessonLoader
from dailylessons.classroom.progress import ProgressStore
from dailylessons.schemas import DeliveryReport, DeliveryStatus, Lesson
from dailylessons.utils import Messages, chunk_text, TELEGRAM_MAX_MESSAGE_LENGTH

from .channel import Channel

logger = logging.getLogger(__name__)


class DeliveryPipeline:
    """
    Assemble and send lessons.

    The pipeline never writes progress by itself: deliver() only reports the
    outcome. deliver_and_advance() is the path used by the scheduler and by
    registration, where a delivered lesson moves the subscriber forward.
    """

    def __init__(
        self,
        loader: LessonLoader,
        channel: Channel,
        messages: Messages,
        store: Optional[ProgressStore] = None,
        max_message_length: int = TELEGRAM_MAX_MESSAGE_LENGTH,
    ):
        """
        Initialize pipeline.

        Args:
            loader: LessonLoader for lesson text and assets
            channel: Outbound channel (TelegramChannel in production)
            messages: Message templates for captions and video links
            store: ProgressStore used by deliver_and_advance
            max_message_length: Hard cap on a single text message
        """
        self.loader = loader
        self.channel = channel
        self.messages = messages
        self.store = store
        self.max_message_length = max_message_length

    @property
    def total_lessons(self) -> int:
        return self.loader.total_lessons

    async def deliver(self, chat_id: str | int, lesson_index: int) -> DeliveryReport:
        """
        Send a lesson without touching progress.

        Args:
            chat_id: Target chat
            lesson_index: 0-based lesson index

        Returns:
            DeliveryReport; status is DELIVERED only if every text segment was sent
        """
        chat_key = str(chat_id)
        report = DeliveryReport(
            chat_id=chat_key,
            lesson_index=lesson_index,
            status=DeliveryStatus.LESSON_UNAVAILABLE,
        )

        lesson = self.loader.get_lesson(lesson_index)
        if lesson is None:
            logger.warning(f"Lesson {lesson_index + 1} is not available for {chat_key}")
            return report

        if lesson.image_path is not None:
            await self._send_image(chat_key, lesson, report)

        try:
            for segment in chunk_text(lesson.text, self.max_message_length):
                await self.channel.send_text(chat_key, segment)
                report.segments_sent += 1
        except Exception as e:
            logger.error(
                f"Failed to deliver lesson {lesson.number} to {chat_key} "
                f"after {report.segments_sent} segment(s): {e}"
            )
            report.status = DeliveryStatus.FAILED
            return report

        if lesson.audio_path is not None:
            await self._send_audio(chat_key, lesson, report)

        if lesson.video is not None:
            await self._send_video(chat_key, lesson, report)

        report.status = DeliveryStatus.DELIVERED
        return report

    async def deliver_and_advance(self, chat_id: str | int, lesson_index: int) -> DeliveryReport:
        """Send a lesson and, if it was delivered, record it in the progress store."""
        if self.store is None:
            raise RuntimeError("deliver_and_advance needs a ProgressStore")

        report = await self.deliver(chat_id, lesson_index)
        if report.delivered:
            self.store.advance(chat_id, lesson_index)
        return report

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    async def _send_image(self, chat_id: str, lesson: Lesson, report: DeliveryReport):
        caption = self.messages.format("image_caption", number=lesson.number)
        try:
            await self.channel.send_photo(chat_id, lesson.image_path, caption=caption)
        except Exception as e:
            logger.warning(f"Failed to send image for lesson {lesson.number} to {chat_id}: {e}")
            report.asset_failures.append("image")

    async def _send_audio(self, chat_id: str, lesson: Lesson, report: DeliveryReport):
        try:
            await self.channel.send_audio(chat_id, lesson.audio_path)
        except Exception as e:
            logger.warning(f"Failed to send audio for lesson {lesson.number} to {chat_id}: {e}")
            report.asset_failures.append("audio")

    async def _send_video(self, chat_id: str, lesson: Lesson, report: DeliveryReport):
        video = lesson.video
        lines = []
        if video.title:
            lines.append(self.messages.format("video_title", title=video.title))
        lines.append(video.url)

        try:
            await self.channel.send_text(chat_id, "\n".join(lines))
        except Exception as e:
            logger.warning(f"Failed to send video link for lesson {lesson.number} to {chat_id}: {e}")
            report.asset_failures.append("video")
