"""
Bot commands: /start, /progress, /lesson <n>, /help.

Commands call the progress store and the delivery pipeline directly, outside
the daily schedule. Each handler replies through the channel and returns a
value describing what happened.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from dailylessons.classroom.progress import ProgressStore
from dailylessons.delivery.pipeline import DeliveryPipeline
from dailylessons.schemas import DeliveryReport, DeliveryStatus
from dailylessons.utils import Messages

logger = logging.getLogger(__name__)


@dataclass
class ProgressReport:
    """Progress of one subscriber, as shown by /progress."""
    delivered_count: int
    total_lessons: int
    completed: bool
    next_lesson_number: Optional[int]
    last_delivered_at: Optional[datetime]


class LessonCommands:
    """Handlers behind the bot's command surface."""

    def __init__(
        self,
        store: ProgressStore,
        pipeline: DeliveryPipeline,
        messages: Messages,
        timezone: ZoneInfo,
        delivery_time: str,
    ):
        self.store = store
        self.pipeline = pipeline
        self.messages = messages
        self.timezone = timezone
        self.delivery_time = delivery_time

    @property
    def total_lessons(self) -> int:
        return self.pipeline.total_lessons

    async def _reply(self, chat_id: str | int, key: str, **kwargs):
        await self.pipeline.channel.send_text(chat_id, self.messages.format(key, **kwargs))

    # -------------------------------------------------------------------------
    # /start
    # -------------------------------------------------------------------------

    async def start(self, chat_id: str | int) -> Optional[DeliveryReport]:
        """
        Register a subscriber.

        A new subscriber is welcomed and receives lesson 1 immediately; on
        success their progress moves to lesson 2. A returning subscriber only
        gets a summary.

        Returns:
            DeliveryReport of the first lesson, or None for returning subscribers
        """
        existing = self.store.get(chat_id)

        if existing is not None:
            await self._reply(
                chat_id,
                "welcome_back",
                delivered=existing.delivered_count(self.total_lessons),
                total=self.total_lessons,
                delivery_time=self.delivery_time,
                timezone=self.timezone.key,
            )
            await self._reply(chat_id, "help")
            return None

        self.store.ensure(chat_id)
        await self._reply(chat_id, "welcome")
        report = await self.pipeline.deliver_and_advance(chat_id, 0)
        if not report.delivered:
            logger.warning(f"First lesson for new subscriber {chat_id} was not delivered: {report.status.value}")
        if report.status == DeliveryStatus.LESSON_UNAVAILABLE:
            await self._reply(chat_id, "lesson_unavailable", number=1)
        await self._reply(chat_id, "help")
        return report

    # -------------------------------------------------------------------------
    # /progress
    # -------------------------------------------------------------------------

    def get_progress(self, chat_id: str | int) -> Optional[ProgressReport]:
        record = self.store.get(chat_id)
        if record is None:
            return None

        total = self.total_lessons
        delivered = record.delivered_count(total)
        completed = delivered >= total
        return ProgressReport(
            delivered_count=delivered,
            total_lessons=total,
            completed=completed,
            next_lesson_number=None if completed else delivered + 1,
            last_delivered_at=record.last_delivered_at,
        )

    async def progress(self, chat_id: str | int) -> Optional[ProgressReport]:
        """Reply with the subscriber's progress; unregistered chats are told to /start."""
        report = self.get_progress(chat_id)
        if report is None:
            await self._reply(chat_id, "not_registered")
            return None

        lines = [
            self.messages.format(
                "progress_summary", delivered=report.delivered_count, total=report.total_lessons
            )
        ]
        if report.completed:
            lines.append(self.messages.format("progress_completed"))
        else:
            lines.append(
                self.messages.format(
                    "progress_next",
                    number=report.next_lesson_number,
                    delivery_time=self.delivery_time,
                    timezone=self.timezone.key,
                )
            )
        if report.last_delivered_at is not None:
            sent_at = report.last_delivered_at.astimezone(self.timezone)
            lines.append(
                self.messages.format("progress_last_sent", sent_at=sent_at.strftime("%Y-%m-%d %H:%M"))
            )

        await self.pipeline.channel.send_text(chat_id, "\n".join(lines))
        return report

    # -------------------------------------------------------------------------
    # /lesson <n>
    # -------------------------------------------------------------------------

    async def resend(self, chat_id: str | int, argument: Optional[str]) -> Optional[DeliveryReport]:
        """
        Send a specific lesson again without moving the subscriber's position.

        Args:
            chat_id: Requesting chat
            argument: 1-based lesson number as typed by the user

        Returns:
            DeliveryReport, or None if the number was invalid
        """
        total = self.total_lessons
        try:
            number = int((argument or "").strip())
        except ValueError:
            number = None

        if number is None or number < 1 or number > total:
            await self._reply(chat_id, "lesson_usage", total=total)
            return None

        await self._reply(chat_id, "lesson_ack", number=number)
        report = await self.pipeline.deliver(chat_id, number - 1)
        if report.status == DeliveryStatus.LESSON_UNAVAILABLE:
            await self._reply(chat_id, "lesson_unavailable", number=number)
        return report

    # -------------------------------------------------------------------------
    # /help
    # -------------------------------------------------------------------------

    async def help(self, chat_id: str | int):
        await self._reply(chat_id, "help")
