"""
LessonScheduler - Deliver the next lesson to every due subscriber once a day.

A cron trigger (APScheduler) fires run_once() at the configured local time.
Each run:
- Snapshots the due subscribers from the progress store
- Delivers to them one after another, with a pause between subscribers
- Advances progress for delivered lessons only

Runs never overlap: a trigger that fires while a run is in progress is skipped.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from dailylessons.classroom.progress import ProgressStore
from dailylessons.errors import ConfigurationError
from dailylessons.schemas import DeliveryStatus, TickSummary
from dailylessons.utils import Messages

from .pipeline import DeliveryPipeline

logger = logging.getLogger(__name__)


JOB_ID = "daily-lessons"


def build_trigger(cron_expression: str, timezone: ZoneInfo) -> CronTrigger:
    """Build a cron trigger, raising ConfigurationError for a bad expression."""
    try:
        return CronTrigger.from_crontab(cron_expression, timezone=timezone)
    except ValueError as e:
        raise ConfigurationError(f"Invalid cron expression {cron_expression!r}: {e}") from e


class LessonScheduler:
    """Drive the delivery pipeline on a daily schedule."""

    def __init__(
        self,
        pipeline: DeliveryPipeline,
        store: ProgressStore,
        messages: Messages,
        cron_expression: str,
        timezone: ZoneInfo,
        send_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize scheduler.

        Args:
            pipeline: DeliveryPipeline used for every send
            store: ProgressStore holding subscriber positions
            messages: Message templates (course completion notice)
            cron_expression: Five-field cron expression, e.g. "0 6 * * *"
            timezone: Timezone the cron expression is evaluated in
            send_delay_seconds: Pause between subscribers (Telegram rate limits)
            sleep: Coroutine used for the pause
        """
        self.pipeline = pipeline
        self.store = store
        self.messages = messages
        self.trigger = build_trigger(cron_expression, timezone)
        self.send_delay_seconds = send_delay_seconds
        self._sleep = sleep
        self._run_lock = asyncio.Lock()
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def is_running(self) -> bool:
        """True while a delivery run is in progress."""
        return self._run_lock.locked()

    # -------------------------------------------------------------------------
    # Timer
    # -------------------------------------------------------------------------

    def start(self):
        """Register the daily job and start the timer (needs a running event loop)."""
        if self._scheduler is not None:
            return
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            self.trigger,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Daily delivery scheduled; next run at {self.next_run_time}")

    def shutdown(self):
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

    @property
    def next_run_time(self) -> Optional[datetime]:
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    # -------------------------------------------------------------------------
    # Delivery run
    # -------------------------------------------------------------------------

    async def run_once(self) -> Optional[TickSummary]:
        """
        Deliver the next lesson to every due subscriber.

        Returns:
            TickSummary, or None if another run was still in progress
        """
        if self._run_lock.locked():
            logger.warning("Previous delivery run still in progress; skipping this trigger")
            return None

        async with self._run_lock:
            return await self._run()

    async def _run(self) -> TickSummary:
        total = self.pipeline.total_lessons
        due = self.store.list_due(total)
        summary = TickSummary(due=len(due))

        if not due:
            logger.info("No subscribers due for delivery")
            return summary

        logger.info(f"Delivering daily lessons to {len(due)} subscribers")

        for position, (chat_id, lesson_index) in enumerate(due):
            if position > 0 and self.send_delay_seconds > 0:
                await self._sleep(self.send_delay_seconds)

            try:
                report = await self.pipeline.deliver(chat_id, lesson_index)
            except Exception as e:  # keep serving the rest of the batch
                logger.error(f"Unexpected error delivering lesson {lesson_index + 1} to {chat_id}: {e}")
                summary.failed += 1
                continue

            if report.status == DeliveryStatus.DELIVERED:
                try:
                    record = self.store.advance(chat_id, lesson_index)
                except Exception as e:
                    logger.error(
                        f"Failed to record lesson {lesson_index + 1} for {chat_id}; "
                        f"it will be sent again next run: {e}"
                    )
                    summary.failed += 1
                    continue
                summary.delivered += 1
                if record.next_lesson_index >= total:
                    await self._send_course_completed(chat_id)
            elif report.status == DeliveryStatus.LESSON_UNAVAILABLE:
                summary.unavailable += 1
            else:
                summary.failed += 1

        logger.info(
            f"Daily delivery finished: {summary.delivered} delivered, "
            f"{summary.failed} failed, {summary.unavailable} unavailable"
        )
        return summary

    async def _send_course_completed(self, chat_id: str):
        try:
            await self.pipeline.channel.send_text(chat_id, self.messages.format("course_completed"))
        except Exception as e:
            logger.warning(f"Failed to send course completion notice to {chat_id}: {e}")
