"""
Telegram bot wiring: builds every component from Settings, registers the
command handlers on an aiogram Dispatcher and runs polling next to the daily
scheduler.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass

from aiogram import Bot, Dispatcher, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message
from aiogram.utils.token import TokenValidationError

from dailylessons.classroom import JsonFileBackend, LessonLoader, ProgressStore
from dailylessons.commands import LessonCommands
from dailylessons.config import Settings
from dailylessons.delivery import Channel, DeliveryPipeline, LessonScheduler, TelegramChannel
from dailylessons.errors import ConfigurationError, DailyLessonsError
from dailylessons.utils import load_messages

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """All long-lived components of a running bot."""
    settings: Settings
    loader: LessonLoader
    store: ProgressStore
    pipeline: DeliveryPipeline
    scheduler: LessonScheduler
    commands: LessonCommands


def build_application(settings: Settings, channel: Channel) -> Application:
    """
    Wire the components together.

    Raises:
        ConfigurationError: If lessons, messages or the schedule are invalid
        StoreCorruption: If the progress file cannot be parsed
    """
    messages = load_messages(settings.messages_path)
    loader = LessonLoader(
        settings.lessons_path,
        settings.images_dir,
        settings.audio_dir,
        settings.videos_path,
        max_lessons=settings.max_lessons,
    )
    store = ProgressStore(JsonFileBackend(settings.progress_path), total_lessons=loader.total_lessons)
    pipeline = DeliveryPipeline(loader, channel, messages, store=store)
    scheduler = LessonScheduler(
        pipeline,
        store,
        messages,
        settings.cron_expression,
        settings.timezone,
        send_delay_seconds=settings.send_delay_seconds,
    )
    commands = LessonCommands(
        store,
        pipeline,
        messages,
        settings.timezone,
        settings.delivery_time,
    )
    return Application(settings, loader, store, pipeline, scheduler, commands)


def build_router(commands: LessonCommands) -> Router:
    """Register the four bot commands."""
    router = Router(name="lessons")

    @router.message(CommandStart())
    async def handle_start(message: Message):
        await commands.start(message.chat.id)

    @router.message(Command("progress"))
    async def handle_progress(message: Message):
        await commands.progress(message.chat.id)

    @router.message(Command("lesson"))
    async def handle_lesson(message: Message, command: CommandObject):
        await commands.resend(message.chat.id, command.args)

    @router.message(Command("help"))
    async def handle_help(message: Message):
        await commands.help(message.chat.id)

    return router


async def run(settings: Settings):
    """Start polling and the daily scheduler; returns when polling stops."""
    try:
        bot = Bot(token=settings.telegram_token)
    except TokenValidationError as e:
        raise ConfigurationError(f"Invalid TELEGRAM_BOT_TOKEN: {e}") from e

    try:
        app = build_application(settings, TelegramChannel(bot))

        dp = Dispatcher()
        dp.include_router(build_router(app.commands))

        app.scheduler.start()
        logger.info(
            f"Telegram bot started. Managing {len(app.store)} subscribers "
            f"across {app.loader.total_lessons} lessons."
        )
        try:
            await dp.start_polling(bot)
        finally:
            app.scheduler.shutdown()
    finally:
        await bot.session.close()


def main() -> int:
    try:
        settings = Settings.from_env()
    except DailyLessonsError as e:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
        logger.error(str(e))
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        asyncio.run(run(settings))
    except DailyLessonsError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Stopping bot...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
