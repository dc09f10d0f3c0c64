"""
Outbound channel - the only place that talks to the Telegram Bot API.

The pipeline and commands depend on the Channel protocol; TelegramChannel
implements it on top of an aiogram Bot. Retries and timeouts of single API
calls are left to aiogram.
"""

import re
from pathlib import Path
from typing import Protocol

from aiogram import Bot
from aiogram.types import FSInputFile


_NUMERIC_CHAT_ID = re.compile(r"^-?\d+$")


def normalize_chat_id(chat_id: str | int) -> str | int:
    """Numeric chat ids are sent as integers, channel usernames as strings."""
    text = str(chat_id)
    return int(text) if _NUMERIC_CHAT_ID.match(text) else text


class Channel(Protocol):
    async def send_text(self, chat_id: str | int, text: str) -> None: ...

    async def send_photo(self, chat_id: str | int, path: Path, caption: str | None = None) -> None: ...

    async def send_audio(self, chat_id: str | int, path: Path) -> None: ...


class TelegramChannel:
    """Send lesson content through an aiogram Bot."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_text(self, chat_id: str | int, text: str):
        await self.bot.send_message(normalize_chat_id(chat_id), text)

    async def send_photo(self, chat_id: str | int, path: Path, caption: str | None = None):
        photo = FSInputFile(path, filename=path.name)
        await self.bot.send_photo(normalize_chat_id(chat_id), photo, caption=caption)

    async def send_audio(self, chat_id: str | int, path: Path):
        audio = FSInputFile(path, filename=path.name)
        await self.bot.send_audio(normalize_chat_id(chat_id), audio)
