"""DailyLessons utilities."""

from .chunking import chunk_text, TELEGRAM_MAX_MESSAGE_LENGTH
from .message_loader import Messages, load_messages, DEFAULT_MESSAGES_PATH

__all__ = [
    "chunk_text",
    "TELEGRAM_MAX_MESSAGE_LENGTH",
    "Messages",
    "load_messages",
    "DEFAULT_MESSAGES_PATH",
]
