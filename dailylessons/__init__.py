"""DailyLessons - deliver a fixed curriculum of lessons to Telegram subscribers, one per day."""

__version__ = "0.1.0"
