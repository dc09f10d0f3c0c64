"""
Runtime configuration for DailyLessons.

Values come from the environment (optionally a .env file in the working
directory). Relative paths are resolved against the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from dailylessons.errors import ConfigurationError
from dailylessons.utils.message_loader import DEFAULT_MESSAGES_PATH


DEFAULT_TIMEZONE = "Asia/Tehran"
DEFAULT_CRON_EXPRESSION = "0 6 * * *"
DEFAULT_MAX_LESSONS = 100
DEFAULT_SEND_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class Settings:
    telegram_token: str
    lessons_path: Path
    images_dir: Path
    audio_dir: Path
    videos_path: Path
    progress_path: Path
    messages_path: Path
    timezone_name: str = DEFAULT_TIMEZONE
    cron_expression: str = DEFAULT_CRON_EXPRESSION
    max_lessons: int = DEFAULT_MAX_LESSONS
    send_delay_seconds: float = DEFAULT_SEND_DELAY_SECONDS
    log_level: str = "INFO"

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @property
    def delivery_time(self) -> str:
        return describe_daily_time(self.cron_expression)

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        base_dir: Optional[Path] = None,
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (default: os.environ after loading .env)
            base_dir: Directory relative paths resolve against (default: cwd)

        Raises:
            ConfigurationError: If the token is missing or a value is invalid
        """
        if env is None:
            load_dotenv()
            env = os.environ
        base = base_dir or Path.cwd()

        def path_setting(name: str, default: str | Path) -> Path:
            value = Path(env.get(name) or default)
            return value if value.is_absolute() else (base / value).resolve()

        token = (env.get("TELEGRAM_BOT_TOKEN") or "").strip()
        if not token:
            raise ConfigurationError("Missing TELEGRAM_BOT_TOKEN environment variable.")

        timezone_name = env.get("BOT_TIMEZONE") or DEFAULT_TIMEZONE
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone in BOT_TIMEZONE: {timezone_name}") from e

        cron_expression = env.get("BOT_CRON_EXPRESSION") or DEFAULT_CRON_EXPRESSION
        if len(cron_expression.split()) != 5:
            raise ConfigurationError(
                f"BOT_CRON_EXPRESSION must have 5 fields, got {cron_expression!r}"
            )

        max_lessons = _parse_number(env, "MAX_LESSONS", int, DEFAULT_MAX_LESSONS)
        if max_lessons <= 0:
            raise ConfigurationError(f"MAX_LESSONS must be positive, got {max_lessons}")

        send_delay = _parse_number(env, "SEND_DELAY_SECONDS", float, DEFAULT_SEND_DELAY_SECONDS)
        if send_delay < 0:
            raise ConfigurationError(f"SEND_DELAY_SECONDS must not be negative, got {send_delay}")

        return cls(
            telegram_token=token,
            lessons_path=path_setting("LESSONS_PATH", "daily_lessons.json"),
            images_dir=path_setting("LESSON_IMAGES_DIR", "images"),
            audio_dir=path_setting("LESSON_AUDIO_DIR", "tts_audio"),
            videos_path=path_setting("LESSON_VIDEOS_PATH", "asma_ul_husna_videos.json"),
            progress_path=path_setting("USER_PROGRESS_PATH", Path("data") / "user_progress.json"),
            messages_path=path_setting("BOT_MESSAGES_PATH", DEFAULT_MESSAGES_PATH),
            timezone_name=timezone_name,
            cron_expression=cron_expression,
            max_lessons=max_lessons,
            send_delay_seconds=send_delay,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )


def _parse_number(env: Mapping[str, str], name: str, kind: type, default):
    raw = env.get(name)
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def describe_daily_time(cron_expression: str) -> str:
    """
    Human-readable time of day for a daily cron expression.

    "0 6 * * *" -> "06:00"; anything more complex is returned unchanged.
    """
    fields = cron_expression.split()
    if len(fields) == 5 and fields[0].isdigit() and fields[1].isdigit():
        return f"{int(fields[1]):02d}:{int(fields[0]):02d}"
    return cron_expression
