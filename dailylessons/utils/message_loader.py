"""
Message loader utility for DailyLessons.

Loads the YAML file holding every user-visible bot text.
"""

from pathlib import Path
from typing import Any

import yaml

from dailylessons.errors import ConfigurationError


# Bundled message templates (inside the package)
MESSAGES_DIR = Path(__file__).parent.parent / "messages"
DEFAULT_MESSAGES_PATH = MESSAGES_DIR / "default.yaml"

REQUIRED_KEYS = (
    "help",
    "welcome",
    "welcome_back",
    "not_registered",
    "progress_summary",
    "progress_next",
    "progress_completed",
    "progress_last_sent",
    "lesson_usage",
    "lesson_ack",
    "lesson_unavailable",
    "course_completed",
    "image_caption",
    "video_title",
)


class Messages:
    """Formatted access to message templates."""

    def __init__(self, templates: dict[str, str]):
        missing = [key for key in REQUIRED_KEYS if key not in templates]
        if missing:
            raise ConfigurationError(f"Message templates missing keys: {', '.join(missing)}")
        self.templates = templates

    def format(self, key: str, **kwargs: Any) -> str:
        """
        Format a message template with provided values.

        Args:
            key: Template name (e.g., "welcome_back")
            **kwargs: Values to substitute

        Returns:
            Formatted message, trailing whitespace removed
        """
        return self.templates[key].format(**kwargs).rstrip()


def load_messages(path: Path | None = None) -> Messages:
    """
    Load message templates from a YAML file.

    Args:
        path: Optional custom messages file (default: bundled default.yaml)

    Returns:
        Messages instance

    Raises:
        ConfigurationError: If the file is missing, unparsable or incomplete
    """
    file_path = path or DEFAULT_MESSAGES_PATH

    if not file_path.exists():
        raise ConfigurationError(f"Messages file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse messages file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Messages file {file_path} must contain a mapping")

    return Messages({str(key): str(value) for key, value in data.items()})
