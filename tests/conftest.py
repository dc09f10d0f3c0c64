"""Shared fixtures: lesson files on disk, an in-memory store and a recording channel."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dailylessons.classroom import LessonLoader, MemoryBackend, ProgressStore
from dailylessons.delivery import DeliveryPipeline
from dailylessons.utils import load_messages


LESSON_TEXTS = [
    "Lesson one: Ar-Rahman.",
    "Lesson two: Ar-Rahim.",
    "Lesson three: Al-Malik.",
]


class FakeChannel:
    """Records every send; selected kinds or chats can be made to fail."""

    def __init__(self):
        self.sent: list[tuple[str, str, object]] = []
        self.failing_kinds: set[str] = set()
        self.failing_chats: set[str] = set()

    def _check(self, kind: str, chat_id):
        if kind in self.failing_kinds or str(chat_id) in self.failing_chats:
            raise ConnectionError(f"{kind} send failed")

    async def send_text(self, chat_id, text):
        self._check("text", chat_id)
        self.sent.append(("text", str(chat_id), text))

    async def send_photo(self, chat_id, path, caption=None):
        self._check("photo", chat_id)
        self.sent.append(("photo", str(chat_id), (Path(path).name, caption)))

    async def send_audio(self, chat_id, path):
        self._check("audio", chat_id)
        self.sent.append(("audio", str(chat_id), Path(path).name))

    def kinds(self, chat_id=None) -> list[str]:
        return [kind for kind, chat, _ in self.sent if chat_id is None or chat == str(chat_id)]

    def texts(self, chat_id=None) -> list[str]:
        return [
            payload for kind, chat, payload in self.sent
            if kind == "text" and (chat_id is None or chat == str(chat_id))
        ]


class FailingSaveBackend(MemoryBackend):
    """MemoryBackend whose next `failures` saves raise OSError."""

    def __init__(self, failures: int = 0):
        super().__init__()
        self.failures = failures

    def save(self, document):
        if self.failures > 0:
            self.failures -= 1
            raise OSError("disk full")
        super().save(document)


class FakeClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start=datetime(2025, 3, 1, 2, 30, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


@pytest.fixture
def lesson_dir(tmp_path) -> Path:
    """Lesson assets: 3 texts, image for lesson 1, audio for lesson 1, video for lessons 1-2."""
    (tmp_path / "daily_lessons.json").write_text(
        json.dumps(LESSON_TEXTS, ensure_ascii=False), encoding="utf-8"
    )
    images = tmp_path / "images"
    images.mkdir()
    (images / "devine-name-1.jpg").write_bytes(b"\xff\xd8\xff")
    audio = tmp_path / "tts_audio"
    audio.mkdir()
    (audio / "lesson_001.wav").write_bytes(b"RIFF")
    (tmp_path / "videos.json").write_text(
        json.dumps([
            {"title": "The Most Merciful", "url": "https://example.com/v1"},
            {"url": "https://example.com/v2"},
        ]),
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def loader(lesson_dir) -> LessonLoader:
    return LessonLoader(
        lesson_dir / "daily_lessons.json",
        lesson_dir / "images",
        lesson_dir / "tts_audio",
        lesson_dir / "videos.json",
    )


@pytest.fixture
def messages():
    return load_messages()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(loader, clock) -> ProgressStore:
    return ProgressStore(MemoryBackend(), total_lessons=loader.total_lessons, clock=clock)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def pipeline(loader, channel, messages, store) -> DeliveryPipeline:
    return DeliveryPipeline(loader, channel, messages, store=store)
