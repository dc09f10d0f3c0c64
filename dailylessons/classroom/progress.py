"""
ProgressStore - Track how many lessons every subscriber has received.

Stores one record per chat:
- Next lesson index (count of lessons already delivered)
- Time of the last successful delivery
- Registration time

The whole document is rewritten on every mutation. JsonFileBackend writes to
a temporary file and renames it over the old one, so a crash leaves either the
previous or the new snapshot on disk.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from dailylessons.errors import StoreCorruption
from dailylessons.schemas import ProgressDocument, SubscriberRecord, utcnow

logger = logging.getLogger(__name__)


DEFAULT_PROGRESS_PATH = Path("data") / "user_progress.json"


class ProgressBackend(Protocol):
    def load(self) -> ProgressDocument: ...

    def save(self, document: ProgressDocument) -> None: ...


class JsonFileBackend:
    """Persist the progress document as a single JSON file."""

    def __init__(self, path: str | Path = DEFAULT_PROGRESS_PATH):
        self.path = Path(path)

    def load(self) -> ProgressDocument:
        """
        Load the progress document.

        Returns:
            The stored document, or an empty one if the file does not exist

        Raises:
            StoreCorruption: If the file exists but is not a valid progress document
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return ProgressDocument()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreCorruption(f"Corrupted progress file at {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreCorruption(
                f"Corrupted progress file at {self.path}: expected an object, "
                f"received {type(data).__name__}"
            )

        try:
            return ProgressDocument.model_validate(data)
        except ValidationError as e:
            raise StoreCorruption(f"Corrupted progress file at {self.path}: {e}") from e

    def save(self, document: ProgressDocument):
        """Write the document atomically (temp file in the same directory, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryBackend:
    """Keep the progress document in memory (tests, dry runs)."""

    def __init__(self, document: Optional[ProgressDocument] = None):
        self.document = document or ProgressDocument()
        self.save_count = 0

    def load(self) -> ProgressDocument:
        return self.document.model_copy(deep=True)

    def save(self, document: ProgressDocument):
        self.document = document.model_copy(deep=True)
        self.save_count += 1


class ProgressStore:
    """
    Single source of truth for subscriber progress.

    Every other component reads and writes subscriber state through this
    object; nothing else touches the backing file.
    """

    def __init__(
        self,
        backend: ProgressBackend,
        total_lessons: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the store and load the persisted document.

        Args:
            backend: Persistence backend (JsonFileBackend, MemoryBackend)
            total_lessons: If given, next_lesson_index is never advanced past it
            clock: Returns the current time (aware datetime)

        Raises:
            StoreCorruption: If the persisted document cannot be parsed
        """
        self.backend = backend
        self.total_lessons = total_lessons
        self._clock = clock
        self._document = backend.load()

    def __len__(self) -> int:
        return len(self._document.users)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, chat_id: str | int) -> Optional[SubscriberRecord]:
        """Get a copy of the record for a chat, or None if unregistered."""
        record = self._document.users.get(str(chat_id))
        return record.model_copy() if record else None

    def is_registered(self, chat_id: str | int) -> bool:
        return str(chat_id) in self._document.users

    def list_due(self, total_lessons: int) -> list[tuple[str, int]]:
        """
        List subscribers that still have lessons to receive.

        Args:
            total_lessons: Number of lessons in the curriculum

        Returns:
            (chat_id, next_lesson_index) pairs in store order
        """
        return [
            (chat_id, record.next_lesson_index)
            for chat_id, record in self._document.users.items()
            if record.is_due(total_lessons)
        ]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def ensure(self, chat_id: str | int) -> SubscriberRecord:
        """Return the record for a chat, creating it at lesson 0 if missing."""
        key = str(chat_id)
        record = self._document.users.get(key)
        if record is None:
            record = SubscriberRecord(registered_at=self._clock())
            self._commit(key, record)
            logger.info(f"Registered subscriber {key}")
        return record.model_copy()

    def advance(self, chat_id: str | int, delivered_index: int) -> SubscriberRecord:
        """
        Record a successful delivery and persist the store.

        next_lesson_index only ever moves forward: it becomes
        max(current, delivered_index + 1), capped at total_lessons.
        If the write fails the in-memory state is left unchanged.
        """
        key = str(chat_id)
        current = self._document.users.get(key)
        if current is None:
            record = SubscriberRecord(registered_at=self._clock())
        else:
            record = current.model_copy()

        next_index = max(record.next_lesson_index, delivered_index + 1)
        if self.total_lessons is not None:
            next_index = min(next_index, max(self.total_lessons, record.next_lesson_index))

        record.next_lesson_index = next_index
        record.last_delivered_at = self._clock()
        self._commit(key, record)
        return record.model_copy()

    def _commit(self, key: str, record: SubscriberRecord):
        """Persist the document with one record replaced, then adopt it in memory."""
        document = self._document.model_copy(update={"users": {**self._document.users, key: record}})
        self.backend.save(document)
        self._document = document
