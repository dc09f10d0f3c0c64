"""Tests for ProgressStore and its persistence backends."""

import json

import pytest

from dailylessons.classroom import JsonFileBackend, MemoryBackend, ProgressStore
from dailylessons.errors import StoreCorruption
from dailylessons.schemas import ProgressDocument, SubscriberRecord

from conftest import FailingSaveBackend


class TestEnsure:

    def test_creates_record_at_zero(self, store):
        record = store.ensure("42")
        assert record.next_lesson_index == 0
        assert record.last_delivered_at is None
        assert store.is_registered("42")
        assert len(store) == 1

    def test_idempotent(self, store):
        first = store.ensure("42")
        store.advance("42", 0)
        second = store.ensure("42")
        assert second.registered_at == first.registered_at
        assert second.next_lesson_index == 1

    def test_int_and_str_ids_are_the_same_subscriber(self, store):
        store.ensure(42)
        assert store.get("42") is not None
        assert len(store) == 1

    def test_persists_new_record(self, clock):
        backend = MemoryBackend()
        store = ProgressStore(backend, clock=clock)
        store.ensure("7")
        assert "7" in backend.document.users
        assert backend.save_count == 1
        store.ensure("7")
        assert backend.save_count == 1


class TestGet:

    def test_unknown_is_none(self, store):
        assert store.get("nobody") is None
        assert not store.is_registered("nobody")

    def test_returns_copy(self, store):
        store.ensure("42")
        record = store.get("42")
        record.next_lesson_index = 99
        assert store.get("42").next_lesson_index == 0


class TestAdvance:

    def test_moves_to_next_lesson(self, store):
        store.ensure("42")
        record = store.advance("42", 0)
        assert record.next_lesson_index == 1
        assert record.last_delivered_at is not None

    def test_monotonic(self):
        store = ProgressStore(MemoryBackend())
        store.advance("42", 6)
        record = store.advance("42", 1)
        assert record.next_lesson_index == 7

    def test_capped_at_total_lessons(self, store):
        record = store.advance("42", 10)
        assert record.next_lesson_index == store.total_lessons

    def test_updates_last_delivered_at(self, store):
        store.ensure("42")
        first = store.advance("42", 0).last_delivered_at
        second = store.advance("42", 1).last_delivered_at
        assert second > first

    def test_unknown_subscriber_is_created(self, store):
        store.advance("new", 0)
        assert store.get("new").next_lesson_index == 1

    def test_persists_every_advance(self):
        backend = MemoryBackend()
        store = ProgressStore(backend)
        store.ensure("42")
        store.advance("42", 0)
        store.advance("42", 1)
        assert backend.save_count == 3
        assert backend.document.users["42"].next_lesson_index == 2


class TestFailedSave:

    def test_advance_leaves_record_unchanged(self, clock):
        backend = FailingSaveBackend()
        store = ProgressStore(backend, total_lessons=3, clock=clock)
        store.ensure("42")
        before = store.get("42")

        backend.failures = 1
        with pytest.raises(OSError):
            store.advance("42", 0)

        assert store.get("42") == before
        assert store.list_due(3) == [("42", 0)]
        assert backend.document.users["42"].next_lesson_index == 0

    def test_ensure_does_not_register(self, clock):
        backend = FailingSaveBackend(failures=1)
        store = ProgressStore(backend, clock=clock)

        with pytest.raises(OSError):
            store.ensure("42")

        assert store.get("42") is None
        assert len(store) == 0

        store.ensure("42")
        assert store.is_registered("42")
        assert "42" in backend.document.users


class TestListDue:

    def test_filters_finished(self, store):
        store.ensure("a")
        store.ensure("b")
        store.ensure("c")
        store.advance("b", 2)
        store.advance("c", 0)
        assert store.list_due(3) == [("a", 0), ("c", 1)]

    def test_empty_store(self, store):
        assert store.list_due(3) == []


class TestJsonFileBackend:

    def test_missing_file_is_empty(self, tmp_path):
        backend = JsonFileBackend(tmp_path / "data" / "user_progress.json")
        assert backend.load().users == {}

    def test_round_trip_through_store(self, tmp_path, clock):
        path = tmp_path / "data" / "user_progress.json"
        store = ProgressStore(JsonFileBackend(path), clock=clock)
        store.ensure("42")
        store.advance("42", 0)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["users"]["42"]["currentLesson"] == 1
        assert data["users"]["42"]["lastSentAt"] is not None

        reopened = ProgressStore(JsonFileBackend(path))
        assert reopened.get("42").next_lesson_index == 1
        assert reopened.get("42").registered_at == store.get("42").registered_at

    def test_reads_existing_file_format(self, tmp_path):
        path = tmp_path / "user_progress.json"
        path.write_text(json.dumps({
            "users": {
                "123": {
                    "currentLesson": 5,
                    "lastSentAt": "2025-01-05T02:30:00.123Z",
                    "joinedAt": "2025-01-01T10:00:00.000Z",
                },
                "-100500": {"currentLesson": 0, "lastSentAt": None, "joinedAt": "2025-01-02T10:00:00.000Z"},
            }
        }), encoding="utf-8")
        store = ProgressStore(JsonFileBackend(path))
        assert store.list_due(100) == [("123", 5), ("-100500", 0)]

    def test_no_temp_files_left(self, tmp_path):
        path = tmp_path / "user_progress.json"
        backend = JsonFileBackend(path)
        backend.save(ProgressDocument(users={"1": SubscriberRecord()}))
        backend.save(ProgressDocument(users={"2": SubscriberRecord()}))
        assert [p.name for p in tmp_path.iterdir()] == ["user_progress.json"]
        assert set(backend.load().users) == {"2"}

    def test_failed_write_keeps_previous_snapshot(self, tmp_path, monkeypatch):
        path = tmp_path / "user_progress.json"
        backend = JsonFileBackend(path)
        backend.save(ProgressDocument(users={"1": SubscriberRecord()}))

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("dailylessons.classroom.progress.os.replace", broken_replace)
        with pytest.raises(OSError):
            backend.save(ProgressDocument(users={"2": SubscriberRecord()}))

        assert set(backend.load().users) == {"1"}
        assert [p.name for p in tmp_path.iterdir()] == ["user_progress.json"]

    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        '"users"',
        '{"users": []}',
        '{"users": {"42": {"currentLesson": "many"}}}',
        '{"users": {"42": {"currentLesson": -3}}}',
    ])
    def test_corrupted_file_raises(self, tmp_path, content):
        path = tmp_path / "user_progress.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(StoreCorruption):
            ProgressStore(JsonFileBackend(path))
