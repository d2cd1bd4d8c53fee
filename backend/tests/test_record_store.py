"""
CampusNotes Backend — Record Store Unit Tests
==============================================

What:  Tests for RecordStore loading, ordering, add/find/remove and the file mirror.
How:   Real files in pytest's tmp_path; write failures are simulated by
       patching the store's file writer.

What we test:
    ✅ Missing file is created with an empty array
    ✅ Unreadable files start empty and are backed up
    ✅ list() is newest-first for any insertion order and never raises
    ✅ After every successful mutation the file equals the in-memory collection
    ✅ Failed writes leave memory and file unchanged
"""

import itertools
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from campusnotes.exceptions import NotFoundError, RecordStoreError
from campusnotes.services.record_store import RecordStore

T0 = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def read_ids(path):
    return [record["id"] for record in json.loads(path.read_text(encoding="utf-8"))]


async def reload(path):
    fresh = RecordStore(path)
    await fresh.initialize()
    return fresh


class TestRecordStoreInitialize:
    """Tests for first-use loading of the backing file."""

    @pytest.mark.asyncio
    async def test_creates_missing_file_with_empty_array(self, store_path):
        store = RecordStore(store_path)
        await store.initialize()

        assert store_path.exists()
        assert json.loads(store_path.read_text(encoding="utf-8")) == []
        assert store.list() == []
        assert store.initialized is True

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "api" / "data" / "notes-data.json"
        store = RecordStore(path)
        await store.initialize()
        assert path.exists()

    @pytest.mark.asyncio
    async def test_loads_existing_records(self, store_path, make_note):
        note = make_note("1700000000000", created_at=T0)
        store_path.write_text(
            json.dumps([note.model_dump(mode="json", by_alias=True)]), encoding="utf-8"
        )

        store = await reload(store_path)

        assert store.count == 1
        assert store.find("1700000000000") == note

    @pytest.mark.asyncio
    async def test_loads_camelcase_layout_with_js_timestamps(self, store_path):
        """Files written by the original service keep loading."""
        store_path.write_text(
            json.dumps([{
                "id": "1705312800000",
                "title": "Organic Chemistry Lab",
                "subject": "Chemistry",
                "desc": "Titration results",
                "type": "image",
                "fileName": "lab.png",
                "fileUrl": "https://res.cloudinary.com/demo/image/upload/campusnotes/images/lab.png",
                "publicId": "campusnotes/images/1705312800000_lab",
                "fileType": "image/png",
                "fileSize": 51200,
                "createdAt": "2024-01-15T10:00:00.000Z",
            }]),
            encoding="utf-8",
        )

        store = await reload(store_path)
        note = store.find("1705312800000")

        assert note is not None
        assert note.description == "Titration results"
        assert note.public_id == "campusnotes/images/1705312800000_lab"
        assert note.created_at == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_naive_timestamps_are_read_as_utc(self, store_path, make_note):
        payload = make_note("1").model_dump(mode="json", by_alias=True)
        payload["createdAt"] = "2024-01-15T10:00:00"
        store_path.write_text(json.dumps([payload]), encoding="utf-8")

        store = await reload(store_path)

        assert store.find("1").created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_malformed_json_starts_empty_and_keeps_backup(self, store_path):
        store_path.write_text('[{"id": "1", "title": ', encoding="utf-8")

        store = await reload(store_path)

        assert store.list() == []
        # The original file is not rewritten until the next mutation
        assert store_path.read_text(encoding="utf-8") == '[{"id": "1", "title": '
        backups = list(store_path.parent.glob("notes-data.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == '[{"id": "1", "title": '

    @pytest.mark.asyncio
    async def test_non_array_json_is_treated_as_unreadable(self, store_path):
        store_path.write_text('{"notes": []}', encoding="utf-8")

        store = await reload(store_path)

        assert store.count == 0
        assert list(store_path.parent.glob("notes-data.json.corrupt-*"))

    @pytest.mark.asyncio
    async def test_invalid_records_are_skipped(self, store_path, make_note):
        good = make_note("1", created_at=T0).model_dump(mode="json", by_alias=True)
        store_path.write_text(json.dumps([good, {"id": "2"}]), encoding="utf-8")

        store = await reload(store_path)

        assert [n.id for n in store.list()] == ["1"]
        assert list(store_path.parent.glob("notes-data.json.corrupt-*"))

    @pytest.mark.asyncio
    async def test_non_utf8_file_starts_empty_and_keeps_backup(self, store_path):
        raw = b'[{"id": "1", "title": "\xff\xfe caf\xe9"}]'
        store_path.write_bytes(raw)

        store = await reload(store_path)

        assert store.initialized is True
        assert store.count == 0
        backups = list(store_path.parent.glob("notes-data.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_bytes() == raw

    @pytest.mark.asyncio
    async def test_utf8_bom_is_tolerated(self, store_path, make_note):
        payload = json.dumps([make_note("1").model_dump(mode="json", by_alias=True)])
        store_path.write_bytes(b"\xef\xbb\xbf" + payload.encode("utf-8"))

        store = await reload(store_path)

        assert store.find("1") is not None

    @pytest.mark.asyncio
    async def test_empty_file_loads_as_empty_collection(self, store_path):
        store_path.write_text("", encoding="utf-8")

        store = await reload(store_path)

        assert store.count == 0
        assert not list(store_path.parent.glob("notes-data.json.corrupt-*"))

    @pytest.mark.asyncio
    async def test_initialize_runs_once(self, record_store, store_path, make_note):
        store_path.write_text(
            json.dumps([make_note("1").model_dump(mode="json", by_alias=True)]),
            encoding="utf-8",
        )

        await record_store.initialize()

        assert record_store.count == 0


class TestRecordStoreQueries:
    """Tests for list() and find()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order", list(itertools.permutations([0, 1, 2, 3])))
    async def test_list_is_newest_first_for_any_insertion_order(self, record_store, make_note, order):
        for offset in order:
            await record_store.add(make_note(str(offset), created_at=T0 + timedelta(minutes=offset)))

        assert [n.id for n in record_store.list()] == ["3", "2", "1", "0"]

    @pytest.mark.asyncio
    async def test_list_scenario_three_titles(self, record_store, make_note):
        for i, title in enumerate(["A", "B", "C"]):
            await record_store.add(make_note(str(i), title=title, created_at=T0 + timedelta(hours=i)))

        assert [n.title for n in record_store.list()] == ["C", "B", "A"]

    @pytest.mark.asyncio
    async def test_list_does_not_reorder_collection(self, record_store, store_path, make_note):
        await record_store.add(make_note("old", created_at=T0))
        await record_store.add(make_note("new", created_at=T0 + timedelta(days=1)))

        record_store.list()
        await record_store.add(make_note("mid", created_at=T0 + timedelta(hours=1)))

        # Insertion order is what gets persisted
        assert read_ids(store_path) == ["old", "new", "mid"]

    def test_list_fails_safe(self, store_path):
        store = RecordStore(store_path)
        store._notes = [object()]  # no created_at → sorting raises

        assert store.list() == []

    def test_find_missing_returns_none(self, store_path):
        assert RecordStore(store_path).find("nope") is None


class TestRecordStoreMutations:
    """Tests for add() and remove() and the file mirror."""

    @pytest.mark.asyncio
    async def test_add_then_find_returns_equal_record(self, record_store, make_note):
        note = make_note("1700000000000")

        stored = await record_store.add(note)

        assert stored == note
        assert record_store.find("1700000000000") == note

    @pytest.mark.asyncio
    async def test_add_persists_full_collection(self, record_store, store_path, make_note):
        await record_store.add(make_note("1", created_at=T0))
        await record_store.add(make_note("2", created_at=T0 + timedelta(seconds=1)))

        reloaded = await reload(store_path)

        assert reloaded.list() == record_store.list()
        assert read_ids(store_path) == ["1", "2"]

    @pytest.mark.asyncio
    async def test_file_uses_camelcase_keys(self, record_store, store_path, make_note):
        await record_store.add(make_note("1"))

        record = json.loads(store_path.read_text(encoding="utf-8"))[0]

        assert {"fileName", "fileUrl", "publicId", "fileType", "fileSize", "createdAt", "desc"} <= set(record)

    @pytest.mark.asyncio
    async def test_add_does_not_check_duplicate_ids(self, record_store, make_note):
        await record_store.add(make_note("1", title="first"))
        await record_store.add(make_note("1", title="second"))

        assert record_store.count == 2
        assert record_store.find("1").title == "first"

    @pytest.mark.asyncio
    async def test_remove_returns_record_and_persists(self, record_store, store_path, make_note):
        await record_store.add(make_note("1"))
        keep = await record_store.add(make_note("2"))

        removed = await record_store.remove("1")

        assert removed.id == "1"
        assert record_store.find("1") is None
        assert (await reload(store_path)).list() == [keep]

    @pytest.mark.asyncio
    async def test_remove_missing_raises_and_leaves_collection(self, record_store, store_path, make_note):
        await record_store.add(make_note("1"))
        before = store_path.read_text(encoding="utf-8")

        with pytest.raises(NotFoundError):
            await record_store.remove("2")

        assert record_store.count == 1
        assert store_path.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_add_find_remove_scenario(self, record_store, make_note):
        note = make_note("1700000000000")
        await record_store.add(note)

        assert record_store.find("1700000000000") == note
        assert await record_store.remove("1700000000000") == note
        assert record_store.find("1700000000000") is None

    @pytest.mark.asyncio
    async def test_failed_add_is_rolled_back(self, record_store, store_path, make_note):
        await record_store.add(make_note("1"))
        before = store_path.read_text(encoding="utf-8")

        with patch.object(record_store, "_write_file", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(RecordStoreError):
                await record_store.add(make_note("2"))

        assert record_store.find("2") is None
        assert record_store.count == 1
        assert store_path.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_failed_remove_restores_record(self, record_store, make_note):
        for note_id in ("1", "2", "3"):
            await record_store.add(make_note(note_id))

        with patch.object(record_store, "_write_file", AsyncMock(side_effect=OSError("read-only"))):
            with pytest.raises(RecordStoreError):
                await record_store.remove("2")

        assert [n.id for n in record_store._notes] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_writes_leave_no_temp_files(self, record_store, store_path, make_note):
        await record_store.add(make_note("1"))
        await record_store.remove("1")

        leftovers = [p for p in store_path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []
