"""
CampusNotes Backend — Record Store
===================================

What:  Durable, process-local collection of Note records backed by one JSON file.
Why:   The service keeps metadata only (the bytes live in blob storage), so a
       single small JSON file is enough and needs no database server.
How:   The collection lives in memory; every mutation rewrites the whole file.
Who:   Constructed once by the app factory and reached through dependencies.
When:  initialize() runs once before any other operation (at startup).

Persistence protocol:
    1. Serialize the full collection as a JSON array (camelCase keys)
    2. Write it to a uniquely named temp file beside the target
    3. os.replace() the temp file over the target

    A crash can therefore leave the previous file or the new one, never a
    half-written one. Writes are serialized by an asyncio.Lock, so the file
    always ends up holding the latest in-memory state. There is no
    write-ahead log, and a second process writing the same file is not
    detected.

Failure handling:
    - Unreadable file at startup: the collection starts empty and a copy of
      the file is saved as <name>.corrupt-<timestamp> for manual recovery
    - Write failure: the in-memory change is rolled back, RecordStoreError raised
    - list() never raises; it logs and returns an empty list
"""

import asyncio
import contextlib
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from campusnotes.exceptions import NotFoundError, RecordStoreError
from campusnotes.models.note import Note

logger = logging.getLogger(__name__)

# Serializer for the on-disk layout: a bare JSON array of records
_NOTE_LIST = TypeAdapter(List[Note])


class RecordStore:
    """
    In-memory ordered collection of notes mirrored to a JSON file.

    The collection keeps insertion order; list() returns a sorted copy
    (newest first). Identifiers are not checked for uniqueness here;
    NoteService is responsible for generating unique ones.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._notes: List[Note] = []
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def count(self) -> int:
        """Number of stored notes."""
        return len(self._notes)

    # ── Startup ───────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """
        Load the backing file into memory, creating it if missing.

        Runs once per store; later calls return immediately. If the file
        cannot be created the store still starts (empty) and the next
        mutation retries the write.
        """
        async with self._init_lock:
            if self._initialized:
                return

            if await aiofiles.os.path.exists(self.path):
                self._notes = await self._load()
                logger.info("Loaded %d notes from %s", len(self._notes), self.path)
            else:
                self._notes = []
                try:
                    await self._persist()
                    logger.info("Created new notes file at %s", self.path)
                except RecordStoreError as e:
                    logger.error("Could not create notes file: %s | Context: %s", e.message, e.context)

            self._initialized = True

    async def _load(self) -> List[Note]:
        try:
            async with aiofiles.open(self.path, "rb") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Error reading notes file %s: %s", self.path, str(e))
            return []

        if not raw.strip():
            return []

        try:
            data = json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(
                "Notes file %s is not valid UTF-8 JSON (%s); starting with an empty collection",
                self.path,
                str(e),
            )
            await self._backup_unreadable(raw)
            return []

        if not isinstance(data, list):
            logger.error(
                "Notes file %s holds a %s, expected an array; starting with an empty collection",
                self.path,
                type(data).__name__,
            )
            await self._backup_unreadable(raw)
            return []

        notes: List[Note] = []
        skipped = 0
        for index, item in enumerate(data):
            try:
                notes.append(Note.model_validate(item))
            except PydanticValidationError as e:
                skipped += 1
                logger.warning(
                    "Skipping invalid record #%d in %s (%d validation errors)",
                    index,
                    self.path,
                    e.error_count(),
                )

        if skipped:
            await self._backup_unreadable(raw)
        return notes

    async def _backup_unreadable(self, raw: bytes) -> None:
        """Keep a copy of a file we could not fully read; the next write replaces it."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        backup_path = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            async with aiofiles.open(backup_path, "wb") as f:
                await f.write(raw)
            logger.warning("Saved a copy of the unreadable notes file to %s", backup_path)
        except OSError as e:
            logger.error("Could not back up unreadable notes file to %s: %s", backup_path, str(e))

    # ── Queries ───────────────────────────────────────────────────────────

    def list(self) -> List[Note]:
        """All notes, newest first. Returns an empty list on any internal error."""
        try:
            return sorted(self._notes, key=lambda note: note.created_at, reverse=True)
        except Exception as e:
            logger.error("Error listing notes: %s", str(e), exc_info=True)
            return []

    def find(self, note_id: str) -> Optional[Note]:
        """First note with the given identifier, or None."""
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    # ── Mutations ─────────────────────────────────────────────────────────

    async def add(self, note: Note) -> Note:
        """
        Append a note and flush the collection.

        Raises:
            RecordStoreError: the file write failed (the append is undone)
        """
        self._notes.append(note)
        try:
            await self._persist()
        except RecordStoreError:
            # Undo by identity; an equal-valued duplicate may exist earlier
            for index in range(len(self._notes) - 1, -1, -1):
                if self._notes[index] is note:
                    del self._notes[index]
                    break
            raise

        logger.info("Note added: '%s' (id=%s), total notes: %d", note.title, note.id, len(self._notes))
        return note

    async def remove(self, note_id: str) -> Note:
        """
        Remove the first note with the given identifier and flush.

        Returns the removed note so the caller can clean up its blob.

        Raises:
            NotFoundError: no such note (collection unchanged)
            RecordStoreError: the file write failed (the note is restored)
        """
        index = next((i for i, n in enumerate(self._notes) if n.id == note_id), None)
        if index is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        note = self._notes.pop(index)
        try:
            await self._persist()
        except RecordStoreError:
            self._notes.insert(index, note)
            raise

        logger.info("Note removed: '%s' (id=%s), total notes: %d", note.title, note.id, len(self._notes))
        return note

    # ── Persistence ───────────────────────────────────────────────────────

    async def _persist(self) -> None:
        # Serialized under the lock so the last write always carries the newest state
        async with self._write_lock:
            payload = _NOTE_LIST.dump_json(list(self._notes), indent=2, by_alias=True).decode("utf-8")
            try:
                await self._write_file(payload)
            except OSError as e:
                logger.error("Error saving notes to %s: %s", self.path, str(e))
                raise RecordStoreError(
                    context={"path": str(self.path), "os_error": str(e)},
                ) from e
            logger.debug("Saved %d notes to %s", len(self._notes), self.path)

    async def _write_file(self, payload: str) -> None:
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError:
            with contextlib.suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            raise
