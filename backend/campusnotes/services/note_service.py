"""
CampusNotes Backend — Note Service (Business Logic Orchestrator)
=================================================================

What:  Coordinates upload → blob storage → record store, and the delete path.
Why:   Keeps validation and failure policy in one place, independent of HTTP.
How:   Composes a RecordStore and a BlobStorage passed in by the app factory.
Who:   Called by the route handlers.

Orchestration Flow (POST /api/upload):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────────┐
    │  Upload  │───▶│  Validate   │───▶│ BlobStorage  │───▶│ RecordStore  │
    │  (Route) │    │  file/title │    │  .upload()   │    │  .add()      │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────────┘

    On failure:
    - Validation fails → ValidationError (400), nothing stored
    - Blob upload fails → BlobStorageError (500), no record created
    - Record write fails → uploaded blob is deleted best-effort, RecordStoreError (500)

Delete Flow (DELETE /api/data/{id}):
    find() → NotFoundError if absent → blob delete (failure logged, ignored)
    → remove() → success. Local consistency wins over remote consistency.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from campusnotes.config import settings
from campusnotes.exceptions import (
    BlobStorageError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from campusnotes.models.note import Note
from campusnotes.services.blob_storage import BlobStorage, resource_kind_for
from campusnotes.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_NOTE_TYPE = "note"
DEFAULT_MIME_TYPE = "application/octet-stream"


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - list_notes(): All notes, newest first
        - get_note(): Single note lookup with not-found handling
        - upload_note(): Validate, store the blob, append the record
        - delete_note(): Best-effort blob delete, then remove the record
    """

    def __init__(
        self,
        record_store: RecordStore,
        blob_storage: BlobStorage,
        blob_folder: Optional[str] = None,
        max_upload_size: Optional[int] = None,
    ):
        self.record_store = record_store
        self.blob_storage = blob_storage
        self.blob_folder = blob_folder or settings.blob_folder
        self.max_upload_size = max_upload_size or settings.max_upload_size
        self._last_id = 0

    # ── Queries ───────────────────────────────────────────────────────────

    def list_notes(self) -> List[Note]:
        return self.record_store.list()

    def get_note(self, note_id: str) -> Note:
        note = self.record_store.find(note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload_note(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        title: Optional[str],
        subject: Optional[str] = None,
        description: Optional[str] = None,
        note_type: Optional[str] = None,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Note:
        """
        Store an uploaded file remotely and record its metadata.

        Args:
            filename:       Original client file name (None when no file was sent)
            content:        Raw file bytes (None when no file was sent)
            title:          Required, must not be blank
            subject:        Optional, stripped
            description:    Optional, stripped
            note_type:      "image", "note", ...; defaults to "note"
            content_type:   MIME type declared by the client
            content_length: Size reported by the multipart parser, if known

        Returns:
            The stored Note.

        Raises:
            ValidationError:  Missing file or title, oversized file
            BlobStorageError: Remote upload failed (no record created)
            RecordStoreError: Notes file could not be written
        """
        clean_title = (title or "").strip()
        if content is None or not filename:
            raise ValidationError(message="File and title are required", field="file")
        if not clean_title:
            raise ValidationError(message="File and title are required", field="title")

        self._validate_size(content, content_length)

        note_type = (note_type or "").strip() or DEFAULT_NOTE_TYPE
        resource_kind = resource_kind_for(note_type)
        note_id = self._next_note_id()

        stored = await self.blob_storage.upload(
            content,
            resource_kind=resource_kind,
            folder=f"{self.blob_folder}/{note_type}s",
            object_key=f"{note_id}_{self._object_stem(filename)}",
        )

        note = Note(
            id=note_id,
            title=clean_title,
            subject=(subject or "").strip(),
            description=(description or "").strip(),
            type=note_type,
            file_name=filename,
            file_url=stored.url,
            public_id=stored.storage_id,
            file_type=content_type or DEFAULT_MIME_TYPE,
            file_size=len(content),
        )

        try:
            await self.record_store.add(note)
        except RecordStoreError:
            # Don't leave an orphaned blob behind a record that was never saved
            await self._discard_blob(stored.storage_id, resource_kind)
            raise

        logger.info("Note %s uploaded: '%s' (%s, %d bytes)", note.id, note.title, note.type, note.file_size)
        return note

    def _validate_size(self, content: bytes, content_length: Optional[int]) -> None:
        max_mb = self.max_upload_size / (1024 * 1024)
        size = len(content)
        if (content_length and content_length > self.max_upload_size) or size > self.max_upload_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    @staticmethod
    def _object_stem(filename: str) -> str:
        return Path(filename).name.split(".")[0] or "file"

    def _next_note_id(self) -> str:
        """
        Epoch-millisecond identifier, unique for the life of the process.

        Bumped forward when two uploads land in the same millisecond or the
        clock went backwards past an ID that is already taken.
        """
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        while self.record_store.find(str(candidate)) is not None:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    async def _discard_blob(self, storage_id: str, resource_kind: str) -> None:
        try:
            await self.blob_storage.delete(storage_id, resource_kind=resource_kind)
            logger.info("Discarded blob %s after failed record write", storage_id)
        except BlobStorageError as e:
            logger.warning("Failed to discard blob %s: %s", storage_id, e.message)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_note(self, note_id: Optional[str]) -> Note:
        """
        Delete a note: remote blob first (best-effort), then the record.

        Raises:
            ValidationError:  Blank identifier
            NotFoundError:    No such note
            RecordStoreError: Notes file could not be written
        """
        if not note_id or not note_id.strip():
            raise ValidationError(message="Note ID is required", field="id")

        note = self.record_store.find(note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        if note.public_id:
            try:
                await self.blob_storage.delete(
                    note.public_id,
                    resource_kind=resource_kind_for(note.type),
                )
            except BlobStorageError as e:
                logger.warning(
                    "Remote delete failed for note %s, removing the record anyway: %s",
                    note_id,
                    e.message,
                )

        return await self.record_store.remove(note_id)
