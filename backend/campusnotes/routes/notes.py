"""
CampusNotes Backend — Notes Route Handlers
===========================================

What:  GET /api/notes, GET /api/data (alias), GET /api/notes/{id},
       DELETE /api/data/{id}.
How:   Delegates to NoteService; errors are raised as typed exceptions and
       formatted by the global handlers in main.py.
Who:   Called by the frontend note grid and its delete buttons.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from campusnotes.dependencies import get_note_service
from campusnotes.exceptions import ValidationError
from campusnotes.models.note import Note
from campusnotes.schemas.note import ErrorResponse, MessageResponse
from campusnotes.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=List[Note],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all notes",
    description="Returns every note, most recently created first.",
)
async def list_notes(service: NoteService = Depends(get_note_service)) -> List[Note]:
    return service.list_notes()


@router.get(
    "/data",
    response_model=List[Note],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all notes (alias of /api/notes)",
)
async def list_data(service: NoteService = Depends(get_note_service)) -> List[Note]:
    return service.list_notes()


@router.get(
    "/notes/{note_id}",
    response_model=Note,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Get a single note by ID",
)
async def get_note(note_id: str, service: NoteService = Depends(get_note_service)) -> Note:
    return service.get_note(note_id)


@router.delete(
    "/data/{note_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing note ID", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note",
    description=(
        "Deletes the stored file from blob storage (best-effort) and removes "
        "the note record. A failed remote delete does not block the removal."
    ),
)
async def delete_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> MessageResponse:
    note = await service.delete_note(note_id)
    logger.info("Deleted note %s ('%s')", note.id, note.title)
    return MessageResponse(message="File deleted successfully!")


# Without these, DELETE /api/data would fall through to 405 (or a slash redirect)
@router.delete("/data", include_in_schema=False)
@router.delete("/data/", include_in_schema=False)
async def delete_note_without_id() -> MessageResponse:
    raise ValidationError(message="Note ID is required", field="id")
