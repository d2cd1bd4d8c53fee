"""
CampusNotes Backend — Upload Route Handler
===========================================

What:  Handles POST /api/upload: a file plus title, subject, desc and type.
How:   Reads the multipart form, delegates to NoteService, returns 201.
Who:   Called by the frontend upload form.

Request Flow:
    1. Client sends multipart/form-data with 'file' and text fields
    2. Missing file or title → 400 (raised by NoteService, not FastAPI's 422)
    3. NoteService uploads to blob storage, then appends the record
    4. Return 201 Created with {message, file}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from campusnotes.dependencies import get_note_service
from campusnotes.schemas.note import ErrorResponse, UploadResponse
from campusnotes.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={
        201: {"description": "Note uploaded", "model": UploadResponse},
        400: {"description": "Missing file/title or file too large", "model": ErrorResponse},
        500: {"description": "Blob storage or record store failure", "model": ErrorResponse},
    },
    summary="Upload a note",
    description=(
        "Upload a file (max 50MB) with a title and optional subject, description "
        "and type. Images (type=image) are stored as images, everything else as raw files."
    ),
)
async def upload_note(
    # Optional at the FastAPI level so a missing field maps to our 400, not 422
    file: Optional[UploadFile] = File(default=None, description="The note file"),
    title: Optional[str] = Form(default=None, description="Required title"),
    subject: Optional[str] = Form(default=None),
    desc: Optional[str] = Form(default=None),
    note_type: Optional[str] = Form(default=None, alias="type", description="image, note, ..."),
    service: NoteService = Depends(get_note_service),
) -> UploadResponse:
    content: Optional[bytes] = None
    try:
        if file is not None:
            content = await file.read()
            logger.info(
                "Received upload: filename=%s, size=%d bytes",
                file.filename or "unknown",
                len(content),
            )

        note = await service.upload_note(
            filename=file.filename if file is not None else None,
            content=content,
            title=title,
            subject=subject,
            description=desc,
            note_type=note_type,
            content_type=file.content_type if file is not None else None,
            content_length=file.size if file is not None else None,
        )
    finally:
        if file is not None:
            await file.close()

    return UploadResponse(message="File uploaded successfully!", file=note)
