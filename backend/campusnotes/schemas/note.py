"""
CampusNotes Backend — Pydantic Response Schemas
================================================

What:  Pydantic models defining the API envelopes returned to clients.
Why:   Automatic serialization and OpenAPI doc generation. The Note record
       itself (models/note.py) is returned as-is inside these envelopes.
Who:   Used by route handlers as response models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from campusnotes.models.note import Note


class UploadResponse(BaseModel):
    """
    What:  Response after a successful upload.
    Who:   Returned by POST /api/upload with HTTP 201 Created.
    """
    message: str = Field(
        default="File uploaded successfully!",
        description="Human-readable success message",
    )
    file: Note = Field(description="The stored note record")


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. after DELETE /api/data/{id}."""
    message: str = Field(description="Human-readable result")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "File and title are required",
            "details": {"field": "title"},
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="'OK' while the process is serving requests")
    timestamp: datetime = Field(description="Server time (UTC)")
    message: str = Field(description="Human-readable status line")
