"""
CampusNotes Backend — Note Record Model
========================================

What:  Pydantic model for one uploaded file's metadata entry.
Why:   The same shape is persisted in the notes JSON file and returned by the
       API, so a single validated model covers both.
How:   Python attribute names are snake_case; the JSON keys (aliases) keep the
       camelCase layout existing data files were written with.
Who:   Built by NoteService on upload; held and persisted by RecordStore.

JSON layout of a record:
    {
        "id": "1700000000000",
        "title": "Linear Algebra — Week 3",
        "subject": "Mathematics",
        "desc": "Eigenvalues worksheet",
        "type": "note",
        "fileName": "week3.pdf",
        "fileUrl": "https://res.cloudinary.com/.../week3.pdf",
        "publicId": "campusnotes/notes/1700000000000_week3",
        "fileType": "application/pdf",
        "fileSize": 182044,
        "createdAt": "2023-11-14T22:13:20Z"
    }
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class Note(BaseModel):
    """
    Represents an uploaded note.

    Lifecycle:
        1. Created once the blob upload has succeeded
        2. Appended to the record store (and flushed to disk)
        3. Never updated — only listed, looked up, or deleted

    Ordering:
        Lists are sorted by created_at, newest first. Timestamps are always
        timezone-aware so records from different sources compare cleanly.
    """

    id: str = Field(min_length=1, description="Time-derived unique identifier")
    title: str = Field(min_length=1, description="Display title")
    subject: str = Field(default="", description="Course or subject")
    description: str = Field(default="", alias="desc", description="Free-text description")
    type: str = Field(default="note", description="Declared kind: image, note, ...")
    file_name: str = Field(alias="fileName", description="Original uploaded file name")
    file_url: str = Field(alias="fileUrl", description="Public URL of the stored blob")
    public_id: str = Field(default="", alias="publicId", description="Blob storage identifier")
    file_type: str = Field(default="application/octet-stream", alias="fileType", description="MIME type")
    file_size: int = Field(default=0, ge=0, alias="fileSize", description="Size in bytes")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
        description="When the note was created (UTC)",
    )

    model_config = {"populate_by_name": True}

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps (older files) are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
