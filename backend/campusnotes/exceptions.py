"""
CampusNotes Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Services raise typed errors instead of returning None, so a failed write
       can never be mistaken for a successful no-op.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the record store, blob storage and note service.

Exception Hierarchy:
    CampusNotesError (base)   → 500 Internal Server Error
    ├── ValidationError       → 400 Bad Request (client can fix)
    ├── NotFoundError         → 404 Not Found
    ├── RecordStoreError      → 500 Internal Server Error
    └── BlobStorageError      → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CampusNotesError(Exception):
    """
    Base exception for all CampusNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CampusNotesError):
    """
    Raised when client input fails validation.

    When:    Missing file or title, oversized payload, blank note ID.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CampusNotesError):
    """
    Raised when a requested note does not exist.

    HTTP:    404 Not Found

    The record store's find() returns None for missing records; remove() and
    the service layer convert that into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RecordStoreError(CampusNotesError):
    """
    Raised when the notes file cannot be written.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error

    The in-memory collection is rolled back before this is raised, so memory
    and the file on disk still agree.
    """

    def __init__(
        self,
        message: str = "Could not save notes. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobStorageError(CampusNotesError):
    """
    Raised when the remote blob storage rejects or fails an upload/delete.

    HTTP:    500 Internal Server Error

    No retries are attempted. During note deletion this error is logged and
    ignored by the service (local deletion proceeds).
    """

    def __init__(
        self,
        message: str = "File storage service failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
