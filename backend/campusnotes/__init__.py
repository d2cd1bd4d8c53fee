"""
CampusNotes Backend — Application Package Initializer
=====================================================

What: Marks the `campusnotes` directory as a Python package.
Why:  Enables module imports like `from campusnotes.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend keeps the same thin layering for every request:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    NoteService (Business Logic)     │  ← Validation, orchestration
    ├──────────────────┬──────────────────┤
    │   RecordStore    │   BlobStorage    │  ← JSON file / Cloudinary
    └──────────────────┴──────────────────┘

    - Routes extract form fields and path params, then delegate
    - NoteService decides what a failure means and raises typed errors
    - RecordStore owns the note collection and its JSON mirror on disk
    - BlobStorage holds the uploaded bytes; records only keep its URL and ID
"""

__version__ = "1.0.0"
