# Services package init
"""
CampusNotes Backend — Services Layer
=====================================

What:  Business logic and persistence sitting between routes (HTTP) and storage.
Why:   Routes handle HTTP; services handle rules and storage.

Service Inventory:
    - RecordStore: JSON-file-backed note collection (load/list/find/add/remove)
    - BlobStorage (abstract): Interface for the remote file store
    - CloudinaryStorage: Concrete BlobStorage using the Cloudinary SDK
    - NoteService: Orchestrates upload → blob → record and the delete path

Unlike a module-level singleton, each service is constructed once by
create_app() and stored on app.state; routes reach it via dependencies.
"""
