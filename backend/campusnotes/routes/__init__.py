# Routes package init
"""
CampusNotes Backend — API Routes Package
=========================================

Route Inventory:
    - upload.py:  POST   /api/upload          (file + metadata)
    - notes.py:   GET    /api/notes           (all notes, newest first)
                  GET    /api/data            (alias of /api/notes)
                  GET    /api/notes/{id}      (single note)
                  DELETE /api/data/{id}       (delete note and its blob)
    - health.py:  GET    /health, /api/health (liveness)

Routes stay THIN: extract request data, call NoteService, pick the status code.
"""
