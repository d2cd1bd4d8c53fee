"""
CampusNotes Backend — FastAPI Dependencies
===========================================

What:  Accessors that hand route handlers the services built by create_app().
Why:   The store is an explicit object owned by the application, not module
       state, so tests can build an app around their own store and blob client.
How:   Services live on app.state; these functions read them from the request.
"""

from fastapi import Request

from campusnotes.services.note_service import NoteService


async def get_note_service(request: Request) -> NoteService:
    """
    The application's note service, with its record store initialized.

    The lifespan handler normally initializes the store at startup;
    initialize() is idempotent, so calling it here also covers servers
    (and test transports) that skip lifespan events.
    """
    service: NoteService = request.app.state.note_service
    await service.record_store.initialize()
    return service
