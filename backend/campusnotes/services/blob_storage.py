"""
CampusNotes Backend — Abstract Blob Storage Interface
======================================================

What:  Abstract base class for the remote service that holds uploaded bytes.
Why:   NoteService only needs "put these bytes somewhere, give me a URL and an
       ID" and "delete that ID". Keeping that behind an interface lets tests
       substitute a mock and lets the provider change without touching routes.
How:   Concrete implementations inherit from BlobStorage and implement
       upload() and delete().
Who:   Called by NoteService during upload and delete.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

IMAGE_RESOURCE = "image"
RAW_RESOURCE = "raw"


def resource_kind_for(note_type: str) -> str:
    """Images are stored as images; everything else as a generic binary."""
    return IMAGE_RESOURCE if note_type == "image" else RAW_RESOURCE


class StoredBlob(BaseModel):
    """Where an uploaded blob ended up."""

    url: str = Field(description="Public (HTTPS) URL of the stored blob")
    storage_id: str = Field(description="Provider identifier used for later deletion")


class BlobStorage(ABC):
    """
    Abstract interface for remote blob storage.

    Contract:
        - Every provider-specific failure is wrapped in BlobStorageError
        - No retries; a failed call fails the operation once
        - No timeout is imposed; a hanging provider blocks the request
    """

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        *,
        resource_kind: str,
        folder: str,
        object_key: str,
    ) -> StoredBlob:
        """
        Store content remotely.

        Args:
            content:       Raw file bytes
            resource_kind: "image" or "raw" (see resource_kind_for)
            folder:        Destination folder, e.g. "campusnotes/notes"
            object_key:    Name of the object inside the folder

        Returns:
            StoredBlob with the public URL and storage identifier.

        Raises:
            BlobStorageError: The provider rejected or failed the upload.
        """
        ...

    @abstractmethod
    async def delete(self, storage_id: str, *, resource_kind: str) -> None:
        """
        Delete a previously stored blob.

        Raises:
            BlobStorageError: The provider call failed.
        """
        ...
