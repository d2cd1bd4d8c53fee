"""
CampusNotes Backend — Cloudinary Blob Storage
==============================================

What:  BlobStorage implementation backed by Cloudinary.
Why:   Cloudinary serves images and raw files over a CDN with a free tier,
       which is all a campus note-sharing site needs.
How:   Uses the official `cloudinary` SDK. The SDK is synchronous (it performs
       blocking HTTP calls), so each call runs in Starlette's threadpool to
       keep the event loop free.
Who:   Instantiated once by the app factory.

Resource types:
    Cloudinary stores images and other files under different resource types
    and requires the same type again on deletion. Notes declared as "image"
    use resource_type="image"; everything else uses "raw".
"""

import io
import logging
import time
from typing import Optional

import cloudinary
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from campusnotes.exceptions import BlobStorageError
from campusnotes.services.blob_storage import BlobStorage, StoredBlob

logger = logging.getLogger(__name__)


class CloudinaryStorage(BlobStorage):
    """Stores note files in a Cloudinary account."""

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
    ):
        # The SDK keeps its credentials in module-level configuration
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        logger.info("CloudinaryStorage initialized for cloud=%s", cloud_name or "<unset>")

    async def upload(
        self,
        content: bytes,
        *,
        resource_kind: str,
        folder: str,
        object_key: str,
    ) -> StoredBlob:
        start_time = time.perf_counter()
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(content),
                resource_type=resource_kind,
                folder=folder,
                public_id=object_key,
            )
        except Exception as e:
            logger.error(
                "Cloudinary upload failed for %s/%s: %s",
                folder,
                object_key,
                str(e),
            )
            raise BlobStorageError(
                message=f"Upload failed: {e}",
                context={"folder": folder, "object_key": object_key, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Uploaded %d bytes to Cloudinary as %s in %.0fms",
            len(content),
            result.get("public_id"),
            duration_ms,
        )
        return StoredBlob(url=result["secure_url"], storage_id=result["public_id"])

    async def delete(self, storage_id: str, *, resource_kind: str) -> None:
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy,
                storage_id,
                resource_type=resource_kind,
            )
        except Exception as e:
            logger.error("Cloudinary delete failed for %s: %s", storage_id, str(e))
            raise BlobStorageError(
                message=f"Delete failed: {e}",
                context={"storage_id": storage_id, "error_type": type(e).__name__},
            ) from e

        # destroy() reports "not found" as a normal result, not an exception
        outcome = (result or {}).get("result")
        if outcome != "ok":
            logger.warning("Cloudinary delete of %s returned %r", storage_id, outcome)
        else:
            logger.info("Deleted %s from Cloudinary", storage_id)
