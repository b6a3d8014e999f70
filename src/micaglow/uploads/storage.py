"""HTTP client for the object-storage REST API.

Product images live in public buckets. Files are validated locally
before any request is made: only image content types up to 5 MiB are
sent.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 5 * 1024 * 1024


class ImageValidationError(Exception):
    """File rejected before upload."""


class StorageError(Exception):
    """Storage service refused a request."""


class StorageUnavailable(StorageError):
    """Storage service could not be reached."""


@dataclass
class UploadResult:
    success: bool
    url: str | None = None
    path: str | None = None
    error: str | None = None

    def as_dict(self):
        return {"success": self.success, "url": self.url, "path": self.path, "error": self.error}


def _get_client() -> httpx.Client:
    """Get a configured httpx client."""
    return httpx.Client(
        base_url=f"{settings.STORAGE_URL.rstrip('/')}/storage/v1",
        timeout=settings.STORAGE_TIMEOUT,
        headers={
            "Authorization": f"Bearer {settings.STORAGE_API_KEY}",
            "apikey": settings.STORAGE_API_KEY,
        },
    )


def validate_image(file):
    """Check content type and size of an uploaded file.

    Raises:
        ImageValidationError: Not an image, or larger than 5 MiB
    """
    content_type = getattr(file, "content_type", "") or ""
    if not content_type.startswith("image/"):
        raise ImageValidationError("File must be an image")
    if file.size > MAX_IMAGE_SIZE:
        raise ImageValidationError("File size must be less than 5MB")


def _object_path(bucket, path):
    return f"{quote(bucket)}/{quote(path)}"


def get_public_url(bucket: str, path: str) -> str:
    return f"{settings.STORAGE_URL.rstrip('/')}/storage/v1/object/public/{_object_path(bucket, path)}"


def _default_path(file):
    name = getattr(file, "name", "") or "image"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}-{name}"


def upload_image(file, bucket: str | None = None, path: str | None = None, upsert: bool = False) -> UploadResult:
    """Upload an image and return its public URL.

    Args:
        file: Django UploadedFile (anything with name, size, content_type, read())
        bucket: Target bucket, defaults to STORAGE_DEFAULT_BUCKET
        path: Object path, defaults to a unique name derived from the file name
        upsert: Overwrite an existing object at the same path

    Raises:
        ImageValidationError: Rejected locally; nothing was sent
    """
    validate_image(file)

    bucket = bucket or settings.STORAGE_DEFAULT_BUCKET
    path = path or _default_path(file)

    try:
        with _get_client() as client:
            response = client.post(
                f"/object/{_object_path(bucket, path)}",
                content=file.read(),
                headers={
                    "Content-Type": file.content_type,
                    "Cache-Control": "max-age=3600",
                    "x-upsert": "true" if upsert else "false",
                },
            )
    except httpx.RequestError as e:
        logger.error("Storage service unavailable: %s", e)
        return UploadResult(success=False, error=f"Upload failed: {e}")

    if response.status_code not in (200, 201):
        message = _error_message(response)
        logger.warning("Upload of %s/%s rejected: %s", bucket, path, message)
        return UploadResult(success=False, error=f"Upload failed: {message}")

    logger.info("Uploaded image %s/%s", bucket, path)
    return UploadResult(success=True, url=get_public_url(bucket, path), path=path)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return data.get("message") or data.get("error") or f"HTTP {response.status_code}"


def delete_image(bucket: str, path: str) -> bool:
    """Remove an object. Returns False when the service refuses or is down."""
    try:
        with _get_client() as client:
            response = client.request("DELETE", f"/object/{quote(bucket)}", json={"prefixes": [path]})
    except httpx.RequestError as e:
        logger.error("Storage service unavailable: %s", e)
        return False

    if response.status_code != 200:
        logger.warning("Delete of %s/%s failed: %s", bucket, path, _error_message(response))
        return False
    return True


def list_images(bucket: str, prefix: str = "") -> list[dict]:
    """Objects in a bucket under a prefix.

    Raises:
        StorageUnavailable: If the service cannot be reached
        StorageError: If the service answers with an error
    """
    try:
        with _get_client() as client:
            response = client.post(f"/object/list/{quote(bucket)}", json={"prefix": prefix, "limit": 100})
    except httpx.RequestError as e:
        logger.error("Storage service unavailable: %s", e)
        raise StorageUnavailable(str(e)) from e

    if response.status_code != 200:
        message = _error_message(response)
        logger.warning("Listing %s failed: %s", bucket, message)
        raise StorageError(message)
    return response.json()


def check_health() -> bool:
    """Check if the storage service answers."""
    try:
        with _get_client() as client:
            response = client.get("/bucket")
            return response.status_code == 200
    except httpx.RequestError as e:
        logger.warning("Storage health check failed: %s", e)
        return False
