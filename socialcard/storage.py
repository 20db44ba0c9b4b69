"""Blob storage for rendered social cards.

In url mode every card is stored under a fresh key of the form
`social/<epoch-millis>-<hex>.png` (see ``dispatch.make_object_key``).
`STORAGE_BACKEND` picks where that key lands:

- `local`: a file at `IMAGE_LIBRARY_DIR/<key>`. The returned URL is
  `/image_library/<key>`, served by ``main.py`` with an immutable cache header.
- `gcs`: a public-read object `<key>` in `GCS_BUCKET`. The returned URL is
  the object's `public_url`.

A failed write raises ``StorageError``. That covers a missing bucket,
missing credentials, a rejected upload and a dropped connection. The
caller never gets bytes back in its place.

Environment variables:
    STORAGE_BACKEND: 'local' (default) or 'gcs'.
    GCS_BUCKET: Bucket receiving the cards when STORAGE_BACKEND is 'gcs'.
    GOOGLE_CLOUD_PROJECT: Project for the storage client (optional).
    IMAGE_LIBRARY_DIR: Root of the local card store (default
        './image_library').
"""

from __future__ import annotations

import os
from functools import lru_cache

import requests
from google.api_core import exceptions as gcloud_exceptions  # type: ignore[import]
from google.auth import exceptions as auth_exceptions  # type: ignore[import]
from google.cloud import storage as gcs  # type: ignore[import]

from .errors import StorageError

STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local").lower()
GCS_BUCKET: str = os.getenv("GCS_BUCKET", "")
GOOGLE_PROJECT: str = os.getenv("GOOGLE_CLOUD_PROJECT", "")
IMAGE_LIBRARY_DIR: str = os.getenv("IMAGE_LIBRARY_DIR", "./image_library")


def _ensure_dir(path: str) -> None:
    """Create the directory holding a card file if it is missing."""
    os.makedirs(path, exist_ok=True)


@lru_cache(maxsize=1)
def _gcs_client() -> gcs.Client:
    return gcs.Client(project=GOOGLE_PROJECT or None)


def _save_gcs(path: str, data: bytes, content_type: str) -> str:
    if not GCS_BUCKET:
        raise StorageError("GCS_BUCKET is not set")
    try:
        blob = _gcs_client().bucket(GCS_BUCKET).blob(path)
        blob.upload_from_string(data, content_type=content_type, predefined_acl="publicRead")
    except (
        gcloud_exceptions.GoogleAPIError,
        auth_exceptions.GoogleAuthError,
        requests.RequestException,
    ) as exc:
        raise StorageError(f"Upload of {path} to gs://{GCS_BUCKET} failed: {exc}") from exc
    return blob.public_url


def _save_local(path: str, data: bytes) -> str:
    dest_path = os.path.join(IMAGE_LIBRARY_DIR, path)
    try:
        _ensure_dir(os.path.dirname(dest_path))
        with open(dest_path, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise StorageError(f"Could not write {dest_path}: {exc}") from exc
    # Return a relative URL pointing to where the file will be served
    return f"/image_library/{path}".replace("\\", "/")


def save_bytes(path: str, data: bytes, content_type: str = "image/png") -> str:
    """Persist a byte string to the configured storage backend.

    Args:
        path: Object key at which to store the bytes, for example
            'social/1700000000000-3fa2c1.png'.
        data: Raw byte content to write.
        content_type: MIME type recorded with the object (GCS only).

    Returns:
        A URL string that can be used by clients to retrieve the data.

    Raises:
        StorageError: If the backend rejects the write.
    """
    if STORAGE_BACKEND == "gcs":
        return _save_gcs(path, data, content_type)
    if STORAGE_BACKEND != "local":
        raise StorageError(f"Unknown STORAGE_BACKEND '{STORAGE_BACKEND}'")
    return _save_local(path, data)
