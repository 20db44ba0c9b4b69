"""Encode the finished image and hand it back or store it."""

from __future__ import annotations

import time
import uuid

from PIL import Image  # type: ignore[import]

from . import storage
from .image_ops import encode_png
from .models import OutputMode, RenderResult

KEY_PREFIX = "social"


def make_object_key() -> str:
    """Return a fresh object key, e.g. ``social/1718000000000-9f86d081884c7.png``."""
    millis = int(time.time() * 1000)
    return f"{KEY_PREFIX}/{millis}-{uuid.uuid4().hex[:13]}.png"


def dispatch(image: Image.Image, mode: OutputMode) -> RenderResult:
    """Encode ``image`` as PNG and return it directly or as a stored URL.

    Raises:
        StorageError: In url mode, if the upload fails. The bytes are never
            returned instead.
    """
    png = encode_png(image)
    if mode is OutputMode.URL:
        key = make_object_key()
        url = storage.save_bytes(key, png, content_type="image/png")
        return RenderResult(url=url, key=key)
    return RenderResult(content=png)
