"""Exception types raised by the render pipeline.

Each stage raises its own error type at the point of failure. Nothing in
the pipeline retries or recovers; the HTTP layer in ``main.py`` maps
``InvalidRequestError`` to a 400 response and every other ``RenderError``
to a 500 response carrying ``str(exc)``.
"""

from __future__ import annotations

from typing import Optional


class RenderError(Exception):
    """Base class for all render pipeline failures."""


class InvalidRequestError(RenderError):
    """A required request field is missing or has an unsupported value."""


class AssetFetchError(RenderError):
    """A background or font asset could not be downloaded.

    Attributes:
        url: The URL that was requested.
        status_code: The HTTP status returned, or ``None`` when the request
            failed before a response arrived (DNS, connect, timeout).
    """

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"Failed to fetch: {url} ({status_code})"
        else:
            message = f"Failed to fetch: {url} ({reason or 'network error'})"
        super().__init__(message)


class AssetDecodeError(RenderError):
    """Background image or font bytes could not be decoded."""


class RasterizeError(RenderError):
    """The layout tree could not be rendered with the supplied fonts."""


class StorageError(RenderError):
    """Persisting the rendered image to blob storage failed."""
