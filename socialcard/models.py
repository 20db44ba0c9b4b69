"""Pydantic models and data schemas for the social card renderer.

``RenderRequest`` is the normalised form of the JSON body accepted by
``POST /render``. Use ``RenderRequest.from_payload`` rather than the
constructor so that text fallbacks and required-field checks are applied
the same way everywhere.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from .errors import InvalidRequestError

TITLE_FALLBACK: str = os.getenv("TITLE_FALLBACK", "Title")
MESSAGE_FALLBACK: str = os.getenv("MESSAGE_FALLBACK", "Message")

REGULAR_WEIGHT = 400
SEMIBOLD_WEIGHT = 700


class OutputMode(str, Enum):
    BINARY = "binary"
    URL = "url"


class LayoutVariant(str, Enum):
    CENTERED = "centered"
    CARD = "card"


def safe_text(value: Any, fallback: str) -> str:
    """Return ``value`` trimmed, or ``fallback`` when it is empty or not a string."""
    text = value.strip() if isinstance(value, str) else ""
    return text or fallback


def _parse_choice(value: Any, enum_cls, default, field: str):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
        raise InvalidRequestError(f"{field} must be one of {allowed}") from None


class RenderRequest(BaseModel):
    """A validated render request.

    Attributes:
        title: Headline text, never empty.
        message: Body text, never empty.
        background_url: URL of the background photo.
        mode: Whether to return PNG bytes or a stored URL.
        layout: Which overlay style to draw.
    """

    title: str
    message: str
    background_url: str
    mode: OutputMode = OutputMode.BINARY
    layout: LayoutVariant = LayoutVariant.CENTERED

    @classmethod
    def from_payload(cls, payload: Any) -> "RenderRequest":
        """Build a request from a decoded JSON body.

        Raises:
            InvalidRequestError: If ``backgroundUrl`` is missing or empty, or
                ``layout`` holds an unsupported value. Any ``mode`` other
                than ``url`` means binary.
        """
        data = payload if isinstance(payload, dict) else {}
        background_url = safe_text(data.get("backgroundUrl"), "")
        if not background_url:
            raise InvalidRequestError("backgroundUrl is required")
        return cls(
            title=safe_text(data.get("title"), TITLE_FALLBACK),
            message=safe_text(data.get("message"), MESSAGE_FALLBACK),
            background_url=background_url,
            mode=OutputMode.URL if data.get("mode") == OutputMode.URL.value else OutputMode.BINARY,
            layout=_parse_choice(data.get("layout"), LayoutVariant, LayoutVariant.CENTERED, "layout"),
        )


class RenderUrlResponse(BaseModel):
    """Response returned by ``POST /render`` in url mode."""

    url: str


class ErrorResponse(BaseModel):
    error: str


@dataclass(frozen=True)
class FontAsset:
    """Raw bytes of one weight of a font family."""

    family: str
    weight: int
    data: bytes


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render: either encoded bytes or a stored object URL."""

    content: Optional[bytes] = None
    url: Optional[str] = None
    key: Optional[str] = None
    media_type: str = "image/png"
