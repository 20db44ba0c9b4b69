"""Image manipulation utilities.

This module wraps the Pillow operations the render pipeline needs:
decoding the fetched background, cover-fitting it to the canvas, layering
the rasterized text on top and encoding the result as PNG.
"""

from __future__ import annotations

from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps  # type: ignore[import]

from .errors import AssetDecodeError
from .scene import CANVAS_HEIGHT, CANVAS_WIDTH


def decode_image(data: bytes) -> Image.Image:
    """Open raw image bytes with Pillow and convert to RGBA.

    Raises:
        AssetDecodeError: If the bytes are not a decodable image.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (OSError, Image.DecompressionBombError) as exc:
        raise AssetDecodeError(f"Background is not a valid image: {exc}") from exc
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return img


def cover_fit(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Scale ``img`` to fill ``size`` and crop the overflow around the center.

    The aspect ratio of the source is preserved. An image that already has
    the target size is returned as an unmodified copy.
    """
    if img.size == size:
        return img.copy()
    return ImageOps.fit(img, size, method=Image.LANCZOS, centering=(0.5, 0.5))


def composite(
    background: bytes,
    overlay: Image.Image,
    size: Tuple[int, int] = (CANVAS_WIDTH, CANVAS_HEIGHT),
) -> Image.Image:
    """Cover-fit the background to ``size`` and alpha-composite ``overlay`` over it.

    Args:
        background: Raw bytes of the background photo.
        overlay: RGBA text layer, usually from ``raster.rasterize``.
        size: Canvas size in pixels.

    Returns:
        The merged RGBA image, exactly ``size``.
    """
    base = cover_fit(decode_image(background), size)
    if overlay.size != size:
        overlay = overlay.resize(size, Image.LANCZOS)
    if overlay.mode != "RGBA":
        overlay = overlay.convert("RGBA")
    base.alpha_composite(overlay)
    return base


def encode_png(img: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
