"""The render pipeline: fetch, size, lay out, rasterize, composite, dispatch.

Environment variables:
    FONT_REGULAR_FILE: File name of the 400 weight (default
        'Inter-Regular.ttf').
    FONT_SEMIBOLD_FILE: File name of the 700 weight (default
        'Inter-SemiBold.ttf').
"""

from __future__ import annotations

import os
from typing import Dict, List

from fastapi.concurrency import run_in_threadpool
from PIL import Image  # type: ignore[import]

from .dispatch import dispatch
from .fetch import fetch_assets
from .image_ops import composite
from .models import REGULAR_WEIGHT, SEMIBOLD_WEIGHT, FontAsset, RenderRequest, RenderResult
from .raster import rasterize
from .scene import CANVAS_HEIGHT, CANVAS_WIDTH, FONT_FAMILY, build_scene
from .sizing import compute_scale, font_sizes

FONT_FILES: Dict[int, str] = {
    REGULAR_WEIGHT: os.getenv("FONT_REGULAR_FILE", "Inter-Regular.ttf"),
    SEMIBOLD_WEIGHT: os.getenv("FONT_SEMIBOLD_FILE", "Inter-SemiBold.ttf"),
}


def font_urls(base_url: str) -> Dict[int, str]:
    """Map each font weight to its URL under ``base_url``."""
    base = base_url if base_url.endswith("/") else base_url + "/"
    return {weight: base + name for weight, name in FONT_FILES.items()}


def missing_font_files(font_dir: str) -> List[str]:
    """Return the font file names that are absent from ``font_dir``."""
    return [name for name in FONT_FILES.values() if not os.path.isfile(os.path.join(font_dir, name))]


def compose_image(request: RenderRequest, background: bytes, fonts: list) -> Image.Image:
    """Run the CPU-bound part of a render and return the final canvas."""
    scale = compute_scale(request.title, request.message)
    title_px, body_px = font_sizes(scale)
    print(
        f"[render] layout={request.layout.value} scale={scale:.2f} "
        f"title_px={title_px} body_px={body_px}"
    )
    scene = build_scene(request.title, request.message, title_px, body_px, request.layout)
    overlay = rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, fonts)
    return composite(background, overlay, (CANVAS_WIDTH, CANVAS_HEIGHT))


def _compose_and_dispatch(request: RenderRequest, background: bytes, fonts: list) -> RenderResult:
    return dispatch(compose_image(request, background, fonts), request.mode)


async def render_social_image(request: RenderRequest, urls: Dict[int, str]) -> RenderResult:
    """Render ``request`` and return PNG bytes or a stored URL.

    Args:
        request: A validated request.
        urls: Font URL per weight, as returned by ``font_urls``.

    Raises:
        RenderError: Any pipeline failure; see ``socialcard.errors``.
    """
    weights = list(urls)
    background, font_data = await fetch_assets(request.background_url, [urls[w] for w in weights])
    fonts = [FontAsset(FONT_FAMILY, weight, data) for weight, data in zip(weights, font_data)]
    return await run_in_threadpool(_compose_and_dispatch, request, background, fonts)
