"""Shared fixtures for the render pipeline tests.

Real TrueType bytes are needed to exercise the rasterizer. Pillow ships a
FreeType default font (since 10.1) which is loaded from bytes, so its raw
data doubles as both the regular and the semibold weight here.
"""

import io

import pytest
from PIL import Image, ImageFont  # type: ignore

from socialcard.models import REGULAR_WEIGHT, SEMIBOLD_WEIGHT, FontAsset
from socialcard.scene import FONT_FAMILY


@pytest.fixture(scope="session")
def font_bytes():
    font = ImageFont.load_default(size=24)
    if not isinstance(font, ImageFont.FreeTypeFont):
        pytest.skip("Pillow was built without FreeType support")
    return font.font_bytes


@pytest.fixture
def fonts(font_bytes):
    return [
        FontAsset(FONT_FAMILY, REGULAR_WEIGHT, font_bytes),
        FontAsset(FONT_FAMILY, SEMIBOLD_WEIGHT, font_bytes),
    ]


@pytest.fixture
def make_image():
    """Return a helper producing encoded image bytes of a given size."""

    def _make(size=(64, 64), color=(0, 120, 200), fmt="PNG"):
        img = Image.new("RGB", size, color=color)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make
