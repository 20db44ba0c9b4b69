import io

import pytest
from PIL import ImageFont  # type: ignore

from socialcard.errors import AssetDecodeError, RasterizeError
from socialcard.models import REGULAR_WEIGHT, FontAsset, LayoutVariant
from socialcard.raster import rasterize, wrap_text
from socialcard.scene import CANVAS_HEIGHT, CANVAS_WIDTH, FONT_FAMILY, Box, Style, build_scene


@pytest.fixture
def font(font_bytes):
    return ImageFont.truetype(io.BytesIO(font_bytes), size=32)


def test_wrap_text_respects_width(font):
    text = "the quick brown fox jumps over the lazy dog " * 4
    lines = wrap_text(text, font, 300)
    assert len(lines) > 1
    assert all(font.getlength(line) <= 300 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_wrap_text_breaks_long_words(font):
    word = "x" * 200
    lines = wrap_text(word, font, 200)
    assert len(lines) > 1
    assert "".join(lines) == word
    assert all(font.getlength(line) <= 200 for line in lines)


def test_wrap_text_keeps_newlines(font):
    assert wrap_text("one\n\ntwo", font, 500) == ["one", "", "two"]


def test_centered_overlay_is_transparent_around_text(fonts):
    scene = build_scene("Hi", "Welcome", 64, 46, LayoutVariant.CENTERED)
    img = rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, fonts)
    assert img.size == (CANVAS_WIDTH, CANVAS_HEIGHT)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0))[3] == 0
    assert img.getpixel((CANVAS_WIDTH - 1, CANVAS_HEIGHT - 1))[3] == 0
    left, top, right, bottom = img.getchannel("A").getbbox()
    assert abs((left + right) / 2 - CANVAS_WIDTH / 2) < 40
    assert abs((top + bottom) / 2 - CANVAS_HEIGHT / 2) < 80


def test_card_overlay_sits_at_bottom(fonts):
    scene = build_scene("Hi", "Welcome", 64, 46, LayoutVariant.CARD)
    img = rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, fonts)
    left, top, right, bottom = img.getchannel("A").getbbox()
    assert top > CANVAS_HEIGHT / 2
    assert 1000 < bottom <= CANVAS_HEIGHT - 64
    assert (left, right) == (64, CANVAS_WIDTH - 64)
    # panel is translucent
    assert 0 < img.getpixel((CANVAS_WIDTH // 2, bottom - 10))[3] < 255


def test_long_text_wraps_inside_canvas(fonts):
    scene = build_scene("Title " * 40, "word " * 200, 38, 28, LayoutVariant.CENTERED)
    img = rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, fonts)
    left, _, right, _ = img.getchannel("A").getbbox()
    # content box is capped at 900px and centered
    assert left >= (CANVAS_WIDTH - 900) // 2 - 2
    assert right <= (CANVAS_WIDTH + 900) // 2 + 2


def test_flex_end_and_opacity():
    child = Box(Style(width=50, height=50, background=(255, 0, 0), opacity=0.5))
    root = Box(Style(width=200, height=200, justify="flex-end", align="center"), (child,))
    img = rasterize(root, 200, 200, [])
    assert img.getpixel((100, 175)) == (255, 0, 0, 128)
    assert img.getpixel((100, 100))[3] == 0
    assert img.getpixel((50, 175))[3] == 0


def test_row_direction_with_gap():
    a = Box(Style(width=40, height=40, background="#00ff00"))
    b = Box(Style(width=40, height=40, background="#0000ff"))
    root = Box(Style(width=200, height=100, flex_direction="row", gap=20, align="flex-start"), (a, b))
    img = rasterize(root, 200, 100, [])
    assert img.getpixel((20, 20)) == (0, 255, 0, 255)
    assert img.getpixel((50, 20))[3] == 0
    assert img.getpixel((80, 20)) == (0, 0, 255, 255)


def test_malformed_font_bytes():
    scene = build_scene("Hi", "Welcome", 64, 46)
    with pytest.raises(AssetDecodeError):
        rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, [FontAsset(FONT_FAMILY, REGULAR_WEIGHT, b"not a font")])


def test_unregistered_weight(font_bytes):
    scene = build_scene("Hi", "Welcome", 64, 46)
    with pytest.raises(RasterizeError, match="700"):
        rasterize(scene, CANVAS_WIDTH, CANVAS_HEIGHT, [FontAsset(FONT_FAMILY, REGULAR_WEIGHT, font_bytes)])
