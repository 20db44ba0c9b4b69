"""Rasterize a layout tree into a transparent RGBA image.

This is a small subset of CSS flexbox, enough for the overlay trees built
by ``scene.build_scene``:

- boxes are either fixed width, stretched to their parent (``align``
  ``stretch`` in a column), or sized to fit their content up to the
  available width and ``max_width``;
- children are laid out along ``flex_direction`` separated by ``gap`` and
  distributed according to ``justify``, and positioned on the cross axis
  according to ``align``;
- color, text alignment and font properties are inherited, opacity
  multiplies down the tree;
- text wraps greedily on whitespace and each line is ``font_size *
  line_height`` pixels tall.

Layout happens in three passes over a tree of ``_Frame`` objects: measure,
place, paint.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, Iterable, List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont  # type: ignore[import]

from .errors import AssetDecodeError, RasterizeError
from .models import FontAsset
from .scene import Box, Color, Node, Text

INHERITED_DEFAULTS: Dict[str, object] = {
    "color": "#000000",
    "text_align": "left",
    "font_family": None,
    "font_weight": 400,
    "font_size": 16,
    "line_height": 1.2,
}


class _FontBook:
    """Fonts available to one rasterize call, keyed by (family, weight)."""

    def __init__(self, fonts: Iterable[FontAsset]) -> None:
        self._data: Dict[Tuple[str, int], bytes] = {}
        self._cache: Dict[Tuple[str, int, int], ImageFont.FreeTypeFont] = {}
        for asset in fonts:
            try:
                ImageFont.truetype(BytesIO(asset.data), size=12)
            except (OSError, ValueError) as exc:
                raise AssetDecodeError(
                    f"Malformed font data for {asset.family} weight {asset.weight}: {exc}"
                ) from exc
            self._data[(asset.family, asset.weight)] = asset.data

    def get(self, family: Optional[str], weight: int, size: int) -> ImageFont.FreeTypeFont:
        key = (family or "", weight, size)
        font = self._cache.get(key)
        if font is None:
            data = self._data.get((family or "", weight))
            if data is None:
                raise RasterizeError(f"Font '{family}' with weight {weight} is not registered")
            font = ImageFont.truetype(BytesIO(data), size=size)
            self._cache[key] = font
        return font


@dataclass
class _Frame:
    node: Node
    props: Dict[str, object]
    width: int
    height: int
    stretch: bool = False
    x: int = 0
    y: int = 0
    children: List["_Frame"] = field(default_factory=list)
    font: Optional[ImageFont.FreeTypeFont] = None
    lines: List[str] = field(default_factory=list)
    line_px: int = 0


def _edges(padding) -> Tuple[int, int, int, int]:
    if isinstance(padding, int):
        return padding, padding, padding, padding
    top, right, bottom, left = padding
    return top, right, bottom, left


def _insets(node: Node) -> Tuple[int, int]:
    top, right, bottom, left = _edges(node.style.padding)
    border = node.style.border_width
    return left + right + 2 * border, top + bottom + 2 * border


def _rgba(color: Color, opacity: float) -> Tuple[int, int, int, int]:
    if isinstance(color, str):
        r, g, b, a = ImageColor.getcolor(color, "RGBA")
    elif len(color) == 3:
        r, g, b = color
        a = 255
    else:
        r, g, b, a = color
    return r, g, b, int(round(a * opacity))


def wrap_text(text: str, font: ImageFont.FreeTypeFont, max_width: float) -> List[str]:
    """Greedy word wrap of ``text`` into lines no wider than ``max_width``.

    Explicit newlines start a new line. A word wider than ``max_width`` on
    its own is broken between characters.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if font.getlength(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = word
            if font.getlength(word) > max_width:
                chunk = ""
                for char in word:
                    if chunk and font.getlength(chunk + char) > max_width:
                        lines.append(chunk)
                        chunk = char
                    else:
                        chunk += char
                current = chunk
        lines.append(current)
    return lines


def _measure(node: Node, available: int, inherited: Dict[str, object], book: _FontBook, stretch: bool) -> _Frame:
    style = node.style
    props = dict(inherited)
    for name in INHERITED_DEFAULTS:
        value = getattr(style, name)
        if value is not None:
            props[name] = value

    inset_x, inset_y = _insets(node)
    limit = style.width if style.width is not None else available
    if style.max_width is not None:
        limit = min(limit, style.max_width)
    inner_limit = max(0, limit - inset_x)

    frame = _Frame(node=node, props=props, width=0, height=0, stretch=stretch)
    if isinstance(node, Text):
        font = book.get(props["font_family"], int(props["font_weight"]), int(props["font_size"]))
        frame.font = font
        frame.lines = wrap_text(node.content, font, inner_limit)
        frame.line_px = int(round(int(props["font_size"]) * float(props["line_height"])))
        content_w = max(math.ceil(font.getlength(line)) for line in frame.lines)
        content_h = frame.line_px * len(frame.lines)
    else:
        row = style.flex_direction == "row"
        child_stretch = style.align == "stretch" and not row
        frame.children = [
            _measure(child, inner_limit, props, book, child_stretch) for child in node.children
        ]
        gaps = style.gap * max(0, len(frame.children) - 1)
        widths = [child.width for child in frame.children]
        heights = [child.height for child in frame.children]
        if row:
            content_w = sum(widths) + gaps
            content_h = max(heights, default=0)
        else:
            content_w = max(widths, default=0)
            content_h = sum(heights) + gaps

    if style.width is not None:
        frame.width = style.width
    elif stretch:
        frame.width = limit
    else:
        frame.width = min(limit, content_w + inset_x)
    frame.height = style.height if style.height is not None else content_h + inset_y
    _stretch_children(frame)
    return frame


def _stretch_children(frame: _Frame) -> None:
    """Resize stretched children to the final inner width of ``frame``."""
    inset_x, _ = _insets(frame.node)
    inner = max(0, frame.width - inset_x)
    for child in frame.children:
        if not child.stretch or child.node.style.width is not None:
            continue
        width = inner
        if child.node.style.max_width is not None:
            width = min(width, child.node.style.max_width)
        if width != child.width:
            child.width = width
            _stretch_children(child)


def _distribute(justify: str, free: float, count: int, gap: int) -> Tuple[float, float]:
    if justify == "center":
        return free / 2, gap
    if justify == "flex-end":
        return free, gap
    if justify == "space-between" and count > 1 and free > 0:
        return 0, gap + free / (count - 1)
    return 0, gap


def _cross_offset(align: str, free: float) -> float:
    if align == "center":
        return free / 2
    if align == "flex-end":
        return free
    return 0


def _place(frame: _Frame, x: int, y: int) -> None:
    frame.x, frame.y = x, y
    if not frame.children:
        return
    style = frame.node.style
    top, _, _, left = _edges(style.padding)
    inset_x, inset_y = _insets(frame.node)
    inner_x = x + left + style.border_width
    inner_y = y + top + style.border_width
    inner_w = frame.width - inset_x
    inner_h = frame.height - inset_y

    row = style.flex_direction == "row"
    count = len(frame.children)
    used = sum(child.width if row else child.height for child in frame.children)
    free = (inner_w if row else inner_h) - used - style.gap * (count - 1)
    cursor, spacing = _distribute(style.justify, free, count, style.gap)
    for child in frame.children:
        if row:
            cross = _cross_offset(style.align, inner_h - child.height)
            _place(child, int(inner_x + cursor), int(inner_y + cross))
            cursor += child.width + spacing
        else:
            cross = _cross_offset(style.align, inner_w - child.width)
            _place(child, int(inner_x + cross), int(inner_y + cursor))
            cursor += child.height + spacing


def _paint(canvas: Image.Image, frame: _Frame, opacity: float) -> None:
    style = frame.node.style
    opacity *= style.opacity
    if opacity <= 0:
        return

    if isinstance(frame.node, Box) and (style.background is not None or style.border_width):
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        outline = None
        if style.border_width and style.border_color is not None:
            outline = _rgba(style.border_color, opacity)
        ImageDraw.Draw(layer).rounded_rectangle(
            (frame.x, frame.y, frame.x + frame.width - 1, frame.y + frame.height - 1),
            radius=style.border_radius,
            fill=_rgba(style.background, opacity) if style.background is not None else None,
            outline=outline,
            width=style.border_width,
        )
        canvas.alpha_composite(layer)

    if isinstance(frame.node, Text) and frame.font is not None:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        fill = _rgba(frame.props["color"], opacity)
        top, _, _, left = _edges(style.padding)
        inset_x, _ = _insets(frame.node)
        inner_w = frame.width - inset_x
        ascent, descent = frame.font.getmetrics()
        leading = (frame.line_px - (ascent + descent)) / 2
        align = frame.props["text_align"]
        for index, line in enumerate(frame.lines):
            if not line:
                continue
            line_w = frame.font.getlength(line)
            if align == "center":
                offset = (inner_w - line_w) / 2
            elif align == "right":
                offset = inner_w - line_w
            else:
                offset = 0
            tx = frame.x + left + style.border_width + offset
            ty = frame.y + top + style.border_width + index * frame.line_px + leading
            draw.text((tx, ty), line, font=frame.font, fill=fill)
        canvas.alpha_composite(layer)

    for child in frame.children:
        _paint(canvas, child, opacity)


def rasterize(node: Node, width: int, height: int, fonts: Iterable[FontAsset]) -> Image.Image:
    """Lay out and draw ``node`` on a transparent ``width`` x ``height`` canvas.

    Args:
        node: Root of the layout tree, usually from ``scene.build_scene``.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        fonts: Font weights that text nodes may reference.

    Returns:
        An RGBA image; pixels outside drawn text and panels are fully
        transparent.

    Raises:
        AssetDecodeError: If any font's bytes cannot be loaded.
        RasterizeError: If a text node references a family/weight pair that
            is not among ``fonts``.
    """
    book = _FontBook(fonts)
    root = _measure(node, width, dict(INHERITED_DEFAULTS), book, stretch=True)
    _place(root, 0, 0)
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    _paint(canvas, root, 1.0)
    return canvas
