"""Layout tree for the text overlay.

The scene is a small declarative tree of ``Box`` and ``Text`` nodes with a
CSS-like ``Style`` record, handed to ``raster.rasterize`` for layout and
drawing. Nothing here measures text; the sizes chosen by ``sizing`` are a
budget, and wrapping happens in the rasterizer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from .models import REGULAR_WEIGHT, SEMIBOLD_WEIGHT, LayoutVariant
from .sizing import round_half_up

CANVAS_WIDTH = 1080
CANVAS_HEIGHT = 1080
FONT_FAMILY = os.getenv("FONT_FAMILY", "Inter")

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]
Edges = Union[int, Tuple[int, int, int, int]]


@dataclass(frozen=True)
class Style:
    """Style attributes of a node. ``None`` means unset (or inherited for text properties)."""

    width: Optional[int] = None
    height: Optional[int] = None
    max_width: Optional[int] = None
    flex_direction: str = "column"
    justify: str = "flex-start"
    align: str = "stretch"
    padding: Edges = 0
    gap: int = 0
    background: Optional[Color] = None
    border_width: int = 0
    border_color: Optional[Color] = None
    border_radius: int = 0
    opacity: float = 1.0
    # inherited
    color: Optional[Color] = None
    text_align: Optional[str] = None
    font_family: Optional[str] = None
    font_weight: Optional[int] = None
    font_size: Optional[int] = None
    line_height: Optional[float] = None


@dataclass(frozen=True)
class Text:
    """A leaf holding literal text."""

    content: str
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class Box:
    """A flex container."""

    style: Style = field(default_factory=Style)
    children: Tuple[Union["Box", Text], ...] = ()


Node = Union[Box, Text]


@dataclass(frozen=True)
class VariantStyle:
    """Style constants of one overlay layout."""

    justify: str
    align: str
    root_padding: int
    color: Color
    text_align: str
    gap: int
    max_width: Optional[int] = None
    panel: Optional[Color] = None
    panel_padding: int = 0
    border_width: int = 0
    border_color: Optional[Color] = None
    border_radius: int = 0
    title_multiplier: float = 1.0
    body_multiplier: float = 1.0
    title_line_height: float = 1.1
    body_line_height: float = 1.3
    body_opacity: float = 0.9


VARIANTS: Dict[LayoutVariant, VariantStyle] = {
    LayoutVariant.CENTERED: VariantStyle(
        justify="center",
        align="center",
        root_padding=80,
        color="#1e0033",
        text_align="center",
        gap=32,
        max_width=900,
        title_multiplier=1.35,
        body_multiplier=1.25,
    ),
    LayoutVariant.CARD: VariantStyle(
        justify="flex-end",
        align="stretch",
        root_padding=64,
        color="#ffffff",
        text_align="left",
        gap=20,
        panel=(20, 0, 35, 150),
        panel_padding=48,
        border_width=2,
        border_color=(255, 255, 255, 46),
        border_radius=32,
    ),
}


def build_scene(
    title: str,
    message: str,
    title_px: int,
    body_px: int,
    variant: LayoutVariant = LayoutVariant.CENTERED,
    width: int = CANVAS_WIDTH,
    height: int = CANVAS_HEIGHT,
) -> Box:
    """Build the overlay tree for one render.

    The root box covers the whole canvas and anchors a content box holding
    the title and then the message.
    """
    look = VARIANTS[variant]
    title_node = Text(
        title,
        Style(
            font_family=FONT_FAMILY,
            font_weight=SEMIBOLD_WEIGHT,
            font_size=round_half_up(title_px * look.title_multiplier),
            line_height=look.title_line_height,
        ),
    )
    message_node = Text(
        message,
        Style(
            font_family=FONT_FAMILY,
            font_weight=REGULAR_WEIGHT,
            font_size=round_half_up(body_px * look.body_multiplier),
            line_height=look.body_line_height,
            opacity=look.body_opacity,
        ),
    )
    content = Box(
        Style(
            flex_direction="column",
            gap=look.gap,
            max_width=look.max_width,
            padding=look.panel_padding,
            background=look.panel,
            border_width=look.border_width,
            border_color=look.border_color,
            border_radius=look.border_radius,
        ),
        (title_node, message_node),
    )
    return Box(
        Style(
            width=width,
            height=height,
            flex_direction="column",
            justify=look.justify,
            align=look.align,
            padding=look.root_padding,
            color=look.color,
            text_align=look.text_align,
        ),
        (content,),
    )
