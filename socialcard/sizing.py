"""Font scale heuristic.

Longer text gets smaller type so that the block still fits the canvas. The
title counts 1.4 times per character because it is set larger and wraps
less gracefully than the message.
"""

from __future__ import annotations

import math
from typing import Tuple

BASE_TITLE_PX = 64
BASE_BODY_PX = 46
TITLE_WEIGHT = 1.4

# (upper bound on units, scale); the first bound that is >= units wins.
SCALE_STEPS: Tuple[Tuple[float, float], ...] = (
    (160, 1.0),
    (260, 0.9),
    (360, 0.8),
    (460, 0.72),
    (560, 0.66),
)
MIN_SCALE = 0.6


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def text_units(title: str, message: str) -> float:
    return len(title) * TITLE_WEIGHT + len(message)


def scale_for_units(units: float) -> float:
    for limit, scale in SCALE_STEPS:
        if units <= limit:
            return scale
    return MIN_SCALE


def compute_scale(title: str, message: str) -> float:
    """Return the font scale factor for a title/message pair."""
    return scale_for_units(text_units(title, message))


def font_sizes(scale: float) -> Tuple[int, int]:
    """Return ``(title_px, body_px)`` for ``scale``, rounded half up.

    Layout variants may enlarge these further; see ``scene.VariantStyle``.
    """
    return round_half_up(BASE_TITLE_PX * scale), round_half_up(BASE_BODY_PX * scale)
